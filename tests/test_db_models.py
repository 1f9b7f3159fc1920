import pytest
from sqlalchemy import inspect

from studio_api.db.models import AiAnalysis, File, FileTest, FileVersion, Message, Project


def test_foreign_keys_indexes():
    """Verify that foreign keys have indexes.

    Cascading deletes walk every child table by its parent id, so each
    ForeignKey column needs an index.
    """
    models_to_check = [File, FileVersion, Message, FileTest, AiAnalysis]

    for model in models_to_check:
        mapper = inspect(model)

        for column in mapper.columns:
            if column.foreign_keys:
                has_index = bool(column.index)

                if not has_index:
                    for idx in model.__table__.indexes:
                        if column.name in [c.name for c in idx.columns]:
                            has_index = True
                            break

                if not has_index:
                    pytest.fail(f"{model.__tablename__}.{column.name} is a Foreign Key but NOT indexed!")


def test_foreign_keys_have_no_database_cascade():
    """Child rows are removed by storage, never by an ON DELETE rule."""
    for model in [File, FileVersion, Message, FileTest, AiAnalysis]:
        for column in inspect(model).columns:
            for fk in column.foreign_keys:
                assert fk.ondelete is None, f"{model.__tablename__}.{column.name}"


def test_table_names():
    assert Project.__tablename__ == "projects"
    assert File.__tablename__ == "files"
    assert FileVersion.__tablename__ == "file_versions"
    assert Message.__tablename__ == "messages"
    assert FileTest.__tablename__ == "tests"
    assert AiAnalysis.__tablename__ == "ai_analyses"


def test_metadata_columns_keep_their_name():
    assert "metadata" in Message.__table__.columns
    assert "metadata" in AiAnalysis.__table__.columns


def test_version_number_unique_per_file():
    constraints = [
        {c.name for c in constraint.columns}
        for constraint in FileVersion.__table__.constraints
        if constraint.__class__.__name__ == "UniqueConstraint"
    ]
    assert {"file_id", "version"} in constraints
