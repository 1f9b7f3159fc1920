"""Shared fixtures: both storage backends, a fake assistant and an HTTP client."""

import httpx
import pytest

from studio_api.config import Settings
from studio_api.db.session import create_engine, create_schema, create_session_factory
from studio_api.main import create_app
from studio_api.schemas import File, Message
from studio_api.services import (
    ChatReply,
    ChatResponder,
    CodeGenerationResult,
    CodeGenerator,
    GeneratedFile,
)
from studio_api.storage import DatabaseStorage, MemoryStorage


class FakeAssistant(CodeGenerator, ChatResponder):
    """Records calls and returns canned answers."""

    def __init__(self) -> None:
        self.chat_calls: list[tuple[str, list[Message]]] = []
        self.generate_calls: list[tuple[str, list[File]]] = []

    async def generate_code(self, prompt, context=None):
        self.generate_calls.append((prompt, list(context or [])))
        return CodeGenerationResult(
            files=[
                GeneratedFile(name="App.tsx", path="src/App.tsx", content="export default 1;"),
                GeneratedFile(name="src", path="src", content="", type="folder"),
            ],
            explanation="Created an App component",
        )

    async def chat(self, message, history):
        self.chat_calls.append((message, list(history)))
        return ChatReply(response=f"echo: {message}", metadata={"turn": len(history)})


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=None, google_api_key=None, otel_exporter_otlp_endpoint=None)


@pytest.fixture(params=["memory", "database"])
async def storage(request, tmp_path):
    """Each contract test runs against both backends."""
    if request.param == "memory":
        yield MemoryStorage()
        return

    db_settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'studio.db'}")
    engine = create_engine(db_settings)
    await create_schema(engine)
    backend = DatabaseStorage(create_session_factory(engine), engine=engine)
    yield backend
    await backend.close()


@pytest.fixture
def assistant() -> FakeAssistant:
    return FakeAssistant()


@pytest.fixture
def app(settings, storage, assistant):
    return create_app(settings=settings, storage=storage, assistant=assistant)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api/v1") as client:
        yield client


@pytest.fixture
async def project(storage):
    return await storage.create_project({"name": "demo"})


@pytest.fixture
async def html_file(storage, project):
    return await storage.create_file(
        {
            "projectId": project.id,
            "name": "index.html",
            "path": "index.html",
            "content": "v1",
            "type": "file",
        }
    )
