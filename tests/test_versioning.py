"""Version history and restore, run against both storage backends."""


async def test_create_does_not_record_a_version(storage, html_file):
    assert await storage.list_file_versions(html_file.id) == []


async def test_versions_are_gap_free_and_hold_previous_content(storage, html_file):
    contents = ["v2", "v3", "v4", "v5"]
    for content in contents:
        await storage.update_file_content(html_file.id, content)

    versions = await storage.list_file_versions(html_file.id)

    assert [v.version for v in versions] == [4, 3, 2, 1]
    # version k holds the content from just before the k-th update
    assert [v.content for v in reversed(versions)] == ["v1", "v2", "v3", "v4"]
    assert all(v.file_id == html_file.id for v in versions)
    assert (await storage.get_file(html_file.id)).content == "v5"


async def test_round_trip(storage, project):
    file = await storage.create_file(
        {"project_id": project.id, "name": "a.txt", "path": "a.txt", "content": "A", "type": "file"}
    )
    await storage.update_file_content(file.id, "B")
    await storage.update_file_content(file.id, "C")

    versions = await storage.list_file_versions(file.id)

    assert [(v.version, v.content) for v in versions] == [(2, "B"), (1, "A")]
    assert (await storage.get_file(file.id)).content == "C"


async def test_numbering_is_per_file(storage, project, html_file):
    other = await storage.create_file(
        {"project_id": project.id, "name": "b", "path": "b", "content": "b1", "type": "file"}
    )
    await storage.update_file_content(html_file.id, "v2")
    await storage.update_file_content(other.id, "b2")
    await storage.update_file_content(html_file.id, "v3")

    assert [v.version for v in await storage.list_file_versions(html_file.id)] == [2, 1]
    assert [v.version for v in await storage.list_file_versions(other.id)] == [1]


async def test_restore_scenario(storage, html_file):
    await storage.update_file_content(html_file.id, "v2")
    await storage.update_file_content(html_file.id, "v3")

    versions = await storage.list_file_versions(html_file.id)
    assert [(v.version, v.content) for v in versions] == [(2, "v2"), (1, "v1")]

    first = versions[-1]
    restored = await storage.restore_file_version(html_file.id, first.id)

    assert restored.content == "v1"
    assert (await storage.get_file(html_file.id)).content == "v1"
    # restoring is not an edit: the history is unchanged
    assert await storage.list_file_versions(html_file.id) == versions


async def test_restore_bumps_updated_at(storage, html_file):
    updated = await storage.update_file_content(html_file.id, "v2")
    version = (await storage.list_file_versions(html_file.id))[0]

    restored = await storage.restore_file_version(html_file.id, version.id)

    assert restored.updated_at >= updated.updated_at


async def test_restore_rejects_version_of_another_file(storage, project, html_file):
    other = await storage.create_file(
        {"project_id": project.id, "name": "b", "path": "b", "content": "b1", "type": "file"}
    )
    await storage.update_file_content(other.id, "b2")
    foreign = (await storage.list_file_versions(other.id))[0]

    assert await storage.restore_file_version(html_file.id, foreign.id) is None
    assert (await storage.get_file(html_file.id)).content == "v1"


async def test_restore_missing_file_or_version(storage, html_file):
    await storage.update_file_content(html_file.id, "v2")
    version = (await storage.list_file_versions(html_file.id))[0]

    assert await storage.restore_file_version(html_file.id, 9999) is None
    assert await storage.restore_file_version(9999, version.id) is None


async def test_get_file_version(storage, html_file):
    await storage.update_file_content(html_file.id, "v2")
    version = (await storage.list_file_versions(html_file.id))[0]

    fetched = await storage.get_file_version(version.id)

    assert fetched == version
    assert await storage.get_file_version(9999) is None


async def test_updates_after_restore_continue_numbering(storage, html_file):
    await storage.update_file_content(html_file.id, "v2")
    first = (await storage.list_file_versions(html_file.id))[0]
    await storage.restore_file_version(html_file.id, first.id)

    await storage.update_file_content(html_file.id, "v3")

    versions = await storage.list_file_versions(html_file.id)
    assert [(v.version, v.content) for v in versions] == [(2, "v1"), (1, "v1")]


async def test_delete_file_removes_history(storage, html_file):
    await storage.update_file_content(html_file.id, "v2")

    await storage.delete_file(html_file.id)

    assert await storage.list_file_versions(html_file.id) == []


async def test_snapshot_and_update_share_a_timestamp(storage, html_file):
    updated = await storage.update_file_content(html_file.id, "v2")
    version = (await storage.list_file_versions(html_file.id))[0]

    assert version.created_at == updated.updated_at
