"""HTTP status codes and response shapes."""

from unittest.mock import AsyncMock

import httpx
import pytest

from studio_api.errors import StorageError
from studio_api.main import create_app
from studio_api.storage import MemoryStorage


async def create_project(client, name="demo"):
    response = await client.post("/projects", json={"name": name})
    assert response.status_code == 200
    return response.json()


async def create_file(client, project_id, content="v1", path="index.html"):
    response = await client.post(
        "/files",
        json={
            "projectId": project_id,
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "content": content,
            "type": "file",
        },
    )
    assert response.status_code == 200
    return response.json()


class TestProjectRoutes:
    async def test_create_returns_camel_case(self, client):
        body = await create_project(client)

        assert body["name"] == "demo"
        assert body["description"] is None
        assert "createdAt" in body
        assert isinstance(body["id"], int)

    async def test_create_invalid_is_400(self, client):
        response = await client.post("/projects", json={"description": "no name"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert "error" in response.json()

    async def test_list_newest_first(self, client):
        await create_project(client, "old")
        await create_project(client, "new")

        response = await client.get("/projects")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["new", "old"]

    async def test_get_missing_is_404(self, client):
        response = await client.get("/projects/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found", "code": "NOT_FOUND"}

    async def test_patch(self, client):
        project = await create_project(client)

        response = await client.patch(f"/projects/{project['id']}", json={"template": "react"})

        assert response.status_code == 200
        assert response.json()["template"] == "react"
        assert response.json()["name"] == "demo"

    async def test_delete(self, client):
        project = await create_project(client)
        await create_file(client, project["id"])

        response = await client.delete(f"/projects/{project['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert (await client.get(f"/projects/{project['id']}")).status_code == 404
        assert (await client.get(f"/projects/{project['id']}/files")).json() == []
        assert (await client.delete(f"/projects/{project['id']}")).status_code == 404


class TestFileRoutes:
    async def test_create_invalid_is_400(self, client):
        response = await client.post("/files", json={"name": "a.js"})
        assert response.status_code == 400

    async def test_patch_versions_and_restore(self, client):
        project = await create_project(client)
        file = await create_file(client, project["id"], content="v1")

        for content in ("v2", "v3"):
            response = await client.patch(f"/files/{file['id']}", json={"content": content})
            assert response.status_code == 200
            assert response.json()["content"] == content

        versions = (await client.get(f"/files/{file['id']}/versions")).json()
        assert [(v["version"], v["content"]) for v in versions] == [(2, "v2"), (1, "v1")]
        assert versions[0]["fileId"] == file["id"]

        response = await client.post(f"/files/{file['id']}/restore/{versions[1]['id']}")
        assert response.status_code == 200
        assert response.json()["content"] == "v1"

        assert len((await client.get(f"/files/{file['id']}/versions")).json()) == 2

    async def test_patch_missing_is_404(self, client):
        response = await client.patch("/files/999", json={"content": "x"})
        assert response.status_code == 404

    async def test_patch_without_content_is_400(self, client):
        project = await create_project(client)
        file = await create_file(client, project["id"])

        response = await client.patch(f"/files/{file['id']}", json={})

        assert response.status_code == 400

    async def test_restore_foreign_version_is_404(self, client):
        project = await create_project(client)
        first = await create_file(client, project["id"], path="a.html")
        second = await create_file(client, project["id"], path="b.html")
        await client.patch(f"/files/{second['id']}", json={"content": "changed"})
        foreign = (await client.get(f"/files/{second['id']}/versions")).json()[0]

        response = await client.post(f"/files/{first['id']}/restore/{foreign['id']}")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_delete(self, client):
        project = await create_project(client)
        file = await create_file(client, project["id"])

        assert (await client.delete(f"/files/{file['id']}")).status_code == 200
        assert (await client.get(f"/files/{file['id']}")).status_code == 404
        assert (await client.delete(f"/files/{file['id']}")).status_code == 404


class TestMessageRoutes:
    async def test_create_and_list(self, client):
        project = await create_project(client)
        url = f"/projects/{project['id']}/messages"

        first = await client.post(url, json={"role": "user", "content": "hi"})
        await client.post(url, json={"role": "assistant", "content": "hello", "metadata": "{}"})

        assert first.status_code == 200
        assert first.json()["projectId"] == project["id"]
        messages = (await client.get(url)).json()
        assert [m["content"] for m in messages] == ["hi", "hello"]
        assert messages[1]["metadata"] == "{}"

    async def test_invalid_role_is_400(self, client):
        project = await create_project(client)

        response = await client.post(
            f"/projects/{project['id']}/messages", json={"role": "robot", "content": "x"}
        )

        assert response.status_code == 400

    async def test_delete_twice(self, client):
        project = await create_project(client)
        url = f"/projects/{project['id']}/messages"
        await client.post(url, json={"role": "user", "content": "hi"})

        assert (await client.delete(url)).json() == {"success": True}
        assert (await client.delete(url)).json() == {"success": True}
        assert (await client.get(url)).json() == []


class TestTestAndAnalysisRoutes:
    async def test_test_lifecycle(self, client):
        project = await create_project(client)
        file = await create_file(client, project["id"])

        created = await client.post(
            f"/files/{file['id']}/tests", json={"name": "renders", "content": "it()"}
        )
        assert created.status_code == 200
        assert created.json()["status"] == "pending"

        test_id = created.json()["id"]
        patched = await client.patch(f"/tests/{test_id}", json={"status": "passed"})
        assert patched.json()["status"] == "passed"

        assert len((await client.get(f"/files/{file['id']}/tests")).json()) == 1
        assert (await client.delete(f"/tests/{test_id}")).status_code == 200
        assert (await client.patch(f"/tests/{test_id}", json={"status": "failed"})).status_code == 404

    async def test_analysis_latest(self, client):
        project = await create_project(client)
        file = await create_file(client, project["id"])
        url = f"/files/{file['id']}/analyses"

        response = await client.post(
            url,
            json={
                "analysisType": "performance",
                "result": {"score": 80, "optimizations": ["memoize"]},
            },
        )
        assert response.status_code == 200
        assert response.json()["analysisType"] == "performance"

        latest = await client.get(f"{url}/latest", params={"type": "performance"})
        assert latest.status_code == 200
        assert latest.json()["id"] == response.json()["id"]

        assert (await client.get(f"{url}/latest", params={"type": "security"})).status_code == 404

    async def test_analysis_invalid_result_is_400(self, client):
        project = await create_project(client)
        file = await create_file(client, project["id"])

        response = await client.post(
            f"/files/{file['id']}/analyses",
            json={"analysisType": "performance", "result": {"score": 250}},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestGitRoutes:
    async def test_commits_project_versions_newest_first(self, client):
        project = await create_project(client)
        index = await create_file(client, project["id"], path="index.html")
        app_js = await create_file(client, project["id"], path="src/app.js")
        await client.patch(f"/files/{index['id']}", json={"content": "v2"})
        await client.patch(f"/files/{app_js['id']}", json={"content": "v2"})
        await client.patch(f"/files/{index['id']}", json={"content": "v3"})

        commits = (await client.get(f"/git/{project['id']}/commits")).json()

        assert [c["message"] for c in commits] == [
            "Updated index.html (version 2)",
            "Updated app.js (version 1)",
            "Updated index.html (version 1)",
        ]
        assert commits[1]["files"] == ["src/app.js"]
        assert commits[0]["author"] == "AI Agent"
        assert commits[0]["hash"].startswith("commit-")

        limited = await client.get(f"/git/{project['id']}/commits", params={"limit": 1})
        assert len(limited.json()) == 1

    async def test_status_lists_paths(self, client):
        project = await create_project(client)
        await create_file(client, project["id"], path="index.html")

        status = (await client.get(f"/git/{project['id']}/status")).json()

        assert status == {"modified": ["index.html"], "added": [], "deleted": [], "untracked": []}


async def test_health(client):
    response = await client.get("http://test/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["storage"] in {"memory", "database"}


@pytest.fixture
def failing_storage():
    storage = MemoryStorage()
    storage.list_projects = AsyncMock(side_effect=StorageError())
    storage.get_project = AsyncMock(side_effect=RuntimeError("connection details"))
    return storage


async def test_storage_error_is_500(settings, assistant, failing_storage):
    app = create_app(settings=settings, storage=failing_storage, assistant=assistant)
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)

    async with httpx.AsyncClient(transport=transport, base_url="http://test/api/v1") as client:
        listed = await client.get("/projects")
        fetched = await client.get("/projects/1")

    assert listed.status_code == 500
    assert listed.json()["code"] == "STORAGE_ERROR"
    assert fetched.status_code == 500
    assert fetched.json() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}


class TestReferenceErrors:
    """Missing parents and out-of-range ids answer the same on both backends."""

    async def test_file_for_missing_project_is_404(self, client):
        response = await client.post(
            "/files",
            json={"projectId": 999, "name": "a.js", "path": "a.js", "type": "file"},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found", "code": "NOT_FOUND"}

    async def test_message_for_missing_project_is_404(self, client):
        response = await client.post(
            "/projects/999/messages", json={"role": "user", "content": "hi"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_test_and_analysis_for_missing_file_are_404(self, client):
        created = await client.post("/files/999/tests", json={"name": "a", "content": "a"})
        analysed = await client.post(
            "/files/999/analyses",
            json={"analysisType": "security", "result": {"riskLevel": "low"}},
        )

        assert created.status_code == 404
        assert analysed.status_code == 404

    @pytest.mark.parametrize(
        "path",
        [
            "/projects/99999999999999999999",
            "/projects/0",
            "/files/2147483648",
            "/files/1/restore/99999999999999999999",
            "/git/99999999999999999999/commits",
        ],
    )
    async def test_out_of_range_path_id_is_400(self, client, path):
        method = client.post if "/restore/" in path else client.get

        response = await method(path)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_out_of_range_body_id_is_400(self, client):
        response = await client.post(
            "/files",
            json={"projectId": 99999999999999999999, "name": "a", "path": "a", "type": "file"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestRoutingErrors:
    """Errors raised by routing use the same body as every other error."""

    async def test_unknown_route(self, client):
        response = await client.get("/no/such/route")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "code": "NOT_FOUND"}

    async def test_wrong_method(self, client):
        response = await client.put("/projects", json={"name": "x"})

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed", "code": "METHOD_NOT_ALLOWED"}
        assert "allow" in response.headers
