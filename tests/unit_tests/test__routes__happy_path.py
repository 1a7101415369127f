from fastapi import status
from fastapi.testclient import TestClient

from telefile_api.main import create_app

from tests.consts import TEST_BOT_TOKEN, TEST_CHANNEL_ID
from tests.fixtures.app_fixtures import REMOTE_CONTENT, REMOTE_URL

# Constants for testing
TEST_FILE_NAME = "hello.txt"
TEST_FILE_CONTENT = b"0123456789"
TEST_FILE_CONTENT_TYPE = "text/plain"


def create_folder(client: TestClient, name: str) -> dict:
    response = client.post("/api/folders", json={"name": name})
    assert response.status_code == status.HTTP_200_OK
    return response.json()["data"]


def upload_file(client: TestClient, folder_id: str | None = None, name: str = TEST_FILE_NAME,
                content: bytes = TEST_FILE_CONTENT) -> dict:
    data = {"folderId": folder_id} if folder_id else {}
    response = client.post(
        "/api/upload",
        files={"file": (name, content, TEST_FILE_CONTENT_TYPE)},
        data=data,
    )
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    return body["data"]


def test_create_and_list(client: TestClient):
    folder = create_folder(client, "Docs")

    response = client.get("/api/folders")
    assert response.json() == {"success": True, "data": [folder]}
    assert folder["name"] == "Docs"
    assert folder["createdAt"] > 0

    uploaded = upload_file(client, folder_id=folder["id"])
    assert uploaded["size"] == 10
    assert uploaded["folderId"] == folder["id"]

    response = client.get("/api/files", params={"folderId": folder["id"]})
    files = response.json()["data"]
    assert [f["id"] for f in files] == [uploaded["id"]]
    assert files[0]["size"] == 10

    # Root listing does not include files inside folders
    assert client.get("/api/files").json()["data"] == []


def test_forward_without_credential(client: TestClient, fake_telegram):
    uploaded = upload_file(client)

    response = client.post(f"/api/files/{uploaded['id']}/forward")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "error": "Telegram bot token is not configured"}
    stored = client.get(f"/api/files/{uploaded['id']}").json()["data"]
    assert "telegram" not in stored
    assert fake_telegram.calls == []


def test_move_and_rename(client: TestClient):
    folder = create_folder(client, "Docs")
    uploaded = upload_file(client, folder_id=folder["id"])

    response = client.patch(f"/api/files/{uploaded['id']}", json={"name": "new.txt"})
    renamed = response.json()["data"]
    assert renamed["name"] == "new.txt"
    assert renamed["folderId"] == folder["id"]
    assert renamed["size"] == 10

    response = client.patch(f"/api/files/{uploaded['id']}", json={"folderId": None})
    moved = response.json()["data"]
    assert moved["name"] == "new.txt"
    assert "folderId" not in moved

    root_files = client.get("/api/files", params={"folderId": "null"}).json()["data"]
    assert [f["id"] for f in root_files] == [uploaded["id"]]


def test_forward_with_credential_is_idempotent(client: TestClient, fake_telegram):
    uploaded = upload_file(client)
    response = client.post("/api/settings", json={"botToken": TEST_BOT_TOKEN, "channelId": TEST_CHANNEL_ID})
    assert response.json()["data"]["botToken"] == TEST_BOT_TOKEN

    first = client.post(f"/api/files/{uploaded['id']}/forward").json()["data"]
    second = client.post(f"/api/files/{uploaded['id']}/forward").json()["data"]

    assert first["telegram"] == {"external_file_id": "tg_file_1", "external_file_name": TEST_FILE_NAME}
    assert second["telegram"] == first["telegram"]
    assert len(fake_telegram.calls) == 1
    assert fake_telegram.calls[0]["chat_id"] == TEST_CHANNEL_ID


def test_upload_forwards_when_configured(client: TestClient, fake_telegram):
    client.post("/api/settings", json={"botToken": TEST_BOT_TOKEN})

    uploaded = upload_file(client)

    assert uploaded["telegram"]["external_file_id"] == "tg_file_1"
    assert fake_telegram.calls[0]["content"] == TEST_FILE_CONTENT


def test_upload_from_url(client: TestClient):
    response = client.post("/api/upload", data={"url": REMOTE_URL})

    assert response.status_code == status.HTTP_200_OK
    uploaded = response.json()["data"]
    assert uploaded["name"] == "remote-notes.txt"
    assert uploaded["size"] == len(REMOTE_CONTENT)


def test_download(client: TestClient):
    uploaded = upload_file(client, name="my report.txt")

    response = client.get(f"/api/files/{uploaded['id']}/download")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_FILE_CONTENT
    assert response.headers["content-type"] == TEST_FILE_CONTENT_TYPE
    assert "filename*=UTF-8''my%20report.txt" in response.headers["content-disposition"]


def test_download_keeps_declared_type_of_non_utf8_text(client: TestClient):
    uploaded = upload_file(client, name="cafe.txt", content=b"caf\xe9")

    response = client.get(f"/api/files/{uploaded['id']}/download")

    assert response.content == b"caf\xe9"
    assert response.headers["content-type"] == "text/plain"


def test_delete_file(client: TestClient):
    uploaded = upload_file(client)

    response = client.delete(f"/api/files/{uploaded['id']}")
    assert response.json() == {"success": True, "data": {"id": uploaded["id"], "deleted": True}}

    response = client.delete(f"/api/files/{uploaded['id']}")
    assert response.json()["data"]["deleted"] is False
    assert client.get(f"/api/files/{uploaded['id']}").status_code == status.HTTP_404_NOT_FOUND


def test_delete_folder_keeps_its_files(client: TestClient):
    folder = create_folder(client, "Temp")
    uploaded = upload_file(client, folder_id=folder["id"])

    response = client.delete(f"/api/folders/{folder['id']}")
    assert response.json()["data"] == {"id": folder["id"], "deleted": True}

    assert client.get("/api/folders").json()["data"] == []
    orphan = client.get(f"/api/files/{uploaded['id']}").json()["data"]
    assert orphan["folderId"] == folder["id"]


def test_delete_many(client: TestClient):
    ids = [create_folder(client, name)["id"] for name in ("a", "b", "c")]

    response = client.post("/api/folders/deleteMany", json={"ids": ids[:2] + ["missing"]})
    assert response.json()["data"] == {"deletedCount": 2, "ids": ids[:2] + ["missing"]}
    assert [f["id"] for f in client.get("/api/folders").json()["data"]] == ids[2:]

    files = [upload_file(client)["id"] for _ in range(2)]
    response = client.post("/api/files/deleteMany", json={"ids": files})
    assert response.json()["data"]["deletedCount"] == 2


def test_settings_round_trip(client: TestClient):
    response = client.get("/api/settings")
    assert response.json() == {"success": True, "data": {"id": "app", "mockMode": True}}

    client.post("/api/settings", json={"botToken": TEST_BOT_TOKEN})
    response = client.post("/api/settings", json={"channelId": TEST_CHANNEL_ID})
    assert response.json()["data"] == {
        "id": "app",
        "botToken": TEST_BOT_TOKEN,
        "channelId": TEST_CHANNEL_ID,
        "mockMode": True,
    }


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
    assert response.json()["components"]["storage"] == "ready"


def test_startup_seeds_demo_data(settings, fake_telegram, fake_fetcher):
    settings.seed_demo_data = True
    app = create_app(settings=settings, telegram=fake_telegram, fetcher=fake_fetcher)

    with TestClient(app) as client:
        folders = client.get("/api/folders").json()["data"]
        assert [f["name"] for f in folders] == ["Documents", "Images", "Misc"]
        root_files = client.get("/api/files").json()["data"]
        assert [f["name"] for f in root_files] == ["meeting-notes.md"]

    # A second startup against the same backend does not duplicate the seed
    app = create_app(settings=settings, telegram=fake_telegram, fetcher=fake_fetcher)
    with TestClient(app) as client:
        assert len(client.get("/api/folders").json()["data"]) == 3
