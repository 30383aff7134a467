"""Image upload and delete routes, plus the store's URL handling."""

import asyncio
from pathlib import Path

import pytest

from apps.shared.config import get_settings
from apps.uploads.storage import ImageStore, StorageError

BASE_URL = get_settings().upload_base_url

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload(client, name="photo.PNG", content=PNG, content_type="image/png"):
    return client.post("/upload", files={"file": (name, content, content_type)})


# ──────────────────────────────────────────────────────────────────────────────
# POST /upload
# ──────────────────────────────────────────────────────────────────────────────

def test_upload_writes_file_and_returns_public_url(admin_client, tmp_path):
    resp = upload(admin_client)

    assert resp.status_code == 200
    body = resp.json()
    assert body["filename"].startswith("projects/")
    assert body["filename"].endswith(".png")
    assert body["url"] == f"{BASE_URL}/{body['filename']}"
    assert (tmp_path / body["filename"]).read_bytes() == PNG


def test_upload_without_extension_defaults_to_jpg(admin_client):
    resp = upload(admin_client, name="blob", content_type="image/jpeg")
    assert resp.json()["filename"].endswith(".jpg")


@pytest.mark.parametrize("content_type", ["text/plain", "application/pdf", "image/bmp"])
def test_upload_rejects_disallowed_types(admin_client, tmp_path, content_type):
    resp = upload(admin_client, name="file.bin", content_type=content_type)

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid file type")
    assert not (tmp_path / "projects").exists()


def test_upload_rejects_oversized_file(admin_client, storage, tmp_path):
    storage.max_bytes = 32

    resp = upload(admin_client)

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("File too large")
    assert not (tmp_path / "projects").exists()


def test_upload_without_file_is_rejected(admin_client):
    resp = admin_client.post("/upload")
    assert resp.status_code == 400
    assert resp.json()["error"] == "No file provided"


def test_upload_requires_session(client, tmp_path):
    assert upload(client).status_code == 401
    assert not (tmp_path / "projects").exists()


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /upload?url=
# ──────────────────────────────────────────────────────────────────────────────

def test_delete_removes_uploaded_file(admin_client, tmp_path):
    stored = upload(admin_client).json()

    resp = admin_client.delete("/upload", params={"url": stored["url"]})

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert not (tmp_path / stored["filename"]).exists()


def test_delete_missing_file_still_succeeds(admin_client, image_url):
    resp = admin_client.delete("/upload", params={"url": image_url("gone.png")})
    assert resp.status_code == 200


def test_delete_store_failure_still_succeeds(admin_client, storage, image_url):
    url = image_url("stuck.png")
    storage.failing.add(url)

    resp = admin_client.delete("/upload", params={"url": url})

    assert resp.status_code == 200
    assert storage.delete_attempts == [url]


@pytest.mark.parametrize(
    "url",
    [
        "https://elsewhere.example/uploads/projects/a.png",
        f"{BASE_URL}/../outside.txt",
        f"{BASE_URL}/",
    ],
)
def test_delete_rejects_urls_outside_the_store(admin_client, url):
    resp = admin_client.delete("/upload", params={"url": url})
    assert resp.status_code == 400
    assert resp.json()["category"] == "client_error"


def test_delete_without_url_is_rejected(admin_client):
    assert admin_client.delete("/upload").status_code == 400


def test_delete_requires_session(client, image_url, storage):
    assert client.delete("/upload", params={"url": image_url("a.png")}).status_code == 401
    assert storage.delete_attempts == []


# ──────────────────────────────────────────────────────────────────────────────
# ImageStore
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def store(tmp_path):
    return ImageStore(root=str(tmp_path), base_url=BASE_URL + "/", max_bytes=1024)


def test_new_path_shape(store):
    path = store.new_path("Holiday.JPEG")

    prefix, name = path.split("/")
    stamp, rest = name.split("-")
    suffix, ext = rest.split(".")
    assert prefix == "projects"
    assert stamp.isdigit()
    assert len(suffix) == 6
    assert ext == "jpeg"


def test_path_for_url_stays_below_root(store, tmp_path):
    target = store.path_for_url(f"{BASE_URL}/projects/a.png")
    assert target == Path(tmp_path).resolve() / "projects" / "a.png"

    with pytest.raises(StorageError):
        store.path_for_url(f"{BASE_URL}/projects/../../etc/passwd")


def test_delete_many_reports_every_outcome(store, tmp_path):
    (tmp_path / "projects").mkdir()
    (tmp_path / "projects" / "a.png").write_bytes(PNG)
    urls = [
        f"{BASE_URL}/projects/a.png",
        "https://elsewhere.example/b.png",
        f"{BASE_URL}/projects/missing.png",
    ]

    results = asyncio.run(store.delete_many(urls))

    assert [r.url for r in results] == urls
    assert [r.ok for r in results] == [True, False, True]
    assert isinstance(results[1].error, StorageError)
    assert not (tmp_path / "projects" / "a.png").exists()
