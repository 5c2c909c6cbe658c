"""Image uploads with the Cloudinary SDK stubbed out"""
import asyncio
import os

import cloudinary.uploader
import pytest

from intranet.config import settings
from intranet.errors import BadRequestError, InternalServerError
from intranet.services.upload import StagedFile, upload_service

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_TEMP_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def cloudinary_calls(monkeypatch):
    """Configure credentials and record what would be sent to Cloudinary"""
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(settings, "CLOUDINARY_API_KEY", "key")
    monkeypatch.setattr(settings, "CLOUDINARY_API_SECRET", "secret")

    calls = {"upload": [], "destroy": []}

    def fake_upload(path, **options):
        calls["upload"].append({"path": path, "existed": os.path.exists(path), **options})
        name = os.path.splitext(os.path.basename(path))[0]
        return {
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/{name}.png",
            "public_id": f"{options['folder']}/{name}",
            "width": 800,
            "height": 600,
            "format": "png",
            "bytes": len(PNG_BYTES),
        }

    def fake_destroy(public_id, **options):
        calls["destroy"].append(public_id)
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    return calls


def _staged(temp_dir, name="photo.png", content_type="image/png", data=PNG_BYTES):
    path = temp_dir / name
    path.write_bytes(data)
    return StagedFile(path=str(path), original_filename=name, content_type=content_type, size=len(data))


async def test_upload_success_removes_temp_file(temp_dir, cloudinary_calls):
    staged = _staged(temp_dir)

    result = await upload_service.upload_image(staged)

    assert result.public_id == "announce/photo"
    assert result.size == len(PNG_BYTES)
    call = cloudinary_calls["upload"][0]
    assert call["existed"] is True
    assert call["resource_type"] == "image"
    assert call["transformation"][0] == {"width": 1920, "height": 1080, "crop": "limit"}
    assert not os.path.exists(staged.path)


async def test_disallowed_mime_is_rejected_and_cleaned_up(temp_dir, cloudinary_calls):
    staged = _staged(temp_dir, "notes.png", content_type="text/plain")

    with pytest.raises(BadRequestError):
        await upload_service.upload_image(staged)

    assert cloudinary_calls["upload"] == []
    assert not os.path.exists(staged.path)


async def test_oversized_file_is_rejected(temp_dir, cloudinary_calls, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)
    staged = _staged(temp_dir)

    with pytest.raises(BadRequestError) as exc:
        await upload_service.upload_image(staged)
    assert exc.value.message.startswith("File size too large")
    assert not os.path.exists(staged.path)


async def test_missing_credentials_is_a_server_error(temp_dir):
    staged = _staged(temp_dir)

    with pytest.raises(InternalServerError) as exc:
        await upload_service.upload_image(staged)
    assert exc.value.message == "Cloudinary is not configured"
    assert not os.path.exists(staged.path)


async def test_sdk_failure_is_a_server_error(temp_dir, cloudinary_calls, monkeypatch):
    def broken_upload(path, **options):
        raise RuntimeError("network down")

    monkeypatch.setattr(cloudinary.uploader, "upload", broken_upload)
    staged = _staged(temp_dir)

    with pytest.raises(InternalServerError):
        await upload_service.upload_image(staged)
    assert not os.path.exists(staged.path)


async def test_upload_multiple_images(temp_dir, cloudinary_calls):
    files = [_staged(temp_dir, f"photo{i}.png") for i in range(3)]

    results = await upload_service.upload_multiple_images(files)

    assert sorted(r.public_id for r in results) == [f"announcements/photo{i}" for i in range(3)]
    assert list(temp_dir.iterdir()) == []


async def test_mixed_batch_uploads_nothing(temp_dir, cloudinary_calls):
    files = [_staged(temp_dir, "good.png"), _staged(temp_dir, "notes.png", content_type="text/plain")]

    with pytest.raises(BadRequestError):
        await upload_service.upload_multiple_images(files)

    await asyncio.sleep(0.05)
    assert cloudinary_calls["upload"] == []
    assert list(temp_dir.iterdir()) == []


async def test_too_many_files(temp_dir, cloudinary_calls):
    files = [_staged(temp_dir, f"photo{i}.png") for i in range(6)]

    with pytest.raises(BadRequestError):
        await upload_service.upload_multiple_images(files)
    assert cloudinary_calls["upload"] == []
    assert list(temp_dir.iterdir()) == []


async def test_delete_image(cloudinary_calls):
    await upload_service.delete_image("announce/photo")
    assert cloudinary_calls["destroy"] == ["announce/photo"]


# ==================== HTTP ====================

async def test_upload_routes_require_token(client):
    resp = await client.post("/api/upload/image", files={"image": ("photo.png", PNG_BYTES, "image/png")})
    assert resp.status_code == 401


async def test_upload_image_route(client, auth_headers, temp_dir, cloudinary_calls):
    resp = await client.post(
        "/api/upload/image",
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
        data={"folder": "covers"},
        headers=auth_headers,
    )

    assert resp.status_code == 201
    assert resp.json()["data"]["public_id"].startswith("covers/")
    assert list(temp_dir.iterdir()) == []


async def test_upload_rejects_non_image_extension(client, auth_headers, temp_dir, cloudinary_calls):
    resp = await client.post(
        "/api/upload/image",
        files={"image": ("script.txt", b"echo hi", "text/plain")},
        headers=auth_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "Only image files are allowed (JPEG, PNG, WebP)"
    assert list(temp_dir.iterdir()) == []


async def test_upload_images_route(client, auth_headers, temp_dir, cloudinary_calls):
    files = [("images", (f"photo{i}.png", PNG_BYTES, "image/png")) for i in range(2)]

    resp = await client.post("/api/upload/images", files=files, headers=auth_headers)

    assert resp.status_code == 201
    assert len(resp.json()["data"]) == 2
    assert list(temp_dir.iterdir()) == []


async def test_delete_route_accepts_folder_paths(client, auth_headers, cloudinary_calls):
    resp = await client.delete("/api/upload/announce/photo", headers=auth_headers)

    assert resp.status_code == 200
    assert cloudinary_calls["destroy"] == ["announce/photo"]
