"""
test_api.py: end-to-end HTTP tests for /api/profiles and /api/images.

HTTP request -> auth guard -> schema validation -> store / image service ->
SQLite / in-memory blob store -> HTTP response.
"""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from petprofiles import store
from petprofiles.api.images.validator import MAX_IMAGE_SIZE
from petprofiles.errors import ProfileConflictError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

REX = {"name": "Rex", "breed": "Beagle", "age": 3}


async def _create(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/profiles", json={**REX, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_returns_camel_case_record_with_location(client: AsyncClient) -> None:
    response = await client.post(
        "/api/profiles",
        json={**REX, "imageUrl": "http://test/api/images/img-1.png"},
    )
    assert response.status_code == 201
    body = response.json()
    assert set(body) == {"id", "name", "breed", "age", "imageUrl", "createdAt", "updatedAt"}
    assert body["imageUrl"] == "http://test/api/images/img-1.png"
    assert body["createdAt"] == body["updatedAt"]
    assert response.headers["Location"].endswith(f"/api/profiles/{body['id']}")


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_id(client: AsyncClient) -> None:
    first = await _create(client)
    second = await _create(client, id=first["id"])
    assert second["id"] != first["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload,field",
    [
        ({"breed": "Beagle", "age": 3}, "name"),
        ({"name": "   ", "breed": "Beagle", "age": 3}, "name"),
        ({"name": "Rex", "breed": "", "age": 3}, "breed"),
        ({"name": "Rex", "breed": "Beagle"}, "age"),
        ({"name": "x" * 101, "breed": "Beagle", "age": 3}, "name"),
        ({**REX, "imageUrl": "u" * 501}, "imageUrl"),
    ],
)
async def test_create_validation_errors_are_400(
    client: AsyncClient, payload: dict, field: str
) -> None:
    response = await client.post("/api/profiles", json=payload)
    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert any(d["field"] == field for d in body["error"]["details"]), body


@pytest.mark.asyncio
async def test_get_list_and_missing(client: AsyncClient) -> None:
    created = await _create(client)

    response = await client.get(f"/api/profiles/{created['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Rex"

    listing = await client.get("/api/profiles")
    assert listing.status_code == 200
    assert [p["id"] for p in listing.json()] == [created["id"]]

    missing = await client.get("/api/profiles/9999")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_returns_204_and_persists(client: AsyncClient) -> None:
    created = await _create(client)
    response = await client.put(
        f"/api/profiles/{created['id']}",
        json={"id": created["id"], "name": "Rex", "breed": "Beagle", "age": 4, "imageUrl": "http://x/img.png"},
    )
    assert response.status_code == 204

    fetched = (await client.get(f"/api/profiles/{created['id']}")).json()
    assert fetched["age"] == 4
    assert fetched["imageUrl"] == "http://x/img.png"
    assert fetched["createdAt"] == created["createdAt"]


@pytest.mark.asyncio
async def test_update_id_mismatch_is_400_and_unchanged(client: AsyncClient) -> None:
    created = await _create(client)
    response = await client.put(
        f"/api/profiles/{created['id']}",
        json={"id": created["id"] + 1, "name": "Changed", "breed": "Pug", "age": 1},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "ID mismatch"

    fetched = (await client.get(f"/api/profiles/{created['id']}")).json()
    assert fetched == created


@pytest.mark.asyncio
async def test_update_missing_is_404(client: AsyncClient) -> None:
    response = await client.put(
        "/api/profiles/77",
        json={"id": 77, "name": "Ghost", "breed": "None", "age": 1},
    )
    assert response.status_code == 404
    assert (await client.get("/api/profiles")).json() == []


@pytest.mark.asyncio
async def test_update_conflict_is_409(client: AsyncClient, monkeypatch) -> None:
    created = await _create(client)
    monkeypatch.setattr(
        store, "update_profile", AsyncMock(side_effect=ProfileConflictError(created["id"]))
    )
    response = await client.put(
        f"/api/profiles/{created['id']}",
        json={"id": created["id"], "name": "Rex", "breed": "Beagle", "age": 5},
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_delete_conflict_is_409(client: AsyncClient, monkeypatch) -> None:
    created = await _create(client)
    monkeypatch.setattr(
        store, "delete_profile", AsyncMock(side_effect=ProfileConflictError(created["id"]))
    )
    response = await client.delete(f"/api/profiles/{created['id']}")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_delete_then_delete_again(client: AsyncClient) -> None:
    created = await _create(client)
    assert (await client.delete(f"/api/profiles/{created['id']}")).status_code == 204
    assert (await client.delete(f"/api/profiles/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_profile_keeps_its_image(client: AsyncClient, blob_store) -> None:
    upload = await client.post("/api/images", files={"file": ("rex.png", PNG_BYTES, "image/png")})
    image = upload.json()
    created = await _create(client, imageUrl=image["imageUrl"])

    assert (await client.delete(f"/api/profiles/{created['id']}")).status_code == 204
    assert image["fileName"] in blob_store.objects


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_upload_then_download_mixed_case_png(client: AsyncClient) -> None:
    response = await client.post(
        "/api/images",
        params={"name": "Rex"},
        files={"file": ("photo.PNG", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["fileName"].startswith("img-")
    assert body["fileName"].endswith(".png")
    assert body["imageUrl"] == f"http://test/api/images/{body['fileName']}"
    assert response.headers["Location"] == body["imageUrl"]

    download = await client.get(f"/api/images/{body['fileName']}")
    assert download.status_code == 200
    assert download.headers["content-type"] == "image/png"
    assert download.content == PNG_BYTES


@pytest.mark.asyncio
async def test_upload_size_boundaries(client: AsyncClient) -> None:
    exact = await client.post(
        "/api/images", files={"file": ("big.jpg", b"\x00" * MAX_IMAGE_SIZE, "image/jpeg")}
    )
    assert exact.status_code == 201

    over = await client.post(
        "/api/images", files={"file": ("big.jpg", b"\x00" * (MAX_IMAGE_SIZE + 1), "image/jpeg")}
    )
    assert over.status_code == 400
    assert over.json()["error"]["code"] == "FILE_TOO_LARGE"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "files,code",
    [
        ({"file": ("setup.exe", b"MZ\x90\x00", "application/octet-stream")}, "INVALID_FILE_TYPE"),
        ({"file": ("empty.png", b"", "image/png")}, "NO_FILE"),
        (None, "NO_FILE"),
    ],
)
async def test_upload_rejections(client: AsyncClient, blob_store, files, code: str) -> None:
    response = await client.post("/api/images", files=files)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == code
    assert blob_store.objects == {}


@pytest.mark.asyncio
async def test_download_missing_is_404(client: AsyncClient) -> None:
    response = await client.get("/api/images/img-missing.png")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_download_unexpected_store_error_is_404(client: AsyncClient, blob_store, monkeypatch) -> None:
    monkeypatch.setattr(blob_store, "download", AsyncMock(side_effect=ConnectionResetError()))
    response = await client.get("/api/images/img-1.png")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_direct_flag_redirects_to_store_url(client: AsyncClient) -> None:
    response = await client.get("/api/images/img-1.png", params={"direct": "true"})
    assert response.status_code == 307
    assert response.headers["location"] == "https://blobs.test/pet-images/img-1.png"


@pytest.mark.asyncio
async def test_delete_image_is_idempotent(client: AsyncClient) -> None:
    upload = (await client.post("/api/images", files={"file": ("a.gif", b"GIF89a", "image/gif")})).json()
    assert (await client.delete(f"/api/images/{upload['fileName']}")).status_code == 204
    assert (await client.delete(f"/api/images/{upload['fileName']}")).status_code == 204
    assert (await client.get(f"/api/images/{upload['fileName']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_image_store_failure_is_500(client: AsyncClient, blob_store) -> None:
    blob_store.unavailable = True
    response = await client.delete("/api/images/img-1.png")
    assert response.status_code == 500
    assert response.json()["error"]["message"] == "An unexpected error occurred"


@pytest.mark.asyncio
async def test_signed_url_endpoint(client: AsyncClient) -> None:
    response = await client.get("/api/images/img-1.png/signed-url", params={"expiresIn": 600})
    assert response.status_code == 200
    body = response.json()
    assert body == {
        "fileName": "img-1.png",
        "url": "https://blobs.test/pet-images/img-1.png?se=600&sig=test",
        "expiresIn": 600,
    }


@pytest.mark.asyncio
async def test_signed_url_endpoint_falls_back_when_signing_fails(client: AsyncClient, blob_store) -> None:
    blob_store.fail_signing = True
    response = await client.get("/api/images/img-1.png/signed-url")
    assert response.status_code == 200
    assert response.json()["url"] == "https://blobs.test/pet-images/img-1.png"
    assert response.json()["expiresIn"] == 3600
