"""Tests for profile, admin user management, media uploads and health."""

import pytest
from httpx import AsyncClient

from app.config import settings
from app.middleware.exceptions import BusinessLogicError
from app.services import storage
from app.services.storage import read_upload, sniff_image_type, store_image

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


class ChunkCountingFile:
    def __init__(self, data: bytes):
        self.data = data
        self.requested = 0

    async def read(self, size: int = -1) -> bytes:
        chunk = self.data[self.requested:self.requested + size]
        self.requested += len(chunk)
        return chunk


@pytest.mark.api
@pytest.mark.asyncio
class TestProfile:

    async def test_update_preferences(self, client: AsyncClient, auth_headers: dict):
        response = await client.patch(
            "/api/profile/",
            json={"preferred_language": "en", "preferred_theme": "dark", "bio": "Busco casa en Sosúa"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["preferred_language"] == "en"
        assert data["preferred_theme"] == "dark"
        assert data["bio"] == "Busco casa en Sosúa"

    async def test_preferred_language_drives_messages(
        self, client: AsyncClient, agent_headers: dict
    ):
        await client.patch("/api/profile/", json={"preferred_language": "en"}, headers=agent_headers)

        response = await client.post(
            "/api/wizard/property/validate",
            json={"step": 1, "form_data": {"title": "Casa en la playa"}},
            headers=agent_headers,
        )

        assert response.json()["errors"]["price"] == "This field is required"

    async def test_invalid_phone_rejected(self, client: AsyncClient, auth_headers: dict):
        response = await client.patch(
            "/api/profile/", json={"phone": "not a phone"}, headers=auth_headers
        )

        assert response.status_code == 422

    async def test_change_password(self, client: AsyncClient, test_user, auth_headers: dict):
        wrong = await client.post(
            "/api/profile/password",
            json={"current_password": "nope", "new_password": "NuevaClave2024"},
            headers=auth_headers,
        )
        changed = await client.post(
            "/api/profile/password",
            json={"current_password": "testpassword123", "new_password": "NuevaClave2024"},
            headers=auth_headers,
        )
        login = await client.post(
            "/api/auth/login", json={"email": test_user.email, "password": "NuevaClave2024"}
        )

        assert wrong.status_code == 400
        assert changed.status_code == 204
        assert login.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
class TestUserAdmin:

    async def test_list_requires_users_manage(self, client: AsyncClient, agent_headers: dict):
        response = await client.get("/api/users/", headers=agent_headers)

        assert response.status_code == 403

    async def test_list_filters_by_role(
        self, client: AsyncClient, admin_headers: dict, agent_user, test_user
    ):
        response = await client.get("/api/users/?role=agent", headers=admin_headers)

        assert response.status_code == 200
        emails = [u["email"] for u in response.json()["items"]]
        assert emails == [agent_user.email]

    async def test_promote_user_to_agent(
        self, client: AsyncClient, admin_headers: dict, test_user
    ):
        response = await client.patch(
            f"/api/users/{test_user.id}", json={"role": "agent"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["role"] == "agent"
        assert "property.write" in response.json()["permissions"]

    async def test_admin_cannot_demote_self(
        self, client: AsyncClient, admin_headers: dict, admin_user
    ):
        response = await client.patch(
            f"/api/users/{admin_user.id}", json={"role": "user"}, headers=admin_headers
        )

        assert response.status_code == 400

    async def test_unknown_permission_rejected(
        self, client: AsyncClient, admin_headers: dict, agent_user
    ):
        response = await client.patch(
            f"/api/users/{agent_user.id}",
            json={"custom_permissions": {"rockets.launch": True}},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "rockets.launch" in response.json()["error"]["message"]


@pytest.mark.unit
class TestStorage:

    def test_sniff_image_type(self):
        assert sniff_image_type(PNG_BYTES) == "image/png"
        assert sniff_image_type(JPEG_BYTES) == "image/jpeg"
        assert sniff_image_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"
        assert sniff_image_type(b"GIF89a") is None

    def test_store_image_writes_file(self, tmp_path):
        stored = store_image(PNG_BYTES, "../../etc/fachada.png", folder="aerial", upload_dir=str(tmp_path))

        assert stored.content_type == "image/png"
        assert stored.filename == "fachada.png"
        assert stored.url.endswith(f"/aerial/{stored.id}.png")
        assert (tmp_path / "aerial" / f"{stored.id}.png").read_bytes() == PNG_BYTES

    def test_rejects_empty_and_oversized(self, tmp_path, monkeypatch):
        with pytest.raises(BusinessLogicError) as empty:
            store_image(b"", "x.png", upload_dir=str(tmp_path))
        assert empty.value.error_code == "EMPTY_UPLOAD"

        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        with pytest.raises(BusinessLogicError) as big:
            store_image(PNG_BYTES, "x.png", upload_dir=str(tmp_path))
        assert big.value.error_code == "FILE_TOO_LARGE"

    async def test_read_upload_stops_past_the_limit(self, monkeypatch):
        monkeypatch.setattr(storage, "UPLOAD_CHUNK_BYTES", 16)
        upload = ChunkCountingFile(PNG_BYTES * 10)

        content = await read_upload(upload, limit=40)

        assert len(content) == 41
        assert upload.requested == 41

    async def test_read_upload_small_file_is_complete(self):
        content = await read_upload(ChunkCountingFile(PNG_BYTES), limit=1000)

        assert content == PNG_BYTES


@pytest.mark.api
@pytest.mark.asyncio
class TestUploadEndpoint:

    async def test_upload_png(self, client: AsyncClient, agent_headers: dict):
        response = await client.post(
            "/api/uploads/images?folder=blog",
            files={"file": ("portada.png", PNG_BYTES, "image/png")},
            headers=agent_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["content_type"] == "image/png"
        assert data["filename"] == "portada.png"
        assert "/blog/" in data["url"]

    async def test_claimed_type_is_ignored(self, client: AsyncClient, agent_headers: dict):
        response = await client.post(
            "/api/uploads/images",
            files={"file": ("notas.jpg", b"just some text", "image/jpeg")},
            headers=agent_headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "UNSUPPORTED_MEDIA_TYPE"

    async def test_oversized_upload(self, client: AsyncClient, agent_headers: dict, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 32)

        response = await client.post(
            "/api/uploads/images",
            files={"file": ("grande.png", PNG_BYTES, "image/png")},
            headers=agent_headers,
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "FILE_TOO_LARGE"

    async def test_unknown_folder(self, client: AsyncClient, agent_headers: dict):
        response = await client.post(
            "/api/uploads/images?folder=../secrets",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
            headers=agent_headers,
        )

        assert response.status_code == 422


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_ready_without_cache(self, client: AsyncClient):
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {
            "service": "ok",
            "database": "ok",
            "redis": "disabled",
        }

    async def test_security_headers(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert "content-security-policy" in response.headers

    async def test_hsts_only_in_production(self, client: AsyncClient, monkeypatch):
        development = await client.get("/health")
        monkeypatch.setattr(settings, "environment", "production")
        production = await client.get("/health", headers={"x-forwarded-proto": "https"})

        assert "strict-transport-security" not in development.headers
        assert production.headers["strict-transport-security"].startswith("max-age=31536000")
        assert development.headers["content-security-policy"].startswith("default-src 'none'")

    async def test_docs_page_has_no_csp(self, client: AsyncClient):
        response = await client.get("/docs")

        assert response.status_code == 200
        assert "content-security-policy" not in response.headers
