"""Tests for public and dashboard listing routes (properties, lands, blog)."""

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, path: str, body: dict, headers: dict) -> dict:
    response = await client.post(path, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.api
@pytest.mark.asyncio
class TestProperties:

    async def test_public_list_only_shows_published(
        self, client: AsyncClient, agent_headers: dict, property_form: dict
    ):
        await _create(client, "/api/dashboard/properties/", property_form, agent_headers)
        await _create(
            client, "/api/dashboard/properties/",
            dict(property_form, title="Apartamento en construcción", status="draft"),
            agent_headers,
        )

        response = await client.get("/api/properties/")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["title"] == property_form["title"]
        assert data["items"][0]["latitude"] == 19.2056

    async def test_public_filters(self, client: AsyncClient, agent_headers: dict, property_form: dict):
        await _create(client, "/api/dashboard/properties/", property_form, agent_headers)

        cheap = await client.get("/api/properties/?max_price=100000")
        by_city = await client.get("/api/properties/?city=terrenas")
        by_type = await client.get("/api/properties/?property_type=villa")

        assert cheap.json()["total"] == 0
        assert by_city.json()["total"] == 1
        assert by_type.json()["total"] == 0

    async def test_accented_city_and_province(
        self, client: AsyncClient, agent_headers: dict, property_form: dict
    ):
        address = {"street": "Avenida La Altagracia 12", "city": "Higüey", "province": "La Altagracia"}
        await _create(
            client, "/api/dashboard/properties/", dict(property_form, address=address), agent_headers
        )
        await _create(client, "/api/dashboard/properties/", property_form, agent_headers)

        by_city = await client.get("/api/properties/", params={"city": "Higüey"})
        by_province = await client.get("/api/properties/", params={"province": "samaná"})
        city_is_not_province = await client.get("/api/properties/", params={"city": "Samaná"})

        assert by_city.json()["total"] == 1
        assert by_city.json()["items"][0]["address"]["city"] == "Higüey"
        assert by_province.json()["total"] == 1
        assert city_is_not_province.json()["total"] == 0

    async def test_draft_is_hidden_from_public_detail(
        self, client: AsyncClient, agent_headers: dict, property_form: dict
    ):
        prop = await _create(
            client, "/api/dashboard/properties/", dict(property_form, status="draft"), agent_headers
        )

        response = await client.get(f"/api/properties/{prop['id']}")

        assert response.status_code == 404

    async def test_plain_user_cannot_create(
        self, client: AsyncClient, auth_headers: dict, property_form: dict
    ):
        response = await client.post(
            "/api/dashboard/properties/", json=property_form, headers=auth_headers
        )

        assert response.status_code == 403

    async def test_owner_updates_other_agent_cannot(
        self,
        client: AsyncClient,
        agent_headers: dict,
        other_agent_headers: dict,
        property_form: dict,
    ):
        prop = await _create(client, "/api/dashboard/properties/", property_form, agent_headers)

        denied = await client.patch(
            f"/api/dashboard/properties/{prop['id']}",
            json={"price": 300000},
            headers=other_agent_headers,
        )
        allowed = await client.patch(
            f"/api/dashboard/properties/{prop['id']}",
            json={"price": 300000, "coordinates": {"latitude": 18.47, "longitude": -69.89}},
            headers=agent_headers,
        )

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["price"] == 300000
        assert allowed.json()["latitude"] == 18.47

    async def test_dashboard_list_scopes_to_owner_unless_manager(
        self,
        client: AsyncClient,
        agent_headers: dict,
        other_agent_headers: dict,
        admin_headers: dict,
        property_form: dict,
    ):
        await _create(client, "/api/dashboard/properties/", property_form, agent_headers)

        own = await client.get("/api/dashboard/properties/", headers=agent_headers)
        other = await client.get("/api/dashboard/properties/", headers=other_agent_headers)
        admin = await client.get("/api/dashboard/properties/", headers=admin_headers)

        assert own.json()["total"] == 1
        assert other.json()["total"] == 0
        assert admin.json()["total"] == 1

    async def test_publish_and_delete(
        self, client: AsyncClient, agent_headers: dict, property_form: dict
    ):
        prop = await _create(
            client, "/api/dashboard/properties/", dict(property_form, status="draft"), agent_headers
        )

        published = await client.post(
            f"/api/dashboard/properties/{prop['id']}/publish", headers=agent_headers
        )
        assert published.json()["status"] == "published"
        assert (await client.get(f"/api/properties/{prop['id']}")).status_code == 200

        deleted = await client.delete(f"/api/dashboard/properties/{prop['id']}", headers=agent_headers)
        assert deleted.status_code == 204
        assert (await client.get(f"/api/properties/{prop['id']}")).status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestLands:

    async def test_create_and_search_by_location(
        self, client: AsyncClient, agent_headers: dict, land_form: dict
    ):
        land = await _create(
            client, "/api/dashboard/lands/", dict(land_form, status="published"), agent_headers
        )
        assert land["name"] == land_form["name"]

        found = await client.get("/api/lands/?location=jarabacoa")
        missing = await client.get("/api/lands/?location=punta cana")

        assert found.json()["total"] == 1
        assert missing.json()["total"] == 0

    async def test_location_is_required(self, client: AsyncClient, agent_headers: dict, land_form: dict):
        body = {k: v for k, v in land_form.items() if k != "location"}

        response = await client.post("/api/dashboard/lands/", json=body, headers=agent_headers)

        assert response.status_code == 422

    async def test_publish_needs_permission(
        self, client: AsyncClient, agent_user, admin_headers: dict, land_form: dict
    ):
        revoked = await client.patch(
            f"/api/users/{agent_user.id}",
            json={"custom_permissions": {"land.publish": False}},
            headers=admin_headers,
        )
        assert revoked.status_code == 200
        assert "land.publish" not in revoked.json()["permissions"]

        login = await client.post(
            "/api/auth/login", json={"email": agent_user.email, "password": "testpassword123"}
        )
        headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

        response = await client.post(
            "/api/dashboard/lands/", json=dict(land_form, status="published"), headers=headers
        )

        assert response.status_code == 403


@pytest.mark.api
@pytest.mark.asyncio
class TestBlog:

    async def test_admin_post_is_public_by_slug(
        self, client: AsyncClient, admin_headers: dict, blog_form: dict
    ):
        post = await _create(client, "/api/dashboard/blog/", blog_form, admin_headers)

        assert post["slug"] == "guia-para-comprar-tu-primera-casa"
        assert post["published_at"] is not None

        response = await client.get(f"/api/blog/{post['slug']}")
        assert response.status_code == 200
        assert response.json()["id"] == post["id"]

    async def test_duplicate_titles_get_unique_slugs(
        self, client: AsyncClient, admin_headers: dict, blog_form: dict
    ):
        first = await _create(client, "/api/dashboard/blog/", blog_form, admin_headers)
        second = await _create(client, "/api/dashboard/blog/", blog_form, admin_headers)

        assert second["slug"] == f"{first['slug']}-2"

    async def test_agent_cannot_publish(
        self, client: AsyncClient, agent_headers: dict, blog_form: dict
    ):
        response = await client.post("/api/dashboard/blog/", json=blog_form, headers=agent_headers)
        draft = await _create(
            client, "/api/dashboard/blog/", dict(blog_form, status="draft"), agent_headers
        )

        assert response.status_code == 403
        assert (await client.get(f"/api/blog/{draft['slug']}")).status_code == 404

    async def test_category_filter(self, client: AsyncClient, admin_headers: dict, blog_form: dict):
        await _create(client, "/api/dashboard/blog/", blog_form, admin_headers)

        matching = await client.get("/api/blog/?category=investment-tips")
        other = await client.get("/api/blog/?category=legal-advice")

        assert matching.json()["total"] == 1
        assert other.json()["total"] == 0

    async def test_script_in_title_is_rejected(
        self, client: AsyncClient, admin_headers: dict, blog_form: dict
    ):
        response = await client.post(
            "/api/dashboard/blog/",
            json=dict(blog_form, title="<script>alert(1)</script> casas"),
            headers=admin_headers,
        )

        assert response.status_code == 422
