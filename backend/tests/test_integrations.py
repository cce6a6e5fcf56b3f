"""Tests for the optional AI and geocoding collaborators.

Both talk HTTP through httpx; a MockTransport stands in for the remote
service, and every failure must degrade instead of raising.
"""

import httpx
import pytest
from httpx import AsyncClient

from app.main import app
from app.schemas.common import WizardType
from app.services.ai import TextGenerationClient, build_prompt, clean_generated_text, parse_tags
from app.services.geocoding import GeocodingClient, get_geocoding_client, in_bounds


def _geocoder(handler) -> GeocodingClient:
    return GeocodingClient(
        base_url="http://geo.test",
        user_agent="brymar-tests",
        transport=httpx.MockTransport(handler),
    )


def _ai(handler, api_key: str = "test-key") -> TextGenerationClient:
    return TextGenerationClient(
        base_url="http://ai.test", api_key=api_key, transport=httpx.MockTransport(handler)
    )


LAS_TERRENAS = {
    "lat": "19.3106",
    "lon": "-69.5428",
    "display_name": "Calle Duarte, Las Terrenas, Samaná, República Dominicana",
    "importance": 0.62,
    "address": {
        "road": "Calle Duarte",
        "town": "Las Terrenas",
        "postcode": "32000",
    },
}


@pytest.mark.unit
class TestPromptHelpers:

    def test_property_prompt_includes_known_details(self, property_form):
        prompt = build_prompt(WizardType.PROPERTY, "title", property_form, "en")

        assert prompt.startswith("Write attractive copy for a real estate property")
        assert "Bedrooms: 3" in prompt
        assert "Las Terrenas, Samaná" in prompt
        assert prompt.endswith("Title:")

    def test_prompt_tolerates_non_text_address_parts(self, property_form):
        form = dict(property_form, address={"city": 10101, "province": None})

        prompt = build_prompt(WizardType.PROPERTY, "description", form, "es")

        assert "10101" in prompt

    def test_clean_removes_prompt_and_prefix(self):
        text = clean_generated_text("PROMPT Assistant: Villa con vista al mar.", "PROMPT")

        assert text == "Villa con vista al mar."

    def test_parse_tags_dedupes_and_caps(self):
        raw = ",".join(["playa", "piscina", "playa"] + [f"tag{i}" for i in range(20)])

        tags = parse_tags(raw)

        assert tags[:2] == ["playa", "piscina"]
        assert len(tags) == 10

    def test_bounds(self):
        assert in_bounds(18.47, -69.89)
        assert not in_bounds(25.76, -80.19)


@pytest.mark.asyncio
class TestTextGenerationClient:

    async def test_disabled_without_key_never_calls_out(self):
        def handler(request):
            raise AssertionError("should not be called")

        client = _ai(handler, api_key="")

        assert client.enabled is False
        assert await client.generate(WizardType.BLOG, "title", {"title": "x"}) is None

    async def test_tags_are_parsed(self, land_form):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["authorization"] == "Bearer test-key"
            return httpx.Response(200, json=[{"generated_text": "montaña, río, inversión"}])

        tags = await _ai(handler).generate(WizardType.LAND, "tags", land_form)

        assert tags == ["montaña", "río", "inversión"]

    async def test_timeout_degrades_to_none(self, property_form):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert await _ai(handler).generate(WizardType.PROPERTY, "description", property_form) is None

    async def test_unexpected_payload_degrades_to_none(self, property_form):
        def handler(request):
            return httpx.Response(200, json={"estimated_time": 20})

        assert await _ai(handler).generate(WizardType.PROPERTY, "title", property_form) is None


@pytest.mark.asyncio
class TestGeocodingClient:

    async def test_geocode_parses_first_match(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/search"
            assert request.url.params["countrycodes"] == "do"
            assert request.headers["user-agent"] == "brymar-tests"
            return httpx.Response(200, json=[LAS_TERRENAS])

        result = await _geocoder(handler).geocode("Calle Duarte, Las Terrenas")

        assert result.latitude == 19.3106
        assert result.longitude == -69.5428
        assert result.street == "Calle Duarte"
        assert result.city == "Las Terrenas"
        assert result.province == "Samaná"
        assert result.postal_code == "32000"
        assert result.confidence == 0.62

    async def test_no_match_has_zero_confidence(self):
        result = await _geocoder(lambda r: httpx.Response(200, json=[])).geocode("nowhere at all")

        assert result.confidence == 0
        assert result.latitude is None

    async def test_match_outside_country_is_dropped(self):
        madrid = dict(LAS_TERRENAS, lat="40.4168", lon="-3.7038")

        result = await _geocoder(lambda r: httpx.Response(200, json=[madrid])).geocode("Gran Vía")

        assert result.confidence == 0

    async def test_http_error_degrades(self):
        result = await _geocoder(lambda r: httpx.Response(502)).geocode("Santo Domingo")

        assert result.confidence == 0

    async def test_reverse_geocode(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/reverse"
            return httpx.Response(200, json={
                "display_name": "Jarabacoa, La Vega",
                "address": {"town": "Jarabacoa"},
            })

        result = await _geocoder(handler).reverse_geocode(19.1189, -70.6364)

        assert result.city == "Jarabacoa"
        assert result.province == "La Vega"
        assert result.confidence == 0.8

    async def test_reverse_out_of_bounds_skips_request(self):
        def handler(request):
            raise AssertionError("should not be called")

        result = await _geocoder(handler).reverse_geocode(40.4, -3.7)

        assert result.confidence == 0
        assert result.latitude == 40.4


@pytest.mark.api
@pytest.mark.asyncio
class TestGeocodingEndpoints:

    async def test_search(self, client: AsyncClient, agent_headers: dict):
        app.dependency_overrides[get_geocoding_client] = lambda: _geocoder(
            lambda r: httpx.Response(200, json=[LAS_TERRENAS])
        )

        response = await client.get(
            "/api/geocoding/search", params={"q": "Las Terrenas"}, headers=agent_headers
        )

        assert response.status_code == 200
        assert response.json()["city"] == "Las Terrenas"
        assert response.json()["country"] == "Dominican Republic"

    async def test_search_failure_still_answers(self, client: AsyncClient, agent_headers: dict):
        app.dependency_overrides[get_geocoding_client] = lambda: _geocoder(
            lambda r: httpx.Response(500)
        )

        response = await client.get(
            "/api/geocoding/search", params={"q": "Las Terrenas"}, headers=agent_headers
        )

        assert response.status_code == 200
        assert response.json()["confidence"] == 0

    async def test_query_too_short(self, client: AsyncClient, agent_headers: dict):
        response = await client.get(
            "/api/geocoding/search", params={"q": "ab"}, headers=agent_headers
        )

        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/geocoding/reverse", params={"lat": 18.5, "lng": -69.9})

        assert response.status_code == 401
