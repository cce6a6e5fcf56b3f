"""Forward / reverse geocoding through a Nominatim-compatible API.

Results are limited to the Dominican Republic. Every call returns a
`GeocodeResult`; on any failure (timeout, HTTP error, empty result,
coordinates out of bounds) the result carries `confidence = 0` instead
of raising, and the wizard keeps whatever the user typed.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

import httpx

from app.config import settings
from app.schemas.wizard import DR_LAT_MAX, DR_LAT_MIN, DR_LNG_MAX, DR_LNG_MIN

logger = logging.getLogger("brymar.geocoding")

COUNTRY = "Dominican Republic"

# Fallback when Nominatim omits the state
CITY_PROVINCE = {
    "santo domingo": "Distrito Nacional",
    "santiago de los caballeros": "Santiago",
    "santiago": "Santiago",
    "punta cana": "La Altagracia",
    "higüey": "La Altagracia",
    "la romana": "La Romana",
    "puerto plata": "Puerto Plata",
    "sosúa": "Puerto Plata",
    "cabarete": "Puerto Plata",
    "las terrenas": "Samaná",
    "samaná": "Samaná",
    "la vega": "La Vega",
    "jarabacoa": "La Vega",
    "san pedro de macorís": "San Pedro de Macorís",
    "san cristóbal": "San Cristóbal",
    "barahona": "Barahona",
}


@dataclass
class GeocodeResult:
    latitude: float | None = None
    longitude: float | None = None
    formatted_address: str | None = None
    street: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    country: str = COUNTRY
    confidence: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def in_bounds(latitude: float, longitude: float) -> bool:
    return DR_LAT_MIN <= latitude <= DR_LAT_MAX and DR_LNG_MIN <= longitude <= DR_LNG_MAX


def _address_parts(components: dict) -> dict:
    street_parts = [components.get("house_number"), components.get("road") or components.get("street")]
    street = " ".join(p for p in street_parts if p) or components.get("neighbourhood") or components.get("suburb")
    city = (
        components.get("city")
        or components.get("town")
        or components.get("village")
        or components.get("municipality")
    )
    province = components.get("state") or components.get("province")
    if not province and city:
        province = CITY_PROVINCE.get(city.lower())
    return {
        "street": street,
        "city": city,
        "province": province,
        "postal_code": components.get("postcode"),
    }


def _confidence(item: dict, default: float) -> float:
    try:
        value = float(item.get("importance", default))
    except (TypeError, ValueError):
        value = default
    return round(min(max(value, 0.01), 1.0), 3)


class GeocodingClient:
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 10.0,
        language: str = "es",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.language = language
        self._transport = transport

    async def _get(self, path: str, params: dict):
        params = {**params, "format": "json", "addressdetails": 1, "accept-language": self.language}
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": self.user_agent},
        ) as client:
            response = await client.get(f"{self.base_url}/{path}", params=params)
            response.raise_for_status()
            return response.json()

    async def geocode(self, query: str) -> GeocodeResult:
        """Address text → coordinates."""
        query = (query or "").strip()
        if not query:
            return GeocodeResult()
        try:
            data = await self._get(
                "search",
                {"q": f"{query}, {COUNTRY}", "limit": 1, "countrycodes": "do"},
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Geocoding '{query}' failed: {exc}")
            return GeocodeResult()

        if not isinstance(data, list) or not data:
            logger.info(f"No geocoding match for '{query}'")
            return GeocodeResult()

        item = data[0]
        try:
            latitude, longitude = float(item["lat"]), float(item["lon"])
        except (KeyError, TypeError, ValueError):
            return GeocodeResult()
        if not in_bounds(latitude, longitude):
            logger.info(f"Geocoding match for '{query}' is outside the Dominican Republic")
            return GeocodeResult()

        return GeocodeResult(
            latitude=latitude,
            longitude=longitude,
            formatted_address=item.get("display_name"),
            confidence=_confidence(item, 0.5),
            **_address_parts(item.get("address") or {}),
        )

    async def reverse_geocode(self, latitude: float, longitude: float) -> GeocodeResult:
        """Coordinates → address."""
        if not in_bounds(latitude, longitude):
            return GeocodeResult(latitude=latitude, longitude=longitude)
        try:
            data = await self._get("reverse", {"lat": latitude, "lon": longitude, "zoom": 18})
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Reverse geocoding ({latitude}, {longitude}) failed: {exc}")
            return GeocodeResult(latitude=latitude, longitude=longitude)

        if not isinstance(data, dict) or data.get("error"):
            return GeocodeResult(latitude=latitude, longitude=longitude)

        parts = _address_parts(data.get("address") or {})
        formatted = data.get("display_name") or ", ".join(
            p for p in (parts["street"], parts["city"], parts["province"]) if p
        )
        return GeocodeResult(
            latitude=latitude,
            longitude=longitude,
            formatted_address=formatted or None,
            confidence=_confidence(data, 0.8),
            **parts,
        )


def get_geocoding_client() -> GeocodingClient:
    """FastAPI dependency; override in tests to inject a mock transport."""
    return GeocodingClient(
        base_url=settings.geocoding_url,
        user_agent=settings.geocoding_user_agent,
        timeout=settings.geocoding_timeout_seconds,
    )
