"""Optional AI copy generation for listing wizards.

Talks to a HuggingFace-inference-compatible endpoint:

    POST {ai_api_url}/generate
    {"inputs": prompt, "parameters": {...}}
    → [{"generated_text": "..."}]

The client never raises to its callers: any failure (disabled, timeout,
HTTP error, unexpected payload) is logged and yields None, and the
caller keeps the field's current value.
"""

from __future__ import annotations

import logging
import re

import httpx

from app.config import settings
from app.schemas.common import WizardType

logger = logging.getLogger("brymar.ai")

MAX_LENGTH = {"title": 100, "description": 500, "tags": 150}
MAX_TAGS = 10

_LABELS = {
    "es": {
        "title": "Título:",
        "description": "Descripción:",
        "tags": "Etiquetas (separadas por comas):",
        "type": "Tipo",
        "bedrooms": "Habitaciones",
        "bathrooms": "Baños",
        "surface": "Área",
        "location": "Ubicación",
        "price": "Precio",
        "zoning": "Zonificación",
        "category": "Categoría",
        "topic": "Tema",
    },
    "en": {
        "title": "Title:",
        "description": "Description:",
        "tags": "Tags (comma-separated):",
        "type": "Type",
        "bedrooms": "Bedrooms",
        "bathrooms": "Bathrooms",
        "surface": "Area",
        "location": "Location",
        "price": "Price",
        "zoning": "Zoning",
        "category": "Category",
        "topic": "Topic",
    },
}

_INTROS = {
    ("es", WizardType.PROPERTY): "Redacta contenido atractivo para una propiedad inmobiliaria con estas características:",
    ("en", WizardType.PROPERTY): "Write attractive copy for a real estate property with these characteristics:",
    ("es", WizardType.LAND): "Redacta contenido atractivo para un terreno con estas características:",
    ("en", WizardType.LAND): "Write attractive copy for a land plot with these characteristics:",
    ("es", WizardType.BLOG): "Redacta contenido para un artículo de blog inmobiliario:",
    ("en", WizardType.BLOG): "Write copy for a real estate blog article:",
}


def _location_of(form_data: dict) -> str | None:
    address = form_data.get("address") or {}
    if isinstance(address, dict):
        parts = [address.get("city"), address.get("province")]
        joined = ", ".join(str(p) for p in parts if p)
        if joined:
            return joined
    return form_data.get("location")


def build_prompt(wizard_type: WizardType, field: str, form_data: dict, language: str = "es") -> str:
    labels = _LABELS.get(language, _LABELS["es"])
    intro = _INTROS.get((language, wizard_type), _INTROS[("es", wizard_type)])

    if wizard_type == WizardType.PROPERTY:
        details = {
            "type": form_data.get("property_type"),
            "bedrooms": form_data.get("bedrooms"),
            "bathrooms": form_data.get("bathrooms"),
            "surface": f"{form_data['surface']} m²" if form_data.get("surface") else None,
            "location": _location_of(form_data),
            "price": f"{form_data['price']} {form_data.get('currency', 'USD')}" if form_data.get("price") else None,
        }
    elif wizard_type == WizardType.LAND:
        details = {
            "type": form_data.get("land_type"),
            "surface": f"{form_data['surface']} m²" if form_data.get("surface") else None,
            "location": _location_of(form_data),
            "zoning": form_data.get("zoning"),
            "price": form_data.get("price"),
        }
    else:
        details = {
            "topic": form_data.get("title"),
            "category": form_data.get("category"),
        }

    lines = [f"{labels[key]}: {value}" for key, value in details.items() if value]
    return f"{intro}\n" + "\n".join(lines) + f"\n\n{labels[field]}"


def clean_generated_text(text: str, prompt: str) -> str:
    cleaned = text.replace(prompt, "").strip()
    cleaned = re.sub(r"^(AI:|Assistant:|Response:)", "", cleaned, flags=re.IGNORECASE).strip()
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    # Drop a trailing sentence fragment
    sentences = re.split(r"[.!?]+", cleaned)
    if len(sentences) > 1 and len(sentences[-1].strip()) < 10:
        cleaned = ". ".join(s.strip() for s in sentences[:-1] if s.strip()) + "."
    return cleaned


def parse_tags(text: str) -> list[str]:
    if "," in text:
        raw = text.split(",")
    elif "\n" in text:
        raw = text.split("\n")
    elif "•" in text or "-" in text:
        raw = re.split(r"[•-]", text)
    else:
        raw = [word for word in text.split() if len(word) > 2]

    tags = []
    for tag in raw:
        tag = re.sub(r"[^\w\s-]", "", tag).strip()
        if tag and len(tag) < 30 and tag not in tags:
            tags.append(tag)
    return tags[:MAX_TAGS]


class TextGenerationClient:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.base_url)

    async def _generate_text(self, prompt: str, max_length: int) -> str | None:
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_length": max_length,
                "temperature": 0.7,
                "do_sample": True,
                "top_p": 0.9,
            },
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/generate",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Text generation failed: {exc}")
            return None

        if not isinstance(result, list) or not result or not isinstance(result[0], dict):
            logger.warning("Text generation returned an unexpected payload")
            return None
        text = clean_generated_text(result[0].get("generated_text") or "", prompt)
        return text or None

    async def generate(
        self,
        wizard_type: WizardType,
        field: str,
        form_data: dict,
        language: str = "es",
    ) -> str | list[str] | None:
        """Generate a title, description or tag list. None means "keep what you have"."""
        if not self.enabled:
            return None
        prompt = build_prompt(wizard_type, field, form_data, language)
        text = await self._generate_text(prompt, MAX_LENGTH[field])
        if text is None:
            return None
        if field == "tags":
            return parse_tags(text) or None
        return text


def get_ai_client() -> TextGenerationClient:
    """FastAPI dependency; override in tests to inject a mock transport."""
    return TextGenerationClient(
        base_url=settings.ai_api_url,
        api_key=settings.ai_api_key,
        timeout=settings.ai_timeout_seconds,
    )
