"""Wizard step definitions and pure step validators.

Every wizard is a fixed, linear list of steps. A step is backed by one
pydantic model from `app.schemas.wizard`; validating a step means
feeding the accumulated form data to that model and translating any
`ValidationError` into a flat `{field: message}` map.

Field keys are dotted paths (`address.city`, `images.0.url`); only the
first error per field is kept.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ValidationError

from app.i18n import translate
from app.schemas.common import WizardType
from app.schemas.wizard import (
    BlogContentStep,
    BlogMediaStep,
    BlogPreviewStep,
    BlogSeoStep,
    LandGeneralStep,
    LandLocationStep,
    LandMediaStep,
    LandPreviewStep,
    PropertyGeneralStep,
    PropertyLocationStep,
    PropertyMediaStep,
    PropertyPreviewStep,
)


@dataclass(frozen=True)
class WizardStep:
    number: int
    name: str
    model: type[BaseModel]
    required: bool = True
    # Dotted paths counted by the completion percentage
    required_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class WizardDefinition:
    wizard_type: WizardType
    steps: tuple[WizardStep, ...]
    title_field: str

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def required_steps(self) -> list[int]:
        return [s.number for s in self.steps if s.required]

    def step(self, number: int) -> WizardStep:
        if not 1 <= number <= self.total_steps:
            raise IndexError(number)
        return self.steps[number - 1]


WIZARDS: dict[WizardType, WizardDefinition] = {
    WizardType.PROPERTY: WizardDefinition(
        wizard_type=WizardType.PROPERTY,
        title_field="title",
        steps=(
            WizardStep(1, "general", PropertyGeneralStep, required_fields=(
                "title", "description", "price", "surface", "property_type", "characteristics",
            )),
            WizardStep(2, "location", PropertyLocationStep, required_fields=(
                "coordinates", "address.street", "address.city", "address.province",
            )),
            WizardStep(3, "media", PropertyMediaStep, required_fields=("images",)),
            WizardStep(4, "preview", PropertyPreviewStep, required=False),
        ),
    ),
    WizardType.LAND: WizardDefinition(
        wizard_type=WizardType.LAND,
        title_field="name",
        steps=(
            WizardStep(1, "general", LandGeneralStep, required_fields=(
                "name", "description", "price", "surface", "land_type", "characteristics",
            )),
            WizardStep(2, "location", LandLocationStep, required_fields=("location",)),
            WizardStep(3, "media", LandMediaStep, required_fields=("images",)),
            WizardStep(4, "preview", LandPreviewStep, required=False),
        ),
    ),
    WizardType.BLOG: WizardDefinition(
        wizard_type=WizardType.BLOG,
        title_field="title",
        steps=(
            WizardStep(1, "content", BlogContentStep, required_fields=(
                "title", "content", "category",
            )),
            WizardStep(2, "media", BlogMediaStep, required=False),
            WizardStep(3, "seo", BlogSeoStep, required=False),
            WizardStep(4, "preview", BlogPreviewStep, required=False),
        ),
    ),
}


def get_wizard(wizard_type: WizardType | str) -> WizardDefinition:
    return WIZARDS[WizardType(wizard_type)]


# ── Error translation ───────────────────────────────────────

def _field_key(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def translate_errors(exc: ValidationError, language: str = "es") -> dict[str, str]:
    """Flatten a pydantic ValidationError into `{dotted_field: message}`."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        key = _field_key(err["loc"]) or "__root__"
        if key in errors:
            continue
        ctx = {k: v for k, v in (err.get("ctx") or {}).items()}
        errors[key] = translate(err["type"], language, **ctx)
    return errors


# ── Validators ──────────────────────────────────────────────

def validate_step(
    wizard_type: WizardType | str,
    step: int,
    form_data: dict,
    language: str = "es",
) -> tuple[bool, dict[str, str]]:
    """Validate one step of a wizard against the accumulated form data.

    Returns `(ok, errors)`; `errors` is empty when `ok` is True.
    Raises IndexError for a step outside 1..N.
    """
    definition = get_wizard(wizard_type)
    model = definition.step(step).model
    try:
        model.model_validate(form_data or {})
    except ValidationError as exc:
        return False, translate_errors(exc, language)
    return True, {}


def validate_all_steps(
    wizard_type: WizardType | str,
    form_data: dict,
    language: str = "es",
) -> tuple[dict[int, bool], dict[str, str]]:
    """Run every step's validator. Returns `(is_valid_by_step, merged_errors)`."""
    definition = get_wizard(wizard_type)
    is_valid: dict[int, bool] = {}
    errors: dict[str, str] = {}
    for step in definition.steps:
        ok, step_errors = validate_step(wizard_type, step.number, form_data, language)
        is_valid[step.number] = ok
        for key, message in step_errors.items():
            errors.setdefault(key, message)
    return is_valid, errors


def _get_path(data: dict, path: str):
    current = data
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _is_filled(value) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, dict)) and len(value) == 0:
        return False
    return True


def completion_percentage(wizard_type: WizardType | str, form_data: dict) -> int:
    """Share of required fields filled across all required steps (0..100).

    A step that fully validates counts all of its fields as filled.
    """
    definition = get_wizard(wizard_type)
    total = 0
    filled = 0
    for step in definition.steps:
        if not step.required_fields:
            continue
        total += len(step.required_fields)
        ok, _ = validate_step(wizard_type, step.number, form_data)
        if ok:
            filled += len(step.required_fields)
        else:
            filled += sum(1 for f in step.required_fields if _is_filled(_get_path(form_data or {}, f)))
    if total == 0:
        return 100
    return round(filled * 100 / total)
