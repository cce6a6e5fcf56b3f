"""Final wizard submission: validated form data → one persisted record.

Every step is validated before anything is written. When a step fails
the create function is never called and the caller gets the field
errors back. A create failure rolls the session back, leaves the draft
untouched and yields a generic localized message.

Editing goes through the same path: an existing record is laid out as
wizard form data, and submitting with its id updates it in place once
every step validates again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.permissions import has_permission
from app.context import UIContext
from app.i18n import translate
from app.middleware.exceptions import PermissionDeniedError, ResourceNotFoundError
from app.models.blog_post import BlogPost
from app.models.land import Land
from app.models.property import Property
from app.models.user import User
from app.schemas.common import WizardType
from app.services import drafts as draft_service
from app.services import listings
from app.services.step_validation import get_wizard
from app.services.wizard_state import WizardState

logger = logging.getLogger("brymar.submission")

Creator = Callable[[AsyncSession, User, dict], Awaitable[object]]

CREATORS: dict[WizardType, Creator] = {
    WizardType.PROPERTY: listings.create_property,
    WizardType.LAND: listings.create_land,
    WizardType.BLOG: listings.create_blog_post,
}

# Statuses the preview step can choose; the rest belong to the dashboard
WIZARD_STATUSES = ("draft", "published")


@dataclass(frozen=True)
class RecordKind:
    model: type
    manage_permission: str
    cache_prefix: str


RECORD_KINDS: dict[WizardType, RecordKind] = {
    WizardType.PROPERTY: RecordKind(Property, "property.manage", "properties"),
    WizardType.LAND: RecordKind(Land, "land.manage", "lands"),
    WizardType.BLOG: RecordKind(BlogPost, "blog.manage", "blog"),
}


@dataclass
class SubmissionResult:
    ok: bool
    message: str
    record_id: str | None = None
    status: str | None = None
    created: bool = True
    errors: dict[str, str] = field(default_factory=dict)
    invalid_steps: list[int] = field(default_factory=list)


def build_record_data(wizard_type: WizardType, form_data: dict) -> dict:
    """Merge every step model's validated output into one record payload.

    Assumes `form_data` already passed all step validators.
    """
    data: dict = {}
    for step in get_wizard(wizard_type).steps:
        model = step.model.model_validate(form_data)
        data.update(model.model_dump(mode="json"))
    return data


def record_to_form_data(wizard_type: WizardType, record) -> dict:
    """Lay a stored record out as wizard form data, the inverse of
    `build_record_data`. Unset columns are left out so the wizard shows
    them as empty.
    """
    form_data: dict = {}
    for step in get_wizard(wizard_type).steps:
        for name in step.model.model_fields:
            if name == "coordinates":
                if record.latitude is not None and record.longitude is not None:
                    form_data[name] = {"latitude": record.latitude, "longitude": record.longitude}
                continue
            value = getattr(record, name, None)
            if value is not None:
                form_data[name] = value
    if form_data.get("status") not in WIZARD_STATUSES:
        form_data["status"] = "draft"
    return form_data


async def load_editable_record(
    db: AsyncSession,
    user: User,
    wizard_type: WizardType,
    record_id: str,
    *,
    permissions: list[str],
    ui: UIContext | None = None,
):
    """Fetch a record the user may edit; owners and `*.manage` holders only."""
    ui = ui or UIContext()
    kind = RECORD_KINDS[wizard_type]
    record = await db.get(kind.model, record_id)
    if record is None:
        raise ResourceNotFoundError(
            wizard_type.value, record_id, message=translate("record_not_found", ui.language)
        )
    if not listings.can_modify(user, record, kind.manage_permission, permissions):
        raise PermissionDeniedError(translate("record_forbidden", ui.language))
    return record


def _apply_status_rules(data: dict, wizard_type: WizardType, permissions: list[str], existing) -> None:
    if existing is not None and existing.status not in WIZARD_STATUSES:
        data.pop("status", None)
        return
    if data.get("status") == "published" and not has_permission(
        permissions, f"{wizard_type.value}.publish"
    ):
        already_public = existing is not None and existing.status == "published"
        data["status"] = "published" if already_public else "draft"


async def submit_wizard(
    db: AsyncSession,
    user: User,
    wizard_type: WizardType,
    form_data: dict,
    *,
    permissions: list[str],
    draft_id: str | None = None,
    record_id: str | None = None,
    ui: UIContext | None = None,
    creator: Creator | None = None,
) -> SubmissionResult:
    """Validate every step, then create a record or update `record_id`.

    Raises ResourceNotFoundError / PermissionDeniedError when `record_id`
    is not editable by `user`.
    """
    ui = ui or UIContext()
    existing = None
    if record_id:
        existing = await load_editable_record(
            db, user, wizard_type, record_id, permissions=permissions, ui=ui
        )

    state = WizardState(wizard_type=wizard_type, ui=ui)
    state.update_form_data(form_data)

    if not state.validate_all():
        logger.info(f"Rejected {wizard_type.value} submission; invalid steps {state.invalid_steps()}")
        return SubmissionResult(
            ok=False,
            message=translate("validation_failed", ui.language),
            errors=state.errors,
            invalid_steps=state.invalid_steps(),
        )

    data = build_record_data(wizard_type, state.form_data)
    _apply_status_rules(data, wizard_type, permissions, existing)

    try:
        if existing is not None:
            # An empty slug keeps the current one
            if not data.get("slug"):
                data.pop("slug", None)
            record = await listings.apply_updates(
                db, existing, data, RECORD_KINDS[wizard_type].cache_prefix
            )
        else:
            record = await (creator or CREATORS[wizard_type])(db, user, data)
    except Exception:
        action = "Updating" if existing is not None else "Creating"
        logger.exception(f"{action} {wizard_type.value} from wizard failed for user {user.id}")
        await db.rollback()
        return SubmissionResult(ok=False, message=translate("submission_failed", ui.language))

    if draft_id:
        await draft_service.discard_after_submit(db, user, draft_id)

    state.reset_wizard()
    created = existing is None
    logger.info(
        f"Wizard {wizard_type.value} {'created' if created else 'updated'} {record.id} by {user.id}"
    )
    return SubmissionResult(
        ok=True,
        message=translate("submission_ok" if created else "submission_updated", ui.language),
        record_id=record.id,
        status=data.get("status", getattr(existing, "status", None)),
        created=created,
    )
