"""Draft persistence for listing wizards.

Contract:
  save(draft_id?, form_data, step) -> draft_id
  load(draft_id)                   -> WizardDraft (form_data + current_step)
  list()                           -> draft summaries, newest first
  delete(draft_id)

Drafts are scoped to their owner: another user's draft id behaves
exactly like a missing one. Storage failures propagate (SQLAlchemy
errors are mapped by the exception handlers); nothing is retried.
"""

from __future__ import annotations

import logging

from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.context import UIContext
from app.i18n import translate
from app.middleware.exceptions import DraftError, DraftNotFoundError
from app.models.user import User
from app.models.wizard_draft import WizardDraft
from app.schemas.common import WizardType
from app.services.wizard_state import WizardState

logger = logging.getLogger("brymar.drafts")

SORT_COLUMNS = {
    "updated_at": WizardDraft.updated_at,
    "created_at": WizardDraft.created_at,
    "completion_percentage": WizardDraft.completion_percentage,
}


def _build_state(
    wizard_type: WizardType,
    form_data,
    step,
    ui: UIContext,
) -> WizardState:
    if not isinstance(form_data, dict):
        raise DraftError(translate("draft_malformed", ui.language), error_code="DRAFT_MALFORMED")
    try:
        return WizardState.from_draft(wizard_type, form_data, step, ui=ui)
    except Exception as exc:
        logger.warning(f"Rejected malformed {wizard_type.value} draft: {exc}")
        raise DraftError(translate("draft_malformed", ui.language), error_code="DRAFT_MALFORMED")


async def _get_owned(db: AsyncSession, user: User, draft_id: str, ui: UIContext) -> WizardDraft:
    result = await db.execute(
        select(WizardDraft).where(
            WizardDraft.id == draft_id,
            WizardDraft.user_id == user.id,
        )
    )
    draft = result.scalar_one_or_none()
    if draft is None:
        raise DraftNotFoundError(draft_id, message=translate("draft_not_found", ui.language))
    return draft


async def save_draft(
    db: AsyncSession,
    user: User,
    wizard_type: WizardType,
    form_data: dict,
    current_step: int,
    draft_id: str | None = None,
    ui: UIContext | None = None,
) -> WizardDraft:
    """Create a new draft, or overwrite `draft_id` when given."""
    ui = ui or UIContext()
    state = _build_state(wizard_type, form_data, current_step, ui)
    snapshot = state.snapshot()
    progress = {str(step): ok for step, ok in state.step_progress().items()}

    if draft_id:
        draft = await _get_owned(db, user, draft_id, ui)
        if draft.wizard_type != wizard_type.value:
            raise DraftError(
                translate("draft_type_mismatch", ui.language),
                error_code="DRAFT_TYPE_MISMATCH",
            )
    else:
        draft = WizardDraft(user_id=user.id, wizard_type=wizard_type.value)
        db.add(draft)

    draft.form_data = snapshot["form_data"]
    draft.current_step = snapshot["current_step"]
    draft.title = state.title()
    draft.step_progress = progress
    draft.completion_percentage = state.completion_percentage()
    await db.flush()
    await db.refresh(draft)

    logger.info(
        f"Draft {draft.id} saved ({wizard_type.value}, step {draft.current_step}, "
        f"{draft.completion_percentage}%)"
    )
    return draft


async def load_draft(
    db: AsyncSession,
    user: User,
    draft_id: str,
    ui: UIContext | None = None,
) -> WizardDraft:
    return await _get_owned(db, user, draft_id, ui or UIContext())


async def restore_state(
    db: AsyncSession,
    user: User,
    draft_id: str,
    ui: UIContext | None = None,
) -> WizardState:
    """Load a draft and rebuild the wizard state it was saved from."""
    ui = ui or UIContext()
    draft = await _get_owned(db, user, draft_id, ui)
    return _build_state(WizardType(draft.wizard_type), draft.form_data, draft.current_step, ui)


async def list_drafts(
    db: AsyncSession,
    user: User,
    wizard_type: WizardType | None = None,
    limit: int = 20,
    offset: int = 0,
    sort_by: str = "updated_at",
    sort_order: str = "desc",
) -> tuple[list[WizardDraft], int]:
    conditions = [WizardDraft.user_id == user.id]
    if wizard_type is not None:
        conditions.append(WizardDraft.wizard_type == wizard_type.value)

    total = await db.scalar(select(func.count(WizardDraft.id)).where(*conditions)) or 0

    column = SORT_COLUMNS.get(sort_by, WizardDraft.updated_at)
    order = asc(column) if sort_order == "asc" else desc(column)
    result = await db.execute(
        select(WizardDraft).where(*conditions).order_by(order).limit(limit).offset(offset)
    )
    return list(result.scalars().all()), total


async def delete_draft(
    db: AsyncSession,
    user: User,
    draft_id: str,
    ui: UIContext | None = None,
) -> None:
    draft = await _get_owned(db, user, draft_id, ui or UIContext())
    await db.delete(draft)
    await db.flush()
    logger.info(f"Draft {draft_id} deleted")


async def discard_after_submit(db: AsyncSession, user: User, draft_id: str) -> None:
    """Remove a submitted draft; a missing one is not an error."""
    await db.execute(
        delete(WizardDraft).where(
            WizardDraft.id == draft_id,
            WizardDraft.user_id == user.id,
        )
    )
    await db.flush()
