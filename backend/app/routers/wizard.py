"""Listing wizards: property, land and blog post creation with save/resume.

Endpoints (all under /api/wizard/{wizard_type}):
  POST   /validate          → validate one step, return wizard progress
  GET    /drafts            → list own drafts of this wizard type
  POST   /drafts            → save a draft (create, or update with draft_id)
  GET    /drafts/{draft_id} → load a draft to resume
  DELETE /drafts/{draft_id} → discard a draft
  GET    /records/{id}      → load an existing listing as form data to edit
  POST   /submit            → validate every step and create the listing,
                              or update it when `record_id` is given
  POST   /generate          → optional AI copy for title / description / tags

Design:
  - Form data lives client-side while editing; drafts are the only
    server-side staging area and are deleted once submitted.
  - Each wizard type requires `<wizard_type>.write`.
  - Field errors are localized through the request's UIContext.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, user_permissions
from app.context import UIContext, get_ui_context
from app.database import get_db
from app.i18n import translate
from app.middleware.exceptions import (
    BrymarException,
    DraftNotFoundError,
    PermissionDeniedError,
    WizardValidationError,
)
from app.models.user import User
from app.schemas.common import PaginatedResponse, WizardType
from app.schemas.wizard import (
    DraftOut,
    DraftSaved,
    DraftSaveRequest,
    DraftSummary,
    GenerateRequest,
    GenerateResponse,
    SubmitRequest,
    SubmitResponse,
    WizardRecordOut,
    WizardStateOut,
    WizardValidateRequest,
)
from app.services import drafts as draft_service
from app.services.ai import TextGenerationClient, get_ai_client
from app.services.step_validation import get_wizard
from app.services.submission import load_editable_record, record_to_form_data, submit_wizard
from app.services.wizard_state import WizardState

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def require_wizard_access(
    wizard_type: WizardType,
    user: User = Depends(get_current_user),
) -> User:
    permission = f"{wizard_type.value}.write"
    if permission not in user_permissions(user):
        raise PermissionDeniedError(f"Missing permissions: {permission}")
    return user


def _make_state_out(state: WizardState) -> WizardStateOut:
    return WizardStateOut(
        wizard_type=state.wizard_type,
        current_step=state.current_step,
        total_steps=state.total_steps,
        form_data=state.form_data,
        is_valid=state.is_valid,
        is_dirty=state.is_dirty,
        is_loading=state.is_loading,
        errors=state.errors,
        completion_percentage=state.completion_percentage(),
        step_progress=state.step_progress(),
    )


# ── Validation ───────────────────────────────────────────────

@router.post("/{wizard_type}/validate", response_model=WizardStateOut)
async def validate_step(
    wizard_type: WizardType,
    body: WizardValidateRequest,
    ui: UIContext = Depends(get_ui_context),
    _user: User = Depends(require_wizard_access),
):
    """Validate `body.step` against the accumulated form data.

    Never persists anything; the client keeps the form state.
    """
    state = WizardState(wizard_type=wizard_type, ui=ui)
    state.update_form_data(body.form_data)
    state.set_current_step(body.step)
    state.validate_current_step()
    return _make_state_out(state)


# ── Drafts ───────────────────────────────────────────────────

@router.get("/{wizard_type}/drafts", response_model=PaginatedResponse[DraftSummary])
async def list_drafts(
    wizard_type: WizardType,
    sort_by: str = Query("updated_at", pattern="^(updated_at|created_at|completion_percentage)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_wizard_access),
):
    items, total = await draft_service.list_drafts(
        db, user,
        wizard_type=wizard_type,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PaginatedResponse(
        items=[DraftSummary.model_validate(d) for d in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/{wizard_type}/drafts", response_model=DraftSaved)
async def save_draft(
    wizard_type: WizardType,
    body: DraftSaveRequest,
    db: AsyncSession = Depends(get_db),
    ui: UIContext = Depends(get_ui_context),
    user: User = Depends(require_wizard_access),
):
    draft = await draft_service.save_draft(
        db, user, wizard_type,
        form_data=body.form_data,
        current_step=body.current_step,
        draft_id=body.draft_id,
        ui=ui,
    )
    return DraftSaved(draft_id=draft.id, message=translate("draft_saved", ui.language))


@router.get("/{wizard_type}/drafts/{draft_id}", response_model=DraftOut)
async def load_draft(
    wizard_type: WizardType,
    draft_id: str,
    db: AsyncSession = Depends(get_db),
    ui: UIContext = Depends(get_ui_context),
    user: User = Depends(require_wizard_access),
):
    draft = await draft_service.load_draft(db, user, draft_id, ui=ui)
    if draft.wizard_type != wizard_type.value:
        raise DraftNotFoundError(draft_id, message=translate("draft_not_found", ui.language))
    return DraftOut.model_validate(draft)


@router.delete("/{wizard_type}/drafts/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(
    wizard_type: WizardType,
    draft_id: str,
    db: AsyncSession = Depends(get_db),
    ui: UIContext = Depends(get_ui_context),
    user: User = Depends(require_wizard_access),
):
    await draft_service.delete_draft(db, user, draft_id, ui=ui)


# ── Submission ───────────────────────────────────────────────

@router.get("/{wizard_type}/records/{record_id}", response_model=WizardRecordOut)
async def load_record(
    wizard_type: WizardType,
    record_id: str,
    db: AsyncSession = Depends(get_db),
    ui: UIContext = Depends(get_ui_context),
    user: User = Depends(require_wizard_access),
):
    """Open an existing listing in the wizard; submit it back with `record_id`."""
    record = await load_editable_record(
        db, user, wizard_type, record_id, permissions=user_permissions(user), ui=ui
    )
    state = WizardState(wizard_type=wizard_type, ui=ui)
    state.update_form_data(record_to_form_data(wizard_type, record))
    return WizardRecordOut(
        record_id=record.id,
        wizard_type=wizard_type,
        form_data=state.form_data,
        completion_percentage=state.completion_percentage(),
        step_progress=state.step_progress(),
    )


@router.post("/{wizard_type}/submit", response_model=SubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit(
    wizard_type: WizardType,
    body: SubmitRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    ui: UIContext = Depends(get_ui_context),
    user: User = Depends(require_wizard_access),
):
    result = await submit_wizard(
        db, user, wizard_type, body.form_data,
        permissions=user_permissions(user),
        draft_id=body.draft_id,
        record_id=body.record_id,
        ui=ui,
    )
    if not result.ok and result.errors:
        raise WizardValidationError(result.message, result.errors, result.invalid_steps)
    if not result.ok:
        raise BrymarException(
            result.message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="SUBMISSION_FAILED",
        )
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return SubmitResponse(
        id=result.record_id,
        wizard_type=wizard_type,
        status=result.status,
        message=result.message,
        created=result.created,
    )


# ── AI copy generation ───────────────────────────────────────

@router.post("/{wizard_type}/generate", response_model=GenerateResponse)
async def generate(
    wizard_type: WizardType,
    body: GenerateRequest,
    ui: UIContext = Depends(get_ui_context),
    ai: TextGenerationClient = Depends(get_ai_client),
    _user: User = Depends(require_wizard_access),
):
    """Suggest copy for one field. On any failure the current value comes back."""
    # Lands keep their title under "name"
    key = get_wizard(wizard_type).title_field if body.field == "title" else body.field
    value = await ai.generate(wizard_type, body.field, body.form_data, ui.language)
    if value is None:
        return GenerateResponse(field=body.field, value=body.form_data.get(key), generated=False)
    return GenerateResponse(field=body.field, value=value, generated=True)
