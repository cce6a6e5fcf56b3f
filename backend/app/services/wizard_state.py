"""In-memory state of one multi-step listing wizard session.

The state is owned by a single editing session and mutated only through
the methods below; none of them do I/O. Draft persistence and
submission live in `app.services.drafts` and `app.services.submission`.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from app.context import UIContext
from app.i18n import translate
from app.middleware.exceptions import BusinessLogicError
from app.schemas.common import WizardType
from app.services import step_validation
from app.services.step_validation import WizardDefinition


@dataclass
class WizardState:
    wizard_type: WizardType
    ui: UIContext = field(default_factory=UIContext)
    current_step: int = 1
    form_data: dict = field(default_factory=dict)
    is_valid: dict[int, bool] = field(default_factory=dict)
    is_dirty: bool = False
    is_loading: bool = False
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def definition(self) -> WizardDefinition:
        return step_validation.get_wizard(self.wizard_type)

    @property
    def total_steps(self) -> int:
        return self.definition.total_steps

    # ── Mutations ────────────────────────────────────────────

    def update_form_data(self, partial: dict) -> None:
        """Merge `partial` into the form data. Does not validate."""
        self.form_data = {**self.form_data, **(partial or {})}
        self.is_dirty = True
        self.errors = {}

    def set_current_step(self, step: int) -> None:
        """Move the step pointer in either direction; clears errors."""
        self._check_step(step)
        self.current_step = step
        self.errors = {}

    def validate_current_step(self) -> bool:
        ok, errors = step_validation.validate_step(
            self.wizard_type, self.current_step, self.form_data, self.ui.language
        )
        self.is_valid = {**self.is_valid, self.current_step: ok}
        self.errors = errors
        return ok

    def go_to_next_step(self) -> bool:
        """Advance only when the current step validates and a later step exists."""
        if not self.validate_current_step():
            return False
        if self.current_step >= self.total_steps:
            return False
        self.current_step += 1
        self.errors = {}
        return True

    def go_to_previous_step(self) -> bool:
        if self.current_step <= 1:
            return False
        self.current_step -= 1
        self.errors = {}
        return True

    def validate_all(self) -> bool:
        """Validate every step; errors of all failing steps are merged."""
        is_valid, errors = step_validation.validate_all_steps(
            self.wizard_type, self.form_data, self.ui.language
        )
        self.is_valid = is_valid
        self.errors = errors
        return all(is_valid.values())

    def reset_wizard(self) -> None:
        self.current_step = 1
        self.form_data = {}
        self.is_valid = {}
        self.is_dirty = False
        self.is_loading = False
        self.errors = {}

    # ── Read-only views ─────────────────────────────────────

    def invalid_steps(self) -> list[int]:
        return sorted(step for step, ok in self.is_valid.items() if not ok)

    def step_progress(self) -> dict[int, bool]:
        """Validity of every step for the current data; does not touch `errors`."""
        is_valid, _ = step_validation.validate_all_steps(self.wizard_type, self.form_data)
        return is_valid

    def completion_percentage(self) -> int:
        return step_validation.completion_percentage(self.wizard_type, self.form_data)

    def title(self) -> str | None:
        value = self.form_data.get(self.definition.title_field)
        if isinstance(value, str) and value.strip():
            return value.strip()[:255]
        return None

    def snapshot(self) -> dict:
        """Payload stored by a draft save."""
        return {
            "form_data": copy.deepcopy(self.form_data),
            "current_step": self.current_step,
        }

    @classmethod
    def from_draft(
        cls,
        wizard_type: WizardType,
        form_data: dict,
        current_step: int,
        ui: UIContext | None = None,
    ) -> "WizardState":
        state = cls(wizard_type=WizardType(wizard_type), ui=ui or UIContext())
        state.form_data = copy.deepcopy(form_data or {})
        state.set_current_step(current_step)
        return state

    def _check_step(self, step: int) -> None:
        if not isinstance(step, int) or not 1 <= step <= self.total_steps:
            raise BusinessLogicError(
                translate(
                    "step_out_of_range", self.ui.language,
                    step=step, total=self.total_steps,
                ),
                error_code="INVALID_STEP",
            )
