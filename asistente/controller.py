"""Wizard controller: active section, active step and progress.

Form filling runs through six fixed steps. The first two belong to the
method selector (form type, then acquisition method); the next three review
the personal, income and deduction data gathered by the chosen strategy;
the last one shows the summary.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from asistente.models.enums import FormTypeId, MethodId, SectionId, StepId
from asistente.models.records import FilingDraft
from asistente.notifications import Notifier
from asistente.progress import percent

logger = logging.getLogger(__name__)

STEPS: tuple[StepId, ...] = (
    StepId.FORM_TYPE,
    StepId.FORM_METHOD,
    StepId.PERSONAL,
    StepId.INCOME,
    StepId.DEDUCTIONS,
    StepId.SUMMARY,
)

STEP_LABELS: dict[StepId, str] = {
    StepId.FORM_TYPE: "Tipo de formulario",
    StepId.FORM_METHOD: "Método de cumplimentación",
    StepId.PERSONAL: "Información personal",
    StepId.INCOME: "Ingresos",
    StepId.DEDUCTIONS: "Deducciones",
    StepId.SUMMARY: "Resumen",
}


class WizardState(BaseModel):
    """Read-only snapshot of the controller."""

    model_config = ConfigDict(frozen=True)

    active_section: SectionId
    active_step: StepId
    selected_form_type: FormTypeId | None = None
    selected_method: MethodId | None = None
    progress_percent: int = Field(ge=0, le=100)


class WizardController:
    """Owns the active section/step and the progress percentage."""

    def __init__(self, notifier: Notifier | None = None):
        self.notifier = notifier or Notifier()
        self.active_section = SectionId.FORM
        self.active_step = STEPS[0]
        self.selected_form_type: FormTypeId | None = None
        self.selected_method: MethodId | None = None
        self.progress_percent = percent(1, len(STEPS))
        self.draft: FilingDraft | None = None

    @property
    def step_index(self) -> int:
        return STEPS.index(self.active_step)

    @property
    def is_first_step(self) -> bool:
        return self.step_index == 0

    @property
    def is_last_step(self) -> bool:
        return self.step_index == len(STEPS) - 1

    @property
    def state(self) -> WizardState:
        return WizardState(
            active_section=self.active_section,
            active_step=self.active_step,
            selected_form_type=self.selected_form_type,
            selected_method=self.selected_method,
            progress_percent=self.progress_percent,
        )

    def advance(self) -> bool:
        """Move to the next step. Returns False (no-op) on the last step."""
        index = self.step_index
        if index >= len(STEPS) - 1:
            return False
        index += 1
        self.active_step = STEPS[index]
        self.progress_percent = percent(index + 1, len(STEPS))
        self._announce()
        return True

    def retreat(self) -> bool:
        """Move to the previous step. Returns False (no-op) on the first step."""
        index = self.step_index
        if index <= 0:
            return False
        # progress uses the index *before* moving back
        self.progress_percent = percent(index, len(STEPS))
        self.active_step = STEPS[index - 1]
        self._announce()
        return True

    # Aliases matching the callback names handed to the method selector
    on_next = advance
    on_previous = retreat

    def _announce(self) -> None:
        label = STEP_LABELS[self.active_step]
        logger.info("Wizard step -> %s (%d%%)", self.active_step.value, self.progress_percent)
        self.notifier.info(
            f"Paso {self.step_index + 1} de {len(STEPS)}: {label}",
            f"Progreso {self.progress_percent}%",
        )

    def select_section(self, section: SectionId | str) -> None:
        """Switch the top-level section. Form-filling progress is kept."""
        self.active_section = SectionId(section)
        logger.info("Wizard section -> %s", self.active_section.value)

    def record_draft(self, draft: FilingDraft | None) -> None:
        self.draft = draft
