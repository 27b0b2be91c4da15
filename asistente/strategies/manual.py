"""Manual form strategy: personal -> income -> deductions tabs."""

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from asistente.exceptions import InvalidTransitionError
from asistente.models.enums import ManualTab, MethodId
from asistente.models.forms import (
    FIELD_SETS,
    PERSONAL_LABELS,
    PersonalInfo,
    coerce_amount,
    deductions_model,
    derived_fields,
    field_errors,
    income_model,
)
from asistente.models.records import FilingDraft
from asistente.progress import percent
from asistente.strategies.base import AcquisitionStrategy

logger = logging.getLogger(__name__)

TABS: tuple[ManualTab, ...] = (ManualTab.PERSONAL, ManualTab.INCOME, ManualTab.DEDUCTIONS)

TAB_LABELS: dict[ManualTab, str] = {
    ManualTab.PERSONAL: "Información Personal",
    ManualTab.INCOME: "Ingresos",
    ManualTab.DEDUCTIONS: "Deducciones",
}


class ManualFormStrategy(AcquisitionStrategy):
    """Three validated tabs; submitting the last one completes the strategy.

    Each ``submit_*`` returns True when the section was stored and the next
    tab (or completion) was reached. On validation failure it returns False,
    leaves the active tab unchanged and exposes ``errors`` as
    ``{field: message}``.
    """

    method = MethodId.MANUAL

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.field_set = FIELD_SETS[self.form_type]
        self.active_tab = ManualTab.PERSONAL
        self.personal: PersonalInfo | None = None
        self.income: dict[str, Decimal] = {name: Decimal("0") for name in self.field_set.income}
        self.deductions: dict[str, Decimal] = {name: Decimal("0") for name in self.field_set.deductions}
        self.submitted: set[ManualTab] = set()
        self.errors: dict[str, str] = {}
        self.session_saved = False

    @property
    def title(self) -> str:
        return self.field_set.title

    # --- Tab navigation ---

    def go_to_tab(self, tab: ManualTab | str) -> None:
        """Jump to *tab*; every earlier tab must already be submitted."""
        tab = ManualTab(tab)
        earlier = TABS[: TABS.index(tab)]
        missing = [t for t in earlier if t not in self.submitted]
        if missing:
            raise InvalidTransitionError(f"open tab '{tab.value}'", self.active_tab.value)
        self.active_tab = tab
        self.errors = {}

    def submit(self, data: Mapping[str, Any]) -> bool:
        """Submit *data* for whichever tab is active."""
        handlers = {
            ManualTab.PERSONAL: self.submit_personal,
            ManualTab.INCOME: self.submit_income,
            ManualTab.DEDUCTIONS: self.submit_deductions,
        }
        return handlers[self.active_tab](data)

    def _require_tab(self, tab: ManualTab) -> None:
        self._ensure_live(f"submit {tab.value}")
        if self.completed:
            raise InvalidTransitionError(f"submit {tab.value}", "completed")
        if self.active_tab != tab:
            raise InvalidTransitionError(f"submit {tab.value}", self.active_tab.value)

    # --- Tab submit handlers ---

    def submit_personal(self, data: Mapping[str, Any]) -> bool:
        self._require_tab(ManualTab.PERSONAL)
        try:
            self.personal = PersonalInfo.model_validate(dict(data))
        except ValidationError as exc:
            self.errors = field_errors(exc)
            logger.info("Personal tab rejected: %s", ", ".join(sorted(self.errors)))
            return False
        self._stored(ManualTab.PERSONAL, "Información personal guardada")
        self.active_tab = ManualTab.INCOME
        return True

    def submit_income(self, data: Mapping[str, Any]) -> bool:
        self._require_tab(ManualTab.INCOME)
        model = income_model(self.form_type)
        try:
            values = model.model_validate(dict(data))
        except ValidationError as exc:
            self.errors = field_errors(exc)
            logger.info("Income tab rejected: %s", ", ".join(sorted(self.errors)))
            return False
        self.income = values.model_dump()
        self._stored(ManualTab.INCOME, "Información de ingresos guardada")
        self.active_tab = ManualTab.DEDUCTIONS
        return True

    def submit_deductions(self, data: Mapping[str, Any]) -> bool:
        self._require_tab(ManualTab.DEDUCTIONS)
        model = deductions_model(self.form_type)
        try:
            values = model.model_validate(dict(data))
        except ValidationError as exc:
            self.errors = field_errors(exc)
            logger.info("Deductions tab rejected: %s", ", ".join(sorted(self.errors)))
            return False
        self.deductions = values.model_dump()
        self._stored(
            ManualTab.DEDUCTIONS,
            "Formulario completado correctamente",
            "Tu información ha sido guardada.",
        )
        self._complete()
        return True

    def _stored(self, tab: ManualTab, title: str, description: str = "") -> None:
        self.errors = {}
        self.submitted.add(tab)
        self.notifier.success(title, description)

    # --- Derived values and progress ---

    def preview_derived(self, income: Mapping[str, Any]) -> dict[str, Decimal]:
        """Live derived fields for unsubmitted income input.

        Values that do not parse count as zero, like an empty input box.
        """
        values: dict[str, Decimal] = {}
        for name in self.field_set.income:
            try:
                values[name] = coerce_amount(income.get(name))
            except ValueError:
                values[name] = Decimal("0")
        return derived_fields(self.form_type, values)

    @property
    def derived(self) -> dict[str, Decimal]:
        return derived_fields(self.form_type, self.income)

    @property
    def progress(self) -> int:
        """Share of filled fields across the three tabs."""
        personal = self.personal.model_dump() if self.personal else {}
        filled = sum(1 for name in PERSONAL_LABELS if personal.get(name))
        filled += sum(1 for v in self.income.values() if v)
        filled += sum(1 for v in self.deductions.values() if v)
        total = len(PERSONAL_LABELS) + len(self.income) + len(self.deductions)
        return percent(filled, total)

    def save_progress(self) -> None:
        self.session_saved = True
        self.notifier.success("Progreso guardado", "Tus datos han sido guardados correctamente.")

    def cancel(self) -> None:
        self._cancel()

    def draft(self) -> FilingDraft:
        labels = {**PERSONAL_LABELS, **self.field_set.income, **self.field_set.deductions, **self.field_set.derived}
        personal = self.personal.model_dump() if self.personal else {}
        return FilingDraft(
            form_type=self.form_type,
            source=self.method,
            personal={k: str(v) for k, v in personal.items()},
            income=dict(self.income),
            deductions=dict(self.deductions),
            result=self.derived,
            labels=labels,
        )
