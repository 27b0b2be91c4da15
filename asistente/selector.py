"""Two-phase method selector: form type, then acquisition method."""

import logging
import random
from typing import Any

from asistente.config import SimulationSettings
from asistente.controller import WizardController
from asistente.exceptions import InvalidTransitionError
from asistente.models.catalog import FORM_TYPES, METHODS, get_form_type, get_method
from asistente.models.enums import FormTypeId, MethodId, SelectorPhase
from asistente.strategies import AcquisitionStrategy, create_strategy
from asistente.timers import Scheduler

logger = logging.getLogger(__name__)


class MethodSelector:
    """Picks a form type and a method, and hosts the active strategy.

    At most one strategy exists at a time. Switching methods, cancelling or
    leaving the method phase disposes it, so none of its pending timers can
    fire afterwards.
    """

    form_types = FORM_TYPES
    methods = METHODS

    def __init__(
        self,
        wizard: WizardController,
        *,
        scheduler: Scheduler | None = None,
        settings: SimulationSettings | None = None,
        rng: random.Random | None = None,
        strategy_options: dict[MethodId, dict[str, Any]] | None = None,
    ):
        self.wizard = wizard
        self.scheduler = scheduler or Scheduler()
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random()
        self.strategy_options = strategy_options or {}
        self.phase = SelectorPhase.FORM_TYPE
        self.selected_form_type: FormTypeId | None = None
        self.selected_method: MethodId | None = None
        self.strategy: AcquisitionStrategy | None = None

    def select_form_type(self, form_type: FormTypeId | str) -> None:
        if self.phase != SelectorPhase.FORM_TYPE:
            raise InvalidTransitionError("select a form type", self.phase.value)
        entry = get_form_type(form_type)
        if entry.id == self.selected_form_type:
            return
        self.selected_form_type = entry.id
        self.wizard.selected_form_type = entry.id
        logger.info("Form type selected: %s", entry.id.value)

    def select_method(self, method: MethodId | str) -> AcquisitionStrategy:
        """Activate the strategy for *method*, discarding any previous one."""
        if self.phase != SelectorPhase.FORM_METHOD:
            raise InvalidTransitionError("select a method", self.phase.value)
        entry = get_method(method)
        self._discard_strategy()
        self.selected_method = entry.id
        self.wizard.selected_method = entry.id
        self.strategy = create_strategy(
            entry.id,
            self.selected_form_type,
            on_complete=self._strategy_completed,
            on_cancel=self.cancel,
            scheduler=self.scheduler,
            settings=self.settings,
            rng=self.rng,
            notifier=self.wizard.notifier,
            **self.strategy_options.get(entry.id, {}),
        )
        logger.info("Method selected: %s", entry.id.value)
        return self.strategy

    @property
    def can_continue(self) -> bool:
        if self.phase == SelectorPhase.FORM_TYPE:
            return self.selected_form_type is not None
        return self.selected_method is not None

    def continue_(self) -> bool:
        """Press "Continue". Returns True when something happened.

        In the method phase the chat method never continues this way; it
        finishes through its own completion.
        """
        if not self.can_continue:
            return False
        if self.phase == SelectorPhase.FORM_TYPE:
            self.phase = SelectorPhase.FORM_METHOD
            self.wizard.on_next()
            return True
        if self.selected_method == MethodId.AI:
            return False
        self._discard_strategy()
        self.wizard.on_next()
        return True

    def back(self) -> bool:
        """Return from the method grid to the form-type grid."""
        if self.phase != SelectorPhase.FORM_METHOD:
            return False
        self._discard_strategy()
        self.selected_method = None
        self.wizard.selected_method = None
        self.phase = SelectorPhase.FORM_TYPE
        self.wizard.on_previous()
        return True

    def cancel(self) -> None:
        """Clear the method and return to the method grid."""
        self._discard_strategy()
        self.selected_method = None
        self.wizard.selected_method = None
        logger.info("Method selection cleared")

    def _strategy_completed(self) -> None:
        strategy = self.strategy
        self.wizard.record_draft(strategy.draft())
        self._discard_strategy()
        self.wizard.on_next()

    def _discard_strategy(self) -> None:
        if self.strategy is not None:
            self.strategy.dispose()
            self.strategy = None
