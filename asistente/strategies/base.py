"""Base interface for data-acquisition strategies."""

import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Callable

from asistente.config import SimulationSettings
from asistente.exceptions import InvalidTransitionError
from asistente.models.catalog import TaxFormType, get_form_type
from asistente.models.enums import FormTypeId, MethodId
from asistente.models.records import FilingDraft
from asistente.notifications import Notifier
from asistente.timers import Scheduler, TimerGroup

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class AcquisitionStrategy(ABC):
    """Abstract base class for the four data-acquisition strategies.

    A strategy owns its local state machine and talks to its parent only
    through ``on_complete`` and ``on_cancel``. Simulated work is scheduled
    through ``self.timers`` so `dispose()` can cancel it.
    """

    method: MethodId

    def __init__(
        self,
        form_type: FormTypeId | str,
        on_complete: Callback | None = None,
        on_cancel: Callback | None = None,
        *,
        scheduler: Scheduler | None = None,
        settings: SimulationSettings | None = None,
        rng: random.Random | None = None,
        notifier: Notifier | None = None,
    ):
        self.form: TaxFormType = get_form_type(form_type)
        self.on_complete = on_complete
        self.on_cancel = on_cancel
        self.scheduler = scheduler or Scheduler()
        self.settings = settings or SimulationSettings()
        self.rng = rng or random.Random()
        self.notifier = notifier or Notifier()
        self.timers = TimerGroup(self.scheduler, owner=f"{self.method.value}:{self.form.id.value}")
        self.disposed = False
        self.completed = False

    @property
    def form_type(self) -> FormTypeId:
        return self.form.id

    @property
    def busy(self) -> bool:
        """True while a simulated operation is still pending."""
        return self.timers.active

    @abstractmethod
    def draft(self) -> FilingDraft:
        """Data gathered so far, normalised for the wizard review steps."""
        ...

    def _complete(self) -> None:
        self._ensure_live("complete")
        self.completed = True
        logger.info("%s strategy completed for %s", self.method.value, self.form.id.value)
        if self.on_complete is not None:
            self.on_complete()

    def _cancel(self) -> None:
        self._ensure_live("cancel")
        logger.info("%s strategy cancelled", self.method.value)
        if self.on_cancel is not None:
            self.on_cancel()

    def _ensure_live(self, action: str) -> None:
        if self.disposed:
            raise InvalidTransitionError(action, "disposed")

    def dispose(self) -> None:
        """Tear down: cancel pending timers and release held resources.

        Safe to call more than once.
        """
        if self.disposed:
            return
        self.timers.cancel_all()
        self._release()
        self.disposed = True
        logger.debug("%s strategy disposed", self.method.value)

    def _release(self) -> None:
        """Hook for subclasses holding resources beyond timers."""
