"""Shared test fixtures for Asistente Fiscal."""

import random
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from asistente.config import SimulationSettings
from asistente.controller import WizardController
from asistente.notifications import Notifier
from asistente.selector import MethodSelector
from asistente.timers import Scheduler


class ScriptedRandom(random.Random):
    """Random source whose ``random()`` replays a fixed list of draws.

    ``choice()`` keeps using the seeded bit generator.
    """

    def __init__(self, draws: list[float]):
        super().__init__(0)
        self.draws = list(draws)

    def random(self) -> float:
        return self.draws.pop(0)

    # Defined here so Random.__init_subclass__ keeps _randbelow on getrandbits.
    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def settings() -> SimulationSettings:
    return SimulationSettings()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def callbacks() -> tuple[MagicMock, MagicMock]:
    return MagicMock(name="on_complete"), MagicMock(name="on_cancel")


@pytest.fixture
def make_strategy(scheduler, settings, notifier, callbacks):
    """Build a strategy wired to the shared scheduler and mock callbacks."""
    on_complete, on_cancel = callbacks

    def _make(cls, form_type="modelo100", draws=None, **kwargs):
        rng = ScriptedRandom(draws) if draws is not None else random.Random(0)
        return cls(
            form_type,
            on_complete=on_complete,
            on_cancel=on_cancel,
            scheduler=scheduler,
            settings=settings,
            rng=rng,
            notifier=notifier,
            **kwargs,
        )

    return _make


@pytest.fixture
def wizard(notifier) -> WizardController:
    return WizardController(notifier)


@pytest.fixture
def selector(wizard, scheduler, settings) -> MethodSelector:
    return MethodSelector(wizard, scheduler=scheduler, settings=settings, rng=random.Random(0))


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2025, 5, 1, 10, 30)


@pytest.fixture
def valid_personal() -> dict[str, str]:
    return {
        "firstName": "María",
        "lastName": "López Ruiz",
        "nif": "12345678a",
        "birthDate": "1985-03-14",
        "email": "maria.lopez@example.com",
        "phone": "612345678",
        "address": "Calle Alcalá 42",
        "postalCode": "28014",
        "city": "Madrid",
        "province": "Madrid",
    }
