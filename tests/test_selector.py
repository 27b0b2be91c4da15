"""Tests for the two-phase method selector."""

import pytest

from asistente.controller import WizardController
from asistente.exceptions import InvalidTransitionError, UnknownFormTypeError, UnknownMethodError
from asistente.models.enums import FormTypeId, ManualTab, MethodId, SelectorPhase, StepId
from asistente.strategies import ChatStrategy, IdLookupStrategy, ManualFormStrategy, UploadStrategy


def _to_method_phase(selector, form_type="modelo100"):
    selector.select_form_type(form_type)
    selector.continue_()
    return selector


class TestFormTypePhase:
    def test_cannot_continue_without_selection(self, selector, wizard):
        assert selector.can_continue is False
        assert selector.continue_() is False
        assert wizard.active_step == StepId.FORM_TYPE

    def test_select_and_continue(self, selector, wizard):
        selector.select_form_type("modelo303")
        assert selector.can_continue is True
        assert selector.continue_() is True
        assert selector.phase == SelectorPhase.FORM_METHOD
        assert wizard.active_step == StepId.FORM_METHOD
        assert wizard.selected_form_type == FormTypeId.MODELO_303

    def test_select_is_idempotent(self, selector):
        selector.select_form_type("modelo100")
        selector.select_form_type("modelo100")
        assert selector.selected_form_type == FormTypeId.MODELO_100

    def test_unknown_form_type(self, selector):
        with pytest.raises(UnknownFormTypeError):
            selector.select_form_type("modelo999")
        assert selector.selected_form_type is None

    def test_method_not_selectable_yet(self, selector):
        with pytest.raises(InvalidTransitionError):
            selector.select_method("manual")


class TestMethodPhase:
    @pytest.mark.parametrize(
        ("method", "cls"),
        [
            ("manual", ManualFormStrategy),
            ("ai", ChatStrategy),
            ("upload", UploadStrategy),
            ("lookup", IdLookupStrategy),
        ],
    )
    def test_activates_one_strategy(self, selector, method, cls):
        _to_method_phase(selector)
        strategy = selector.select_method(method)
        assert isinstance(strategy, cls)
        assert strategy.form_type == FormTypeId.MODELO_100
        assert selector.strategy is strategy

    def test_switching_discards_previous_state(self, selector, valid_personal):
        _to_method_phase(selector)
        manual = selector.select_method("manual")
        manual.submit_personal(valid_personal)
        assert manual.active_tab == ManualTab.INCOME

        selector.select_method("lookup")
        assert manual.disposed is True

        fresh = selector.select_method("manual")
        assert fresh is not manual
        assert fresh.active_tab == ManualTab.PERSONAL

    def test_switching_cancels_pending_timers(self, selector, scheduler):
        _to_method_phase(selector)
        chat = selector.select_method("ai")
        chat.send_message("hola")
        assert scheduler.pending == 1
        selector.select_method("manual")
        assert scheduler.pending == 0
        scheduler.advance(10)
        assert len(chat.messages) == 2

    def test_unknown_method(self, selector):
        _to_method_phase(selector)
        with pytest.raises(UnknownMethodError):
            selector.select_method("fax")


class TestContinueInMethodPhase:
    @pytest.mark.parametrize("method", ["manual", "upload", "lookup"])
    def test_non_ai_continue_equals_on_next(self, selector, wizard, method):
        _to_method_phase(selector)
        strategy = selector.select_method(method)

        reference = WizardController()
        reference.on_next()
        reference.on_next()

        assert selector.continue_() is True
        assert wizard.active_step == reference.active_step == StepId.PERSONAL
        assert wizard.progress_percent == reference.progress_percent
        assert selector.strategy is None
        assert strategy.disposed is True

    def test_ai_waits_for_chat_completion(self, selector, wizard, scheduler):
        _to_method_phase(selector)
        chat = selector.select_method("ai")
        assert selector.continue_() is False
        assert wizard.active_step == StepId.FORM_METHOD

        chat.send_message("Ya estoy listo")
        scheduler.advance(2)
        chat.complete()
        assert wizard.active_step == StepId.PERSONAL
        assert selector.strategy is None
        assert chat.disposed is True

    def test_cannot_continue_without_method(self, selector, wizard):
        _to_method_phase(selector)
        assert selector.can_continue is False
        assert selector.continue_() is False
        assert wizard.active_step == StepId.FORM_METHOD


class TestCancelAndBack:
    def test_cancel_returns_to_method_grid(self, selector, wizard):
        _to_method_phase(selector)
        strategy = selector.select_method("upload")
        selector.cancel()
        assert selector.selected_method is None
        assert wizard.selected_method is None
        assert selector.strategy is None
        assert strategy.disposed is True
        assert selector.phase == SelectorPhase.FORM_METHOD

    def test_strategy_cancel_goes_through_selector(self, selector):
        _to_method_phase(selector)
        lookup = selector.select_method("lookup")
        lookup.cancel()
        assert selector.strategy is None
        assert selector.selected_method is None

    def test_back_to_form_types(self, selector, wizard):
        _to_method_phase(selector)
        selector.select_method("manual")
        assert selector.back() is True
        assert selector.phase == SelectorPhase.FORM_TYPE
        assert wizard.active_step == StepId.FORM_TYPE
        assert selector.strategy is None


class TestStrategyCompletion:
    def test_completion_records_draft_and_advances(self, selector, wizard, valid_personal):
        _to_method_phase(selector)
        manual = selector.select_method(MethodId.MANUAL)
        manual.submit_personal(valid_personal)
        manual.submit_income({"salaryIncome": "30000"})
        manual.submit_deductions({"donations": "100"})

        assert wizard.active_step == StepId.PERSONAL
        assert wizard.draft is not None
        assert wizard.draft.source == MethodId.MANUAL
        assert wizard.draft.personal["nif"] == "12345678A"
        assert selector.strategy is None
        assert manual.disposed is True
