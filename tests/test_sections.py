"""Tests for the Profile, History and Support sections."""

import pytest

from asistente.models.enums import FilingStatus
from asistente.sections import DEFAULT_PROFILE, FAQ, History, Profile, Support


class TestProfile:
    def test_default_record(self):
        profile = Profile()
        assert profile.info.first_name == "John"
        assert profile.info.country == "Spain"

    def test_valid_update(self, notifier):
        profile = Profile(notifier=notifier)
        assert profile.update(city="Valencia", postal_code="46001") == {}
        assert profile.info.city == "Valencia"
        assert notifier.last.title == "Perfil actualizado"

    def test_rejected_update_keeps_record(self):
        profile = Profile()
        errors = profile.update(postal_code="ABCDE", country="E")
        assert errors == {
            "postal_code": "El código postal debe tener 5 dígitos",
            "country": "El país debe tener al menos 2 caracteres",
        }
        assert profile.info == DEFAULT_PROFILE
        assert profile.errors == errors


class TestHistory:
    def test_all_filings(self):
        assert len(History().filter()) == 6

    def test_search_matches_id_or_type(self):
        history = History()
        assert [f.id for f in history.filter(search="f2023")] == ["F2023-045", "F2023-102"]
        assert {f.type for f in history.filter(search="349")} == {"Modelo 349"}

    def test_year_and_type_filters(self):
        filings = History().filter(year="2024", form_type="Modelo 303")
        assert [f.id for f in filings] == ["F2024-012"]
        assert filings[0].status == FilingStatus.DRAFT
        assert filings[0].downloadable is False

    def test_no_match(self):
        assert History().filter(search="modelo 111") == []

    def test_facets(self):
        history = History()
        assert history.years == ["2024", "2023", "2022"]
        assert history.types == ["Modelo 100", "Modelo 303", "Modelo 349"]


class TestSupport:
    def test_empty_query_returns_everything(self):
        assert Support().search() == list(FAQ)

    def test_search_question_and_answer(self):
        support = Support()
        assert len(support.search("DNI/NIE")) == 1
        assert len(support.search("complementaria")) == 2

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            (
                {"name": "", "email": "a@b.es", "subject": "Hola", "message": "Texto"},
                {"name": "This field is required"},
            ),
            (
                {"name": "Ana", "email": "no-email", "subject": "Hola", "message": "Texto"},
                {"email": "Please enter a valid email address"},
            ),
            (
                {"name": "Ana", "email": "a@b.es", "subject": "   ", "message": "Texto"},
                {"subject": "This field is required"},
            ),
        ],
    )
    def test_contact_validation(self, fields, expected):
        support = Support()
        assert support.contact(**fields) == expected
        assert support.sent == []

    def test_contact_recorded(self, notifier):
        support = Support(notifier=notifier)
        errors = support.contact(name="Ana", email="ana@example.es", subject="Duda", message="¿Plazos?")
        assert errors == {}
        assert support.sent[0].subject == "Duda"
        assert notifier.last.title == "Message sent"
