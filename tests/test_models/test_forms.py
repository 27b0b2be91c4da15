"""Tests for field sets, amount coercion and identity helpers."""

from decimal import Decimal

import pytest

from asistente.exceptions import UnknownFormTypeError, UnknownMethodError
from asistente.models import FIELD_SETS, FORM_TYPES, METHODS, FormTypeId, get_form_type, get_method
from asistente.models.forms import (
    AMOUNT_LIMIT_MESSAGE,
    coerce_amount,
    deductions_model,
    format_eur,
    help_text,
    income_model,
    is_valid_nif,
    parse_date,
)


class TestCatalog:
    def test_four_form_types(self):
        assert [f.display_name for f in FORM_TYPES.values()] == [
            "Modelo 100",
            "Modelo 303",
            "Modelo 349",
            "Modelo 390",
        ]

    def test_four_methods(self):
        assert [m.value for m in METHODS] == ["manual", "ai", "upload", "lookup"]

    def test_lookup_by_id(self):
        assert get_form_type("modelo390").description == "Annual VAT summary"
        assert get_method("upload").title == "Fill by uploading filled old form"

    def test_unknown_ids(self):
        with pytest.raises(UnknownFormTypeError):
            get_form_type("modelo1")
        with pytest.raises(UnknownMethodError):
            get_method("telepathy")


class TestFieldSets:
    def test_every_form_type_has_a_field_set(self):
        assert set(FIELD_SETS) == set(FormTypeId)

    @pytest.mark.parametrize("form", list(FormTypeId))
    def test_every_field_has_help(self, form):
        field_set = FIELD_SETS[form]
        for name in {**field_set.income, **field_set.deductions}:
            assert help_text(name) != "Introduce el valor correspondiente", name

    def test_modelo100_extra_deductions(self):
        deductions = FIELD_SETS[FormTypeId.MODELO_100].deductions
        assert "family_deductions" in deductions
        assert "disability_deductions" in deductions
        assert len(deductions) == 7

    def test_only_modelo303_derives_a_result(self):
        derived = {form: bool(fs.derived) for form, fs in FIELD_SETS.items()}
        assert derived == {
            FormTypeId.MODELO_100: False,
            FormTypeId.MODELO_303: True,
            FormTypeId.MODELO_349: False,
            FormTypeId.MODELO_390: False,
        }

    def test_generated_models_default_to_zero(self):
        values = income_model(FormTypeId.MODELO_349).model_validate({})
        assert values.model_dump() == {name: Decimal("0") for name in FIELD_SETS[FormTypeId.MODELO_349].income}

    def test_generated_models_accept_camel_case(self):
        values = deductions_model(FormTypeId.MODELO_303).model_validate({"previousPeriodCompensation": "12.5"})
        assert values.previous_period_compensation == Decimal("12.5")

    def test_models_are_cached(self):
        assert income_model(FormTypeId.MODELO_100) is income_model(FormTypeId.MODELO_100)


class TestAmounts:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1500", Decimal("1500")),
            (" 1500.25 ", Decimal("1500.25")),
            ("1500,25", Decimal("1500.25")),
            ("", Decimal("0")),
            (None, Decimal("0")),
            (42, Decimal("42")),
        ],
    )
    def test_coerce(self, raw, expected):
        assert coerce_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["doce", "1.500,25", "NaN", "Infinity"])
    def test_coerce_rejects(self, raw):
        with pytest.raises(ValueError):
            coerce_amount(raw)

    @pytest.mark.parametrize("raw", ["1e30", "123456789012345678901234567", "-1000000000000", Decimal("1E+40")])
    def test_coerce_rejects_out_of_range(self, raw):
        with pytest.raises(ValueError, match=AMOUNT_LIMIT_MESSAGE):
            coerce_amount(raw)

    def test_largest_amount_still_formats(self):
        amount = coerce_amount("999999999999.99")
        assert format_eur(amount) == "999.999.999.999,99 €"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Decimal("1234.5"), "1.234,50 €"),
            (Decimal("0"), "0,00 €"),
            ("1000000", "1.000.000,00 €"),
            (None, "0,00 €"),
        ],
    )
    def test_format_eur(self, value, expected):
        assert format_eur(value) == expected


class TestIdentity:
    @pytest.mark.parametrize(
        ("value", "valid"),
        [
            ("12345678A", True),
            ("12345678a", True),
            ("X1234567L", True),
            ("z7654321b", True),
            ("1234567A", False),
            ("A1234567L", False),
            ("123456789", False),
            ("", False),
        ],
    )
    def test_nif(self, value, valid):
        assert is_valid_nif(value) is valid

    def test_parse_date_formats(self):
        assert parse_date("1985-03-14") == parse_date("14/03/1985") == parse_date("14-03-1985")
        assert parse_date("1985/03/14") is None
        assert parse_date("") is None
