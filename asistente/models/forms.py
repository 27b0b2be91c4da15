"""Validation schemas and per-form field sets for manual data entry.

Personal information is validated the same way for every form. Income and
deduction sections are generated from `FIELD_SETS`, an exhaustive table keyed
by form type: each field is a currency amount that defaults to zero and must
be numeric-coercible.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, create_model, field_validator
from pydantic.alias_generators import to_camel, to_snake

from asistente.models.enums import FormTypeId

# ---------------------------------------------------------------------------
# Identity helpers (shared with ID lookup and profile)
# ---------------------------------------------------------------------------

DNI_PATTERN = re.compile(r"^[0-9]{8}[A-Za-z]$")
NIE_PATTERN = re.compile(r"^[XYZxyz][0-9]{7}[A-Za-z]$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
POSTAL_CODE_PATTERN = re.compile(r"^[0-9]{5}$")

NIF_MESSAGE = "Introduce un DNI (8 números + letra) o NIE (X/Y/Z + 7 números + letra) válido"
NUMBER_MESSAGE = "Debe ser un número válido"
AMOUNT_LIMIT_MESSAGE = "La cantidad no puede superar 999.999.999.999,99 €"
EMAIL_MESSAGE = "Por favor, introduce un email válido"
POSTAL_CODE_MESSAGE = "El código postal debe tener 5 dígitos"

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")


def is_valid_nif(value: str) -> bool:
    """True for a DNI (8 digits + letter) or NIE (X/Y/Z + 7 digits + letter)."""
    return bool(DNI_PATTERN.match(value) or NIE_PATTERN.match(value))


def parse_date(value: str) -> date | None:
    """Parse an ISO or Spanish-style (DD/MM/YYYY) date, None if unparseable."""
    value = (value or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def check_min_length(value: str, length: int, message: str) -> str:
    if len((value or "").strip()) < length:
        raise ValueError(message)
    return value


def check_email(value: str) -> str:
    if not EMAIL_PATTERN.match(value or ""):
        raise ValueError(EMAIL_MESSAGE)
    return value


def check_postal_code(value: str) -> str:
    if not POSTAL_CODE_PATTERN.match(value or ""):
        raise ValueError(POSTAL_CODE_MESSAGE)
    return value


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Flatten a ValidationError into ``{field_name: message}``.

    Field names are returned in snake_case regardless of whether the input
    used the camelCase aliases. Only the first error per field is kept.
    """
    errors: dict[str, str] = {}
    for err in exc.errors():
        name = to_snake(str(err["loc"][0])) if err["loc"] else "__root__"
        if err["type"] == "value_error":
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        errors.setdefault(name, message)
    return errors


# ---------------------------------------------------------------------------
# Personal information
# ---------------------------------------------------------------------------


class PersonalInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: str
    last_name: str
    nif: str
    birth_date: str
    email: str
    phone: str
    address: str
    postal_code: str
    city: str
    province: str

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, v: str) -> str:
        return check_min_length(v, 2, "El nombre debe tener al menos 2 caracteres")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, v: str) -> str:
        return check_min_length(v, 2, "Los apellidos deben tener al menos 2 caracteres")

    @field_validator("nif")
    @classmethod
    def _nif(cls, v: str) -> str:
        if not is_valid_nif(v):
            raise ValueError(NIF_MESSAGE)
        return v.upper()

    @field_validator("birth_date")
    @classmethod
    def _birth_date(cls, v: str) -> str:
        if parse_date(v) is None:
            raise ValueError("Por favor, introduce una fecha válida")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return check_min_length(v, 9, "Introduce un número de teléfono válido")

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return check_min_length(v, 5, "La dirección debe tener al menos 5 caracteres")

    @field_validator("postal_code")
    @classmethod
    def _postal_code(cls, v: str) -> str:
        return check_postal_code(v)

    @field_validator("city")
    @classmethod
    def _city(cls, v: str) -> str:
        return check_min_length(v, 2, "La ciudad debe tener al menos 2 caracteres")

    @field_validator("province")
    @classmethod
    def _province(cls, v: str) -> str:
        return check_min_length(v, 2, "La provincia debe tener al menos 2 caracteres")


PERSONAL_LABELS: dict[str, str] = {
    "first_name": "Nombre",
    "last_name": "Apellidos",
    "nif": "NIF/NIE",
    "birth_date": "Fecha de nacimiento",
    "email": "Email",
    "phone": "Teléfono",
    "address": "Dirección",
    "postal_code": "Código postal",
    "city": "Ciudad",
    "province": "Provincia",
}

# ---------------------------------------------------------------------------
# Currency amounts
# ---------------------------------------------------------------------------

MAX_AMOUNT = Decimal("1000000000000")


def coerce_amount(value: object) -> Decimal:
    """Coerce form input to a Decimal; blank input counts as zero.

    Amounts must stay below `MAX_AMOUNT` so two-decimal rounding fits the
    default decimal context.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        raw = "" if value is None else str(value).strip()
        if not raw:
            return Decimal("0")
        if "," in raw and "." not in raw:
            raw = raw.replace(",", ".")
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            raise ValueError(NUMBER_MESSAGE) from None
    if not amount.is_finite():
        raise ValueError(NUMBER_MESSAGE)
    if abs(amount) >= MAX_AMOUNT:
        raise ValueError(AMOUNT_LIMIT_MESSAGE)
    return amount


Amount = Annotated[Decimal, BeforeValidator(coerce_amount)]


def format_eur(value: Decimal | str | None) -> str:
    """Format an amount the es-ES way: ``1.234,56 €``."""
    if value is None or value == "":
        return "0,00 €"
    amount = Decimal(str(value)).quantize(Decimal("0.01"))
    text = f"{amount:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".") + " €"


# ---------------------------------------------------------------------------
# Per-form field sets
# ---------------------------------------------------------------------------

_GENERIC_INCOME = {
    "salary_income": "Rendimientos del trabajo",
    "self_employment_income": "Rendimientos de actividades económicas",
    "capital_gains_income": "Ganancias patrimoniales",
    "rental_income": "Rendimientos del capital inmobiliario",
    "other_income": "Otros rendimientos",
}

_GENERIC_DEDUCTIONS = {
    "social_security": "Seguridad Social",
    "pension_contributions": "Aportaciones a planes de pensiones",
    "mortgage_interest": "Intereses de hipoteca (régimen transitorio)",
    "donations": "Donativos",
    "other_deductions": "Otras deducciones",
}


@dataclass(frozen=True)
class FieldSet:
    """Title plus income/deduction fields (name -> label) for one form type."""

    title: str
    income: dict[str, str]
    deductions: dict[str, str]
    derived: dict[str, str] = field(default_factory=dict)


FIELD_SETS: dict[FormTypeId, FieldSet] = {
    FormTypeId.MODELO_100: FieldSet(
        title="Modelo 100 - IRPF",
        income=dict(_GENERIC_INCOME),
        deductions={
            **_GENERIC_DEDUCTIONS,
            "family_deductions": "Deducciones familiares",
            "disability_deductions": "Deducciones por discapacidad",
        },
    ),
    FormTypeId.MODELO_303: FieldSet(
        title="Modelo 303 - IVA",
        income={
            "self_employment_income": "Ingresos por actividades",
            "iva_repercutido": "IVA repercutido",
            "iva_soportado": "IVA soportado deducible",
        },
        deductions={
            "social_security": "Seguridad Social autónomos",
            "previous_period_compensation": "Compensación de periodos anteriores",
            "other_deductions": "Otras deducciones",
        },
        derived={"resultado": "Resultado (a ingresar)"},
    ),
    FormTypeId.MODELO_349: FieldSet(
        title="Modelo 349 - Operaciones intracomunitarias",
        income=dict(_GENERIC_INCOME),
        deductions=dict(_GENERIC_DEDUCTIONS),
    ),
    FormTypeId.MODELO_390: FieldSet(
        title="Modelo 390 - Resumen anual IVA",
        income=dict(_GENERIC_INCOME),
        deductions=dict(_GENERIC_DEDUCTIONS),
    ),
}

INCOME_HELP: dict[str, str] = {
    "salary_income": "Ingresos brutos por trabajo por cuenta ajena, incluyendo salarios, prestaciones, pensiones, etc.",
    "self_employment_income": "Ingresos por actividades profesionales o empresariales (autónomos)",
    "capital_gains_income": "Ganancias por venta de bienes, acciones u otros activos",
    "rental_income": "Ingresos por alquiler de inmuebles",
    "other_income": "Otros ingresos sujetos a declaración",
    "iva_repercutido": "IVA cobrado a clientes en tus facturas emitidas",
    "iva_soportado": "IVA pagado en tus compras y gastos deducibles",
}

DEDUCTION_HELP: dict[str, str] = {
    "social_security": "Cotizaciones a la Seguridad Social o mutualidades",
    "pension_contributions": "Aportaciones a planes de pensiones, hasta el límite legal",
    "mortgage_interest": "Intereses de préstamos para vivienda habitual (solo para hipotecas anteriores a 2013)",
    "donations": "Donativos a entidades sin ánimo de lucro",
    "other_deductions": "Otras deducciones aplicables según normativa",
    "family_deductions": "Deducciones por maternidad, familia numerosa, etc.",
    "disability_deductions": "Deducciones por discapacidad propia o de familiares",
    "previous_period_compensation": "Compensación de cuotas negativas de periodos anteriores",
}

DEFAULT_HELP = "Introduce el valor correspondiente"


def help_text(field_name: str) -> str:
    return INCOME_HELP.get(field_name) or DEDUCTION_HELP.get(field_name) or DEFAULT_HELP


def _section_model(name: str, fields: dict[str, str]) -> type[BaseModel]:
    definitions = {f: (Amount, Decimal("0")) for f in fields}
    return create_model(
        name,
        __config__=ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore"),
        **definitions,
    )


@lru_cache(maxsize=None)
def income_model(form_type: FormTypeId) -> type[BaseModel]:
    """Income schema for *form_type*, built from its field set."""
    fields = FIELD_SETS[form_type].income
    return _section_model(f"Income_{form_type.value}", fields)


@lru_cache(maxsize=None)
def deductions_model(form_type: FormTypeId) -> type[BaseModel]:
    """Deductions schema for *form_type*, built from its field set."""
    fields = FIELD_SETS[form_type].deductions
    return _section_model(f"Deductions_{form_type.value}", fields)


def vat_due(income: dict[str, Decimal]) -> Decimal:
    """Live-computed VAT result: ``max(0, output VAT - input VAT)``."""
    repercutido = income.get("iva_repercutido", Decimal("0"))
    soportado = income.get("iva_soportado", Decimal("0"))
    return max(Decimal("0"), repercutido - soportado).quantize(Decimal("0.01"))


def derived_fields(form_type: FormTypeId, income: dict[str, Decimal]) -> dict[str, Decimal]:
    """Auto-calculated fields for the given income values."""
    if form_type == FormTypeId.MODELO_303:
        return {"resultado": vat_due(income)}
    return {}
