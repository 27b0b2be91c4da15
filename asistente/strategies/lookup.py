"""ID-lookup strategy: fetch existing records from the tax agency by DNI/NIE."""

import logging

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from asistente.exceptions import ImmutableFieldError, InvalidTransitionError, OperationPendingError
from asistente.models.enums import LookupState, MethodId
from asistente.models.forms import (
    NIF_MESSAGE,
    check_email,
    check_min_length,
    check_postal_code,
    field_errors,
    is_valid_nif,
    parse_date,
)
from asistente.models.records import FilingDraft, TaxData
from asistente.strategies import mock_data
from asistente.strategies.base import AcquisitionStrategy
from asistente.timers import Timer

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = frozenset({"document_number", "date_of_birth", "full_name"})


class LookupRequest(BaseModel):
    document_number: str
    date_of_birth: str
    consent: bool

    @field_validator("document_number")
    @classmethod
    def _document_number(cls, v: str) -> str:
        if not v:
            raise ValueError("El número de documento es obligatorio")
        if not is_valid_nif(v):
            raise ValueError(NIF_MESSAGE)
        return v

    @field_validator("date_of_birth")
    @classmethod
    def _date_of_birth(cls, v: str) -> str:
        if not v:
            raise ValueError("La fecha de nacimiento es obligatoria")
        if parse_date(v) is None:
            raise ValueError("Por favor, introduce una fecha de nacimiento válida")
        return v

    @field_validator("consent")
    @classmethod
    def _consent(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("Debes aceptar los términos de uso del servicio de consulta")
        return v


class ContactEdit(BaseModel):
    """Editable contact and address fields of a fetched record."""

    model_config = ConfigDict(extra="forbid")

    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    province: str | None = None
    phone: str | None = None
    email: str | None = None

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return check_min_length(v, 5, "La dirección debe tener al menos 5 caracteres")

    @field_validator("postal_code")
    @classmethod
    def _postal_code(cls, v: str) -> str:
        return check_postal_code(v)

    @field_validator("city", "province")
    @classmethod
    def _place(cls, v: str) -> str:
        return check_min_length(v, 2, "Debe tener al menos 2 caracteres")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return check_min_length(v, 9, "Introduce un número de teléfono válido")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v)


class IdLookupStrategy(AcquisitionStrategy):
    """initial -> loading -> success | error, plus an edit mode on success.

    Only contact and address fields can be edited once a record has been
    fetched; the identity fields in `IMMUTABLE_FIELDS` stay locked.
    """

    method = MethodId.LOOKUP

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.state = LookupState.INITIAL
        self.progress = 0
        self.tax_data: TaxData | None = None
        self.error: str | None = None
        self.errors: dict[str, str] = {}
        self.edit_mode = False
        self._ticker: Timer | None = None

    @property
    def title(self) -> str:
        return f"Consultar {self.form.display_name} mediante DNI/NIE"

    @property
    def busy(self) -> bool:
        return self.state == LookupState.LOADING

    def lookup(self, document_number: str, date_of_birth: str, consent: bool) -> dict[str, str]:
        """Validate the request and start the simulated lookup.

        Returns the field errors; the lookup only starts when there are none.
        """
        self._ensure_live("look up")
        if self.busy:
            raise OperationPendingError("look up")
        if self.state != LookupState.INITIAL:
            raise InvalidTransitionError("look up", self.state.value)
        try:
            request = LookupRequest(
                document_number=document_number,
                date_of_birth=date_of_birth,
                consent=consent,
            )
        except ValidationError as exc:
            self.errors = field_errors(exc)
            logger.info("Lookup request rejected: %s", ", ".join(sorted(self.errors)))
            return self.errors

        self.errors = {}
        self.state = LookupState.LOADING
        self.progress = 0
        logger.info("Looking up %s for %s", request.document_number.upper(), self.form_type.value)
        self._ticker = self.timers.call_every(self.settings.lookup_tick, self._tick)
        self.timers.call_later(self.settings.lookup_duration, lambda: self._resolve(request))
        return {}

    def _tick(self) -> None:
        cap = self.settings.lookup_progress_cap
        if self.progress >= cap:
            self._stop_ticker()
            self.progress = cap
            return
        self.progress += self.settings.lookup_step

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def _resolve(self, request: LookupRequest) -> None:
        self._stop_ticker()
        self.progress = 100
        if self.rng.random() < self.settings.lookup_success_rate:
            self.tax_data = mock_data.lookup_record(
                self.form_type, request.document_number, request.date_of_birth
            )
            self.state = LookupState.SUCCESS
            logger.info("Lookup succeeded for %s", self.form_type.value)
            self.notifier.success("Información recuperada con éxito", "Hemos encontrado tus datos fiscales en el sistema.")
        else:
            self.error = self.rng.choice(mock_data.LOOKUP_ERRORS)
            self.state = LookupState.ERROR
            logger.warning("Lookup failed: %s", self.error)
            self.notifier.error("Error en la consulta", "No ha sido posible recuperar tu información fiscal.")

    # --- Edit mode ---

    def toggle_edit(self) -> None:
        if self.state != LookupState.SUCCESS:
            raise InvalidTransitionError("edit", self.state.value)
        self.edit_mode = not self.edit_mode

    def is_field_disabled(self, field: str) -> bool:
        return not self.edit_mode or field in IMMUTABLE_FIELDS

    def update_personal_info(self, **fields: str) -> dict[str, str]:
        """Edit contact/address fields of the fetched record.

        Returns the field errors; the record is only changed when there are none.
        """
        self._ensure_live("edit personal info")
        if not self.edit_mode:
            raise InvalidTransitionError("edit personal info", "read-only")
        for name in fields:
            if name in IMMUTABLE_FIELDS:
                raise ImmutableFieldError(name)
            if name not in type(self.tax_data.personal_info).model_fields:
                raise ValueError(f"Unknown personal field: {name}")
        try:
            ContactEdit.model_validate(fields)
        except ValidationError as exc:
            self.errors = field_errors(exc)
            logger.info("Contact edit rejected: %s", ", ".join(sorted(self.errors)))
            return self.errors
        self.errors = {}
        personal = self.tax_data.personal_info.model_copy(update=fields)
        self.tax_data = self.tax_data.model_copy(update={"personal_info": personal})
        return {}

    def save_edits(self) -> None:
        if not self.edit_mode:
            raise InvalidTransitionError("save edits", "read-only")
        self.edit_mode = False
        logger.info("Lookup record edited")
        self.notifier.success("Información actualizada", "Los cambios han sido guardados correctamente.")

    # --- Leaving ---

    def try_again(self) -> None:
        """Back to the empty request form, with no trace of the last result."""
        self._ensure_live("try again")
        if self.busy:
            raise OperationPendingError("try again")
        self._reset()

    def cancel(self) -> None:
        self._ensure_live("cancel")
        self.timers.cancel_all()
        self._ticker = None
        self._reset()
        self._cancel()

    def confirm(self) -> None:
        if self.state != LookupState.SUCCESS:
            raise InvalidTransitionError("confirm", self.state.value)
        self._complete()

    def _reset(self) -> None:
        self.state = LookupState.INITIAL
        self.progress = 0
        self.tax_data = None
        self.error = None
        self.errors = {}
        self.edit_mode = False

    def draft(self) -> FilingDraft:
        if self.tax_data is None:
            return FilingDraft(form_type=self.form_type, source=self.method)
        info = self.tax_data.tax_info
        notes = []
        if self.tax_data.metadata is not None:
            notes.append(f"Referencia: {self.tax_data.metadata.reference_number}")
            notes.append(f"Última actualización: {self.tax_data.metadata.last_updated}")
        return FilingDraft(
            form_type=self.form_type,
            source=self.method,
            personal=self.tax_data.personal_info.model_dump(),
            income={
                "employment_income": info.employment_income,
                "capital_income": info.capital_income,
                "property_income": info.property_income,
                "business_income": info.business_income,
            },
            deductions=info.deductions.model_dump(),
            result={"withholdings": info.withholdings},
            labels=LOOKUP_LABELS,
            notes=notes,
        )


LOOKUP_LABELS: dict[str, str] = {
    "full_name": "Nombre completo",
    "document_number": "DNI/NIE",
    "date_of_birth": "Fecha de nacimiento",
    "address": "Dirección",
    "postal_code": "Código postal",
    "city": "Ciudad",
    "province": "Provincia",
    "phone": "Teléfono",
    "email": "Email",
    "employment_income": "Rendimientos del trabajo",
    "capital_income": "Rendimientos del capital",
    "property_income": "Rendimientos inmobiliarios",
    "business_income": "Actividades económicas",
    "withholdings": "Retenciones",
    "social_security": "Seguridad Social",
    "personal_allowance": "Mínimo personal",
    "pension_contributions": "Planes de pensiones",
    "mortgage_deduction": "Deducción por vivienda",
}
