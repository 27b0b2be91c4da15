"""Static catalogs: supported tax forms and data-acquisition methods."""

from pydantic import BaseModel, ConfigDict

from asistente.exceptions import UnknownFormTypeError, UnknownMethodError
from asistente.models.enums import FormTypeId, MethodId


class TaxFormType(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: FormTypeId
    display_name: str
    description: str


class AcquisitionMethod(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: MethodId
    title: str
    description: str


FORM_TYPES: dict[FormTypeId, TaxFormType] = {
    FormTypeId.MODELO_100: TaxFormType(
        id=FormTypeId.MODELO_100,
        display_name="Modelo 100",
        description="Income tax return",
    ),
    FormTypeId.MODELO_303: TaxFormType(
        id=FormTypeId.MODELO_303,
        display_name="Modelo 303",
        description="VAT return",
    ),
    FormTypeId.MODELO_349: TaxFormType(
        id=FormTypeId.MODELO_349,
        display_name="Modelo 349",
        description="EC Sales List",
    ),
    FormTypeId.MODELO_390: TaxFormType(
        id=FormTypeId.MODELO_390,
        display_name="Modelo 390",
        description="Annual VAT summary",
    ),
}

METHODS: dict[MethodId, AcquisitionMethod] = {
    MethodId.MANUAL: AcquisitionMethod(
        id=MethodId.MANUAL,
        title="Fill by hand",
        description="Manually enter your tax information",
    ),
    MethodId.AI: AcquisitionMethod(
        id=MethodId.AI,
        title="Fill by friendly Q&A chat with AI",
        description="Let our AI assistant guide you through the form",
    ),
    MethodId.UPLOAD: AcquisitionMethod(
        id=MethodId.UPLOAD,
        title="Fill by uploading filled old form",
        description="Upload your previous tax form",
    ),
    MethodId.LOOKUP: AcquisitionMethod(
        id=MethodId.LOOKUP,
        title="Fill by lookup info from govt website (API) via ID",
        description="Quickly import your information using your ID",
    ),
}


def get_form_type(form_type: str) -> TaxFormType:
    """Return the catalog entry for *form_type* or raise UnknownFormTypeError."""
    try:
        return FORM_TYPES[FormTypeId(form_type)]
    except ValueError:
        raise UnknownFormTypeError(form_type) from None


def get_method(method: str) -> AcquisitionMethod:
    """Return the catalog entry for *method* or raise UnknownMethodError."""
    try:
        return METHODS[MethodId(method)]
    except ValueError:
        raise UnknownMethodError(method) from None
