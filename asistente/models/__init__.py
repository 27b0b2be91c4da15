"""Data models for Asistente Fiscal."""

from asistente.models.catalog import (
    FORM_TYPES,
    METHODS,
    AcquisitionMethod,
    TaxFormType,
    get_form_type,
    get_method,
)
from asistente.models.chat import Attachment, ChatMessage
from asistente.models.enums import (
    FilingStatus,
    FormTypeId,
    LookupState,
    ManualTab,
    MethodId,
    NotificationLevel,
    Role,
    SectionId,
    SelectorPhase,
    StepId,
    UploadStatus,
)
from asistente.models.forms import FIELD_SETS, FieldSet, PersonalInfo
from asistente.models.records import ExtractedData, FilingDraft, TaxData

__all__ = [
    "AcquisitionMethod",
    "Attachment",
    "ChatMessage",
    "ExtractedData",
    "FIELD_SETS",
    "FieldSet",
    "FilingDraft",
    "FilingStatus",
    "FORM_TYPES",
    "FormTypeId",
    "get_form_type",
    "get_method",
    "LookupState",
    "ManualTab",
    "METHODS",
    "MethodId",
    "NotificationLevel",
    "PersonalInfo",
    "Role",
    "SectionId",
    "SelectorPhase",
    "StepId",
    "TaxData",
    "TaxFormType",
    "UploadStatus",
]
