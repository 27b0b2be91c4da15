"""Enumerations for Asistente Fiscal."""

from enum import StrEnum


class SectionId(StrEnum):
    FORM = "form"
    PROFILE = "profile"
    HISTORY = "history"
    SUPPORT = "support"


class StepId(StrEnum):
    FORM_TYPE = "form-type"
    FORM_METHOD = "form-method"
    PERSONAL = "personal"
    INCOME = "income"
    DEDUCTIONS = "deductions"
    SUMMARY = "summary"


class FormTypeId(StrEnum):
    MODELO_100 = "modelo100"
    MODELO_303 = "modelo303"
    MODELO_349 = "modelo349"
    MODELO_390 = "modelo390"


class MethodId(StrEnum):
    MANUAL = "manual"
    AI = "ai"
    UPLOAD = "upload"
    LOOKUP = "lookup"


class SelectorPhase(StrEnum):
    FORM_TYPE = "form-type"
    FORM_METHOD = "form-method"


class ManualTab(StrEnum):
    PERSONAL = "personal"
    INCOME = "income"
    DEDUCTIONS = "deductions"


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class UploadStatus(StrEnum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


class LookupState(StrEnum):
    INITIAL = "initial"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class NotificationLevel(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class FilingStatus(StrEnum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    COMPLETED = "Completed"
