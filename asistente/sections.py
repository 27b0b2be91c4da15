"""Profile, History and Support sections."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from asistente.models.enums import FilingStatus
from asistente.models.forms import EMAIL_PATTERN, PersonalInfo, field_errors
from asistente.notifications import Notifier

logger = logging.getLogger(__name__)

ALL = "all"

# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class ProfileInfo(PersonalInfo):
    country: str

    @field_validator("country")
    @classmethod
    def _country(cls, v: str) -> str:
        if len((v or "").strip()) < 2:
            raise ValueError("El país debe tener al menos 2 caracteres")
        return v


DEFAULT_PROFILE = ProfileInfo(
    first_name="John",
    last_name="Doe",
    email="john.doe@example.com",
    phone="+34 612 345 678",
    address="Calle Mayor 123",
    city="Madrid",
    postal_code="28001",
    province="Madrid",
    country="Spain",
    nif="12345678A",
    birth_date="1980-01-01",
)


class Profile:
    """Editable profile; a rejected update leaves the stored record untouched."""

    def __init__(self, info: ProfileInfo | None = None, notifier: Notifier | None = None):
        self.info = info or DEFAULT_PROFILE
        self.notifier = notifier or Notifier()
        self.errors: dict[str, str] = {}

    def update(self, **fields: str) -> dict[str, str]:
        data = {**self.info.model_dump(), **fields}
        try:
            self.info = ProfileInfo.model_validate(data)
        except ValidationError as exc:
            self.errors = field_errors(exc)
            logger.info("Profile update rejected: %s", ", ".join(sorted(self.errors)))
            return self.errors
        self.errors = {}
        logger.info("Profile updated: %s", ", ".join(sorted(fields)))
        self.notifier.success("Perfil actualizado", "Tus datos personales han sido guardados.")
        return {}


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Filing:
    id: str
    type: str
    year: str
    status: FilingStatus
    date_submitted: date | None = None
    amount: Decimal | None = None

    @property
    def downloadable(self) -> bool:
        return self.status != FilingStatus.DRAFT


FILINGS: tuple[Filing, ...] = (
    Filing("F2024-001", "Modelo 100", "2024", FilingStatus.SUBMITTED, date(2024, 4, 10), Decimal("1245.78")),
    Filing("F2023-045", "Modelo 100", "2023", FilingStatus.COMPLETED, date(2023, 4, 15), Decimal("956.32")),
    Filing("F2023-102", "Modelo 303", "2023", FilingStatus.COMPLETED, date(2023, 10, 20), Decimal("450.00")),
    Filing("F2022-089", "Modelo 100", "2022", FilingStatus.COMPLETED, date(2022, 4, 18), Decimal("1120.45")),
    Filing("F2022-156", "Modelo 349", "2022", FilingStatus.COMPLETED, date(2022, 6, 30), Decimal("0.00")),
    Filing("F2024-012", "Modelo 303", "2024", FilingStatus.DRAFT),
)


class History:
    def __init__(self, filings: tuple[Filing, ...] = FILINGS):
        self.filings = filings

    @property
    def years(self) -> list[str]:
        return sorted({f.year for f in self.filings}, reverse=True)

    @property
    def types(self) -> list[str]:
        return sorted({f.type for f in self.filings})

    def filter(self, search: str = "", year: str = ALL, form_type: str = ALL) -> list[Filing]:
        """Filings whose id or type contains *search* (case-insensitive).

        *year* and *form_type* must match exactly unless they are ``"all"``.
        """
        needle = search.lower()
        return [
            f
            for f in self.filings
            if (needle in f.id.lower() or needle in f.type.lower())
            and (year == ALL or f.year == year)
            and (form_type == ALL or f.type == form_type)
        ]


# ---------------------------------------------------------------------------
# Support
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FaqItem:
    question: str
    answer: str


FAQ: tuple[FaqItem, ...] = (
    FaqItem(
        "When is the deadline for filing Modelo 100?",
        "The general deadline for filing Modelo 100 (Spanish Income Tax) is from April 1st to June 30th "
        "each year. However, if you choose direct debit payment, the deadline ends on June 25th.",
    ),
    FaqItem(
        "How do I verify my DNI/NIE when using the app?",
        "You can verify your DNI/NIE by uploading a scan of your identification document through the "
        "app's secure verification system. The system will validate your information with the official "
        "government database.",
    ),
    FaqItem(
        "Can I modify a tax declaration after submission?",
        "Once a tax declaration has been submitted, you cannot modify it directly. However, you can file "
        "a supplementary declaration (declaración complementaria) or a rectification (rectificación) if "
        "you need to make changes.",
    ),
    FaqItem(
        "How do I retrieve my previous year's tax filing data?",
        "You can retrieve your previous year's tax filing by logging into your account and accessing the "
        "'History' section. From there, you can download or view your past declarations. Alternatively, "
        "you can use the 'Fill by uploading filled old form' option when starting a new declaration.",
    ),
    FaqItem(
        "Is my tax information secure on this platform?",
        "Yes, all your tax information is encrypted using bank-level security protocols. We use "
        "end-to-end encryption for all sensitive data, and our systems comply with GDPR and Spanish data "
        "protection regulations.",
    ),
    FaqItem(
        "What do I do if I forgot to include some income?",
        "If you've already submitted your declaration and forgot to include some income, you'll need to "
        "file a complementary declaration (declaración complementaria). Our AI assistant can guide you "
        "through this process.",
    ),
)

SUPPORT_EMAIL = "support@asistentefiscal.es"
SUPPORT_PHONE = "+34 91 123 4567"


class ContactRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    email: str
    subject: str
    message: str

    @field_validator("name", "subject", "message")
    @classmethod
    def _required(cls, v: str) -> str:
        if not v:
            raise ValueError("This field is required")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v


class Support:
    def __init__(self, faq: tuple[FaqItem, ...] = FAQ, notifier: Notifier | None = None):
        self.faq = faq
        self.notifier = notifier or Notifier()
        self.sent: list[ContactRequest] = []

    def search(self, query: str = "") -> list[FaqItem]:
        """FAQ items whose question or answer contains *query*; all when empty."""
        if not query:
            return list(self.faq)
        needle = query.lower()
        return [item for item in self.faq if needle in item.question.lower() or needle in item.answer.lower()]

    def contact(self, **fields: str) -> dict[str, str]:
        """Validate and record a contact request; returns field errors."""
        try:
            request = ContactRequest.model_validate(fields)
        except ValidationError as exc:
            errors = field_errors(exc)
            logger.info("Contact request rejected: %s", ", ".join(sorted(errors)))
            return errors
        self.sent.append(request)
        logger.info("Contact request recorded: %s", request.subject)
        self.notifier.success("Message sent", "We will get back to you as soon as possible.")
        return {}
