"""Synthetic tax records produced by the upload and ID-lookup strategies.

Both record shapes come out of the shared deep merge (base mock + per-form
override) as plain dicts and are validated into these models afterwards.
`FilingDraft` is the normalised shape every strategy hands back to the
wizard on completion.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from asistente.models.enums import FormTypeId, MethodId

# ---------------------------------------------------------------------------
# Upload: data extracted from a previously filed form
# ---------------------------------------------------------------------------


class ExtractedPersonalInfo(BaseModel):
    name: str
    nif: str
    address: str
    postal_code: str | None = None
    city: str | None = None
    province: str | None = None
    phone: str | None = None
    email: str | None = None


class ExtractedIncome(BaseModel):
    total_salary: Decimal
    financial_income: Decimal
    capital_gains: Decimal
    rental_income: Decimal | None = None
    business_income: Decimal | None = None


class ExtractedDeductions(BaseModel):
    social_security: Decimal
    pension_contributions: Decimal
    total_deductions: Decimal
    mortgage_interest: Decimal | None = None
    donations: Decimal | None = None


class ExtractedResult(BaseModel):
    tax_due: Decimal
    refund: Decimal | None = None


class ExtractedMetadata(BaseModel):
    tax_year: str
    filing_date: str | None = None
    reference_number: str | None = None


class ExtractedData(BaseModel):
    personal_info: ExtractedPersonalInfo
    income: ExtractedIncome
    deductions: ExtractedDeductions
    result: ExtractedResult
    metadata: ExtractedMetadata | None = None


# ---------------------------------------------------------------------------
# ID lookup: record returned by the (mock) tax agency service
# ---------------------------------------------------------------------------


class LookupPersonalInfo(BaseModel):
    full_name: str
    document_number: str
    date_of_birth: str
    address: str
    postal_code: str
    city: str
    province: str
    phone: str
    email: str


class LookupDeductions(BaseModel):
    social_security: Decimal
    personal_allowance: Decimal
    pension_contributions: Decimal
    mortgage_deduction: Decimal


class LookupTaxInfo(BaseModel):
    employment_income: Decimal
    capital_income: Decimal
    property_income: Decimal
    business_income: Decimal
    withholdings: Decimal
    deductions: LookupDeductions


class LookupMetadata(BaseModel):
    last_updated: str
    reference_number: str
    valid_until: str | None = None


class TaxData(BaseModel):
    personal_info: LookupPersonalInfo
    tax_info: LookupTaxInfo
    metadata: LookupMetadata | None = None


# ---------------------------------------------------------------------------
# Draft handed back to the wizard
# ---------------------------------------------------------------------------


class FilingDraft(BaseModel):
    """Personal, income and deduction data gathered by one strategy."""

    form_type: FormTypeId
    source: MethodId
    personal: dict[str, str] = Field(default_factory=dict)
    income: dict[str, Decimal] = Field(default_factory=dict)
    deductions: dict[str, Decimal] = Field(default_factory=dict)
    result: dict[str, Decimal] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    notes: list[str] = Field(default_factory=list)

    def label(self, field: str) -> str:
        return self.labels.get(field, field)

    @property
    def is_empty(self) -> bool:
        return not (self.personal or self.income or self.deductions)
