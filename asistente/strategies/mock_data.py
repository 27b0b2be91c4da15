"""Synthetic records returned by the simulated extraction and lookup services.

Each service has one base record and a per-form override; the result is
``merge_deep(base, override)`` validated into the record model.
"""

import copy
from typing import Any

from asistente.merge import merge_deep
from asistente.models.enums import FormTypeId
from asistente.models.records import ExtractedData, TaxData

# ---------------------------------------------------------------------------
# Upload (document extraction)
# ---------------------------------------------------------------------------

EXTRACTED_BASE: dict[str, Any] = {
    "personal_info": {
        "name": "Juan García López",
        "nif": "12345678A",
        "address": "Calle Mayor 1, 28001 Madrid",
        "postal_code": "28001",
        "city": "Madrid",
        "province": "Madrid",
        "phone": "600123456",
        "email": "juan.garcia@example.com",
    },
    "income": {
        "total_salary": "42000.00",
        "financial_income": "1500.00",
        "capital_gains": "0.00",
        "rental_income": "0.00",
        "business_income": "0.00",
    },
    "deductions": {
        "social_security": "2688.00",
        "pension_contributions": "3000.00",
        "total_deductions": "5688.00",
        "mortgage_interest": "1200.00",
        "donations": "500.00",
    },
    "result": {
        "tax_due": "8750.00",
        "refund": "0.00",
    },
    "metadata": {
        "tax_year": "2023",
        "filing_date": "15/04/2024",
        "reference_number": "100-2023-78954621",
    },
}

EXTRACTED_OVERRIDES: dict[FormTypeId, dict[str, Any]] = {
    FormTypeId.MODELO_100: {
        "metadata": {
            "tax_year": "2023",
            "filing_date": "15/04/2024",
            "reference_number": "100-2023-78954621",
        },
    },
    FormTypeId.MODELO_303: {
        "income": {
            "total_salary": "0.00",
            "financial_income": "0.00",
            "capital_gains": "0.00",
            "business_income": "35689.45",
        },
        "result": {"tax_due": "7494.78", "refund": "0.00"},
        "metadata": {
            "tax_year": "2023 - 4T",
            "filing_date": "20/01/2024",
            "reference_number": "303-4T-2023-65412398",
        },
    },
    FormTypeId.MODELO_349: {
        "income": {
            "total_salary": "0.00",
            "financial_income": "0.00",
            "capital_gains": "0.00",
            "business_income": "58200.00",
        },
        "result": {"tax_due": "0.00", "refund": "0.00"},
        "metadata": {
            "tax_year": "2023 - 4T",
            "filing_date": "30/01/2024",
            "reference_number": "349-4T-2023-17283946",
        },
    },
    FormTypeId.MODELO_390: {
        "income": {
            "total_salary": "0.00",
            "financial_income": "0.00",
            "capital_gains": "0.00",
            "business_income": "142757.80",
        },
        "result": {"tax_due": "29979.14", "refund": "0.00"},
        "metadata": {
            "tax_year": "2023",
            "filing_date": "29/01/2024",
            "reference_number": "390-2023-90817263",
        },
    },
}

# ---------------------------------------------------------------------------
# ID lookup (tax agency records)
# ---------------------------------------------------------------------------

LOOKUP_BASE: dict[str, Any] = {
    "personal_info": {
        "full_name": "Juan García López",
        "document_number": "",
        "date_of_birth": "",
        "address": "Calle Mayor 1, 3º Izq",
        "postal_code": "28001",
        "city": "Madrid",
        "province": "Madrid",
        "phone": "600123456",
        "email": "juan.garcia@example.com",
    },
    "tax_info": {
        "employment_income": "42000.00",
        "capital_income": "1200.00",
        "property_income": "0.00",
        "business_income": "0.00",
        "withholdings": "7560.00",
        "deductions": {
            "social_security": "2688.00",
            "personal_allowance": "5550.00",
            "pension_contributions": "3000.00",
            "mortgage_deduction": "1500.00",
        },
    },
    "metadata": {
        "last_updated": "15/04/2024",
        "reference_number": "RENTA2023-12345678A",
        "valid_until": "30/06/2024",
    },
}

_NO_DEDUCTIONS = {
    "social_security": "0.00",
    "personal_allowance": "0.00",
    "pension_contributions": "0.00",
    "mortgage_deduction": "0.00",
}

LOOKUP_OVERRIDES: dict[FormTypeId, dict[str, Any]] = {
    FormTypeId.MODELO_100: {
        "tax_info": {
            "employment_income": "42000.00",
            "capital_income": "1200.00",
            "property_income": "0.00",
            "business_income": "0.00",
            "withholdings": "7560.00",
            "deductions": {
                "social_security": "2688.00",
                "personal_allowance": "5550.00",
                "pension_contributions": "3000.00",
                "mortgage_deduction": "1500.00",
            },
        },
        "metadata": {
            "last_updated": "15/04/2024",
            "reference_number": "RENTA2023-12345678A",
            "valid_until": "30/06/2024",
        },
    },
    FormTypeId.MODELO_303: {
        "tax_info": {
            "employment_income": "0.00",
            "capital_income": "0.00",
            "property_income": "0.00",
            "business_income": "35689.45",
            "withholdings": "7494.78",
            "deductions": dict(_NO_DEDUCTIONS),
        },
        "metadata": {
            "last_updated": "20/01/2024",
            "reference_number": "IVA4T2023-12345678A",
            "valid_until": "20/04/2024",
        },
    },
    FormTypeId.MODELO_349: {
        "tax_info": {
            "employment_income": "0.00",
            "capital_income": "0.00",
            "property_income": "0.00",
            "business_income": "58200.00",
            "withholdings": "0.00",
            "deductions": dict(_NO_DEDUCTIONS),
        },
        "metadata": {
            "last_updated": "30/01/2024",
            "reference_number": "ROI4T2023-12345678A",
            "valid_until": "20/04/2024",
        },
    },
    FormTypeId.MODELO_390: {
        "tax_info": {
            "employment_income": "0.00",
            "capital_income": "0.00",
            "property_income": "0.00",
            "business_income": "142757.80",
            "withholdings": "29979.14",
            "deductions": dict(_NO_DEDUCTIONS),
        },
        "metadata": {
            "last_updated": "29/01/2024",
            "reference_number": "IVA2023-12345678A",
            "valid_until": "30/01/2025",
        },
    },
}

LOOKUP_ERRORS: tuple[str, ...] = (
    "No se ha encontrado información asociada al número de documento y fecha de nacimiento proporcionados.",
    "El servicio de consulta de la Agencia Tributaria no está disponible en este momento. "
    "Por favor, inténtalo más tarde.",
    "La información solicitada no está disponible para este tipo de formulario.",
    "El contribuyente no tiene datos registrados para el ejercicio fiscal actual.",
)

EXTRACTION_ERROR = (
    "No se ha podido extraer la información del documento. Puede que el formato no sea "
    "compatible o que la calidad de la imagen no sea suficiente."
)


def extracted_record(form_type: FormTypeId) -> ExtractedData:
    """Base extraction merged with the override for *form_type*."""
    merged = merge_deep(EXTRACTED_BASE, EXTRACTED_OVERRIDES.get(form_type, {}))
    return ExtractedData.model_validate(merged)


def lookup_record(form_type: FormTypeId, document_number: str, date_of_birth: str) -> TaxData:
    """Agency record for the given identity, merged with the override for *form_type*."""
    base = copy.deepcopy(LOOKUP_BASE)
    base["personal_info"]["document_number"] = document_number.upper()
    base["personal_info"]["date_of_birth"] = date_of_birth
    merged = merge_deep(base, LOOKUP_OVERRIDES.get(form_type, {}))
    return TaxData.model_validate(merged)
