"""Asistente Fiscal: onboarding wizard for Spanish tax forms."""

__version__ = "0.1.0"
