"""Custom exceptions for Asistente Fiscal."""


class OnboardingError(Exception):
    """Base exception for onboarding wizard errors."""


class UnknownFormTypeError(OnboardingError):
    """Raised when a form type id is not in the static catalog."""

    def __init__(self, form_type: str):
        self.form_type = form_type
        super().__init__(f"Unknown form type: {form_type!r}")


class UnknownMethodError(OnboardingError):
    """Raised when an acquisition method id is not in the static catalog."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unknown acquisition method: {method!r}")


class InvalidTransitionError(OnboardingError):
    """Raised when an action is not allowed in the current state."""

    def __init__(self, action: str, state: str):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while in state {state!r}")


class OperationPendingError(InvalidTransitionError):
    """Raised when a second simulated operation is started before the first settles."""

    def __init__(self, action: str):
        super().__init__(action, "pending")


class ImmutableFieldError(OnboardingError):
    """Raised when a verified identity field is edited."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field '{field}' cannot be edited after verification")


class SettingsError(OnboardingError):
    """Raised when a simulation settings file cannot be loaded."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Settings error for {path}: {message}")
