from typing import Dict, Optional


class PortalError(Exception):
    """Base class for every error raised by the portal."""


class FieldValidationError(PortalError):
    """One or more input fields failed local validation."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Validation failed")


class InvalidTransition(PortalError):
    """An event was sent to a flow in a step that cannot accept it."""

    def __init__(self, step: str, event: str):
        self.step = step
        self.event = event
        super().__init__(f"Cannot apply '{event}' while in step '{step}'")


class PortalApiError(PortalError):
    """The enrollment API rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
