"""Exceptions raised by the compose core services."""

from __future__ import annotations


class ComposeError(Exception):
    """Base class for core service failures."""


class ConfigurationError(ComposeError):
    pass


class TemplateNotFoundError(ComposeError):
    pass


class SendNotFoundError(ComposeError):
    pass


class StorageValidationError(ComposeError, ValueError):
    pass


class InvalidSendRequest(ComposeError, ValueError):
    pass


class RecipientValidationError(InvalidSendRequest):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [message])


class TemplateValidationFailed(ComposeError):
    """The template HTML has error-level findings; sending is blocked."""

    def __init__(self, validation_errors: list[str]) -> None:
        super().__init__("Template has validation errors")
        self.validation_errors = list(validation_errors)


class MailgunError(ComposeError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SendFailedError(ComposeError):
    """A send record exists but the provider did not accept the message."""

    def __init__(self, message: str, send_id: str) -> None:
        super().__init__(message)
        self.send_id = send_id


__all__ = [
    "ComposeError",
    "ConfigurationError",
    "InvalidSendRequest",
    "MailgunError",
    "RecipientValidationError",
    "SendFailedError",
    "SendNotFoundError",
    "StorageValidationError",
    "TemplateNotFoundError",
    "TemplateValidationFailed",
]
