from .report import ValidationError, ValidationResult
from .rules import RULES, UNSUPPORTED_CSS
from .validator import (
    EmailValidator,
    calculate_score,
    get_summary,
    validate_email_html,
    validate_html,
)

__all__ = [
    "EmailValidator",
    "RULES",
    "UNSUPPORTED_CSS",
    "ValidationError",
    "ValidationResult",
    "calculate_score",
    "get_summary",
    "validate_email_html",
    "validate_html",
]
