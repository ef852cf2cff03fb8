"""Email HTML compatibility validator and score calculator."""

from __future__ import annotations

from typing import Any

from .report import ValidationError, ValidationResult
from .rules import RULES, Rule

ERROR_PENALTY = 15
WARNING_PENALTY = 5


def calculate_score(error_count: int, warning_count: int) -> int:
    score = 100 - error_count * ERROR_PENALTY - warning_count * WARNING_PENALTY
    return max(0, min(100, score))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


class EmailValidator:
    """Runs a fixed battery of rules over email HTML.

    Instances hold no per-call state; one validator can be shared across
    threads and requests.
    """

    def __init__(self, rules: tuple[Rule, ...] = RULES) -> None:
        self._rules = tuple(rules)

    def validate(self, html: str | None) -> ValidationResult:
        text = html if isinstance(html, str) else ""

        errors: list[ValidationError] = []
        warnings: list[ValidationError] = []
        for rule in self._rules:
            for finding in rule(text):
                if finding.type == "error":
                    errors.append(finding)
                else:
                    warnings.append(finding)

        return ValidationResult(
            is_valid=not errors,
            errors=[*errors, *warnings],
            warnings=warnings,
            score=calculate_score(len(errors), len(warnings)),
        )

    @staticmethod
    def summary(result: ValidationResult) -> str:
        error_count = result.error_count
        warning_count = result.warning_count
        score = f"(Score: {result.score}/100)"

        if error_count == 0 and warning_count == 0:
            return f"✅ Perfect! Your email template is fully compatible {score}"
        if error_count == 0:
            return f"⚠️ Good compatibility with {_plural(warning_count, 'minor issue')} {score}"
        return f"❌ {_plural(error_count, 'error')} and {_plural(warning_count, 'warning')} found {score}"


_default_validator = EmailValidator()


def validate_html(html: str | None) -> ValidationResult:
    return _default_validator.validate(html)


def get_summary(result: ValidationResult) -> str:
    return EmailValidator.summary(result)


def validate_email_html(html: str | None) -> dict[str, Any]:
    """Flat message-only view kept for callers that predate ``ValidationResult``."""
    result = validate_html(html)
    return {
        "is_valid": result.is_valid,
        "errors": [finding.message for finding in result.errors],
        "warnings": [finding.message for finding in result.warnings],
    }


__all__ = [
    "ERROR_PENALTY",
    "EmailValidator",
    "WARNING_PENALTY",
    "calculate_score",
    "get_summary",
    "validate_email_html",
    "validate_html",
]
