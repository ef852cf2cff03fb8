"""Validation result types for email HTML checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

FindingType = Literal["error", "warning"]
Category = Literal["structure", "css", "images", "compatibility", "accessibility"]


@dataclass(frozen=True)
class ValidationError:
    type: FindingType
    category: Category
    message: str
    suggestion: str | None = None
    line: int | None = None
    column: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "category": self.category,
            "message": self.message,
            "suggestion": self.suggestion,
            "line": self.line,
            "column": self.column,
        }


@dataclass
class ValidationResult:
    """Outcome of one validation run.

    ``errors`` holds every finding (true errors first, then warnings) and
    ``warnings`` repeats the warning subset. Filter ``errors`` on
    ``type == "error"`` to get blocking findings only.
    """

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)
    score: int = 100

    @property
    def error_count(self) -> int:
        return sum(1 for finding in self.errors if finding.type == "error")

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def error_messages(self) -> list[str]:
        return [finding.message for finding in self.errors if finding.type == "error"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [finding.to_dict() for finding in self.errors],
            "warnings": [finding.to_dict() for finding in self.warnings],
            "score": self.score,
        }


__all__ = ["Category", "FindingType", "ValidationError", "ValidationResult"]
