from typing import Any

from ...core.validate import ValidationResult
from ...config import get_settings

_MESSAGE_LIMITS = {
    "medium": 160,
    "high": 240,
}
_SUPPORTED_VERBOSITIES = {"low", "medium", "high", "extrahigh"}


def _truncate(value: str | None, *, limit: int) -> str:
    text = str(value or "").strip()
    if len(text) <= limit:
        return text
    return f"{text[:limit].rstrip()}... [truncated]"


def _normalize_verbosity(verbosity: str) -> str:
    normalized = str(verbosity or "").strip().lower()
    if normalized in _SUPPORTED_VERBOSITIES:
        return normalized
    return "medium"


def validation_result_to_loggable(result: ValidationResult, verbosity: str | None = None) -> dict[str, Any]:
    level = _normalize_verbosity(verbosity if verbosity is not None else get_settings().log_verbosity)

    if level == "extrahigh":
        return result.to_dict()

    limit = _MESSAGE_LIMITS.get(level, 0)
    loggable: dict[str, Any] = {
        "is_valid": result.is_valid,
        "score": result.score,
        "error_count": result.error_count,
        "warning_count": result.warning_count,
    }
    if level in {"medium", "high"}:
        loggable["errors"] = [_truncate(message, limit=limit) for message in result.error_messages()]
    if level == "high":
        loggable["warnings"] = [_truncate(finding.message, limit=limit) for finding in result.warnings]
    return loggable
