"""Public package entrypoint for the Compose email engine.

This package provides a stable import surface for email HTML validation and
the send/track pipeline, plus optional frontend adapters (CLI and FastAPI
server).
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Any

_LAZY_EXPORTS: dict[str, tuple[str, str]] = {
    "EmailValidator": ("mailcompose.core.validate", "EmailValidator"),
    "ValidationError": ("mailcompose.core.validate", "ValidationError"),
    "ValidationResult": ("mailcompose.core.validate", "ValidationResult"),
    "app": ("mailcompose.server.main", "app"),
    "create_app": ("mailcompose.server.main", "create_app"),
    "get_summary": ("mailcompose.core.validate", "get_summary"),
    "validate_html": ("mailcompose.core.validate", "validate_html"),
}

try:
    __version__ = version("mailcompose")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "EmailValidator",
    "ValidationError",
    "ValidationResult",
    "__version__",
    "app",
    "create_app",
    "get_summary",
    "validate_html",
]


def __getattr__(name: str) -> Any:
    target = _LAZY_EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attribute_name = target
    module = __import__(module_name, fromlist=[attribute_name])
    value = getattr(module, attribute_name)
    globals()[name] = value
    return value
