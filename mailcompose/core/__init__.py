"""Core engine API.

The core layer is framework-agnostic and safe to import from scripts, tests,
CLI commands, and web frontends.
"""

from typing import Any

_LAZY_EXPORTS: dict[str, tuple[str, str]] = {
    "CoreConfig": ("mailcompose.core.config", "CoreConfig"),
    "EmailValidator": ("mailcompose.core.validate", "EmailValidator"),
    "InMemoryStore": ("mailcompose.core.storage", "InMemoryStore"),
    "MailgunClient": ("mailcompose.core.sending", "MailgunClient"),
    "ValidationError": ("mailcompose.core.validate", "ValidationError"),
    "ValidationResult": ("mailcompose.core.validate", "ValidationResult"),
    "config_from_env": ("mailcompose.core.config", "config_from_env"),
    "get_summary": ("mailcompose.core.validate", "get_summary"),
    "send_template": ("mailcompose.core.sending", "send_template"),
    "validate_email_html": ("mailcompose.core.validate", "validate_email_html"),
    "validate_html": ("mailcompose.core.validate", "validate_html"),
}

__all__ = sorted(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    target = _LAZY_EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_name, attribute_name = target
    module = __import__(module_name, fromlist=[attribute_name])
    value = getattr(module, attribute_name)
    globals()[name] = value
    return value
