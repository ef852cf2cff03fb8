"""Core engine configuration.

Core config is side-effect free: it does not load dotenv files.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAILGUN_API_BASE_URL = "https://api.mailgun.net/v3"


@dataclass(frozen=True)
class CoreConfig:
    mailgun_api_key: str = ""
    mailgun_domain: str = ""
    mailgun_api_base_url: str = DEFAULT_MAILGUN_API_BASE_URL
    mailgun_webhook_signing_key: str | None = None
    default_from: str | None = None
    request_timeout: int = 20

    @property
    def sender(self) -> str:
        return self.default_from or f"Compose <noreply@{self.mailgun_domain}>"


def config_from_env() -> CoreConfig:
    return CoreConfig(
        mailgun_api_key=os.getenv("MAILGUN_API_KEY", ""),
        mailgun_domain=os.getenv("MAILGUN_DOMAIN", ""),
        mailgun_api_base_url=os.getenv("MAILGUN_API_BASE_URL", DEFAULT_MAILGUN_API_BASE_URL).rstrip("/"),
        mailgun_webhook_signing_key=os.getenv("MAILGUN_WEBHOOK_SIGNING_KEY") or None,
        default_from=os.getenv("MAILGUN_FROM") or None,
    )


__all__ = ["CoreConfig", "DEFAULT_MAILGUN_API_BASE_URL", "config_from_env"]
