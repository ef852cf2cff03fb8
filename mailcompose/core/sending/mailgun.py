"""Mailgun HTTP API client."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import CoreConfig
from ..errors import ConfigurationError, MailgunError, RecipientValidationError
from ..storage.entities import EmailRecipients

logger = logging.getLogger(__name__)

EMAIL_ADDRESS_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_STATUS_MESSAGES = {
    401: "Invalid Mailgun API key",
    402: "Mailgun account payment required",
    403: "Mailgun API access forbidden",
    404: "Mailgun domain not found",
    429: "Mailgun rate limit exceeded",
}

_STATS_EVENTS = ("accepted", "delivered", "failed", "opened", "clicked")


def http_session(timeout: int = 20) -> requests.Session:
    s = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retries)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.request_timeout = timeout  # type: ignore[attr-defined]
    return s


def is_valid_email_address(address: str) -> bool:
    return bool(EMAIL_ADDRESS_RE.match(address or ""))


def parse_email_addresses(value: str) -> list[str]:
    """Split a comma/semicolon separated list, keeping valid addresses only."""
    candidates = (part.strip() for part in re.split(r"[,;]", value or ""))
    return [address for address in candidates if address and is_valid_email_address(address)]


@dataclass
class EmailSendRequest:
    to: list[str]
    subject: str
    html: str
    cc: list[str] | None = None
    bcc: list[str] | None = None
    text: str | None = None
    sender: str | None = None
    reply_to: str | None = None
    tags: list[str] = field(default_factory=list)
    custom_variables: dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_recipients(cls, recipients: EmailRecipients, **kwargs: Any) -> "EmailSendRequest":
        return cls(to=list(recipients.to), cc=recipients.cc, bcc=recipients.bcc, **kwargs)


@dataclass(frozen=True)
class MailgunResponse:
    id: str
    message: str


def check_send_request(request: EmailSendRequest) -> None:
    if not request.to:
        raise RecipientValidationError("At least one recipient is required")
    if not (request.subject or "").strip():
        raise RecipientValidationError("Subject is required")
    if not (request.html or "").strip():
        raise RecipientValidationError("Email content is required")

    problems: list[str] = []
    for label, addresses in (("", request.to), ("CC ", request.cc), ("BCC ", request.bcc)):
        for address in addresses or []:
            if not is_valid_email_address(address):
                problems.append(f"Invalid {label}email address: {address}")
    if problems:
        raise RecipientValidationError(problems[0], problems)


def _json_object(response: requests.Response) -> dict[str, Any]:
    """Decode a Mailgun response body that must be a JSON object."""
    try:
        data = response.json()
    except ValueError as exc:
        raise MailgunError("Invalid Mailgun response", status_code=response.status_code) from exc
    if not isinstance(data, dict):
        raise MailgunError("Invalid Mailgun response", status_code=response.status_code)
    return data


def _error_for_response(response: requests.Response) -> MailgunError:
    status = response.status_code
    if status in _STATUS_MESSAGES:
        return MailgunError(_STATUS_MESSAGES[status], status_code=status)
    if status >= 500:
        return MailgunError("Mailgun server error", status_code=status)
    try:
        detail = _json_object(response).get("message") or response.reason
    except MailgunError:
        detail = response.reason
    return MailgunError(f"Mailgun API error: {status} - {detail}", status_code=status)


def delivery_status_from_events(events: list[dict[str, Any]]) -> str:
    names = {event.get("event") for event in events}
    if "delivered" in names:
        return "sent"
    if "failed" in names or "rejected" in names:
        return "failed"
    if "accepted" in names:
        return "sent"
    return "pending"


class MailgunClient:
    def __init__(self, config: CoreConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self._http = session or http_session(config.request_timeout)

    @property
    def _auth(self) -> tuple[str, str]:
        return ("api", self.config.mailgun_api_key)

    @property
    def _domain_url(self) -> str:
        return f"{self.config.mailgun_api_base_url}/{self.config.mailgun_domain}"

    def _timeout(self) -> int:
        return getattr(self._http, "request_timeout", self.config.request_timeout)

    def send_email(self, request: EmailSendRequest) -> MailgunResponse:
        check_send_request(request)

        form: list[tuple[str, str]] = [("to", address) for address in request.to]
        form += [("cc", address) for address in request.cc or []]
        form += [("bcc", address) for address in request.bcc or []]
        form.append(("subject", request.subject))
        form.append(("html", request.html))
        if request.text:
            form.append(("text", request.text))
        form.append(("from", request.sender or self.config.sender))
        if request.reply_to:
            form.append(("h:Reply-To", request.reply_to))
        form += [("o:tag", tag) for tag in request.tags]
        form += [(f"v:{key}", str(value)) for key, value in request.custom_variables.items()]
        form += [("o:tracking", "true"), ("o:tracking-clicks", "true"), ("o:tracking-opens", "true")]

        try:
            response = self._http.post(
                f"{self._domain_url}/messages",
                auth=self._auth,
                data=form,
                timeout=self._timeout(),
            )
        except requests.RequestException as exc:
            raise MailgunError(f"Mailgun request failed: {exc}") from exc

        if not response.ok:
            raise _error_for_response(response)

        data = _json_object(response)
        return MailgunResponse(id=str(data.get("id") or ""), message=str(data.get("message") or ""))

    def get_delivery_status(self, message_id: str) -> dict[str, Any]:
        try:
            response = self._http.get(
                f"{self._domain_url}/events",
                auth=self._auth,
                params={"message-id": message_id},
                timeout=self._timeout(),
            )
        except requests.RequestException as exc:
            raise MailgunError(f"Failed to get delivery status: {exc}") from exc
        if not response.ok:
            raise MailgunError(f"Failed to get delivery status: {response.status_code}", status_code=response.status_code)

        items = _json_object(response).get("items") or []
        if not isinstance(items, list):
            raise MailgunError("Invalid Mailgun response", status_code=response.status_code)
        items = [item for item in items if isinstance(item, dict)]
        return {
            "status": delivery_status_from_events(items),
            "events": [
                {
                    "event": item.get("event"),
                    "timestamp": item.get("timestamp"),
                    "recipient": item.get("recipient"),
                    "reason": item.get("reason"),
                }
                for item in items
            ],
        }

    def validate_address(self, address: str) -> dict[str, Any]:
        try:
            response = self._http.get(
                f"{self.config.mailgun_api_base_url}/address/validate",
                auth=self._auth,
                params={"address": address},
                timeout=self._timeout(),
            )
            if not response.ok:
                return {"is_valid": False, "reason": "Validation service unavailable", "suggestion": None}
            data = _json_object(response)
        except (requests.RequestException, MailgunError) as exc:
            logger.warning("Email address validation failed for %s: %s", address, exc)
            return {"is_valid": False, "reason": "Validation failed", "suggestion": None}
        return {
            "is_valid": bool(data.get("is_valid")),
            "reason": data.get("reason"),
            "suggestion": data.get("did_you_mean") or data.get("suggestion"),
        }

    def get_stats(self) -> dict[str, int]:
        empty = {"sent": 0, "delivered": 0, "failed": 0, "opened": 0, "clicked": 0}
        try:
            response = self._http.get(
                f"{self._domain_url}/stats/total",
                auth=self._auth,
                params={"event": list(_STATS_EVENTS)},
                timeout=self._timeout(),
            )
            response.raise_for_status()
            stats = (_json_object(response).get("stats") or [{}])[0]
            if not isinstance(stats, dict):
                raise MailgunError("Invalid Mailgun response")
        except (requests.RequestException, MailgunError, IndexError) as exc:
            logger.warning("Failed to get Mailgun stats: %s", exc)
            return empty

        def total(name: str) -> int:
            bucket = stats.get(name) or {}
            return int(bucket.get("total") or 0)

        return {
            "sent": total("accepted"),
            "delivered": total("delivered"),
            "failed": total("failed"),
            "opened": total("opened"),
            "clicked": total("clicked"),
        }


def client_from_config(config: CoreConfig, session: requests.Session | None = None) -> MailgunClient:
    if not config.mailgun_api_key:
        raise ConfigurationError("MAILGUN_API_KEY environment variable is required")
    if not config.mailgun_domain:
        raise ConfigurationError("MAILGUN_DOMAIN environment variable is required")
    return MailgunClient(config, session=session)


__all__ = [
    "EMAIL_ADDRESS_RE",
    "EmailSendRequest",
    "MailgunClient",
    "MailgunResponse",
    "check_send_request",
    "client_from_config",
    "delivery_status_from_events",
    "http_session",
    "is_valid_email_address",
    "parse_email_addresses",
]
