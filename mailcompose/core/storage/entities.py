"""Persisted records for templates and email sends."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

EmailSendStatus = Literal["pending", "sent", "failed"]
SEND_STATUSES: tuple[str, ...] = ("pending", "sent", "failed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EmailRecipients:
    to: list[str] = field(default_factory=list)
    cc: list[str] | None = None
    bcc: list[str] | None = None

    @property
    def total(self) -> int:
        return len(self.to) + len(self.cc or []) + len(self.bcc or [])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmailRecipients":
        return cls(
            to=list(data.get("to") or []),
            cc=list(data["cc"]) if data.get("cc") else None,
            bcc=list(data["bcc"]) if data.get("bcc") else None,
        )


@dataclass
class Template:
    id: str
    user_id: str
    name: str
    subject: str
    html: str
    template_type: str = "custom"
    images: list[str] = field(default_factory=list)
    generation_prompt: str | None = None
    validation_score: int = 100
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class EmailSend:
    id: str
    user_id: str
    template_id: str | None
    subject: str
    recipients: EmailRecipients
    status: EmailSendStatus = "pending"
    mailgun_message_id: str | None = None
    error_message: str | None = None
    sent_at: datetime = field(default_factory=utcnow)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["sent_at"] = self.sent_at.isoformat()
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass(frozen=True)
class TemplateStats:
    id: str
    user_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    send_count: int = 0
    successful_sends: int = 0
    failed_sends: int = 0
    last_sent_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "send_count": self.send_count,
            "successful_sends": self.successful_sends,
            "failed_sends": self.failed_sends,
            "last_sent_at": self.last_sent_at.isoformat() if self.last_sent_at else None,
        }


__all__ = [
    "EmailRecipients",
    "EmailSend",
    "EmailSendStatus",
    "SEND_STATUSES",
    "Template",
    "TemplateStats",
    "utcnow",
]
