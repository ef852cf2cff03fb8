"""In-process template and send storage.

Every read and write is scoped by ``user_id`` so one user can never see or
change another user's rows.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..errors import SendNotFoundError, StorageValidationError, TemplateNotFoundError
from ..validate import validate_html
from .entities import (
    SEND_STATUSES,
    EmailRecipients,
    EmailSend,
    Template,
    TemplateStats,
    utcnow,
)

MAX_TEMPLATE_NAME_LENGTH = 255

_TEMPLATE_UPDATABLE_FIELDS = {"name", "subject", "html", "template_type", "images", "generation_prompt"}
_SEND_UPDATABLE_FIELDS = {"status", "mailgun_message_id", "error_message", "sent_at"}


def _require_text(field_name: str, value: Any) -> str:
    text = str(value or "")
    if not text.strip():
        raise StorageValidationError(f"Template {field_name} must not be empty")
    return text


def _check_template_fields(values: dict[str, Any]) -> None:
    for field_name in ("name", "subject", "html"):
        if field_name in values:
            _require_text(field_name, values[field_name])
    if len(str(values.get("name") or "")) > MAX_TEMPLATE_NAME_LENGTH:
        raise StorageValidationError(f"Template name must be at most {MAX_TEMPLATE_NAME_LENGTH} characters")


class InMemoryStore:
    def __init__(self, *, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._templates: dict[str, Template] = {}
        self._sends: dict[str, EmailSend] = {}

    # Templates

    def list_templates(self, user_id: str) -> list[Template]:
        with self._lock:
            owned = [t for t in self._templates.values() if t.user_id == user_id]
        return sorted(owned, key=lambda t: t.updated_at, reverse=True)

    def get_template(self, template_id: str, user_id: str) -> Template | None:
        with self._lock:
            template = self._templates.get(template_id)
        if template is None or template.user_id != user_id:
            return None
        return template

    def create_template(
        self,
        user_id: str,
        *,
        name: str,
        subject: str,
        html: str,
        template_type: str = "custom",
        images: list[str] | None = None,
        generation_prompt: str | None = None,
    ) -> Template:
        _check_template_fields({"name": name, "subject": subject, "html": html})
        now = self._clock()
        template = Template(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            subject=subject,
            html=html,
            template_type=template_type or "custom",
            images=list(images or []),
            generation_prompt=generation_prompt,
            validation_score=validate_html(html).score,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._templates[template.id] = template
        return template

    def update_template(self, template_id: str, user_id: str, **changes: Any) -> Template:
        unknown = set(changes) - _TEMPLATE_UPDATABLE_FIELDS
        if unknown:
            raise StorageValidationError(f"Unknown template field(s): {', '.join(sorted(unknown))}")
        _check_template_fields(changes)

        with self._lock:
            current = self._templates.get(template_id)
            if current is None or current.user_id != user_id:
                raise TemplateNotFoundError(f"Template not found: {template_id}")
            if "html" in changes:
                changes["validation_score"] = validate_html(changes["html"]).score
            updated = replace(current, **changes, updated_at=self._clock())
            self._templates[template_id] = updated
        return updated

    def delete_template(self, template_id: str, user_id: str) -> None:
        with self._lock:
            current = self._templates.get(template_id)
            if current is None or current.user_id != user_id:
                raise TemplateNotFoundError(f"Template not found: {template_id}")
            del self._templates[template_id]
            # Sends outlive their template but lose the reference.
            for send_id, send in self._sends.items():
                if send.template_id == template_id:
                    self._sends[send_id] = replace(send, template_id=None)

    def search_templates(self, user_id: str, query: str) -> list[Template]:
        needle = (query or "").strip().lower()
        if not needle:
            return self.list_templates(user_id)
        return [
            t
            for t in self.list_templates(user_id)
            if needle in t.name.lower() or needle in t.subject.lower()
        ]

    def duplicate_template(self, template_id: str, user_id: str, new_name: str | None = None) -> Template:
        source = self.get_template(template_id, user_id)
        if source is None:
            raise TemplateNotFoundError(f"Template not found: {template_id}")
        return self.create_template(
            user_id,
            name=new_name or f"{source.name} (Copy)",
            subject=source.subject,
            html=source.html,
            template_type=source.template_type,
            images=source.images,
            generation_prompt=source.generation_prompt,
        )

    def template_stats(self, user_id: str) -> list[TemplateStats]:
        stats: list[TemplateStats] = []
        for template in self.list_templates(user_id):
            related = self.list_sends_for_template(template.id, user_id)
            stats.append(
                TemplateStats(
                    id=template.id,
                    user_id=user_id,
                    name=template.name,
                    created_at=template.created_at,
                    updated_at=template.updated_at,
                    send_count=len(related),
                    successful_sends=sum(1 for s in related if s.status == "sent"),
                    failed_sends=sum(1 for s in related if s.status == "failed"),
                    last_sent_at=max((s.sent_at for s in related), default=None),
                )
            )
        return stats

    # Sends

    def create_send(
        self,
        user_id: str,
        *,
        template_id: str | None,
        subject: str,
        recipients: EmailRecipients,
        status: str = "pending",
    ) -> EmailSend:
        if not (subject or "").strip():
            raise StorageValidationError("Email subject must not be empty")
        if status not in SEND_STATUSES:
            raise StorageValidationError(f"Invalid email send status: {status}")
        now = self._clock()
        send = EmailSend(
            id=str(uuid.uuid4()),
            user_id=user_id,
            template_id=template_id,
            subject=subject,
            recipients=recipients,
            status=status,
            sent_at=now,
            created_at=now,
        )
        with self._lock:
            self._sends[send.id] = send
        return send

    def update_send(self, send_id: str, user_id: str, **changes: Any) -> EmailSend:
        unknown = set(changes) - _SEND_UPDATABLE_FIELDS
        if unknown:
            raise StorageValidationError(f"Unknown send field(s): {', '.join(sorted(unknown))}")
        if "status" in changes and changes["status"] not in SEND_STATUSES:
            raise StorageValidationError(f"Invalid email send status: {changes['status']}")

        with self._lock:
            current = self._sends.get(send_id)
            if current is None or current.user_id != user_id:
                raise SendNotFoundError(f"Email send not found: {send_id}")
            updated = replace(current, **changes)
            self._sends[send_id] = updated
        return updated

    def get_send(self, send_id: str, user_id: str) -> EmailSend | None:
        with self._lock:
            send = self._sends.get(send_id)
        if send is None or send.user_id != user_id:
            return None
        return send

    def list_sends(self, user_id: str, limit: int | None = None) -> list[EmailSend]:
        with self._lock:
            owned = [s for s in self._sends.values() if s.user_id == user_id]
        owned.sort(key=lambda s: s.created_at, reverse=True)
        return owned[:limit] if limit is not None else owned

    def list_sends_for_template(self, template_id: str, user_id: str) -> list[EmailSend]:
        return [s for s in self.list_sends(user_id) if s.template_id == template_id]


__all__ = ["InMemoryStore", "MAX_TEMPLATE_NAME_LENGTH"]
