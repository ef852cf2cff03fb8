"""Send a stored template through Mailgun, gated on validation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import (
    ComposeError,
    InvalidSendRequest,
    RecipientValidationError,
    SendFailedError,
    TemplateNotFoundError,
    TemplateValidationFailed,
)
from ..storage.entities import EmailRecipients, utcnow
from ..storage.store import InMemoryStore
from ..validate import validate_html
from .mailgun import EmailSendRequest, MailgunClient, check_send_request

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], MailgunClient]


@dataclass(frozen=True)
class SendOutcome:
    send_id: str
    mailgun_message_id: str
    message: str = "Email sent successfully"


def apply_customizations(html: str, customizations: dict[str, str] | None) -> str:
    """Replace each ``{{key}}`` placeholder with its value."""
    result = html
    for key, value in (customizations or {}).items():
        result = result.replace(f"{{{{{key}}}}}", str(value))
    return result


def send_template(
    store: InMemoryStore,
    client_factory: ClientFactory,
    *,
    user_id: str,
    template_id: str,
    recipients: EmailRecipients | None,
    subject: str,
    customizations: dict[str, str] | None = None,
) -> SendOutcome:
    if not template_id or recipients is None or not (subject or "").strip():
        raise InvalidSendRequest("Missing required fields: template_id, recipients, subject")
    if not recipients.to:
        raise RecipientValidationError("At least one recipient is required")

    template = store.get_template(template_id, user_id)
    if template is None:
        raise TemplateNotFoundError("Template not found")

    validation = validate_html(template.html)
    if not validation.is_valid:
        messages = validation.error_messages()
        logger.warning(
            "Blocked send of template %s: %d validation error(s), score %d",
            template_id,
            len(messages),
            validation.score,
        )
        raise TemplateValidationFailed(messages)

    clean_subject = subject.strip()
    request = EmailSendRequest.for_recipients(
        recipients,
        subject=clean_subject,
        html=apply_customizations(template.html, customizations),
    )
    check_send_request(request)

    email_send = store.create_send(
        user_id,
        template_id=template_id,
        subject=clean_subject,
        recipients=recipients,
    )

    request.tags = ["compose-app", f"template-{template_id}", f"send-{email_send.id}"]
    request.custom_variables = {"sendId": email_send.id, "templateId": template_id, "userId": user_id}
    try:
        client = client_factory()
        response = client.send_email(request)
    except ComposeError as exc:
        logger.error("Mailgun send failed for send %s: %s", email_send.id, exc)
        store.update_send(email_send.id, user_id, status="failed", error_message=str(exc))
        raise SendFailedError(str(exc), send_id=email_send.id) from exc

    store.update_send(
        email_send.id,
        user_id,
        status="sent",
        mailgun_message_id=response.id,
        sent_at=utcnow(),
    )
    logger.info("Sent template %s as send %s (Mailgun id %s)", template_id, email_send.id, response.id)
    return SendOutcome(send_id=email_send.id, mailgun_message_id=response.id)


__all__ = ["ClientFactory", "SendOutcome", "apply_customizations", "send_template"]
