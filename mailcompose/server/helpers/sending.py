"""Send/track helpers that translate core failures into HTTP errors."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from ...core.errors import (
    InvalidSendRequest,
    RecipientValidationError,
    SendFailedError,
    TemplateNotFoundError,
    TemplateValidationFailed,
)
from ...core.sending import SendOutcome, send_template
from ...core.sending.service import ClientFactory
from ...core.storage import EmailRecipients, InMemoryStore
from ..schemas import SendEmailRequest

logger = logging.getLogger("uvicorn.error")


def recipients_from_payload(payload: SendEmailRequest) -> EmailRecipients | None:
    if payload.recipients is None:
        return None
    return EmailRecipients.from_dict(payload.recipients.model_dump())


def run_send(
    store: InMemoryStore,
    client_factory: ClientFactory,
    *,
    user_id: str,
    payload: SendEmailRequest,
) -> dict[str, Any]:
    try:
        outcome: SendOutcome = send_template(
            store,
            client_factory,
            user_id=user_id,
            template_id=payload.template_id,
            recipients=recipients_from_payload(payload),
            subject=payload.subject,
            customizations=payload.customizations,
        )
    except TemplateValidationFailed as exc:
        raise HTTPException(
            status_code=400,
            detail={"error": str(exc), "validation_errors": exc.validation_errors},
        ) from exc
    except RecipientValidationError as exc:
        raise HTTPException(status_code=400, detail={"error": str(exc), "errors": exc.errors}) from exc
    except InvalidSendRequest as exc:
        raise HTTPException(status_code=400, detail={"error": str(exc)}) from exc
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"error": str(exc)}) from exc
    except SendFailedError as exc:
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to send email", "details": str(exc), "send_id": exc.send_id},
        ) from exc

    return {
        "success": True,
        "send_id": outcome.send_id,
        "mailgun_message_id": outcome.mailgun_message_id,
        "message": outcome.message,
    }
