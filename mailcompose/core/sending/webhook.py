"""Mailgun delivery webhook verification and processing."""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any

from ..errors import SendNotFoundError
from ..storage.store import InMemoryStore

logger = logging.getLogger(__name__)

EVENT_STATUS = {
    "accepted": "pending",
    "delivered": "sent",
    "failed": "failed",
    "rejected": "failed",
    "complained": "failed",
    "unsubscribed": "failed",
}


def verify_signature(signing_key: str | None, timestamp: str, token: str, signature: str) -> bool:
    if not signing_key:
        logger.warning("MAILGUN_WEBHOOK_SIGNING_KEY not configured")
        return False
    expected = hmac.new(
        signing_key.encode("utf-8"),
        f"{timestamp}{token}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected, str(signature or ""))


def map_event_to_status(event: str) -> str | None:
    return EVENT_STATUS.get(event)


def process_event(store: InMemoryStore, payload: dict[str, Any]) -> dict[str, Any]:
    """Apply one verified ``event-data`` payload to the matching send."""
    event_data = payload.get("event-data") or {}
    event = str(event_data.get("event") or "")
    user_variables = event_data.get("user-variables") or {}
    send_id = user_variables.get("sendId")
    user_id = user_variables.get("userId")

    logger.info("Mailgun webhook: %s for send %s", event, send_id)

    if not send_id or not user_id:
        logger.warning("Webhook missing sendId or userId in user variables")
        return {"received": True}

    status = map_event_to_status(event)
    if status:
        updates: dict[str, Any] = {"status": status}
        if status == "failed":
            delivery_status = event_data.get("delivery-status") or {}
            updates["error_message"] = (
                delivery_status.get("message") or event_data.get("reason") or f"Email {event}"
            )
        try:
            store.update_send(send_id, user_id, **updates)
        except SendNotFoundError:
            logger.warning("Webhook referenced unknown send %s", send_id)
        else:
            logger.info("Updated send %s to status: %s", send_id, status)

    return {"received": True, "event": event, "send_id": send_id}


__all__ = ["EVENT_STATUS", "map_event_to_status", "process_event", "verify_signature"]
