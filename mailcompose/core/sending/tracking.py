"""Delivery tracking: Mailgun event refresh and per-user delivery stats."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import pandas as pd

from ..errors import ComposeError
from ..storage.entities import EmailSend, utcnow
from ..storage.store import InMemoryStore
from .service import ClientFactory

logger = logging.getLogger(__name__)

EVENT_DESCRIPTIONS = {
    "accepted": "Email accepted by Mailgun for delivery",
    "rejected": "Email rejected due to policy or content issues",
    "delivered": "Email successfully delivered to recipient",
    "failed": "Email delivery failed permanently",
    "opened": "Email was opened by recipient",
    "clicked": "Link in email was clicked by recipient",
    "unsubscribed": "Recipient unsubscribed from emails",
    "complained": "Recipient marked email as spam",
    "stored": "Email stored (for large attachments)",
}


def event_description(event: str) -> str:
    return EVENT_DESCRIPTIONS.get(event, f"Unknown event: {event}")


def _rate(part: int, whole: int) -> float | None:
    return part / whole * 100 if whole > 0 else None


def delivery_metrics(events: Iterable[dict[str, Any]], send: EmailSend) -> dict[str, float | None]:
    names = [event.get("event") for event in events]
    delivered = names.count("delivered")
    return {
        "delivery_rate": _rate(delivered, send.recipients.total),
        "open_rate": _rate(names.count("opened"), delivered),
        "click_rate": _rate(names.count("clicked"), delivered),
    }


def refresh_delivery_status(
    store: InMemoryStore,
    client_factory: ClientFactory,
    send_id: str,
    user_id: str,
) -> dict[str, Any] | None:
    """Pull Mailgun events for one send and sync its stored status.

    Returns ``None`` when the send has no Mailgun id yet or Mailgun cannot be
    reached; callers fall back to the stored record.
    """
    send = store.get_send(send_id, user_id)
    if send is None or not send.mailgun_message_id:
        return None

    try:
        delivery = client_factory().get_delivery_status(send.mailgun_message_id)
    except ComposeError as exc:
        logger.warning("Could not refresh delivery status for send %s: %s", send_id, exc)
        return None

    if delivery["status"] != send.status:
        store.update_send(send_id, user_id, status=delivery["status"])

    events = [{**event, "description": event_description(str(event.get("event")))} for event in delivery["events"]]
    return {
        "send_id": send_id,
        "status": delivery["status"],
        "events": events,
        "last_updated": utcnow().isoformat(),
        **delivery_metrics(delivery["events"], send),
    }


def tracking_info(
    store: InMemoryStore,
    client_factory: ClientFactory,
    send_ids: Iterable[str],
    user_id: str,
) -> list[dict[str, Any]]:
    results = (refresh_delivery_status(store, client_factory, send_id, user_id) for send_id in send_ids)
    return [result for result in results if result is not None]


def delivery_stats(sends: Iterable[EmailSend], *, days: int = 30, now: datetime | None = None) -> dict[str, Any]:
    now = now or utcnow()
    if now.tzinfo is None:
        # Stored timestamps are aware UTC; a naive reference time is taken as UTC.
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - timedelta(days=days)
    frame = pd.DataFrame(
        [{"status": send.status, "sent_at": send.sent_at} for send in sends if send.sent_at >= cutoff],
        columns=["status", "sent_at"],
    )

    total = len(frame)
    delivered = int((frame["status"] == "sent").sum())
    failed = int((frame["status"] == "failed").sum())

    activity: list[dict[str, Any]] = []
    if total:
        frame["date"] = pd.to_datetime(frame["sent_at"], utc=True).dt.strftime("%Y-%m-%d")
        frame["delivered"] = (frame["status"] == "sent").astype(int)
        frame["failed"] = (frame["status"] == "failed").astype(int)
        daily = frame.groupby("date").agg(
            sent=("status", "size"),
            delivered=("delivered", "sum"),
            failed=("failed", "sum"),
        )
        activity = [
            {"date": date, "sent": int(row.sent), "delivered": int(row.delivered), "failed": int(row.failed)}
            for date, row in daily.sort_index().iterrows()
        ]

    return {
        "total_sent": total,
        "delivered": delivered,
        "failed": failed,
        "delivery_rate": delivered / total * 100 if total else 0.0,
        "recent_activity": activity,
    }


def format_delivery_rate(rate: float) -> str:
    if rate >= 95:
        return "Excellent"
    if rate >= 85:
        return "Good"
    if rate >= 70:
        return "Fair"
    return "Poor"


__all__ = [
    "EVENT_DESCRIPTIONS",
    "delivery_metrics",
    "delivery_stats",
    "event_description",
    "format_delivery_rate",
    "refresh_delivery_status",
    "tracking_info",
]
