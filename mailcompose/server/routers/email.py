"""Email delivery routes: send, webhook, status and tracking."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from ...core.config import CoreConfig
from ...core.sending import process_event, verify_signature
from ...core.sending.service import ClientFactory
from ...core.sending.tracking import delivery_stats, refresh_delivery_status, tracking_info
from ...core.storage import InMemoryStore
from ..dependencies import current_user_id, get_client_factory, get_core_config, get_store
from ..helpers.sending import run_send
from ..schemas import SendEmailRequest

logger = logging.getLogger("uvicorn.error")
router = APIRouter(prefix="/api/v1/email")


@router.post("/send")
def send_email(
    payload: SendEmailRequest,
    store: InMemoryStore = Depends(get_store),
    client_factory: ClientFactory = Depends(get_client_factory),
    user_id: str = Depends(current_user_id),
) -> dict:
    return run_send(store, client_factory, user_id=user_id, payload=payload)


@router.post("/webhook")
async def mailgun_webhook(
    request: Request,
    store: InMemoryStore = Depends(get_store),
    core_config: CoreConfig = Depends(get_core_config),
) -> Any:
    try:
        body = await request.json()
        signature = body.get("signature") or {}
        verified = verify_signature(
            core_config.mailgun_webhook_signing_key,
            str(signature.get("timestamp") or ""),
            str(signature.get("token") or ""),
            str(signature.get("signature") or ""),
        )
        if not verified:
            logger.error("Invalid webhook signature")
            return JSONResponse(status_code=401, content={"error": "Invalid signature"})
        return process_event(store, body)
    except Exception:
        # A 200 stops Mailgun from retrying a payload we cannot process.
        logger.exception("Webhook processing error")
        return {"received": True, "error": "Processing error logged"}


@router.get("/status/{send_id}")
def email_status(
    send_id: str,
    store: InMemoryStore = Depends(get_store),
    client_factory: ClientFactory = Depends(get_client_factory),
    user_id: str = Depends(current_user_id),
) -> dict:
    if store.get_send(send_id, user_id) is None:
        raise HTTPException(status_code=404, detail="Email send not found")

    tracking = refresh_delivery_status(store, client_factory, send_id, user_id)
    email_send = store.get_send(send_id, user_id).to_dict()
    if tracking is None:
        return {"error": "Unable to fetch tracking data", "email_send": email_send}
    return {"success": True, "email_send": email_send, "tracking": tracking}


@router.get("/tracking")
def email_tracking(
    send_ids: str = Query("", description="Comma separated send ids"),
    days: int = Query(30, ge=1, le=365),
    store: InMemoryStore = Depends(get_store),
    client_factory: ClientFactory = Depends(get_client_factory),
    user_id: str = Depends(current_user_id),
) -> dict:
    requested = [send_id.strip() for send_id in send_ids.split(",") if send_id.strip()]
    if requested:
        return {"success": True, "tracking": tracking_info(store, client_factory, requested, user_id)}

    tracking = tracking_info(store, client_factory, [send.id for send in store.list_sends(user_id)], user_id)
    # Re-read: refreshing tracking may have changed stored statuses.
    sends = store.list_sends(user_id)
    return {
        "success": True,
        "tracking": tracking,
        "stats": delivery_stats(sends, days=days),
        "email_sends": [send.to_dict() for send in sends],
    }
