from .mailgun import EmailSendRequest, MailgunClient, MailgunResponse, client_from_config
from .service import SendOutcome, apply_customizations, send_template
from .tracking import delivery_stats, refresh_delivery_status, tracking_info
from .webhook import map_event_to_status, process_event, verify_signature

__all__ = [
    "EmailSendRequest",
    "MailgunClient",
    "MailgunResponse",
    "SendOutcome",
    "apply_customizations",
    "client_from_config",
    "delivery_stats",
    "map_event_to_status",
    "process_event",
    "refresh_delivery_status",
    "send_template",
    "tracking_info",
    "verify_signature",
]
