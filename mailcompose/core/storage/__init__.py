from .entities import (
    SEND_STATUSES,
    EmailRecipients,
    EmailSend,
    EmailSendStatus,
    Template,
    TemplateStats,
)
from .store import InMemoryStore

__all__ = [
    "EmailRecipients",
    "EmailSend",
    "EmailSendStatus",
    "InMemoryStore",
    "SEND_STATUSES",
    "Template",
    "TemplateStats",
]
