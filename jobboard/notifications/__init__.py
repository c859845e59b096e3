"""Notification ledger, typed payloads and message templates.

- NotificationLedger: durable per-recipient notification store
- build_payload: validates a payload against its notification type
- MessageRenderer: Jinja2 rendering of notification messages
"""

from .ledger import NotificationLedger
from .models import NotificationError, NotificationPayloadError, NotificationTemplateError
from .payloads import (
    PAYLOAD_TYPES,
    AccountBannedPayload,
    AccountUnbannedPayload,
    ApplicationUpdatePayload,
    JobDeletedPayload,
    JobMatchPayload,
    JobStatusUpdatePayload,
    NewApplicationPayload,
    NotificationPayload,
    build_payload,
)
from .templates import MessageRenderer

__all__ = [
    "NotificationLedger",
    "MessageRenderer",
    "build_payload",
    "PAYLOAD_TYPES",
    # Payloads
    "NotificationPayload",
    "JobMatchPayload",
    "NewApplicationPayload",
    "ApplicationUpdatePayload",
    "JobStatusUpdatePayload",
    "JobDeletedPayload",
    "AccountBannedPayload",
    "AccountUnbannedPayload",
    # Exceptions
    "NotificationError",
    "NotificationPayloadError",
    "NotificationTemplateError",
]
