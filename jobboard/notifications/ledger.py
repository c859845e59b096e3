"""Notification ledger: the durable record of what each user must be told.

Every operation opens its own unit of work, so one recipient's write never
depends on another's. Reads and updates are always scoped by recipient.
"""

from typing import Any, Dict, List, Optional

from jobboard.domain.models import Notification, NotificationType
from jobboard.logging import get_logger
from jobboard.persistence import NotificationRepository, get_session
from jobboard.services.errors import NotFoundError

logger = get_logger(__name__, component="ledger")


class NotificationLedger:
    """Append-only notification store with per-recipient read state."""

    def create(
        self,
        user_id: int,
        notification_type: NotificationType,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Persist one notification for one recipient.

        Raises:
            PersistenceError: If the write fails
        """
        with get_session() as session:
            notification = NotificationRepository(session).create(
                user_id, notification_type, message, data
            )

        logger.info(
            "Notification created",
            extra={
                "event": "notification.created",
                "notification_id": notification.id,
                "user_id": user_id,
                "notification_type": notification.type.value,
            },
        )
        return notification

    def list_for_user(self, user_id: int) -> List[Notification]:
        """The user's notifications, newest first."""
        with get_session() as session:
            return NotificationRepository(session).list_for_user(user_id)

    def unread_count(self, user_id: int) -> int:
        with get_session() as session:
            return NotificationRepository(session).count_unread(user_id)

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        """Mark one notification read.

        Raises:
            NotFoundError: If the notification doesn't exist or belongs to someone else
        """
        with get_session() as session:
            notification = NotificationRepository(session).mark_read(user_id, notification_id)

        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    def mark_all_read(self, user_id: int) -> int:
        """Mark all of the user's notifications read. Returns how many changed."""
        with get_session() as session:
            updated = NotificationRepository(session).mark_all_read(user_id)

        logger.debug(
            "Notifications marked read",
            extra={"event": "notification.read_all", "user_id": user_id, "updated": updated},
        )
        return updated
