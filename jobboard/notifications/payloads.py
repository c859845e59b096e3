"""Typed notification payloads.

Each notification type carries its own payload model. Payloads are stored in
the ledger and sent to the client as camelCase JSON.
"""

from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from jobboard.domain.models import ApplicationStatus, JobStatus, NotificationType

from .models import NotificationPayloadError


class NotificationPayload(BaseModel):
    """Base payload: camelCase on the wire, unknown fields rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class JobMatchPayload(NotificationPayload):
    """recommendedJob / jobReopened"""

    job_id: int
    match_score: int


class NewApplicationPayload(NotificationPayload):
    application_id: int
    job_id: int


class ApplicationUpdatePayload(NotificationPayload):
    application_id: int
    job_id: int
    job_title: str
    company: str
    status: ApplicationStatus


class JobStatusUpdatePayload(NotificationPayload):
    job_id: int
    job_title: str
    old_status: JobStatus
    new_status: JobStatus


class JobDeletedPayload(NotificationPayload):
    job_id: int
    job_title: str


class AccountBannedPayload(NotificationPayload):
    """``jobs_closed`` is None for accounts that own no jobs."""

    jobs_closed: Optional[int] = None


class AccountUnbannedPayload(NotificationPayload):
    """``jobs_reopened`` is None for accounts that own no jobs."""

    jobs_reopened: Optional[int] = None


PAYLOAD_TYPES: Dict[NotificationType, Type[NotificationPayload]] = {
    NotificationType.RECOMMENDED_JOB: JobMatchPayload,
    NotificationType.JOB_REOPENED: JobMatchPayload,
    NotificationType.NEW_APPLICATION: NewApplicationPayload,
    NotificationType.APPLICATION_UPDATE: ApplicationUpdatePayload,
    NotificationType.JOB_STATUS_UPDATE: JobStatusUpdatePayload,
    NotificationType.JOB_DELETED: JobDeletedPayload,
    NotificationType.ACCOUNT_BANNED: AccountBannedPayload,
    NotificationType.ACCOUNT_UNBANNED: AccountUnbannedPayload,
}


def build_payload(notification_type: NotificationType, **fields: Any) -> NotificationPayload:
    """
    Validate payload fields against the variant for a notification type.

    Args:
        notification_type: Type of the notification
        **fields: Payload fields in snake_case

    Returns:
        The typed payload

    Raises:
        NotificationPayloadError: If the fields don't fit the variant

    Example:
        >>> build_payload(NotificationType.JOB_DELETED, job_id=4, job_title="SRE").to_wire()
        {'jobId': 4, 'jobTitle': 'SRE'}
    """
    payload_type = PAYLOAD_TYPES.get(NotificationType(notification_type))
    if payload_type is None:
        raise NotificationPayloadError(f"No payload defined for {notification_type}")
    try:
        return payload_type(**fields)
    except PydanticValidationError as e:
        raise NotificationPayloadError(
            f"Invalid payload for {NotificationType(notification_type).value}: {e}"
        ) from e
