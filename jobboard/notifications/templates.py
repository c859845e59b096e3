"""Message rendering for ledger notifications using Jinja2.

Each notification type has one short plain-text template. StrictUndefined
turns a missing variable into an error instead of an empty string.
"""

import logging
from typing import Any, Dict, Optional

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError

from jobboard.domain.models import NotificationType

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATES: Dict[str, str] = {
    NotificationType.RECOMMENDED_JOB.value: (
        "✨ {{ match_score }}% Match! New recommended job: {{ job_title }} at {{ company }}"
    ),
    NotificationType.JOB_REOPENED.value: (
        "✨ {{ match_score }}% Match! Job reopened: {{ job_title }} at {{ company }}"
        " is now accepting applications"
    ),
    NotificationType.NEW_APPLICATION.value: (
        "New application received for {{ job_title or 'your job' }}"
        " from {{ applicant_name or 'a candidate' }}"
    ),
    NotificationType.APPLICATION_UPDATE.value: (
        "{% if status == 'approved' %}"
        '🎉 Congratulations! Your application for "{{ job_title }}" at {{ company }} has been approved'
        "{% elif status == 'rejected' %}"
        '❌ Your application for "{{ job_title }}" at {{ company }} was rejected'
        "{% else %}"
        'Application for "{{ job_title }}" status updated to: {{ status }}'
        "{% endif %}"
    ),
    NotificationType.JOB_STATUS_UPDATE.value: (
        "{% set action = new_status if new_status in ('paused', 'closed') else 'updated' %}"
        'Admin {{ action }} your job: "{{ job_title }}"'
        " (Status changed from {{ old_status }} to {{ new_status }})"
    ),
    NotificationType.JOB_DELETED.value: '🗑️ Admin removed your job: "{{ job_title }}"',
    NotificationType.ACCOUNT_BANNED.value: (
        "Your account has been suspended by admin."
        "{% if jobs_closed is not none %}"
        " All your {{ jobs_closed }} active job(s) have been temporarily closed."
        "{% else %}"
        " You will not be able to apply for jobs until your account is reactivated."
        "{% endif %}"
    ),
    NotificationType.ACCOUNT_UNBANNED.value: (
        "Your account has been reactivated by admin."
        "{% if jobs_reopened is not none %}"
        " All your {{ jobs_reopened }} job(s) have been reopened automatically."
        "{% else %}"
        " You can now apply for jobs again."
        "{% endif %}"
    ),
}


class MessageRenderer:
    """Renders the human-readable message of a notification.

    Templates are compiled once per environment and cached by Jinja2.
    """

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        self.env = Environment(
            loader=DictLoader(templates or MESSAGE_TEMPLATES),
            autoescape=False,
            undefined=StrictUndefined,
        )

    def render(self, notification_type: NotificationType, **context: Any) -> str:
        """Render the message for a notification type.

        Args:
            notification_type: Selects the template
            **context: Template variables (snake_case)

        Returns:
            The message text on a single line

        Raises:
            NotificationTemplateError: If rendering fails or no template exists
        """
        name = NotificationType(notification_type).value
        try:
            template = self.env.get_template(name)
            # Enum members render as their value
            values = {key: getattr(value, "value", value) for key, value in context.items()}
            return template.render(values).strip().replace("\n", " ")
        except TemplateError as e:
            error_msg = f"Message rendering failed for {name}: {e}"
            logger.error(error_msg, exc_info=True, extra={"event": "notification.render_failed"})
            raise NotificationTemplateError(error_msg) from e
