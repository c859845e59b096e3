"""Exceptions for the notification package."""


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when a message template fails to render (e.g. a missing variable)."""

    pass


class NotificationPayloadError(NotificationError):
    """Raised when payload fields don't fit the variant of the notification type.

    This is a programming error in the caller, never a user input problem.
    """

    pass
