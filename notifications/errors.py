"""
Error types raised by the notification dispatcher.

The HTTP layer maps these onto fixed responses:
- ValidationError -> 400 {"error": "Missing required fields"}
- anything else   -> 500 {"error": "Failed to send email"}
"""

from typing import Optional


class NotificationError(Exception):
    """Base class for notification failures."""


class ValidationError(NotificationError):
    """Required fields were missing from an event. Nothing was sent."""

    def __init__(self, message: str = "Missing required fields", missing: Optional[list[str]] = None):
        super().__init__(message)
        self.missing = missing or []


class DeliveryError(NotificationError):
    """The email provider failed or rejected a send."""

    def __init__(self, message: str, recipient: Optional[str] = None):
        super().__init__(message)
        self.recipient = recipient
