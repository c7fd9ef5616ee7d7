"""
Transactional email notifications for the toy lending library.

This package contains the notification core used by the HTTP service:
- Event models (reservation created, waitlist created, status updated)
- Branded HTML email templates
- Email senders (Resend, console)
- The dispatcher that decides what to send
"""

from notifications.channels import (
    ConsoleEmailSender,
    DeliveryReceipt,
    EmailSender,
    ResendEmailSender,
)
from notifications.dispatcher import NotificationDispatcher
from notifications.errors import DeliveryError, NotificationError, ValidationError
from notifications.models import (
    DispatchResult,
    LoanStatus,
    RenderedMessage,
    ReservationCreated,
    StatusUpdated,
    WaitlistCreated,
)
from notifications.templates import TemplateConfig

__all__ = [
    "ConsoleEmailSender",
    "DeliveryReceipt",
    "EmailSender",
    "ResendEmailSender",
    "NotificationDispatcher",
    "DeliveryError",
    "NotificationError",
    "ValidationError",
    "DispatchResult",
    "LoanStatus",
    "RenderedMessage",
    "ReservationCreated",
    "StatusUpdated",
    "WaitlistCreated",
    "TemplateConfig",
]
