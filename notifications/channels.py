"""
Email delivery channels.

The dispatcher talks to an EmailSender and never to a provider SDK directly.
Two implementations are provided:
- ResendEmailSender: real delivery through the Resend API
- ConsoleEmailSender: logs messages instead of sending them and keeps a
  history for test assertions and local development

Design decisions:
- send() either returns a DeliveryReceipt or raises DeliveryError
- No retries or queueing; a failed send fails the current request
- Senders are constructed explicitly and injected, never module globals
- The Resend key is process-wide SDK state, set once when the sender is built
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol
from uuid import uuid4

import resend

from notifications.errors import DeliveryError

logger = logging.getLogger("notifications")

DEFAULT_FROM_ADDRESS = "Bethesda Lending Library <no-reply@bethesdalendinglibrary.com>"


@dataclass(frozen=True)
class DeliveryReceipt:
    """Provider acknowledgement of an accepted email."""
    id: str
    recipient: str


class EmailSender(Protocol):
    """Anything that can deliver a rendered email."""

    def send(self, to: str, subject: str, html: str) -> DeliveryReceipt:
        ...


class ResendEmailSender:
    """
    Email sender backed by the Resend API.

    The Resend SDK keeps a single API key in module state, so a process can
    hold only one key. Constructing a sender installs its key there; the most
    recently constructed sender wins.

    Example:
        sender = ResendEmailSender(api_key="re_...", from_address="Library <hi@example.com>")
        receipt = sender.send("parent@example.com", "Hello", "<p>Hi</p>")
    """

    def __init__(self, api_key: Optional[str], from_address: str = DEFAULT_FROM_ADDRESS):
        self.api_key = api_key
        self.from_address = from_address
        resend.api_key = api_key

    def send(self, to: str, subject: str, html: str) -> DeliveryReceipt:
        """
        Send one email through Resend.

        Raises:
            DeliveryError: if the provider rejects the request or cannot be reached
        """
        params: resend.Emails.SendParams = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "html": html,
        }

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            logger.error(f"[EMAIL FAILED] To: {to} | Subject: {subject} | Error: {e}")
            raise DeliveryError(f"Resend rejected email to {to}: {e}", recipient=to) from e

        logger.info(f"[EMAIL] To: {to} | Subject: {subject}")
        return DeliveryReceipt(id=str(response["id"]), recipient=to)


@dataclass
class SentEmail:
    """A message recorded by ConsoleEmailSender."""
    success: bool
    recipient: str
    subject: str
    html: str
    from_address: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"{status} EMAIL to {self.recipient}: {self.subject}"


class ConsoleEmailSender:
    """
    Mock email sender.

    Logs email sends and tracks them for test assertions. Can simulate
    provider rejections for specific recipients.
    """

    def __init__(
        self,
        from_address: str = DEFAULT_FROM_ADDRESS,
        fail_for: Iterable[str] = (),
    ):
        """
        Initialize the console sender.

        Args:
            from_address: Sender address (for logging)
            fail_for: Recipients whose sends should fail, for testing
        """
        self.from_address = from_address
        self.fail_for = set(fail_for)
        self.sent_messages: list[SentEmail] = []

    def send(self, to: str, subject: str, html: str) -> DeliveryReceipt:
        """Record the email, or raise DeliveryError if `to` is set up to fail."""
        if to in self.fail_for:
            error = "Simulated email delivery failure"
            self.sent_messages.append(SentEmail(
                success=False,
                recipient=to,
                subject=subject,
                html=html,
                from_address=self.from_address,
                error=error,
            ))
            logger.error(f"[EMAIL FAILED] To: {to} | Subject: {subject} | Error: {error}")
            raise DeliveryError(error, recipient=to)

        self.sent_messages.append(SentEmail(
            success=True,
            recipient=to,
            subject=subject,
            html=html,
            from_address=self.from_address,
        ))
        logger.info(f"[EMAIL] To: {to} | Subject: {subject}")
        logger.debug(f"[EMAIL BODY] {html}")
        return DeliveryReceipt(id=f"console-{uuid4()}", recipient=to)

    def get_sent_count(self) -> int:
        """Get the number of send attempts (for testing)."""
        return len(self.sent_messages)

    def get_successful_sends(self) -> list[SentEmail]:
        """Get all successful sends."""
        return [m for m in self.sent_messages if m.success]

    def clear_history(self):
        """Clear sent message history (useful between tests)."""
        self.sent_messages.clear()

    def find_message_to(self, recipient: str) -> Optional[SentEmail]:
        """Find the first message sent to a specific recipient."""
        for msg in self.sent_messages:
            if msg.recipient == recipient:
                return msg
        return None
