"""
Notification dispatcher for lending-library events.

Decides whether an event warrants an email, renders it and hands it to the
injected EmailSender. One handler per event variant.

Rules:
- Required fields are checked before anything is rendered or sent
- Status "On Loan" is never emailed; the handler reports skipped=True
- Reservations and waitlist entries also notify the admin mailbox when one is
  configured. The recipient email goes first, then the admin copy. If the
  admin send fails the recipient email has already gone out and the error
  still propagates.
- Unrecognised statuses send the generic subject with an empty body
"""

import logging
from typing import Optional

from notifications.channels import EmailSender
from notifications.errors import ValidationError
from notifications.models import (
    DispatchResult,
    LoanStatus,
    NotificationEvent,
    RenderedMessage,
    ReservationCreated,
    StatusUpdated,
    WaitlistCreated,
)
from notifications.templates import (
    DEFAULT_TEMPLATE_CONFIG,
    TemplateConfig,
    render_ready_for_pickup,
    render_reservation_admin_summary,
    render_reservation_received,
    render_returned,
    render_waitlist_admin_summary,
    render_waitlist_confirmation,
    status_update_subject,
)

logger = logging.getLogger("dispatcher")


class NotificationDispatcher:
    """
    Turns lending-library events into emails.

    Example:
        dispatcher = NotificationDispatcher(
            sender=ResendEmailSender(api_key="re_..."),
            admin_email="desk@library.example",
        )
        result = dispatcher.handle_waitlist_created(
            WaitlistCreated(parent_email="parent@example.com", item_name="Wooden Train")
        )
        result.to_response()  # {"ok": True}
    """

    def __init__(
        self,
        sender: EmailSender,
        template_config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
        admin_email: Optional[str] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            sender: Delivers rendered emails
            template_config: Branding for recipient emails
            admin_email: Mailbox that receives admin copies (disabled if empty)
        """
        self.sender = sender
        self.template_config = template_config
        self.admin_email = admin_email or None

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    def handle_reservation_created(self, event: ReservationCreated) -> DispatchResult:
        """Confirm a reservation to the parent and notify the admin mailbox."""
        self._require(event)

        subject, html = render_reservation_received(
            parent_name=event.parent_name,
            child_name=event.child_name,
            item_name=event.item_name,
            preferred_day=event.preferred_day,
            note=event.note,
            config=self.template_config,
        )
        messages = [RenderedMessage(to=event.parent_email, subject=subject, html=html)]

        if self.admin_email:
            subject, html = render_reservation_admin_summary(
                parent_email=event.parent_email,
                parent_name=event.parent_name,
                child_name=event.child_name,
                item_name=event.item_name,
                preferred_day=event.preferred_day,
            )
            messages.append(RenderedMessage(to=self.admin_email, subject=subject, html=html))

        return self._deliver(messages)

    def handle_waitlist_created(self, event: WaitlistCreated) -> DispatchResult:
        """Confirm a waitlist entry to the parent and notify the admin mailbox."""
        self._require(event)

        subject, html = render_waitlist_confirmation(
            parent_name=event.parent_name,
            child_name=event.child_name,
            item_name=event.item_name,
            config=self.template_config,
        )
        messages = [RenderedMessage(to=event.parent_email, subject=subject, html=html)]

        if self.admin_email:
            subject, html = render_waitlist_admin_summary(
                parent_email=event.parent_email,
                parent_name=event.parent_name,
                child_name=event.child_name,
                item_name=event.item_name,
            )
            messages.append(RenderedMessage(to=self.admin_email, subject=subject, html=html))

        return self._deliver(messages)

    def handle_status_updated(self, event: StatusUpdated) -> DispatchResult:
        """Email the parent about a loan status change, unless it is On Loan."""
        self._require(event)

        if event.new_status == LoanStatus.ON_LOAN:
            logger.info(f"Skipping email for {event.item_name!r}: status is On Loan")
            return DispatchResult(skipped=True)

        if event.new_status == LoanStatus.READY_FOR_PICKUP:
            subject, html = render_ready_for_pickup(
                parent_name=event.parent_name,
                child_name=event.child_name,
                item_name=event.item_name,
                preferred_day=event.preferred_day,
                config=self.template_config,
            )
        elif event.new_status == LoanStatus.RETURNED:
            subject, html = render_returned(
                parent_name=event.parent_name,
                item_name=event.item_name,
                config=self.template_config,
            )
        else:
            logger.warning(
                f"No template for status {event.new_status!r}; "
                f"sending {event.item_name!r} update with an empty body"
            )
            subject, html = status_update_subject(event.item_name), ""

        return self._deliver([RenderedMessage(to=event.parent_email, subject=subject, html=html)])

    def handle(self, event: NotificationEvent) -> DispatchResult:
        """Route any event model to its handler."""
        if isinstance(event, ReservationCreated):
            return self.handle_reservation_created(event)
        elif isinstance(event, WaitlistCreated):
            return self.handle_waitlist_created(event)
        elif isinstance(event, StatusUpdated):
            return self.handle_status_updated(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require(self, event: NotificationEvent) -> None:
        missing = event.missing_fields()
        if missing:
            logger.info(f"Rejecting {type(event).__name__}: missing {', '.join(missing)}")
            raise ValidationError(missing=missing)

    def _deliver(self, messages: list[RenderedMessage]) -> DispatchResult:
        # In order; the admin copy is only attempted after the parent's succeeds.
        result = DispatchResult(messages=messages)
        for message in messages:
            receipt = self.sender.send(message.to, message.subject, message.html)
            result.receipts.append(receipt)
        return result
