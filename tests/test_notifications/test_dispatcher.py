"""
Tests for the notification dispatcher.

These tests verify template selection, the On Loan suppression rule, admin
copies and error propagation, using the console sender as a fake.
"""

import pytest

from notifications.channels import ConsoleEmailSender
from notifications.dispatcher import NotificationDispatcher
from notifications.errors import DeliveryError, ValidationError
from notifications.models import (
    LoanStatus,
    ReservationCreated,
    StatusUpdated,
    WaitlistCreated,
)

PICKUP_MARKER = "Pickup Location"


class TestReservationCreated:
    """Tests for handle_reservation_created."""

    def test_sends_confirmation(self, dispatcher, sender, reservation_payload, parent_email):
        """Test the parent receives the reservation confirmation."""
        event = ReservationCreated.model_validate(reservation_payload)

        result = dispatcher.handle_reservation_created(event)

        assert result.to_response() == {"ok": True}
        assert sender.get_sent_count() == 1
        email = sender.find_message_to(parent_email)
        assert email.subject == 'Reservation received for "Wooden Train Set"'
        assert "Reservation Received" in email.html
        assert "Monday" in email.html
        assert PICKUP_MARKER not in email.html

    def test_note_newline_rendered_as_break(self, dispatcher, sender, parent_email):
        event = ReservationCreated(
            parent_email=parent_email,
            item_name="Blocks",
            note="  Could we pick up after 3pm?\nThanks!  ",
        )

        dispatcher.handle_reservation_created(event)

        html = sender.find_message_to(parent_email).html
        assert "Could we pick up after 3pm?<br />Thanks!</p>" in html
        assert "<br />  Could" not in html

    def test_admin_copy_sent_second(self, admin_dispatcher, sender, reservation_payload, parent_email, admin_email):
        """Test that the admin copy follows the parent's email."""
        event = ReservationCreated.model_validate(reservation_payload)

        result = admin_dispatcher.handle_reservation_created(event)

        assert sender.get_sent_count() == 2
        assert [m.recipient for m in sender.sent_messages] == [parent_email, admin_email]
        assert [r.recipient for r in result.receipts] == [parent_email, admin_email]

        admin = sender.sent_messages[1]
        assert admin.subject == 'New reservation: "Wooden Train Set"'
        assert parent_email in admin.html
        assert "Wooden Train Set" in admin.html
        assert "<strong>Preferred pickup:</strong> Monday" in admin.html

    def test_no_admin_copy_without_admin_email(self, dispatcher, sender, reservation_payload):
        dispatcher.handle_reservation_created(ReservationCreated.model_validate(reservation_payload))
        assert sender.get_sent_count() == 1

    def test_empty_admin_email_disables_copy(self, sender, reservation_payload):
        dispatcher = NotificationDispatcher(sender=sender, admin_email="")

        dispatcher.handle_reservation_created(ReservationCreated.model_validate(reservation_payload))

        assert sender.get_sent_count() == 1

    @pytest.mark.parametrize("field", ["parentEmail", "itemName"])
    def test_missing_required_field(self, admin_dispatcher, sender, reservation_payload, field):
        """Test that validation fails before anything is sent."""
        reservation_payload.pop(field)
        event = ReservationCreated.model_validate(reservation_payload)

        with pytest.raises(ValidationError) as exc_info:
            admin_dispatcher.handle_reservation_created(event)

        assert exc_info.value.missing == [field]
        assert str(exc_info.value) == "Missing required fields"
        assert sender.get_sent_count() == 0

    def test_not_idempotent(self, dispatcher, sender, reservation_payload):
        """Test that identical events each send their own email."""
        event = ReservationCreated.model_validate(reservation_payload)

        dispatcher.handle_reservation_created(event)
        dispatcher.handle_reservation_created(event)

        assert sender.get_sent_count() == 2

    def test_admin_failure_after_parent_success(self, reservation_payload, parent_email, admin_email):
        """Test that an admin send failure propagates after the parent email went out."""
        sender = ConsoleEmailSender(fail_for=[admin_email])
        dispatcher = NotificationDispatcher(sender=sender, admin_email=admin_email)

        with pytest.raises(DeliveryError):
            dispatcher.handle_reservation_created(ReservationCreated.model_validate(reservation_payload))

        assert [m.recipient for m in sender.get_successful_sends()] == [parent_email]

    def test_parent_failure_skips_admin(self, reservation_payload, parent_email, admin_email):
        sender = ConsoleEmailSender(fail_for=[parent_email])
        dispatcher = NotificationDispatcher(sender=sender, admin_email=admin_email)

        with pytest.raises(DeliveryError):
            dispatcher.handle_reservation_created(ReservationCreated.model_validate(reservation_payload))

        assert sender.get_sent_count() == 1
        assert sender.find_message_to(admin_email) is None


class TestWaitlistCreated:
    """Tests for handle_waitlist_created."""

    def test_sends_confirmation(self, dispatcher, sender, waitlist_payload, parent_email):
        result = dispatcher.handle_waitlist_created(WaitlistCreated.model_validate(waitlist_payload))

        assert result.to_response() == {"ok": True}
        email = sender.find_message_to(parent_email)
        assert email.subject == 'Waitlist request for "Balance Bike" received'
        assert "Waitlist Confirmation" in email.html
        assert PICKUP_MARKER not in email.html

    def test_admin_copy(self, admin_dispatcher, sender, waitlist_payload, admin_email):
        admin_dispatcher.handle_waitlist_created(WaitlistCreated.model_validate(waitlist_payload))

        assert sender.get_sent_count() == 2
        admin = sender.find_message_to(admin_email)
        assert admin.subject == 'New waitlist request: "Balance Bike"'
        assert "jordan.parent@example.com" in admin.html
        assert "Preferred pickup" not in admin.html

    def test_missing_item_name(self, admin_dispatcher, sender, waitlist_payload):
        waitlist_payload["itemName"] = ""

        with pytest.raises(ValidationError):
            admin_dispatcher.handle_waitlist_created(WaitlistCreated.model_validate(waitlist_payload))

        assert sender.get_sent_count() == 0


class TestStatusUpdated:
    """Tests for handle_status_updated."""

    def test_on_loan_is_skipped(self, dispatcher, sender, status_payload):
        """Test the suppression rule: no email for On Loan."""
        status_payload["newStatus"] = LoanStatus.ON_LOAN.value

        result = dispatcher.handle_status_updated(StatusUpdated.model_validate(status_payload))

        assert result.skipped is True
        assert result.to_response() == {"skipped": True}
        assert sender.get_sent_count() == 0

    def test_on_loan_skipped_with_admin_configured(self, admin_dispatcher, sender, parent_email):
        event = StatusUpdated(parent_email=parent_email, item_name="Blocks", new_status="On Loan")

        admin_dispatcher.handle_status_updated(event)

        assert sender.get_sent_count() == 0

    def test_ready_for_pickup(self, admin_dispatcher, sender, status_payload, parent_email):
        """Test the pickup email includes the preferred day and pickup info, with no admin copy."""
        result = admin_dispatcher.handle_status_updated(StatusUpdated.model_validate(status_payload))

        assert result.to_response() == {"ok": True}
        assert sender.get_sent_count() == 1
        email = sender.find_message_to(parent_email)
        assert email.subject == '🎉 "Wooden Train Set" is ready for pickup'
        assert "Your Toy is Ready for Pickup" in email.html
        assert "Monday" in email.html
        assert PICKUP_MARKER in email.html

    def test_returned(self, dispatcher, sender, status_payload, parent_email):
        status_payload["newStatus"] = "Returned"

        dispatcher.handle_status_updated(StatusUpdated.model_validate(status_payload))

        email = sender.find_message_to(parent_email)
        assert email.subject == 'Update for "Wooden Train Set"'
        assert "Thank You" in email.html
        assert PICKUP_MARKER not in email.html

    def test_unknown_status_sends_empty_body(self, dispatcher, sender, status_payload, parent_email, caplog):
        """Test that an unrecognised status still sends, with the generic subject and no content."""
        status_payload["newStatus"] = "Lost"

        result = dispatcher.handle_status_updated(StatusUpdated.model_validate(status_payload))

        assert result.to_response() == {"ok": True}
        email = sender.find_message_to(parent_email)
        assert email.subject == 'Update for "Wooden Train Set"'
        assert email.html == ""
        assert any("Lost" in record.message for record in caplog.records)

    @pytest.mark.parametrize("field", ["parentEmail", "itemName", "newStatus"])
    def test_missing_required_field(self, dispatcher, sender, status_payload, field):
        status_payload.pop(field)

        with pytest.raises(ValidationError):
            dispatcher.handle_status_updated(StatusUpdated.model_validate(status_payload))

        assert sender.get_sent_count() == 0

    def test_validation_runs_before_suppression(self, dispatcher, status_payload):
        """Test that an On Loan event without an email is still a validation error."""
        status_payload["newStatus"] = "On Loan"
        status_payload.pop("parentEmail")

        with pytest.raises(ValidationError):
            dispatcher.handle_status_updated(StatusUpdated.model_validate(status_payload))


class TestHandle:
    """Tests for routing through handle()."""

    def test_routes_each_event_type(self, dispatcher, sender, parent_email):
        dispatcher.handle(ReservationCreated(parent_email=parent_email, item_name="A"))
        dispatcher.handle(WaitlistCreated(parent_email=parent_email, item_name="B"))
        dispatcher.handle(StatusUpdated(parent_email=parent_email, item_name="C", new_status="Returned"))

        subjects = [m.subject for m in sender.sent_messages]
        assert subjects == [
            'Reservation received for "A"',
            'Waitlist request for "B" received',
            'Update for "C"',
        ]

    def test_rejects_unknown_event(self, dispatcher):
        with pytest.raises(TypeError):
            dispatcher.handle(object())
