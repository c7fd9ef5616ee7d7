"""
Event and message models for the lending-library notification service.

The three event models mirror the JSON bodies posted by the lending-library
frontend. Field names are camelCase on the wire and snake_case in Python.

Design decisions:
- Every field is optional at the model level. Required-field checks happen in
  the dispatcher so that a missing field is reported as one fixed validation
  error instead of a per-field schema error.
- "Missing" means absent, null or empty string.
- new_status stays a plain string; unknown values are accepted and routed to
  the fallthrough branch of the status handler.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from notifications.channels import DeliveryReceipt


class LoanStatus(str, Enum):
    """Loan statuses the dispatcher knows how to handle."""
    ON_LOAN = "On Loan"                     # suppressed, never emailed
    READY_FOR_PICKUP = "Ready for Pickup"
    RETURNED = "Returned"


class EventType(str, Enum):
    """Event variants, named after their endpoint path."""
    RESERVATION_CREATED = "reservation-created"
    WAITLIST_CREATED = "waitlist-created"
    STATUS_UPDATED = "status-updated"


class NotificationEvent(BaseModel):
    """Fields shared by every event variant."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
        frozen=True,
    )

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("parent_email", "item_name")

    parent_email: Optional[str] = None
    parent_name: Optional[str] = None
    child_name: Optional[str] = None
    item_name: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def falsy_numbers_as_missing(cls, value):
        """Treat 0 and 0.0 like an absent value instead of the text "0"."""
        if isinstance(value, (int, float)) and not isinstance(value, bool) and not value:
            return None
        return value

    def missing_fields(self) -> list[str]:
        """Return the wire names of required fields that are absent or empty."""
        return [
            to_camel(name)
            for name in self.REQUIRED_FIELDS
            if not getattr(self, name)
        ]


class ReservationCreated(NotificationEvent):
    """A parent reserved a toy."""
    preferred_day: Optional[str] = None
    note: Optional[str] = None


class WaitlistCreated(NotificationEvent):
    """A parent joined the waitlist for a toy that is out."""


class StatusUpdated(NotificationEvent):
    """A loan changed status in the library system."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("parent_email", "item_name", "new_status")

    new_status: Optional[str] = None
    preferred_day: Optional[str] = None


EVENT_MODELS: dict[EventType, type[NotificationEvent]] = {
    EventType.RESERVATION_CREATED: ReservationCreated,
    EventType.WAITLIST_CREATED: WaitlistCreated,
    EventType.STATUS_UPDATED: StatusUpdated,
}


@dataclass(frozen=True)
class RenderedMessage:
    """A fully rendered email, ready to hand to a sender exactly once."""
    to: str
    subject: str
    html: str


@dataclass
class DispatchResult:
    """
    Outcome of handling one event.

    Serialises to the HTTP response body: {"skipped": true} when the
    suppression rule applied, {"ok": true} otherwise.
    """
    skipped: bool = False
    messages: list[RenderedMessage] = field(default_factory=list)
    receipts: list[DeliveryReceipt] = field(default_factory=list)

    def to_response(self) -> dict[str, bool]:
        if self.skipped:
            return {"skipped": True}
        return {"ok": True}
