"""
Shared pytest fixtures for the lending-library email service tests.

These fixtures provide a recording sender and dispatchers wired to it.
"""

import pytest

from notifications.channels import ConsoleEmailSender
from notifications.dispatcher import NotificationDispatcher
from notifications.templates import TemplateConfig


@pytest.fixture
def admin_email() -> str:
    """Mailbox that receives admin copies."""
    return "desk@library.example"


@pytest.fixture
def parent_email() -> str:
    return "jordan.parent@example.com"


@pytest.fixture
def sender() -> ConsoleEmailSender:
    """Fresh recording sender for each test."""
    return ConsoleEmailSender()


@pytest.fixture
def template_config() -> TemplateConfig:
    return TemplateConfig()


@pytest.fixture
def dispatcher(sender: ConsoleEmailSender, template_config: TemplateConfig) -> NotificationDispatcher:
    """Dispatcher without an admin mailbox."""
    return NotificationDispatcher(sender=sender, template_config=template_config)


@pytest.fixture
def admin_dispatcher(
    sender: ConsoleEmailSender,
    template_config: TemplateConfig,
    admin_email: str,
) -> NotificationDispatcher:
    """Dispatcher that also sends admin copies."""
    return NotificationDispatcher(
        sender=sender,
        template_config=template_config,
        admin_email=admin_email,
    )


# =============================================================================
# Event payloads (wire format)
# =============================================================================

@pytest.fixture
def reservation_payload(parent_email: str) -> dict:
    """A complete reservation-created body."""
    return {
        "parentEmail": parent_email,
        "parentName": "Jordan",
        "childName": "Sam",
        "itemName": "Wooden Train Set",
        "preferredDay": "Monday",
        "note": "Could we pick up after 3pm?\nThanks!",
    }


@pytest.fixture
def waitlist_payload(parent_email: str) -> dict:
    """A complete waitlist-created body."""
    return {
        "parentEmail": parent_email,
        "parentName": "Jordan",
        "childName": "Sam",
        "itemName": "Balance Bike",
    }


@pytest.fixture
def status_payload(parent_email: str) -> dict:
    """A status-updated body; tests set newStatus as needed."""
    return {
        "parentEmail": parent_email,
        "parentName": "Jordan",
        "childName": "Sam",
        "itemName": "Wooden Train Set",
        "newStatus": "Ready for Pickup",
        "preferredDay": "Monday",
    }
