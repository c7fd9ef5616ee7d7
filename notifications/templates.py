"""
Email templates for lending-library notifications.

Every recipient email is a branded HTML document: a header with the library
logo, a title, the event-specific content, an optional pickup-info block and a
footer. Admin summaries are plain, unbranded HTML.

Design decisions:
- Templates are plain Python string composition, no template engine
- Every caller-supplied value goes through escape() before interpolation
- Subjects are plain text and are not escaped
- Branding lives in TemplateConfig so it can be swapped in tests
- Renderers are pure functions returning (subject, html)
"""

import html
from dataclasses import dataclass, field
from typing import Optional


# =============================================================================
# Branding
# =============================================================================

@dataclass(frozen=True)
class TemplateConfig:
    """
    Branding and pickup details used by the branded wrapper.

    Defaults reproduce the Bethesda Toy Lending Library emails.
    """
    logo_url: str = (
        "https://res.cloudinary.com/towson008/image/upload/v1765341466/tp1aouaicde3zpykntkn.png"
    )
    logo_alt: str = "Bethesda Toy Lending Library"
    library_name: str = "Bethesda Toy Lending Library"
    organization: str = "Bethesda Services"
    copyright_year: int = 2025
    pickup_address: str = "3310 Schmon Parkway, Thorold, ON, L2V 4Y6"
    pickup_hours: tuple[str, ...] = field(
        default=("Monday – Friday: 9:00 AM – 4:00 PM", "Business Days Only")
    )
    brand_color: str = "#003366"
    background_color: str = "#f8fafc"
    text_color: str = "#1f2937"


DEFAULT_TEMPLATE_CONFIG = TemplateConfig()


# =============================================================================
# Helpers
# =============================================================================

def escape(value: Optional[str]) -> str:
    """HTML-escape a caller-supplied value. None renders as an empty string."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def format_note(note: str) -> str:
    """Escape a free-text note and turn its newlines into line breaks."""
    return escape(note).replace("\n", "<br />").strip()


def _for_child(child_name: Optional[str]) -> str:
    return f"for {escape(child_name)}" if child_name else ""


def render_pickup_info(config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG) -> str:
    """Render the pickup location and hours block."""
    hours = " <br/>\n      ".join(escape(line) for line in config.pickup_hours)
    return f"""
  <div style="margin-top:16px; padding:12px; background:{config.brand_color}; border-radius:6px;">
    <p style="margin:0;"><strong>📍 Pickup Location</strong></p>
    <p style="margin:4px 0;">{escape(config.pickup_address)}</p>
    <p style="margin:8px 0 0;">
      <strong>🕒 Pickup Hours</strong><br />
      {hours}
    </p>
  </div>
"""


def render_branded_email(
    title: str,
    content: str,
    config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
    show_pickup_info: bool = False,
) -> str:
    """
    Wrap a content fragment in the library's branded HTML shell.

    Args:
        title: Heading shown above the content (escaped)
        content: Already-rendered HTML fragment (inserted as-is)
        config: Branding to apply
        show_pickup_info: Append the pickup location/hours block

    Returns:
        Complete HTML body
    """
    pickup_info = render_pickup_info(config) if show_pickup_info else ""
    return f"""
    <div style="background:{config.background_color}; padding:24px; font-family:Arial, sans-serif;">
      <div style="max-width:600px; margin:auto; border-radius:8px; overflow:hidden;">

        <!-- Header -->
        <div style="background:{config.brand_color}; padding:20px; text-align:center;">
          <img src="{escape(config.logo_url)}" alt="{escape(config.logo_alt)}" style="max-width:160px;" />
        </div>

        <!-- Body -->
        <div style="padding:24px; color:{config.text_color};">
          <h2 style="color:{config.brand_color};">{escape(title)}</h2>
          {content}
          {pickup_info}
        </div>

        <!-- Footer -->
        <div style="background:{config.brand_color}; padding:16px; font-size:12px; text-align:center; color:#ffffff;">
          <p style="margin:0;">{escape(config.library_name)}</p>
          <p style="margin:4px 0;">© {config.copyright_year} {escape(config.organization)}</p>
        </div>

      </div>
    </div>
  """


# =============================================================================
# Recipient templates
# =============================================================================

def render_reservation_received(
    parent_name: Optional[str],
    child_name: Optional[str],
    item_name: str,
    preferred_day: Optional[str] = None,
    note: Optional[str] = None,
    config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
) -> tuple[str, str]:
    """Confirmation sent to the parent when a reservation is created."""
    if preferred_day:
        pickup_line = f"Preferred pick-up day: <strong>{escape(preferred_day)}</strong>."
    else:
        pickup_line = "We will contact you with pick-up details soon."

    note_block = ""
    if note:
        note_block = f"<p><strong>Your note:</strong><br />{format_note(note)}</p>"

    content = f"""
          <p>Hi {escape(parent_name or "there")},</p>
          <p>
            We have received your reservation for
            <strong>{escape(item_name)}</strong>
            {_for_child(child_name)}.
          </p>
          <p>{pickup_line}</p>
          {note_block}
          <p>
            We will send another email when this toy is
            <strong>ready for pickup</strong>.
          </p>
        """
    subject = f'Reservation received for "{item_name}"'
    return subject, render_branded_email("Reservation Received", content, config)


def render_waitlist_confirmation(
    parent_name: Optional[str],
    child_name: Optional[str],
    item_name: str,
    config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
) -> tuple[str, str]:
    """Confirmation sent to the parent when they join a waitlist."""
    content = f"""
          <p>Hi {escape(parent_name or "there")},</p>
          <p>
            You have been added to the waitlist for
            <strong>{escape(item_name)}</strong>
            {_for_child(child_name)}.
          </p>
          <p>
            We will contact you as soon as this toy becomes available.
          </p>
        """
    subject = f'Waitlist request for "{item_name}" received'
    return subject, render_branded_email("Waitlist Confirmation", content, config)


def render_ready_for_pickup(
    parent_name: Optional[str],
    child_name: Optional[str],
    item_name: str,
    preferred_day: Optional[str] = None,
    config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
) -> tuple[str, str]:
    """Sent when a reserved toy is ready to collect. Includes pickup info."""
    requested_day = ""
    if preferred_day:
        requested_day = f"<p>You requested pickup on <strong>{escape(preferred_day)}</strong>.</p>"

    content = f"""
          <p>Hi {escape(parent_name or "there")},</p>
          <p>
            Great news! <strong>{escape(item_name)}</strong>
            {_for_child(child_name)} is now
            <strong>ready for pickup</strong>.
          </p>
          {requested_day}
          <h4>Note: Please bring this confirmation email with you when you come.</h4>
        """
    subject = f'🎉 "{item_name}" is ready for pickup'
    html_body = render_branded_email(
        "Your Toy is Ready for Pickup", content, config, show_pickup_info=True
    )
    return subject, html_body


def render_returned(
    parent_name: Optional[str],
    item_name: str,
    config: TemplateConfig = DEFAULT_TEMPLATE_CONFIG,
) -> tuple[str, str]:
    """Thank-you sent when a toy comes back."""
    content = f"""
          <p>Hi {escape(parent_name or "there")},</p>
          <p>
            We have marked <strong>{escape(item_name)}</strong> as
            <strong>Returned</strong>.
          </p>
          <p>Thank you for using the Toy Lending Library!</p>
        """
    return status_update_subject(item_name), render_branded_email("Thank You", content, config)


def status_update_subject(item_name: str) -> str:
    """Generic subject for status updates without a dedicated template."""
    return f'Update for "{item_name}"'


# =============================================================================
# Admin summaries
# =============================================================================

def _admin_parent_line(parent_name: Optional[str], parent_email: str) -> str:
    return (
        f"<p><strong>Parent:</strong> {escape(parent_name or 'N/A')} "
        f"({escape(parent_email)})</p>"
    )


def render_reservation_admin_summary(
    parent_email: str,
    parent_name: Optional[str],
    child_name: Optional[str],
    item_name: str,
    preferred_day: Optional[str] = None,
) -> tuple[str, str]:
    """Internal notice of a new reservation."""
    html_body = f"""
          <h3>New Reservation</h3>
          {_admin_parent_line(parent_name, parent_email)}
          <p><strong>Child:</strong> {escape(child_name or "N/A")}</p>
          <p><strong>Item:</strong> {escape(item_name)}</p>
          <p><strong>Preferred pickup:</strong> {escape(preferred_day or "N/A")}</p>
        """
    return f'New reservation: "{item_name}"', html_body


def render_waitlist_admin_summary(
    parent_email: str,
    parent_name: Optional[str],
    child_name: Optional[str],
    item_name: str,
) -> tuple[str, str]:
    """Internal notice of a new waitlist entry."""
    html_body = f"""
          <h3>New Waitlist Entry</h3>
          {_admin_parent_line(parent_name, parent_email)}
          <p><strong>Child:</strong> {escape(child_name or "N/A")}</p>
          <p><strong>Item:</strong> {escape(item_name)}</p>
        """
    return f'New waitlist request: "{item_name}"', html_body
