"""
MJML Email Templates
Review request and staff notification emails, compiled to HTML on send
"""

from datetime import date
from typing import Optional

from .utils.sanitization import sanitize_string

THEME = {
    "primary": "#1a73e8",
    "primary_dark": "#1557b0",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_text: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="#ffffff" padding="0 40px 40px 40px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="500"
              border-radius="4px"
              padding="12px 24px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_section = ""
    if footer_text:
        footer_section = f"""
        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="#666666" padding="0">
              {footer_text}
            </mj-text>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="'Helvetica Neue', Helvetica, Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['card_bg']}" padding="30px 40px 10px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        {footer_section}
      </mj-body>
    </mjml>
    """


def review_request_template(hotel_name: str, positive_link: str, feedback_link: str) -> str:
    """Ask a guest to review their stay.

    The main button goes to the public review site; guests with a complaint
    can use the private feedback link instead.
    """
    hotel_name = sanitize_string(hotel_name)
    positive_link = sanitize_string(positive_link)
    feedback_link = sanitize_string(feedback_link)

    content = f"""
    <mj-text>
      Thank you for choosing {hotel_name}. We'd love to hear about your stay!
    </mj-text>
    """

    feedback_section = f"""
    <mj-text align="center" font-size="14px" color="{THEME['text_muted']}" padding="16px 0 0 0">
      Something not quite right?
      <a href="{feedback_link}" style="color: {THEME['primary']};">Tell us privately</a>
      so we can make it better.
    </mj-text>
    """

    return get_base_template(
        title="Share Your Experience",
        preview_text=f"How was your stay at {hotel_name}?",
        content_sections=content + feedback_section,
        cta_url=positive_link,
        cta_label="Write a Review",
        footer_text=f"If you didn't stay at {hotel_name}, please ignore this email.",
    )


def review_notification_template(
    hotel_name: str,
    guest_name: str,
    stay_date: date,
    rating: int,
    review_text: str,
    dashboard_url: str,
) -> str:
    """Staff notification for a new internal review"""
    stars = "⭐" * max(0, min(int(rating), 5))
    stay = stay_date.strftime("%b %d, %Y") if hasattr(stay_date, "strftime") else str(stay_date)

    def field(label: str, value: str, extra_style: str = "") -> str:
        return f"""
        <mj-text font-weight="bold" padding="0 0 4px 0">{label}</mj-text>
        <mj-text padding="0 0 20px 0"><p style="margin: 0;{extra_style}">{value}</p></mj-text>
        """

    content = (
        f"""
        <mj-text color="{THEME['text_muted']}" padding="0 0 24px 0">
          A guest left private feedback for {sanitize_string(hotel_name)}.
        </mj-text>
        """
        + field("Guest Name:", sanitize_string(guest_name))
        + field("Stay Date:", stay)
        + field("Rating:", stars)
        + field("Review:", sanitize_string(review_text), " white-space: pre-wrap;")
    )

    return get_base_template(
        title="New Review Received",
        preview_text=f"New {rating}-star review from {sanitize_string(guest_name)}",
        content_sections=content,
        cta_url=dashboard_url,
        cta_label="View in Dashboard",
    )
