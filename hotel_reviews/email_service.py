"""
Email Service over SMTP
Renders MJML templates and hands them to the configured SMTP server
"""

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from urllib.parse import urlencode

from mjml import mjml_to_html
from sqlalchemy.orm import Session

from . import config
from .domain.hotels.repository import HotelRepository
from .domain.reviews.tokens import ReviewTokenCodec, get_token_codec
from .email_templates import review_notification_template, review_request_template
from .errors import ConfigurationError, EmailDeliveryError, NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int
    username: str
    password: str
    from_address: str
    timeout: int = 30


def load_smtp_settings() -> SMTPSettings:
    """Read SMTP settings, failing if the transport is not configured"""
    if not config.SMTP_HOST or not config.SMTP_USER or not config.SMTP_PASS:
        logger.error("❌ No email service configured - SMTP_HOST, SMTP_USER or SMTP_PASS missing")
        raise ConfigurationError("Missing SMTP configuration")

    from_address = config.SMTP_FROM or config.SMTP_USER
    if not from_address:
        raise ConfigurationError("Missing SMTP_FROM configuration")

    return SMTPSettings(
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        username=config.SMTP_USER,
        password=config.SMTP_PASS,
        from_address=from_address,
        timeout=config.SMTP_TIMEOUT,
    )


def send_via_smtp(settings: SMTPSettings, to: str, subject: str, html_content: str) -> dict:
    """Send one HTML email, raising on any transport failure"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.from_address
    msg["To"] = to
    msg.attach(MIMEText(html_content, "html"))

    context = ssl.create_default_context()
    if settings.port == 465:
        server = smtplib.SMTP_SSL(settings.host, settings.port, context=context, timeout=settings.timeout)
    else:
        server = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)

    try:
        if settings.port != 465:
            server.starttls(context=context)
        server.login(settings.username, settings.password)
        server.sendmail(settings.from_address.split("<")[-1].rstrip(">"), [to], msg.as_string())
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            server.close()

    logger.info(f"✅ SMTP email sent successfully via {settings.host}")
    return {"id": f"smtp-{datetime.now(timezone.utc).timestamp()}", "success": True}


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns an attribute dict with 'html' and 'errors'
        if result.errors:
            logger.warning(f"MJML compilation warnings: {result.errors}")
        return result.html
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(to: str, subject: str, mjml_content: str) -> dict:
    """
    Send an email through the configured SMTP server

    Args:
        to: Recipient email
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)

    Returns:
        Send response dict

    Raises:
        ConfigurationError: SMTP settings are missing
        EmailDeliveryError: The template failed to compile, or the server
            rejected the message or timed out
    """
    settings = load_smtp_settings()
    html_content = compile_mjml_to_html(mjml_content)

    try:
        logger.info(f"📧 Sending email via SMTP to: {to}")
        return await asyncio.to_thread(send_via_smtp, settings, to, subject, html_content)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ Email send error to {to}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


class ReviewEmailDispatcher:
    """Review request and staff notification emails"""

    def __init__(self, codec: Optional[ReviewTokenCodec] = None, app_url: Optional[str] = None):
        self.codec = codec or get_token_codec()
        self.app_url = (app_url or config.APP_URL).rstrip("/")

    def build_review_link(self, hotel_id: str, email: str) -> str:
        """Internal review form link with a fresh token for this guest"""
        token = self.codec.issue(hotel_id, email)
        return f"{self.app_url}/review?{urlencode({'hotel': hotel_id, 'token': token})}"

    async def send_review_request(
        self,
        to_email: str,
        hotel_name: str,
        hotel_id: str,
        positive_link: Optional[str] = None,
    ) -> dict:
        feedback_link = self.build_review_link(hotel_id, to_email)
        mjml_content = review_request_template(
            hotel_name=hotel_name,
            positive_link=positive_link or feedback_link,
            feedback_link=feedback_link,
        )
        result = await send_email(
            to=to_email,
            subject=f"How was your stay at {hotel_name}?",
            mjml_content=mjml_content,
        )
        logger.info(f"✅ Review request email sent to {to_email}")
        return result

    async def send_internal_notification(self, db: Session, hotel_id: str, review) -> dict:
        """Tell the hotel's staff user about a new internal review"""
        hotel = HotelRepository.get_hotel_by_id(db, hotel_id)
        if not hotel:
            raise NotFound("Hotel not found")

        staff_user = HotelRepository.get_staff_user(db, hotel_id)
        if not staff_user or not staff_user.email:
            raise NotFound("No staff user assigned to this hotel")

        mjml_content = review_notification_template(
            hotel_name=hotel.name,
            guest_name=review.guest_name,
            stay_date=review.stay_date,
            rating=review.rating,
            review_text=review.review_text,
            dashboard_url=f"{self.app_url}/dashboard",
        )
        result = await send_email(
            to=staff_user.email,
            subject="New Review Received",
            mjml_content=mjml_content,
        )
        logger.info(f"✅ Review notification email sent for hotel {hotel_id}")
        return result


_dispatcher: Optional[ReviewEmailDispatcher] = None


def get_email_dispatcher() -> ReviewEmailDispatcher:
    """Dependency injection for the shared dispatcher"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = ReviewEmailDispatcher()
    return _dispatcher
