"""
Transactional email through Resend.

Every sender returns True when the message was handed to Resend or was
deliberately skipped (email disabled, no API key), and False when Resend
failed. Callers run these from background tasks, so a failure never breaks
the request that triggered it.
"""

import logging
from html import escape
from typing import Optional

import resend

from calendar_links import calculate_end_time, format_duration, format_long_date, format_time
from config import APP_URL, EMAIL_FROM, ENABLE_EMAIL, RESEND_API_KEY

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY

BRAND_COLOR = "#10b981"


def send_email(to: str, subject: str, html: str) -> bool:
    if not ENABLE_EMAIL:
        logger.info(f"Email sending is disabled. Skipped '{subject}' to {to}")
        return True

    if not resend.api_key:
        logger.warning("RESEND_API_KEY not configured. Email notification skipped.")
        return True

    try:
        resend.Emails.send({
            "from": EMAIL_FROM,
            "to": [to],
            "subject": subject,
            "html": html,
        })
        logger.info(f"Sent '{subject}' to {to}")
        return True
    except Exception as e:
        logger.error(f"Error sending email '{subject}' to {to}: {e}")
        return False


def email_wrap(heading: str, body_html: str, color: str = BRAND_COLOR) -> str:
    """Wrap email body in a consistent layout."""
    return f"""<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto;">
  <div style="background-color: {color}; color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0;">
    <h1 style="margin: 0;">{escape(heading)}</h1>
  </div>
  <div style="background-color: #f9fafb; padding: 30px; border-radius: 0 0 8px 8px;">
    {body_html}
  </div>
  <p style="text-align: center; margin-top: 30px; color: #9ca3af; font-size: 14px;">Apex Padel</p>
</div>"""


def match_details_html(match: dict) -> str:
    rows = [
        ("Date", format_long_date(match["date"])),
        ("Time", f"{format_time(match['time'])} - {format_time(calculate_end_time(match['time'], match['duration']))}"),
        ("Duration", format_duration(match["duration"])),
        ("Location", match["location"]),
    ]
    items = "".join(
        f'<div style="margin: 10px 0;"><strong>{label}:</strong> {escape(str(value))}</div>'
        for label, value in rows
    )
    badge = ""
    if match.get("is_private"):
        badge = ('<span style="display: inline-block; background-color: #a855f7; color: white; '
                 'padding: 4px 12px; border-radius: 12px; font-size: 12px;">Private Match</span>')
    return (
        '<div style="background-color: white; padding: 20px; border-radius: 8px; margin: 20px 0; '
        f'border-left: 4px solid {BRAND_COLOR};">'
        f"<h2>{escape(match.get('title') or 'Padel Match')}</h2>{items}{badge}</div>"
    )


def _match_link(match: dict) -> str:
    return f'<p><a href="{APP_URL}/matches/{match["id"]}">View match details</a></p>'


def send_booking_confirmation_email(user: dict, match: dict) -> bool:
    body = (
        f"<p>Hi {escape(user['name'])},</p>"
        "<p>Your spot has been confirmed for the following match:</p>"
        f"{match_details_html(match)}{_match_link(match)}"
        "<p>See you on the court!</p>"
    )
    subject = f"Booking Confirmed: {match.get('title') or 'Padel Match'}"
    return send_email(user["email"], subject, email_wrap("Booking Confirmed!", body))


def send_cancellation_email(user: dict, match: dict) -> bool:
    body = (
        f"<p>Hi {escape(user['name'])},</p>"
        "<p>Your booking for the following match has been cancelled:</p>"
        f"{match_details_html(match)}"
        "<p>We hope to see you at another match soon.</p>"
    )
    subject = f"Booking Cancelled: {match.get('title') or 'Padel Match'}"
    return send_email(user["email"], subject, email_wrap("Booking Cancelled", body, color="#ef4444"))


def send_creator_booking_notification(creator: dict, player: dict, match: dict, player_count: int) -> bool:
    body = (
        f"<p>Hi {escape(creator['name'])},</p>"
        f"<p><strong>{escape(player['name'])}</strong> just joined your match "
        f"({player_count}/{match['max_players']} players).</p>"
        f"{match_details_html(match)}{_match_link(match)}"
    )
    subject = f"New Player Joined: {match.get('title') or 'Padel Match'}"
    return send_email(creator["email"], subject, email_wrap("New Player Joined", body))


def send_creator_cancellation_notification(creator: dict, player: dict, match: dict, player_count: int) -> bool:
    body = (
        f"<p>Hi {escape(creator['name'])},</p>"
        f"<p><strong>{escape(player['name'])}</strong> cancelled their spot in your match "
        f"({player_count}/{match['max_players']} players).</p>"
        f"{match_details_html(match)}{_match_link(match)}"
    )
    subject = f"Player Cancelled: {match.get('title') or 'Padel Match'}"
    return send_email(creator["email"], subject, email_wrap("Player Cancelled", body, color="#f59e0b"))


def send_password_reset_email(user: dict, token: str, expires_minutes: Optional[int] = None) -> bool:
    link = f"{APP_URL}/reset-password?token={token}"
    expiry = f" The link expires in {expires_minutes} minutes." if expires_minutes else ""
    body = (
        f"<p>Hi {escape(user['name'])},</p>"
        "<p>We received a request to reset your password.</p>"
        f'<p><a href="{link}">Reset your password</a></p>'
        f"<p>If you didn't ask for this, you can ignore this email.{expiry}</p>"
    )
    return send_email(user["email"], "Reset your Apex Padel password", email_wrap("Password Reset", body))
