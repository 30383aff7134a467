"""
Notification mail sent after a contact message is stored.

Runs as a FastAPI background task once the response has gone out: at most
once, no retry, and no way for a failure to reach the visitor.
"""
import logging
from datetime import datetime
from html import escape
from urllib.parse import quote

from apps.messages.client import GmailMailer

logger = logging.getLogger(__name__)


def send_contact_notification(mailer: GmailMailer, payload: dict) -> str:
    """Tell the site owner about a new message."""
    name, email = payload["name"], payload["email"]
    subject, body = payload["subject"], payload["message"]

    text = (
        "New Contact Form Submission\n\n"
        f"From: {name} <{email}>\n"
        f"Subject: {subject}\n\n"
        f"Message:\n{body}\n\n"
        "---\n"
        f"Reply to this message by emailing {email}\n"
    )
    reply_link = f"mailto:{quote(email)}?subject={quote('Re: ' + subject)}"
    html = (
        "<h2>New Contact Form Submission</h2>"
        f"<p><strong>From:</strong> {escape(name)} &lt;{escape(email)}&gt;</p>"
        f"<p><strong>Subject:</strong> {escape(subject)}</p>"
        f"<p style=\"white-space: pre-wrap\">{escape(body)}</p>"
        f"<p><a href=\"{escape(reply_link)}\">Reply to {escape(name)}</a></p>"
        f"<p><small>&copy; {datetime.now().year} - sent from the portfolio contact form</small></p>"
    )

    return mailer.send(
        to=mailer.notification_email,
        subject=f"[Portfolio] New message from {name}: {subject}",
        text=text,
        html=html,
    )


def send_auto_reply(mailer: GmailMailer, payload: dict) -> str:
    """Confirm receipt to the person who wrote in."""
    name, subject = payload["name"], payload["subject"]

    text = (
        f"Hi {name},\n\n"
        f"Thank you for reaching out! I've received your message regarding \"{subject}\" "
        "and will get back to you as soon as possible, usually within 24-48 hours.\n\n"
        "Best regards\n"
    )
    html = (
        f"<p>Hi <strong>{escape(name)}</strong>,</p>"
        f"<p>Thank you for reaching out! I've received your message regarding "
        f"\"<strong>{escape(subject)}</strong>\" and will get back to you as soon as "
        "possible, usually within 24-48 hours.</p>"
        "<p>Best regards</p>"
    )

    return mailer.send(
        to=payload["email"],
        subject=f"Thanks for reaching out, {name}!",
        text=text,
        html=html,
    )


def dispatch_notifications(mailer: GmailMailer, payload: dict) -> None:
    """Send both mails independently; every failure is logged and dropped."""
    if not mailer.configured:
        logger.warning("Gmail credentials not configured, skipping contact notifications")
        return

    for label, send in (
        ("notification email", send_contact_notification),
        ("auto-reply", send_auto_reply),
    ):
        try:
            send(mailer, payload)
        except Exception as e:
            logger.error(f"Failed to send {label}: {e}", exc_info=True)
