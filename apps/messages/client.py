"""
Gmail API client for outbound notification mail

Uses the OAuth refresh-token flow: every send exchanges the stored refresh
token for a short-lived access token, then posts a raw MIME message.
"""
import base64
import logging
from email.message import EmailMessage

import requests
from fastapi import Depends

from apps.shared.config import Settings, get_settings

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"


class GmailMailer:
    def __init__(self, settings: Settings):
        self.client_id = settings.gmail_client_id
        self.client_secret = settings.gmail_client_secret
        self.refresh_token = settings.gmail_refresh_token
        self.user = settings.gmail_user
        self.sender_name = settings.mail_sender_name
        self.notification_email = settings.notification_email or settings.gmail_user

    @property
    def configured(self) -> bool:
        return all((self.client_id, self.client_secret, self.refresh_token, self.user))

    def _access_token(self) -> str:
        response = requests.post(
            TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=10,
        )
        response.raise_for_status()
        return response.json()["access_token"]

    def send(self, to: str, subject: str, text: str, html: str) -> str:
        """
        Send one message.

        Returns:
            Gmail message id

        Raises:
            requests.RequestException: On token refresh or send failure
        """
        mail = EmailMessage()
        mail["From"] = f"{self.sender_name} <{self.user}>"
        mail["To"] = to
        mail["Subject"] = subject
        mail.set_content(text)
        mail.add_alternative(html, subtype="html")

        raw = base64.urlsafe_b64encode(mail.as_bytes()).decode()

        try:
            response = requests.post(
                SEND_URL,
                headers={"Authorization": f"Bearer {self._access_token()}"},
                json={"raw": raw},
                timeout=10,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to send mail to {to}: {e}")
            raise

        message_id = response.json().get("id", "")
        logger.info(f"Sent mail '{subject}' ({message_id})")
        return message_id


def get_mailer(settings: Settings = Depends(get_settings)) -> GmailMailer:
    return GmailMailer(settings)
