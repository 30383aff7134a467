"""
Contact message models
"""
from uuid import uuid4

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index

from apps.shared.database import Base, utcnow

MESSAGE_STATUSES = ("UNREAD", "READ", "REPLIED", "ARCHIVED")


class Message(Base):
    """
    A contact form submission.

    status moves freely between UNREAD, READ, REPLIED and ARCHIVED on admin
    request; the only automatic move is UNREAD -> READ when the admin opens
    the message. starred is independent of status.
    """
    __tablename__ = "messages"
    __table_args__ = (
        # Cooldown lookup: latest message per email
        Index("ix_messages_email_created_at", "email", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    subject = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="UNREAD", index=True)
    starred = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_mail_payload(self) -> dict:
        """Plain copy of the fields the notification mails need."""
        return {
            "name": self.name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
        }
