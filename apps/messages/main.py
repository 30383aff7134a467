"""
Messages API

Public contact form plus the admin inbox: listing with per-status counts,
read receipts, status/star moderation and deletion.
"""
import logging
import re
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from apps.shared.auth import require_session
from apps.shared.config import Settings, get_settings
from apps.shared.database import get_db, utcnow
from apps.shared.errors import bad_request, not_found
from apps.shared.responses import SuccessResponse
from apps.messages.client import GmailMailer, get_mailer
from apps.messages.models import Message, MESSAGE_STATUSES
from apps.messages.schemas import (
    ContactInput,
    ContactResponse,
    MessageListResponse,
    MessageResponse,
    MessageStats,
    MessageUpdate,
)
from apps.messages.tasks import dispatch_notifications

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

router = APIRouter(prefix="/messages", tags=["messages"])
contact_router = APIRouter(prefix="/contact", tags=["contact"])


# ──────────────────────────────────────────────────────────────────────────────
# Public contact form
# ──────────────────────────────────────────────────────────────────────────────

@contact_router.post("", response_model=ContactResponse, status_code=201)
def submit_message(
    payload: ContactInput,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
    mailer: GmailMailer = Depends(get_mailer),
):
    """
    Store a contact form submission.
    One message per email address per cooldown window (5 minutes by default).
    Notification mails go out after the response and never affect it.
    """
    name = (payload.name or "").strip()
    email = (payload.email or "").strip().lower()
    subject = (payload.subject or "").strip()
    body = (payload.message or "").strip()

    if not (name and email and subject and body):
        raise bad_request("All fields are required")

    if not EMAIL_PATTERN.match(email):
        raise bad_request("Invalid email address")

    # Check-then-insert: concurrent submissions can both pass this check
    cutoff = utcnow() - timedelta(seconds=settings.contact_cooldown_seconds)
    recent = (
        db.query(Message.id)
        .filter(Message.email == email, Message.created_at >= cutoff)
        .first()
    )
    if recent:
        raise HTTPException(
            status_code=429,
            detail={
                "message": "Please wait a few minutes before sending another message",
                "category": "rate_limit",
            },
        )

    message = Message(
        name=name,
        email=email,
        subject=subject,
        message=body,
        status="UNREAD",
        starred=False,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"Stored contact message {message.id}")

    background_tasks.add_task(dispatch_notifications, mailer, message.to_mail_payload())

    return ContactResponse()


# ──────────────────────────────────────────────────────────────────────────────
# Admin inbox (session required)
# ──────────────────────────────────────────────────────────────────────────────

def message_stats(db: Session) -> MessageStats:
    """Counts over every message, independent of any list filter."""
    by_status = dict(
        db.query(Message.status, func.count(Message.id))
        .group_by(Message.status)
        .all()
    )
    total = db.query(func.count(Message.id)).scalar() or 0
    starred = (
        db.query(func.count(Message.id)).filter(Message.starred.is_(True)).scalar() or 0
    )
    return MessageStats(
        total=total,
        unread=by_status.get("UNREAD", 0),
        read=by_status.get("READ", 0),
        replied=by_status.get("REPLIED", 0),
        archived=by_status.get("ARCHIVED", 0),
        starred=starred,
    )


@router.get("", response_model=MessageListResponse)
def list_messages(
    status: Optional[str] = None,
    starred: Optional[str] = None,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
):
    """
    List messages, newest first.
    ``status`` filters to one status (ALL or absent means no filter);
    ``starred=true`` keeps only starred messages; any other value is ignored.
    """
    query = db.query(Message)
    if status in MESSAGE_STATUSES:
        query = query.filter(Message.status == status)
    if starred == "true":
        query = query.filter(Message.starred.is_(True))

    messages = query.order_by(Message.created_at.desc()).all()
    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        stats=message_stats(db),
    )


@router.get("/{message_id}", response_model=MessageResponse)
def get_message(
    message_id: str,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
):
    """
    Get a single message.
    Opening an UNREAD message marks it READ; the response shows the message
    as it was before that change.
    """
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise not_found("Message not found")

    response = MessageResponse.model_validate(message)

    if message.status == "UNREAD":
        # Conditional update so a concurrent status change is not overwritten
        (
            db.query(Message)
            .filter(Message.id == message_id, Message.status == "UNREAD")
            .update({"status": "READ", "updated_at": utcnow()}, synchronize_session=False)
        )
        db.commit()

    return response


@router.patch("/{message_id}", response_model=MessageResponse)
def update_message(
    message_id: str,
    update: MessageUpdate,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
):
    """
    Update status and/or starred.
    A status outside UNREAD/READ/REPLIED/ARCHIVED is ignored, not rejected.
    """
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise not_found("Message not found")

    changes = update.model_dump(exclude_unset=True)

    new_status = changes.get("status")
    if isinstance(new_status, str) and new_status in MESSAGE_STATUSES:
        message.status = new_status
    elif "status" in changes:
        logger.info(f"Ignoring invalid status {new_status!r} for message {message_id}")

    if "starred" in changes:
        message.starred = bool(changes["starred"])

    db.commit()
    db.refresh(message)
    return message


@router.delete("/{message_id}", response_model=SuccessResponse)
def delete_message(
    message_id: str,
    admin: str = Depends(require_session),
    db: Session = Depends(get_db),
):
    """Delete a message."""
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise not_found("Message not found")

    db.delete(message)
    db.commit()
    logger.info(f"Deleted message {message_id}")
    return SuccessResponse()
