"""
Message CRUD against the store.

Every operation commits on its own; nothing spans a transaction across
requests. Update and delete look up the owner first, then mutate with a
statement scoped by (id, user_id), so the mutation is self-authorizing
even if the row changes between the two steps. A row deleted in that
window surfaces as NotFoundError.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from msgboard.errors import AuthorizationError, NotFoundError, PersistenceError
from msgboard.models import Message, User
from msgboard.schemas import MessageResponse

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise PersistenceError() from exc


def create_message(db: Session, user_id: int, username: str, text: str) -> MessageResponse:
    """
    Insert a message owned by the session user.

    The timestamp is assigned here, never taken from the client.
    """
    message = Message(text=text, timestamp=datetime.now(timezone.utc), user_id=user_id)

    with _store_errors(db, "create a message"):
        db.add(message)
        db.commit()
        db.refresh(message)

    logger.info("Message %s created by user %s", message.id, user_id)
    return MessageResponse(
        id=message.id,
        text=message.text,
        timestamp=message.timestamp,
        user_id=message.user_id,
        username=username
    )


def list_messages(db: Session) -> List[MessageResponse]:
    """
    All messages, newest first, with the owner's username joined in.
    """
    with _store_errors(db, "list messages"):
        rows = (
            db.query(Message.id, Message.text, Message.timestamp, Message.user_id, User.username)
            .join(User, Message.user_id == User.id)
            .order_by(Message.timestamp.desc(), Message.id.desc())
            .all()
        )

    return [
        MessageResponse(
            id=row.id,
            text=row.text,
            timestamp=row.timestamp,
            user_id=row.user_id,
            username=row.username
        )
        for row in rows
    ]


def get_owner_id(db: Session, message_id: int) -> Optional[int]:
    with _store_errors(db, "look up a message"):
        row = db.query(Message.user_id).filter(Message.id == message_id).first()
    return row.user_id if row else None


def check_ownership(db: Session, user_id: int, message_id: int, action: str):
    """
    Raises NotFoundError if the message does not exist and
    AuthorizationError if it belongs to someone else.
    """
    owner_id = get_owner_id(db, message_id)
    if owner_id is None:
        raise NotFoundError()
    if owner_id != user_id:
        logger.warning(
            "User %s tried to %s message %s owned by user %s",
            user_id, action, message_id, owner_id
        )
        raise AuthorizationError(f"Not allowed to {action} this message")


def update_message(db: Session, user_id: int, message_id: int, text: str) -> Message:
    """
    Replace the text of a message owned by user_id.

    The timestamp is left unchanged. Returns the row as re-read after
    the update.
    """
    check_ownership(db, user_id, message_id, "edit")

    with _store_errors(db, "update a message"):
        updated = (
            db.query(Message)
            .filter(Message.id == message_id, Message.user_id == user_id)
            .update({Message.text: text}, synchronize_session=False)
        )
        db.commit()

    if updated == 0:
        raise NotFoundError()

    with _store_errors(db, "read back a message"):
        message = db.query(Message).filter(Message.id == message_id).first()

    if message is None:
        raise NotFoundError()

    logger.info("Message %s updated by user %s", message_id, user_id)
    return message


def delete_message(db: Session, user_id: int, message_id: int):
    check_ownership(db, user_id, message_id, "delete")

    with _store_errors(db, "delete a message"):
        deleted = (
            db.query(Message)
            .filter(Message.id == message_id, Message.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()

    if deleted == 0:
        raise NotFoundError()

    logger.info("Message %s deleted by user %s", message_id, user_id)
