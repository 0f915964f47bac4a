from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from msgboard.database import get_db
from msgboard.dependencies import get_current_user
from msgboard.errors import ValidationError
from msgboard.schemas import (
    MessageText, MessageResponse, MessageUpdateResponse, SessionUser, StatusResponse
)
from msgboard import message_service

router = APIRouter(prefix="/messages", tags=["messages"])

# Largest id a SQLite INTEGER can hold
MAX_MESSAGE_ID = 2**63 - 1


def _require_id(message_id: Optional[int]) -> int:
    if message_id is None:
        raise ValidationError("Message id is required")
    return message_id


@router.get("", response_model=List[MessageResponse])
def list_messages(
    user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    All messages, newest first. Requires login.
    """
    return message_service.list_messages(db)


@router.post("/save", response_model=MessageResponse)
def save_message(
    request: MessageText,
    user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return message_service.create_message(db, user.user_id, user.username, request.text)


@router.put("/update", response_model=MessageUpdateResponse)
def update_message(
    request: MessageText,
    message_id: Optional[int] = Query(None, alias="id", ge=1, le=MAX_MESSAGE_ID),
    user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Replace the text of one of the caller's messages.

    Error cases:
    - 400: Missing, non-integer or out-of-range id, malformed body
    - 401: Not logged in
    - 403: Message belongs to another user
    - 404: No such message
    """
    return message_service.update_message(db, user.user_id, _require_id(message_id), request.text)


@router.delete("/delete", response_model=StatusResponse)
def delete_message(
    message_id: Optional[int] = Query(None, alias="id", ge=1, le=MAX_MESSAGE_ID),
    user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    message_service.delete_message(db, user.user_id, _require_id(message_id))
    return StatusResponse(message="Message deleted")
