from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from msgboard.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Registered account. Never updated or deleted once created.

    Design notes:
    - username is unique and indexed for login lookup
    - password_hash never leaves the database layer
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class Message(Base):
    """
    A board post owned by the user who created it.

    Only text is mutable; timestamp is set by the server on insert.
    The owner's username is joined in at read time, not stored here.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Listing is always newest first
    __table_args__ = (
        Index('ix_messages_timestamp', 'timestamp'),
    )

    def __repr__(self):
        return f"<Message(id={self.id}, user_id={self.user_id})>"
