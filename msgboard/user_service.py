import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from msgboard.auth import hash_password, verify_password
from msgboard.errors import (
    AuthenticationError, ConflictError, PersistenceError, ValidationError
)
from msgboard.models import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def normalize_username(username: str) -> str:
    # Register and login must agree on the stored form
    return username.strip()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def register_user(db: Session, username: str, password: str) -> User:
    """
    Create a new account.

    The username is stored stripped of surrounding whitespace.

    Raises:
        ValidationError: username is blank
        ConflictError: username already taken
        HashingError: password could not be hashed
        PersistenceError: any other database failure
    """
    username = normalize_username(username)
    if not username:
        raise ValidationError("Username is required")

    user = User(username=username, password_hash=hash_password(password))

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        db.rollback()
        logger.info("Registration rejected, username taken: %s", username)
        raise ConflictError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to register user %s", username)
        raise PersistenceError() from exc

    logger.info("User registered: id=%s username=%s", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    """
    Check credentials and return the matching user.

    Unknown usernames and wrong passwords fail with the same message so
    the response does not reveal which one was wrong.
    """
    username = normalize_username(username)
    try:
        user = get_user_by_username(db, username)
    except SQLAlchemyError as exc:
        logger.exception("Failed to look up user %s", username)
        raise PersistenceError() from exc

    if not user or not verify_password(user.password_hash, password):
        logger.info("Login failed for username=%s", username)
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info("User logged in: id=%s username=%s", user.id, user.username)
    return user
