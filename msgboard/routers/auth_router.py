import logging
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from msgboard.auth import SessionManager
from msgboard.database import get_db
from msgboard.dependencies import get_session_manager
from msgboard.schemas import RegisterRequest, LoginRequest, UserResponse, StatusResponse
from msgboard import user_service

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserResponse)
def register(
    request: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Create new user account.

    Does not log the user in; the client calls /login afterwards.

    Error cases:
    - 400: Malformed body, blank or already taken username
    - 500: Hashing or database error
    """
    user = user_service.register_user(db, request.username, request.password)
    return user


@router.post("/login", response_model=UserResponse)
def login(
    request: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    sessions: SessionManager = Depends(get_session_manager)
):
    """
    Authenticate user and set the session cookie.

    Error cases:
    - 400: Malformed body
    - 401: Unknown username or wrong password (same message for both)
    """
    user = user_service.authenticate(db, request.username, request.password)
    sessions.create(response, user.id, user.username)
    return user


@router.api_route("/logout", methods=["GET", "POST"], response_model=StatusResponse)
def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager)
):
    """
    Clear the session cookie.

    Returns success even without an active session (idempotent).
    """
    current = sessions.read(request)
    sessions.destroy(request, response)
    if current is not None:
        logger.info("User logged out: id=%s", current.user_id)
    return StatusResponse(message="Logged out")
