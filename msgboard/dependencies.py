from fastapi import Depends, Request

from msgboard.auth import SessionManager
from msgboard.errors import AuthenticationError
from msgboard.schemas import SessionUser


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_current_user(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager)
) -> SessionUser:
    """
    Authorization gate for protected routes.

    Raises AuthenticationError (401) before the route body runs when the
    request carries no valid session. The user is not re-read from the
    database; the signed cookie is trusted for its lifetime.
    """
    user = sessions.read(request)
    if user is None:
        raise AuthenticationError()
    return user
