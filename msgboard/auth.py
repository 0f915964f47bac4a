import logging
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from argon2.exceptions import HashingError as Argon2HashingError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Request, Response
from jose import JWTError, jwt
from msgboard.config import Settings
from msgboard.errors import HashingError
from msgboard.schemas import SessionUser

logger = logging.getLogger(__name__)

# Argon2id with the library's default cost parameters.
# The encoded hash carries algorithm parameters and salt.
ph = PasswordHasher()


def hash_password(password: str) -> str:
    """
    Hash password using Argon2id.

    Returns hash string that includes algorithm parameters and salt.
    Format: $argon2id$v=19$m=65536,t=3,p=4$salt$hash
    """
    try:
        return ph.hash(password)
    except Argon2HashingError as exc:
        raise HashingError() from exc


def verify_password(password_hash: str, password: str) -> bool:
    """
    Verify password against stored hash.

    Uses constant-time comparison internally.
    Returns False for a mismatch or a malformed hash, never raises.
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


class SessionManager:
    """
    Stateless cookie sessions.

    The cookie holds a signed JWT with the user id and username, so
    nothing is stored server-side. A session is either present and valid
    or the request is anonymous; there is no third outcome.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.session_secret_key
        self.algorithm = settings.session_algorithm
        self.lifetime = timedelta(hours=settings.session_expire_hours)
        self.cookie_name = settings.session_cookie_name
        self.cookie_secure = settings.cookie_secure
        self.cookie_httponly = settings.cookie_httponly
        self.cookie_samesite = settings.cookie_samesite
        self.cookie_domain = settings.cookie_domain if settings.cookie_domain != "localhost" else None

    def encode(self, user_id: int, username: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "username": username,
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[SessionUser]:
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return SessionUser(user_id=int(claims["sub"]), username=claims["username"])
        except (JWTError, KeyError, TypeError, ValueError):
            return None

    def create(self, response: Response, user_id: int, username: str) -> str:
        """
        Issue a session for the user and set it on the response.

        Returns the cookie value.
        """
        token = self.encode(user_id, username)
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            httponly=self.cookie_httponly,
            secure=self.cookie_secure,
            samesite=self.cookie_samesite,
            max_age=int(self.lifetime.total_seconds()),
            path="/",
            domain=self.cookie_domain
        )
        return token

    def read(self, request: Request) -> Optional[SessionUser]:
        """
        Resolve the session carried by the request.

        Returns None if the cookie is absent, malformed, expired or
        signed with another key.
        """
        token = request.cookies.get(self.cookie_name)
        if not token:
            return None

        session = self.decode(token)
        if session is None:
            logger.info("Rejected invalid session cookie")
        return session

    def destroy(self, request: Request, response: Response):
        """
        Clear the session cookie by setting it empty with max_age=0.

        Safe to call when there is no active session.
        """
        response.set_cookie(
            key=self.cookie_name,
            value="",
            httponly=self.cookie_httponly,
            secure=self.cookie_secure,
            samesite=self.cookie_samesite,
            max_age=0,
            path="/",
            domain=self.cookie_domain
        )
