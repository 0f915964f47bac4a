from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and type safety.
    """
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8080

    # Signs the session cookie. Changing this invalidates all existing sessions
    session_secret_key: str
    session_algorithm: str = "HS256"
    session_expire_hours: int = 24
    session_cookie_name: str = "session"

    database_url: str = "sqlite:///./var/messages.db"

    static_dir: Path = PACKAGE_DIR / "static"

    # secure=True enforces HTTPS only - must be True in production
    cookie_secure: bool = False
    cookie_domain: str = "localhost"
    cookie_httponly: bool = True
    cookie_samesite: str = "lax"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance. Load once, reuse throughout application lifecycle.
    """
    return Settings()
