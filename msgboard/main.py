import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from msgboard.auth import SessionManager
from msgboard.config import Settings, get_settings
from msgboard.database import create_db_engine, create_session_factory, init_db
from msgboard.errors import register_error_handlers
from msgboard.routers import auth_router, message_router

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and its collaborators.

    The engine, session factory and session manager are created here
    and handed to request handlers through app.state.
    """
    settings = settings or get_settings()
    engine = create_db_engine(settings.database_url, echo=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.
        Runs on startup and shutdown.
        """
        configure_logging(settings)
        init_db(engine)
        logger.info("Message board ready, database at %s", engine.url)
        yield
        engine.dispose()
        logger.info("Message board stopped")

    app = FastAPI(
        title="Message Board",
        description="Session-authenticated message board",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.session_manager = SessionManager(settings)

    # The bundled front-end is same-origin; CORS is only for local development
    if settings.debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)
    app.include_router(auth_router.router)
    app.include_router(message_router.router)

    static_dir = settings.static_dir
    app.mount("/static", StaticFiles(directory=static_dir, check_dir=False), name="static")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(static_dir / "index.html")

    return app


def run():
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "msgboard.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
