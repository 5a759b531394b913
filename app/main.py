"""Vivimap – FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.database import Base, create_db_engine, create_session_factory
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import User, VerificationCode, Memory  # noqa: F401
from app.errors import general_exception_handler, http_exception_handler, validation_exception_handler
from app.routers import auth, memories
from app.services.rate_limit import SlidingWindowRateLimiter

log = logging.getLogger("uvicorn.error")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    app.state.settings = settings
    app.state.engine = create_db_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.auth_rate_limiter = SlidingWindowRateLimiter(
        settings.auth_rate_limit_max, settings.auth_rate_limit_window_seconds
    )
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(auth.router)
    app.include_router(memories.router)

    @app.on_event("startup")
    def startup():
        Base.metadata.create_all(bind=app.state.engine)
        if settings.mailgun_api_key and settings.mailgun_domain:
            log.info("[Mailgun] App using domain=%s from=%s", settings.mailgun_domain, settings.mailgun_from_email)
        else:
            log.warning("[Mailgun] Not configured - verification emails will not be delivered; set MAILGUN_API_KEY and MAILGUN_DOMAIN")
        if settings.scheduler_enabled:
            from app.services.code_cleanup import start_scheduler
            app.state.scheduler = start_scheduler(app.state.session_factory, app.state.auth_rate_limiter)

    @app.on_event("shutdown")
    def shutdown():
        if app.state.scheduler is not None:
            app.state.scheduler.shutdown(wait=False)
            app.state.scheduler = None
        app.state.engine.dispose()

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    static_root = Path(settings.static_dir).resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    def spa_fallback(full_path: str):
        """Serve static assets, and the client entry document for every other non-API path."""
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not found.")
        if full_path:
            candidate = (static_root / full_path).resolve()
            if candidate.is_file() and candidate.is_relative_to(static_root):
                return FileResponse(candidate)
        index = static_root / "index.html"
        if not index.is_file():
            return JSONResponse(status_code=404, content={"message": "Client build not found."})
        return FileResponse(index)

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=get_settings().port)
