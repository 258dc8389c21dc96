"""
api/main.py -- FastAPI application factory for DevConnector.

Run with:      uvicorn asgi:app --reload
               python asgi.py

create_app(settings) is the composition root: the Settings object built here
is stored on app.state.settings and handed to the auth gate, the token
issuer and the GitHub client. Nothing else reads configuration.

Middleware stack (outermost to innermost; add_middleware() prepends, so
registration order in create_app() is the reverse):
  1. log_requests      -- one log line per request with latency
  2. CORSMiddleware    -- adds CORS headers for browser clients
  3. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Exception handlers map the core.errors taxonomy to HTTP statuses in one
place. Unexpected exceptions are logged and answered with a plain-text
"Server Error".

Lifespan opens the stores and the GitHub session on startup and closes them
on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import HealthResponse
from api.routes.auth import router as auth_router
from api.routes.posts import router as posts_router
from api.routes.profile import router as profile_router
from api.routes.users import router as users_router
from auth.store import UserStore
from core.config import Settings, get_settings
from core.errors import AppError
from core.github import GitHubClient
from social.store import SocialStore

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("devconnector.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open stores and the GitHub client on startup; close them on shutdown."""
    settings: Settings = app.state.settings
    logger.info("DevConnector API starting up (environment=%s)", settings.environment)
    app.state.user_store = UserStore(settings.database_url)
    app.state.social = SocialStore(settings.database_url)
    app.state.github = GitHubClient(token=settings.github_token, base_url=settings.github_api_url)
    if not settings.github_token:
        logger.warning("GITHUB_TOKEN not set -- GitHub requests are unauthenticated and heavily rate-limited")
    logger.info("Stores initialized")

    yield

    app.state.github.close()
    app.state.social.close()
    app.state.user_store.close()
    logger.info("DevConnector API shutdown complete")


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error with the status its kind maps to."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with one {"msg", "param", "location"} entry per failed field."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        errors.append(
            {
                "msg": err.get("msg", "Invalid value"),
                "param": loc[-1] if len(loc) > 1 else "",
                "location": loc[0] if loc else "",
            }
        )
    return JSONResponse(status_code=400, content={"errors": errors})


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = JSONResponse(status_code=429, content={"msg": "Too many requests, please try again later"})
    response.headers["Retry-After"] = str(int(getattr(exc, "retry_after", 60)))
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Catch-all for unexpected failures.

    The exception is logged server-side only; the client gets a generic body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return PlainTextResponse("Server Error", status_code=500)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Static front end (production only)
# ---------------------------------------------------------------------------


def _mount_static(app: FastAPI, static_dir: Path) -> None:
    """Serve the compiled client: /static assets plus index.html for every other non-API path."""
    index = static_dir / "index.html"
    assets = static_dir / "static"
    if assets.is_dir():
        app.mount("/static", StaticFiles(directory=assets), name="static")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa(full_path: str):
        if full_path.startswith("api/"):
            return JSONResponse(status_code=404, content={"msg": "Not found"})
        candidate = (static_dir / full_path).resolve()
        if full_path and candidate.is_file() and static_dir.resolve() in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(index)


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="DevConnector API",
        description="Developer profiles, posts, comments and likes.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    # SlowAPI looks for app.state.limiter by convention.
    app.state.limiter = limiter

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", settings.token_header],
        max_age=3600,
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(users_router, prefix="/api", tags=["Users"])
    app.include_router(auth_router, prefix="/api", tags=["Auth"])
    app.include_router(profile_router, prefix="/api", tags=["Profile"])
    app.include_router(posts_router, prefix="/api", tags=["Posts"])

    @app.get("/api/health", tags=["Health"])
    def health(request: Request) -> HealthResponse:
        """Liveness plus a database round-trip. No auth, no rate limit."""
        try:
            request.app.state.user_store.ping()
            database = "ok"
        except Exception:
            logger.exception("Health check database ping failed")
            database = "error"
        return HealthResponse(
            status="ok" if database == "ok" else "degraded",
            version=VERSION,
            components={"app": "ok", "database": database},
        )

    if settings.serve_static:
        static_dir = Path(settings.static_dir)
        if (static_dir / "index.html").is_file():
            _mount_static(app, static_dir)
            logger.info("Serving front end from %s", static_dir)
        else:
            logger.warning("Static serving enabled but %s/index.html is missing", static_dir)

    return app
