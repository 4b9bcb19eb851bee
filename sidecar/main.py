import logging
import os
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.middleware import add_cors_middleware
from api.routes import close_aggregator, router
from rules import default_registry
from server import configure_logging, find_free_port, start_server

_logger = logging.getLogger(__name__)

_SENTRY_DSN = os.getenv("SENTRY_DSN", "")

# PHI patterns to scrub from error reports
_PHI_PATTERNS = [
    re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),                    # SSN
    re.compile(r"\b\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2})?(?:\.\d+)?Z?\b"),  # ISO timestamps
    re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b"),        # dates
    re.compile(r"\b[A-Z]{1,2}\d{6,10}\b"),                    # MRN
    re.compile(r"(?i)\bmrn\s*[:=]?\s*\w+"),                   # labeled MRN
    re.compile(r"(?i)(?:patient|name)\s*[:=]\s*[^\n,;]{2,40}"),  # labeled patient name
]


def _scrub_phi(text: str) -> str:
    for pattern in _PHI_PATTERNS:
        text = pattern.sub("[REDACTED]", text)
    return text


def _before_send(event, hint):
    if "exception" in event:
        for exc_info in event["exception"].get("values", []):
            if exc_info.get("value"):
                exc_info["value"] = _scrub_phi(exc_info["value"])
    for bc in event.get("breadcrumbs", {}).get("values", []):
        if bc.get("message"):
            bc["message"] = _scrub_phi(bc["message"])
    return event


def _init_sentry() -> None:
    if not _SENTRY_DSN:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration
    except ImportError:
        _logger.warning("SENTRY_DSN is set but sentry-sdk is not installed; error reporting disabled")
        return

    sentry_sdk.init(
        dsn=_SENTRY_DSN,
        environment=os.getenv("SENTRY_ENVIRONMENT", "development"),
        integrations=[FastApiIntegration(), StarletteIntegration()],
        before_send=_before_send,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    _logger.info(
        "Signal families loaded: %s",
        ", ".join(f["family_id"] for f in default_registry.list_families()),
    )
    yield
    close_aggregator()


def create_app() -> FastAPI:
    _init_sentry()
    app = FastAPI(title="Abstraction Sidecar", version="1.0.0", lifespan=lifespan)
    add_cors_middleware(app)

    # Unhandled errors return a JSON 500.  The handler runs in Starlette's
    # ServerErrorMiddleware, outside CORSMiddleware, so the response carries
    # no CORS headers.
    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        _logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."},
        )

    app.include_router(router)
    return app


if __name__ == "__main__":
    configure_logging()
    port = int(os.getenv("PORT", "0")) or find_free_port()
    app = create_app()
    start_server(app, port)
