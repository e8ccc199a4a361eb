"""FastAPI application for the PrivacyGuard document redaction service."""

import logging
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version, PackageNotFoundError

import gradio as gr
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings, load_settings
from .logging_config import setup_logging
from .middleware import RequestIDMiddleware
from .rate_limit import limiter
from .routes import health_router, redact_router

logger = logging.getLogger(__name__)


def _get_version() -> str:
    try:
        return pkg_version("privacyguard")
    except PackageNotFoundError:
        return "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    logger.info("Starting PrivacyGuard API")
    logger.info(
        "LLM provider=%s, style=%s, id_prefix_digits=%d",
        settings.llm_provider, settings.redaction_style.value, settings.national_id_prefix_digits,
    )
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="PrivacyGuard Document Redaction API",
    description=(
        "Detects personally identifiable information in document images with a "
        "hosted vision model and returns a regenerated, masked copy."
    ),
    version=_get_version(),
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

settings = get_settings()
allow_all = settings.cors_origins_list == ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred.",
            "detail": str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
        },
    )


app.include_router(health_router)
app.include_router(redact_router)

from ui.app import create_ui  # noqa: E402

gradio_app = create_ui()
app = gr.mount_gradio_app(app, gradio_app, path="/")


def main():
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    main()
