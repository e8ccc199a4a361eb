"""Health check endpoints."""

import tempfile
from datetime import datetime, timezone
from importlib.metadata import version as pkg_version, PackageNotFoundError
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..models.schemas import HealthResponse, ReadyzResponse

router = APIRouter(tags=["Health"])


def _safe_version() -> str:
    try:
        return pkg_version("privacyguard")
    except PackageNotFoundError:
        return "0.1.0"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is running and report the configured models.",
)
async def health_check() -> HealthResponse:
    """Return service health status."""
    settings = get_settings()
    if settings.llm_provider == "azure":
        detection_model = settings.azure_openai_deployment_name
        image_model = settings.azure_openai_image_deployment_name
    else:
        detection_model = settings.openai_model
        image_model = settings.openai_image_model

    return HealthResponse(
        status="healthy",
        version=_safe_version(),
        timestamp=datetime.now(timezone.utc),
        llm_provider=settings.llm_provider,
        detection_model=detection_model,
        image_model=image_model,
    )


@router.get(
    "/healthz",
    summary="Liveness probe",
    description="Liveness probe for container orchestrators.",
)
async def liveness() -> dict:
    """Return liveness status, no dependency checks."""
    return {"status": "alive"}


@router.get(
    "/readyz",
    response_model=ReadyzResponse,
    summary="Readiness probe",
    description="Readiness probe that checks critical dependencies.",
    responses={503: {"description": "Service not ready"}},
)
async def readiness():
    """Check if the service is ready to accept traffic."""
    settings = get_settings()
    checks: dict[str, str] = {}
    all_ok = True

    # Download files for the UI are written here
    try:
        storage = Path(settings.storage_dir)
        storage.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=storage, delete=True):
            pass
        checks["filesystem"] = "ok"
    except OSError as e:
        checks["filesystem"] = f"error: {e}"
        all_ok = False

    if settings.llm_provider == "openai":
        if settings.openai_api_key:
            checks["llm_config"] = "ok"
        else:
            checks["llm_config"] = "error: OPENAI_API_KEY not set"
            all_ok = False
    elif settings.llm_provider == "azure":
        if (
            settings.azure_openai_api_key
            and settings.azure_openai_endpoint
            and settings.azure_openai_deployment_name
            and settings.azure_openai_image_deployment_name
        ):
            checks["llm_config"] = "ok"
        else:
            checks["llm_config"] = "error: Azure OpenAI credentials or deployments not set"
            all_ok = False
    else:
        checks["llm_config"] = f"error: unknown provider '{settings.llm_provider}'"
        all_ok = False

    response = ReadyzResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
    )

    if not all_ok:
        return JSONResponse(status_code=503, content=response.model_dump())

    return response
