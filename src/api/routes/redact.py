"""PII detection and redaction endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from starlette.requests import Request

from ..config import get_settings
from ..middleware import get_request_id
from ..rate_limit import limiter
from ..models.schemas import DetectResponse, ErrorResponse, HTTPErrorResponse, RedactResponse
from ..storage.file_storage import FileTooLargeError, file_storage

from privacyguard.exceptions import DetectionError, InvalidImageError
from privacyguard.factory import build_pipeline
from privacyguard.models.entities import ImageData, RedactionStyle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["PII Redaction"])

_ERROR_RESPONSES = {
    400: {"model": HTTPErrorResponse},
    413: {"model": HTTPErrorResponse},
    502: {"model": ErrorResponse, "description": "The detection model call failed"},
}


async def _read_image(file: UploadFile) -> ImageData:
    contents = await file.read()
    try:
        return file_storage.load_upload(contents, filename=file.filename or "")
    except FileTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except InvalidImageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _resolve_style(style: Optional[str]) -> str:
    if style is None:
        return get_settings().redaction_style.value
    try:
        return RedactionStyle(style).value
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid style '{style}'. Expected one of: mask, placeholder",
        )


def _detection_failed(e: DetectionError) -> JSONResponse:
    body = ErrorResponse(
        error="detection_failed",
        message="PII detection failed; no masking was attempted.",
        detail=str(e),
    )
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=body.model_dump())


@router.post(
    "/detect",
    response_model=DetectResponse,
    responses=_ERROR_RESPONSES,
    summary="Detect PII in a document image",
)
@limiter.limit(lambda: get_settings().rate_limit)
async def detect_pii(
    request: Request,
    file: UploadFile = File(...),
) -> DetectResponse:
    image = await _read_image(file)
    pipeline = build_pipeline(**get_settings().pipeline_kwargs())

    try:
        result = await pipeline.detect_async(image, request_id=get_request_id())
    except InvalidImageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DetectionError as e:
        logger.exception("Detection failed for %s", file.filename)
        return _detection_failed(e)

    return DetectResponse.from_result(result)


@router.post(
    "/redact",
    response_model=RedactResponse,
    responses=_ERROR_RESPONSES,
    summary="Detect PII and return a masked copy of the image",
)
@limiter.limit(lambda: get_settings().rate_limit)
async def redact_pii(
    request: Request,
    file: UploadFile = File(...),
    style: Optional[str] = Form(None),
) -> RedactResponse:
    image = await _read_image(file)
    redaction_style = _resolve_style(style)
    pipeline = build_pipeline(**get_settings().pipeline_kwargs(redaction_style))

    try:
        result = await pipeline.process_async(image, request_id=get_request_id())
    except InvalidImageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DetectionError as e:
        logger.exception("Detection failed for %s; masking not attempted", file.filename)
        return _detection_failed(e)

    return RedactResponse.from_result(
        result,
        redaction_style=redaction_style,
        masking_status=result.masking_status.value,
        status="masking_failed" if result.masking_error else "completed",
        masking_error=result.masking_error,
        masked_image=result.masked_image.to_data_uri() if result.masked_image else None,
    )
