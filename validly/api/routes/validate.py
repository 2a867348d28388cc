"""Key validation endpoint."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from validly.core.config import Settings, get_settings
from validly.core.logging import get_logger
from validly.models.validation import ValidationRequest, ValidationResult
from validly.services.errors import (
    InputValidationError,
    InternalValidationError,
    KeyCheckError,
    UnsupportedProviderError,
)
from validly.services.orchestrator import INTERNAL_ERROR_MESSAGE, ValidationOrchestrator

logger = get_logger(__name__)
router = APIRouter(tags=["validation"])


def get_orchestrator(settings: Settings = Depends(get_settings)) -> ValidationOrchestrator:
    """Build a validation orchestrator from settings."""
    return ValidationOrchestrator(settings.validation)


def error_response(status_code: int, error: KeyCheckError) -> JSONResponse:
    """Render a failed validation call in the same shape as a result."""
    body = ValidationResult(is_valid=False, error=error.message, error_kind=error.kind)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def result_response(result: ValidationResult) -> JSONResponse:
    """Render a completed validation. Valid results always carry ``tokenUsage``."""
    body = result.model_dump(mode="json", by_alias=True, exclude_none=True)
    if result.is_valid:
        body.setdefault("tokenUsage", None)
    return JSONResponse(content=body)


@router.post(
    "/validate",
    response_model=ValidationResult,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Missing input or unsupported provider"},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Unexpected internal failure"},
    },
)
async def validate_key(
    payload: ValidationRequest,
    orchestrator: ValidationOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """
    Check whether a provider accepts an API key and estimate its usage.

    Rejected keys are reported with HTTP 200 and ``isValid: false``.

    Args:
        payload: Provider and API key
        orchestrator: Validation orchestrator (injected)

    Returns:
        Validation result
    """
    try:
        result = await orchestrator.validate(payload)
    except (InputValidationError, UnsupportedProviderError) as e:
        logger.info(
            "Validation request rejected",
            extra={"provider": payload.provider, "error_kind": e.kind.value},
        )
        return error_response(status.HTTP_400_BAD_REQUEST, e)
    except InternalValidationError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
    except Exception as e:
        logger.error("Validation request failed", extra={"error_type": type(e).__name__})
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            InternalValidationError(INTERNAL_ERROR_MESSAGE),
        )

    logger.info(
        "Validation completed",
        extra={
            "provider": payload.provider,
            "is_valid": result.is_valid,
            "error_kind": result.error_kind.value if result.error_kind else None,
            "has_real_time_data": result.has_real_time_data,
        },
    )
    return result_response(result)
