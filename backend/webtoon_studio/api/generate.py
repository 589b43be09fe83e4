"""Generation API router."""
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from webtoon_studio.models.generation import (
    GenerateFailure,
    GenerateRequest,
    GenerateResponse,
    GenerationHistoryItem,
)
from webtoon_studio.services.generation import GenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/generate", tags=["generate"])


def get_generation_service(request: Request) -> GenerationService:
    """FastAPI dependency: retrieve GenerationService from app.state.

    Returns HTTP 503 if the service was not initialized at startup.
    """
    svc: GenerationService | None = getattr(request.app.state, "generation_service", None)
    if svc is None:
        raise HTTPException(
            status_code=503,
            detail="Generation service unavailable. Service not initialized.",
        )
    return svc


@router.post(
    "",
    response_model=GenerateResponse,
    responses={500: {"model": GenerateFailure}},
)
async def generate(
    body: GenerateRequest,
    service: GenerationService = Depends(get_generation_service),
) -> Union[GenerateResponse, JSONResponse]:
    """Generate an image for a scenario and record the attempt.

    Provider failures still return 200 with a placeholder image and a
    non-empty ``diagnostic``.

    Raises:
        HTTPException 422: Validation error (handled by FastAPI automatically).
    """
    try:
        return await service.generate(body)
    except Exception as exc:
        logger.error(
            "generate failed",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        return JSONResponse(
            status_code=500,
            content=GenerateFailure().model_dump(by_alias=True),
        )


@router.get("", response_model=list[GenerationHistoryItem])
async def list_recent(
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: GenerationService = Depends(get_generation_service),
) -> list[GenerationHistoryItem] | JSONResponse:
    """Return recent generations, newest first, with their scenarios.

    Without ``limit`` the configured history size is used.
    """
    try:
        return service.list_recent(limit)
    except Exception as exc:
        logger.error(
            "list_recent failed",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        return JSONResponse(status_code=500, content={"error": "Failed to fetch history"})
