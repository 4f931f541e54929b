"""
URL extraction API routes.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from app.services.extraction_service import ExtractionService

router = APIRouter()

# Lazy initialization
_extraction_service: Optional[ExtractionService] = None

ERROR_STATUS = {
    'validation': 400,
    'not_found': 400,
    'failure': 500,
}


def get_extraction_service() -> ExtractionService:
    """Get or create ExtractionService instance."""
    global _extraction_service
    if _extraction_service is None:
        try:
            _extraction_service = ExtractionService()
            logger.info("ExtractionService initialized successfully")
        except Exception:
            logger.exception("Failed to initialize ExtractionService")
            raise
    return _extraction_service


class ExtractRequest(BaseModel):
    """Request model for URL extraction."""
    url: Optional[str] = Field(None, description="Google News article URL")


class ExtractResponse(BaseModel):
    """Response model for a resolved URL."""
    model_config = ConfigDict(populate_by_name=True)

    target_url: str = Field(..., alias="targetUrl")


class RecentExtractionsResponse(BaseModel):
    items: List[Dict[str, Any]]


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post(
    "",
    response_model=ExtractResponse,
    responses={
        400: {"description": "Invalid input, or no article link on the page"},
        500: {"description": "Browser launch or navigation failure"},
    },
)
async def extract_url(request: ExtractRequest):
    """
    Resolve a Google News link to the publisher's article URL.

    Returns:
        {"targetUrl": ...} on success, {"message": ...} with 400/500 otherwise
    """
    url = (request.url or "").strip()
    if not url:
        return _message(400, "URL is required")

    try:
        service = get_extraction_service()
        result = await service.extract(url)
    except Exception as e:
        logger.exception("Unexpected extraction failure")
        return _message(500, f"Failed to extract target URL: {e}")

    if result.get('success'):
        return ExtractResponse(target_url=result['target_url'])

    status_code = ERROR_STATUS.get(result.get('error_type'), 500)
    return _message(status_code, result.get('error') or "Failed to extract target URL")


@router.get("/recent", response_model=RecentExtractionsResponse)
async def list_recent_extractions():
    """List the most recent successful extractions, newest first."""
    service = get_extraction_service()
    return RecentExtractionsResponse(items=service.history.list_recent())


@router.delete("/recent")
async def clear_recent_extractions():
    """Forget all recent extractions."""
    service = get_extraction_service()
    service.history.clear()
    logger.info("Recent extractions cleared")
    return {"status": "cleared"}
