"""
Decorators for FastAPI endpoints.

Maps the document-processing errors onto HTTP status codes and turns any
other failure into a structured 500.
"""

import logging
from functools import wraps
from typing import Callable, Dict, Type, TypeVar

from fastapi import HTTPException

from ..core.exceptions import (
    DocumentProcessingError,
    ExtractionError,
    NoContentError,
    UnsupportedFormatError,
)
from ..models.schemas import ErrorResponse

logger = logging.getLogger(__name__)

T = TypeVar('T')

DOCUMENT_ERROR_STATUS: Dict[Type[DocumentProcessingError], int] = {
    UnsupportedFormatError: 415,
    NoContentError: 422,
    ExtractionError: 422,
}


def status_for(error: DocumentProcessingError) -> int:
    """HTTP status for a document-processing error (422 if unmapped)."""
    for error_type, status_code in DOCUMENT_ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status_code
    return 422


def handle_endpoint_errors(error_type: str) -> Callable:
    """
    Decorator for consistent endpoint error handling.

    Wraps async endpoint functions to:
    - Re-raise HTTPException unchanged
    - Convert DocumentProcessingError to 415/422 carrying the error's kind
    - Convert other exceptions to 500 HTTPException with structured detail

    Args:
        error_type: Error type string for unexpected failures

    Example:
        @app.post("/api/analyze-text")
        @handle_endpoint_errors("AnalysisError")
        async def analyze_text(request: AnalyzeTextRequest):
            return await pipeline.analyze_text(request.text)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except DocumentProcessingError as e:
                logger.warning(f"{func.__name__} rejected document: {e.kind}: {e}")
                raise HTTPException(
                    status_code=status_for(e),
                    detail={
                        "error": e.kind,
                        "message": str(e)
                    }
                )
            except Exception as e:
                logger.error(
                    f"Error in {func.__name__}: {e}",
                    exc_info=True
                )
                raise HTTPException(
                    status_code=500,
                    detail=ErrorResponse(
                        error=error_type,
                        message=str(e),
                    ).model_dump(mode="json", exclude_none=True)
                )
        return wrapper
    return decorator
