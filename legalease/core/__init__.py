"""Core error types shared by services, workflows and the API layer."""

from .exceptions import (
    LegalEaseError,
    DocumentProcessingError,
    UnsupportedFormatError,
    ExtractionError,
    NoContentError,
    ResponseShapeError,
)

__all__ = [
    "LegalEaseError",
    "DocumentProcessingError",
    "UnsupportedFormatError",
    "ExtractionError",
    "NoContentError",
    "ResponseShapeError",
]
