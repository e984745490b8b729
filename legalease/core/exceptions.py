"""
Exception hierarchy for LegalEase.

Fatal-tier errors (everything under DocumentProcessingError) abort an analysis
and reach the caller with a stable ``kind`` so the UI can tell them apart.
ResponseShapeError belongs to the degraded tier and never leaves the
structured inference client.
"""


class LegalEaseError(Exception):
    """Base exception for all LegalEase errors."""
    pass


class DocumentProcessingError(LegalEaseError):
    """Raised when a document cannot be turned into analyzable text."""

    kind = "DocumentProcessingError"


class UnsupportedFormatError(DocumentProcessingError):
    """Raised when the declared media type is outside the supported set."""

    kind = "UnsupportedFormat"

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(f"Unsupported file type: {media_type}")


class ExtractionError(DocumentProcessingError):
    """Raised when parsing or OCR of a supported document fails."""

    kind = "ExtractionFailed"


class NoContentError(DocumentProcessingError):
    """Raised when extraction succeeded but produced no text."""

    kind = "NoContent"

    def __init__(self, message: str = "No text content found in document"):
        super().__init__(message)


class ResponseShapeError(LegalEaseError):
    """Raised when a parsed model reply does not have the expected shape."""
    pass
