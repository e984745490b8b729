"""
Text extraction for uploaded legal documents.

Dispatches on the declared media type only; file extensions and content
sniffing are never consulted. Supported: PDF (PyMuPDF), Word documents
(python-docx), plain text, and JPEG/PNG/TIFF images (OCR).
"""

import asyncio
import io
import os
from enum import Enum
from typing import Callable, Dict, Optional, Union

import docx
import fitz  # PyMuPDF
import structlog

from ..core.exceptions import ExtractionError, UnsupportedFormatError
from ..utils.performance import log_execution_time
from .ocr import OcrCapability, TesseractOcr, ocr_session


logger = structlog.get_logger()

DocumentSource = Union[str, "os.PathLike[str]", bytes]


class MediaType(str, Enum):
    """Media types the extractor accepts."""
    PDF = "application/pdf"
    LEGACY_DOC = "application/msword"
    DOC_XML = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    PLAIN_TEXT = "text/plain"
    JPEG = "image/jpeg"
    PNG = "image/png"
    TIFF = "image/tiff"


SUPPORTED_MEDIA_TYPES = frozenset(m.value for m in MediaType)


def normalize_media_type(media_type: str) -> str:
    """Lower-case a media type and drop parameters such as ``; charset=utf-8``."""
    return (media_type or "").split(";", 1)[0].strip().lower()


class TextExtractor:
    """
    Converts a document source into plain text.

    The source is a filesystem path or the raw document bytes. For plain
    text a string that does not name an existing file is taken to be the
    text itself, which is how pasted text enters the pipeline.

    Usage:
        extractor = TextExtractor()
        text = extractor.extract("/tmp/lease.pdf", "application/pdf")
    """

    def __init__(
        self,
        ocr_engine: Optional[OcrCapability] = None,
        ocr_language: str = "eng",
    ):
        """
        Initialize the extractor.

        Args:
            ocr_engine: OCR capability for image types (Tesseract if None)
            ocr_language: Language hint handed to the OCR engine
        """
        self.ocr_engine = ocr_engine or TesseractOcr()
        self.ocr_language = ocr_language

        self.handlers: Dict[MediaType, Callable[[DocumentSource], str]] = {
            MediaType.PDF: self._extract_pdf,
            MediaType.LEGACY_DOC: self._extract_word,
            MediaType.DOC_XML: self._extract_word,
            MediaType.PLAIN_TEXT: self._extract_plain_text,
            MediaType.JPEG: self._extract_image,
            MediaType.PNG: self._extract_image,
            MediaType.TIFF: self._extract_image,
        }

    @log_execution_time("text_extraction")
    def extract(self, source: DocumentSource, media_type: str) -> str:
        """
        Extract plain text from a document.

        Args:
            source: File path, raw bytes, or (for text/plain) the text itself
            media_type: Declared media type of the source

        Returns:
            Extracted text, possibly empty

        Raises:
            UnsupportedFormatError: If the media type is not supported
            ExtractionError: If parsing or OCR fails
        """
        normalized = normalize_media_type(media_type)
        if normalized not in SUPPORTED_MEDIA_TYPES:
            raise UnsupportedFormatError(media_type)

        handler = self.handlers[MediaType(normalized)]

        try:
            text = handler(source)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(
                "text_extraction_failed",
                media_type=normalized,
                error=str(e)
            )
            raise ExtractionError(f"Failed to extract text from document: {e}") from e

        logger.info(
            "text_extracted",
            media_type=normalized,
            characters=len(text)
        )
        return text

    async def aextract(self, source: DocumentSource, media_type: str) -> str:
        """Run ``extract`` in a worker thread."""
        return await asyncio.to_thread(self.extract, source, media_type)

    # --- Handlers ---

    def _extract_pdf(self, source: DocumentSource) -> str:
        data = self._read_bytes(source)
        with fitz.open(stream=data, filetype="pdf") as doc:
            return "\n".join(page.get_text("text") for page in doc)

    def _extract_word(self, source: DocumentSource) -> str:
        # python-docx reads the XML format only; a binary .doc raises here
        # and surfaces as an ExtractionError.
        document = docx.Document(io.BytesIO(self._read_bytes(source)))

        lines = [para.text for para in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                lines.append("\t".join(cell.text for cell in row.cells))

        return "\n".join(lines)

    def _extract_plain_text(self, source: DocumentSource) -> str:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source).decode("utf-8", errors="replace")

        path = os.fspath(source)
        if os.path.isfile(path):
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()

        # Not a file: the string is the text payload
        return path

    def _extract_image(self, source: DocumentSource) -> str:
        with ocr_session(self.ocr_engine, self.ocr_language) as handle:
            return self.ocr_engine.recognize(handle, source)

    @staticmethod
    def _read_bytes(source: DocumentSource) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        with open(os.fspath(source), "rb") as f:
            return f.read()
