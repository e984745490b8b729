"""
OCR capability for scanned documents and photographs of documents.

The extractor talks to OCR through a three-call protocol: ``begin`` acquires
a recognition session, ``recognize`` reads one image with it, and ``end``
releases it. ``ocr_session`` wraps the pair so that ``end`` runs exactly
once per ``begin`` on every exit path.
"""

import io
import logging
import os
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Protocol, Union

from PIL import Image
import pytesseract


logger = logging.getLogger(__name__)

ImageSource = Union[str, "os.PathLike[str]", bytes]


class OcrCapability(Protocol):
    """Interface of an OCR engine."""

    def begin(self, language_hint: str) -> Any:
        ...

    def recognize(self, handle: Any, image: ImageSource) -> str:
        ...

    def end(self, handle: Any) -> None:
        ...


@dataclass
class TesseractSession:
    """Handle for an acquired Tesseract recognition session."""
    language: str
    config: str = ""
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    closed: bool = False


class TesseractOcr:
    """
    OCR engine backed by the Tesseract binary through pytesseract.

    ``begin`` verifies the binary is reachable and fixes the recognition
    language for the session, so a missing installation fails before any
    image is decoded.
    """

    def __init__(self, tesseract_cmd: str = None, config: str = ""):
        """
        Initialize the OCR engine.

        Args:
            tesseract_cmd: Path to the tesseract executable (defaults to PATH lookup)
            config: Extra command-line options passed to tesseract
        """
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.config = config

    def begin(self, language_hint: str = "eng") -> TesseractSession:
        version = pytesseract.get_tesseract_version()
        session = TesseractSession(language=language_hint or "eng", config=self.config)
        logger.debug(
            f"OCR session {session.session_id} started "
            f"(tesseract {version}, lang={session.language})"
        )
        return session

    def recognize(self, handle: TesseractSession, image: ImageSource) -> str:
        if handle.closed:
            raise RuntimeError(f"OCR session {handle.session_id} is already closed")

        if isinstance(image, (bytes, bytearray)):
            source = io.BytesIO(image)
        else:
            source = os.fspath(image)

        with Image.open(source) as img:
            frames = []
            # Multi-page TIFFs carry one page per frame
            for index in range(getattr(img, "n_frames", 1)):
                img.seek(index)
                frames.append(
                    pytesseract.image_to_string(
                        img.convert("RGB"),
                        lang=handle.language,
                        config=handle.config,
                    )
                )

        return "\n\n".join(frame.strip() for frame in frames if frame.strip())

    def end(self, handle: TesseractSession) -> None:
        handle.closed = True
        logger.debug(f"OCR session {handle.session_id} closed")


@contextmanager
def ocr_session(engine: OcrCapability, language_hint: str) -> Iterator[Any]:
    """
    Acquire an OCR session and release it on every exit path.

    Usage:
        with ocr_session(engine, "eng") as handle:
            text = engine.recognize(handle, "scan.png")
    """
    handle = engine.begin(language_hint)
    try:
        yield handle
    finally:
        engine.end(handle)
