"""
Services package for LegalEase.

Text extraction, OCR, language detection, and the Gemini-backed structured
inference client.
"""

from .gemini_router import GeminiRouter, GeminiModel, LegalExpertise, TaskComplexity
from .language import available_languages, detect_language, language_display_name
from .ocr import OcrCapability, TesseractOcr, ocr_session
from .structured_inference import (
    InferenceFailure,
    ModelCapability,
    StructuredInferenceClient,
    extract_json_object,
)
from .text_extractor import MediaType, SUPPORTED_MEDIA_TYPES, TextExtractor

__all__ = [
    "GeminiRouter",
    "GeminiModel",
    "LegalExpertise",
    "TaskComplexity",
    "available_languages",
    "detect_language",
    "language_display_name",
    "OcrCapability",
    "TesseractOcr",
    "ocr_session",
    "InferenceFailure",
    "ModelCapability",
    "StructuredInferenceClient",
    "extract_json_object",
    "MediaType",
    "SUPPORTED_MEDIA_TYPES",
    "TextExtractor",
]
