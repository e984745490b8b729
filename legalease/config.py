"""
Runtime configuration for LegalEase.

Settings are read from environment variables, optionally seeded from a
``.env`` file in the working directory.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Application settings."""
    google_api_key: Optional[str] = None
    gemini_timeout_seconds: float = 30.0
    gemini_max_timeout_seconds: float = 120.0
    ocr_language: str = "eng"
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB, same limit as the upload form
    max_prompt_chars: int = 30000
    log_level: str = "INFO"
    log_json: bool = True

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        """
        Build settings from the process environment.

        Args:
            load_dotenv_file: Load a ``.env`` file first (existing variables win)

        Returns:
            Populated Settings instance
        """
        if load_dotenv_file:
            load_dotenv(find_dotenv(usecwd=True))

        return cls(
            google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
            gemini_timeout_seconds=float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30")),
            gemini_max_timeout_seconds=float(os.getenv("GEMINI_MAX_TIMEOUT_SECONDS", "120")),
            ocr_language=os.getenv("OCR_LANGUAGE", "eng"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            max_prompt_chars=int(os.getenv("MAX_PROMPT_CHARS", "30000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", True),
        )
