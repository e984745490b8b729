"""
Unit tests for environment-driven settings.
"""

from legalease.config import Settings


class TestSettings:
    """Test Settings.from_env."""

    def test_defaults(self, monkeypatch):
        for name in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "GEMINI_TIMEOUT_SECONDS",
                     "MAX_UPLOAD_BYTES", "LOG_JSON", "OCR_LANGUAGE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env(load_dotenv_file=False)

        assert settings.google_api_key is None
        assert settings.gemini_timeout_seconds == 30.0
        assert settings.max_upload_bytes == 10 * 1024 * 1024
        assert settings.ocr_language == "eng"
        assert settings.log_json is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "key-123")
        monkeypatch.setenv("GEMINI_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "2048")
        monkeypatch.setenv("OCR_LANGUAGE", "eng+hin")
        monkeypatch.setenv("LOG_JSON", "false")

        settings = Settings.from_env(load_dotenv_file=False)

        assert settings.google_api_key == "key-123"
        assert settings.gemini_timeout_seconds == 12.5
        assert settings.max_upload_bytes == 2048
        assert settings.ocr_language == "eng+hin"
        assert settings.log_json is False

    def test_gemini_api_key_fallback(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "legacy-key")

        assert Settings.from_env(load_dotenv_file=False).google_api_key == "legacy-key"

    def test_dotenv_file_is_loaded(self, monkeypatch, tmp_path):
        # setenv first so teardown also removes the value loaded from .env
        monkeypatch.setenv("OCR_LANGUAGE", "unset")
        monkeypatch.delenv("OCR_LANGUAGE")
        (tmp_path / ".env").write_text("OCR_LANGUAGE=tam\n")
        monkeypatch.chdir(tmp_path)

        assert Settings.from_env().ocr_language == "tam"
