"""
Legal translation of analysis text into the catalog languages.
"""

from typing import Any, Dict, List

import structlog

from ..core.exceptions import ResponseShapeError
from ..models.schemas import LanguageOption, TranslationResult
from ..services.language import available_languages, language_display_name
from ..services.structured_inference import InferenceFailure, StructuredInferenceClient


logger = structlog.get_logger()


TRANSLATION_PROMPT = """You are a legal translation specialist. Translate the following legal text from {source_name} to {target_name}.

IMPORTANT GUIDELINES:
1. Preserve legal meaning and nuance
2. Maintain formal legal tone
3. Include explanations for legal terms that don't have direct translations
4. Keep technical terms in brackets if needed: [original term]
5. Ensure cultural and legal context is appropriate for the target language
6. For Indian regional languages, consider Indian legal system context

Text to translate:
{text}

Provide response in JSON format:
{{
  "translatedText": "translated text here",
  "confidence": confidence_score_0_to_100,
  "notes": "any important translation notes or explanations"
}}

Focus on clarity and legal accuracy over literal word-for-word translation.
"""

SUMMARY_TRANSLATION_PROMPT = """Translate this legal document summary to {target_name}, keeping in mind it's for ordinary users who need to understand their legal rights and obligations.

Document Type: {document_type}
Summary: {summary}

Guidelines:
1. Use simple, accessible language in the target language
2. Explain legal concepts clearly
3. Maintain accuracy while improving comprehension
4. Include cultural context relevant to the target language region
5. For Indian languages, reference Indian legal system when relevant

Provide response in JSON format:
{{
  "translatedText": "user-friendly translated summary",
  "confidence": confidence_score_0_to_100
}}
"""

TRANSLATION_DEFAULTS: Dict[str, Any] = {"confidence": 70}


def _translation_validator(original: str, source_language: str, target_language: str):
    """Build a validator producing a TranslationResult for ``original``."""
    def validate(data: Dict[str, Any]) -> TranslationResult:
        translated = data.get("translatedText")
        if translated is not None and not isinstance(translated, str):
            raise ResponseShapeError("'translatedText' must be a string")
        return TranslationResult(
            original_text=original,
            translated_text=translated or original,
            source_language=source_language,
            target_language=target_language,
            confidence=data["confidence"],
        )
    return validate


class TranslationOrchestrator:
    """
    Translates legal text while preserving its meaning.

    Neither translate method raises; failures come back as results.
    """

    def __init__(self, client: StructuredInferenceClient):
        """
        Args:
            client: Structured inference client bound to the legal translator model
        """
        self.client = client

    async def translate(
        self,
        text: str,
        target_language: str = "hi",
        source_language: str = "en",
    ) -> TranslationResult:
        """
        Translate text between two catalog languages.

        Unknown language codes are passed to the model as-is.

        Returns:
            TranslationResult; "Translation failed: <reason>" with
            confidence 0 if the model fails
        """
        logger.info(
            "translation_requested",
            source_language=source_language,
            target_language=target_language,
            characters=len(text)
        )

        def fallback(failure: InferenceFailure) -> TranslationResult:
            return TranslationResult(
                original_text=text,
                translated_text=f"Translation failed: {failure.reason}",
                source_language=source_language,
                target_language=target_language,
                confidence=0,
            )

        return await self.client.infer(
            prompt_template=TRANSLATION_PROMPT,
            inputs={
                "source_name": language_display_name(source_language),
                "target_name": language_display_name(target_language),
                "text": text,
            },
            validator=_translation_validator(text, source_language, target_language),
            fallback_builder=fallback,
            defaults=TRANSLATION_DEFAULTS,
            operation="translate",
        )

    async def translate_summary(
        self,
        summary: str,
        document_type: str,
        target_language: str = "hi",
    ) -> TranslationResult:
        """
        Translate a document summary for a lay reader.

        Falls back to a plain ``translate(summary, target_language, "en")``
        when the summary-specific call fails.
        """
        failures: List[InferenceFailure] = []

        result = await self.client.infer(
            prompt_template=SUMMARY_TRANSLATION_PROMPT,
            inputs={
                "target_name": language_display_name(target_language),
                "document_type": document_type,
                "summary": summary,
            },
            validator=_translation_validator(summary, "en", target_language),
            fallback_builder=failures.append,
            defaults=TRANSLATION_DEFAULTS,
            operation="translate_summary",
        )

        if failures:
            logger.warning(
                "summary_translation_degraded",
                stage=failures[0].stage,
                reason=failures[0].reason
            )
            return await self.translate(summary, target_language, "en")

        return result

    def available_languages(self) -> List[LanguageOption]:
        """Languages offered for translation, in catalog order."""
        return available_languages()
