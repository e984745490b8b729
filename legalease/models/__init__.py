"""
Models package for LegalEase.

Pydantic schemas for analysis records, API requests and responses.
"""

from .schemas import (
    RiskLevel,
    ClauseRecord,
    DocumentAnalysis,
    DocumentInsights,
    QAResult,
    TranslationResult,
    LanguageOption,
    AnalyzeTextRequest,
    QuestionRequest,
    TranslateRequest,
    TranslateSummaryRequest,
    SuggestedQuestionsRequest,
    ErrorResponse,
    clamp_score,
)

__all__ = [
    "RiskLevel",
    "ClauseRecord",
    "DocumentAnalysis",
    "DocumentInsights",
    "QAResult",
    "TranslationResult",
    "LanguageOption",
    "AnalyzeTextRequest",
    "QuestionRequest",
    "TranslateRequest",
    "TranslateSummaryRequest",
    "SuggestedQuestionsRequest",
    "ErrorResponse",
    "clamp_score",
]
