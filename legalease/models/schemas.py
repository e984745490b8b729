"""
Pydantic schemas for LegalEase.

These models define the analysis, Q&A and translation records produced by the
inference pipeline, plus the request/response structures of the API layer.

Attributes are snake_case in Python and camelCase on the wire (``riskLevel``,
``overallRiskScore``...). Both spellings are accepted when validating, so a
model reply can be validated directly against these schemas.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def clamp_score(value: Any) -> int:
    """
    Coerce a 0-100 score into range.

    Args:
        value: Number or numeric string from a model reply

    Returns:
        Integer score clamped into [0, 100]

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, bool):
        raise ValueError(f"Score must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Score must be numeric, got {value!r}")
    if number != number:  # NaN
        raise ValueError("Score must not be NaN")
    return int(round(min(100.0, max(0.0, number))))


class RiskLevel(str, Enum):
    """Risk severity levels for a clause."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def coerce(cls, value: Any) -> "RiskLevel":
        """Map any value onto a risk level, defaulting to MEDIUM."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.MEDIUM


class CamelModel(BaseModel):
    """Immutable model serialized with camelCase field names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ClauseRecord(CamelModel):
    """A single contractual provision annotated with risk metadata."""
    text: str = Field(..., description="Verbatim excerpt from the source document")
    summary: str = Field(default="", description="Plain-language gloss of the clause")
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM, description="low, medium or high")
    risk_factors: List[str] = Field(
        default_factory=list,
        description="Short phrases naming specific risks"
    )
    explanation: str = Field(default="", description="Implications of the clause")
    category: str = Field(default="General", description="Free-form clause category")
    is_standard: bool = Field(default=False, description="Whether this is a boilerplate clause")

    @field_validator("risk_level", mode="before")
    @classmethod
    def coerce_risk_level(cls, v: Any) -> RiskLevel:
        """Unrecognized risk levels become MEDIUM instead of failing."""
        return RiskLevel.coerce(v)


class DocumentAnalysis(CamelModel):
    """Complete analysis of one document."""
    summary: str = Field(..., description="Overall document summary")
    clauses: List[ClauseRecord] = Field(
        default_factory=list,
        description="Clauses in the order the model reported them"
    )
    overall_risk_score: int = Field(..., ge=0, le=100, description="Risk score (0-100)")
    key_insights: List[str] = Field(default_factory=list, description="Key insights for the reader")
    recommended_actions: List[str] = Field(
        default_factory=list,
        description="Suggested next steps"
    )
    language: str = Field(default="en", description="Detected document language code")
    document_type: str = Field(default="Legal Document", description="Document type label")

    @field_validator("overall_risk_score", mode="before")
    @classmethod
    def clamp_risk_score(cls, v: Any) -> int:
        return clamp_score(v)


class DocumentInsights(CamelModel):
    """Document-level findings produced from the clause analysis."""
    summary: str = Field(default="Document analysis completed", description="Overall summary")
    document_type: str = Field(default="Legal Document", description="Document type label")
    key_insights: List[str] = Field(default_factory=list, description="Key insights")
    recommended_actions: List[str] = Field(default_factory=list, description="Suggested next steps")
    overall_risk_score: int = Field(default=50, ge=0, le=100, description="Risk score (0-100)")

    @field_validator("overall_risk_score", mode="before")
    @classmethod
    def clamp_risk_score(cls, v: Any) -> int:
        return clamp_score(v)


class QAResult(CamelModel):
    """Answer to a single question about a document."""
    question: str = Field(..., description="The question that was asked")
    answer: str = Field(..., description="Plain-language answer")
    related_clauses: List[str] = Field(
        default_factory=list,
        description="Clause excerpts the answer relies on"
    )
    confidence: int = Field(default=50, ge=0, le=100, description="Confidence (0-100)")
    follow_up_questions: List[str] = Field(
        default_factory=list,
        description="Suggested follow-up questions"
    )

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> int:
        return clamp_score(v)


class TranslationResult(CamelModel):
    """Result of translating a piece of text."""
    original_text: str = Field(..., description="Text that was translated")
    translated_text: str = Field(..., description="Translated text")
    source_language: str = Field(default="en", description="Source language code")
    target_language: str = Field(..., description="Target language code")
    confidence: int = Field(default=70, ge=0, le=100, description="Confidence (0-100)")

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> int:
        return clamp_score(v)


class LanguageOption(CamelModel):
    """A selectable language."""
    code: str = Field(..., description="Language code (e.g. 'hi')")
    display_name: str = Field(..., description="Human-readable language name")


# API-specific request/response models for FastAPI endpoints

class AnalyzeTextRequest(CamelModel):
    """Request body for analyzing pasted text."""
    text: str = Field(..., description="Document text to analyze")


class QuestionRequest(CamelModel):
    """Request body for asking a question about a document."""
    question: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Natural language question about the document"
    )
    document_context: str = Field(..., min_length=1, description="Document text or summary")
    language: str = Field(default="en", description="Language code for the answer")


class TranslateRequest(CamelModel):
    """Request body for translating text."""
    text: str = Field(..., min_length=1, description="Text to translate")
    target_language: str = Field(default="hi", description="Target language code")
    source_language: str = Field(default="en", description="Source language code")


class TranslateSummaryRequest(CamelModel):
    """Request body for translating a document summary."""
    summary: str = Field(..., min_length=1, description="Summary to translate")
    document_type: str = Field(default="Legal Document", description="Document type label")
    target_language: str = Field(default="hi", description="Target language code")


class SuggestedQuestionsRequest(CamelModel):
    """Request body for generating questions about a document."""
    document_context: str = Field(..., min_length=1, description="Document text or summary")


class ErrorResponse(BaseModel):
    """Standard error response format."""
    error: str = Field(..., description="Error type or code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional error details"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the error occurred"
    )
