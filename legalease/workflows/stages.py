"""
AI-backed stages of the document analysis pipeline.

ClauseAnalysisStage splits document text into annotated clauses.
InsightAggregationStage turns the clause statistics into document-level
findings. Both always return a usable value: when the model fails they
substitute deterministic results built from what is already known.
"""

from collections import Counter
from typing import Any, Dict, List, Sequence

import structlog
from pydantic import ValidationError

from ..core.exceptions import ResponseShapeError
from ..models.schemas import ClauseRecord, DocumentInsights, RiskLevel
from ..services.structured_inference import (
    InferenceFailure,
    StructuredInferenceClient,
    backfill,
)


logger = structlog.get_logger()


# ═══════════════════════════════════════════════════════════════════════════════
# Clause analysis
# ═══════════════════════════════════════════════════════════════════════════════

CLAUSE_ANALYSIS_PROMPT = """Analyze the following legal document text and identify distinct clauses or sections. For each clause, provide:

1. The original clause text
2. A plain English summary (1-2 sentences)
3. Risk level (low/medium/high) with justification
4. Category (e.g., "Termination", "Payment", "Liability", "Confidentiality", "Dispute Resolution", etc.)
5. Whether it's a standard clause or unusual
6. Key risk factors or concerns

Document text:
{text}

Return your analysis in the following JSON format:
{{
  "clauses": [
    {{
      "text": "original clause text",
      "summary": "plain English explanation",
      "riskLevel": "low|medium|high",
      "riskFactors": ["list of specific risk factors"],
      "explanation": "detailed explanation of implications",
      "category": "clause category",
      "isStandard": true/false
    }}
  ]
}}

Focus on identifying clauses that could impact ordinary users' rights, obligations, or financial liability.
"""

CLAUSE_DEFAULTS: Dict[str, Any] = {
    "summary": "",
    "riskFactors": [],
    "explanation": "",
    "category": "General",
    "isStandard": False,
}

FALLBACK_EXCERPT_CHARS = 500


class ClauseAnalysisStage:
    """Segments document text into ClauseRecords."""

    def __init__(self, client: StructuredInferenceClient, max_prompt_chars: int = 30000):
        """
        Initialize the stage.

        Args:
            client: Structured inference client bound to the clause analyst model
            max_prompt_chars: Longest document excerpt embedded in the prompt
        """
        self.client = client
        self.max_prompt_chars = max_prompt_chars

    async def run(self, text: str) -> List[ClauseRecord]:
        """
        Identify and annotate the clauses of a document.

        Args:
            text: Extracted document text

        Returns:
            Clauses in the order the model reported them; never empty
        """
        clauses = await self.client.infer(
            prompt_template=CLAUSE_ANALYSIS_PROMPT,
            inputs={"text": text[:self.max_prompt_chars]},
            validator=parse_clauses,
            fallback_builder=lambda failure: fallback_clauses(text, failure),
            operation="clause_analysis",
        )

        logger.info(
            "clause_analysis_complete",
            clause_count=len(clauses),
            high_risk=sum(1 for c in clauses if c.risk_level == RiskLevel.HIGH)
        )
        return clauses


def parse_clauses(data: Dict[str, Any]) -> List[ClauseRecord]:
    """
    Validate the ``clauses`` list of a model reply.

    Elements that are not objects or have no text are dropped; an
    unrecognized risk level becomes medium.

    Raises:
        ResponseShapeError: If there is no list or no usable clause in it
    """
    items = data.get("clauses")
    if not isinstance(items, list):
        raise ResponseShapeError("'clauses' must be a list")

    clauses = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        try:
            clauses.append(ClauseRecord.model_validate(backfill(item, CLAUSE_DEFAULTS)))
        except ValidationError as e:
            logger.warning("clause_dropped", index=index, error=str(e))

    if not clauses:
        raise ResponseShapeError("reply contains no usable clauses")

    return clauses


def fallback_clauses(text: str, failure: InferenceFailure = None) -> List[ClauseRecord]:
    """Single placeholder clause used when automatic analysis fails."""
    return [
        ClauseRecord(
            text=text[:FALLBACK_EXCERPT_CHARS] + "...",
            summary="Unable to analyze clauses automatically. Please review document manually.",
            risk_level=RiskLevel.MEDIUM,
            risk_factors=["Automatic analysis failed"],
            explanation=(
                "The AI analysis service encountered an error. "
                "Consider consulting a legal professional for detailed review."
            ),
            category="Unknown",
            is_standard=False,
        )
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Insight aggregation
# ═══════════════════════════════════════════════════════════════════════════════

INSIGHT_PROMPT = """Based on the following legal document analysis, provide:

1. Overall document summary (2-3 sentences)
2. Document type identification
3. Key insights for ordinary users
4. Recommended actions
5. Overall risk assessment (0-100 scale)

Document contains {clause_count} clauses with the following risk levels:
- High risk: {high_count}
- Medium risk: {medium_count}
- Low risk: {low_count}

Sample clauses categories: {categories}

Document excerpt:
{excerpt}

Provide response in JSON format:
{{
  "summary": "overall document summary",
  "documentType": "contract type (e.g., Employment Agreement, Rental Agreement, etc.)",
  "keyInsights": ["insight 1", "insight 2", "insight 3"],
  "recommendedActions": ["action 1", "action 2", "action 3"],
  "overallRiskScore": numeric_value_0_to_100
}}
"""

INSIGHT_FIELDS = ("summary", "documentType", "keyInsights", "recommendedActions", "overallRiskScore")

INSIGHT_DEFAULTS: Dict[str, Any] = {
    "summary": "Document analysis completed",
    "documentType": "Legal Document",
    "keyInsights": [],
    "recommendedActions": [],
    "overallRiskScore": 50,
}

INSIGHT_EXCERPT_CHARS = 4000


def risk_counts(clauses: Sequence[ClauseRecord]) -> Counter:
    """Count clauses per risk level."""
    return Counter(clause.risk_level for clause in clauses)


def fallback_risk_score(high_risk_count: int) -> int:
    """30 plus 20 per high-risk clause, capped at 90."""
    return min(90, 30 + 20 * high_risk_count)


class InsightAggregationStage:
    """Produces document-level findings from clause analysis."""

    def __init__(self, client: StructuredInferenceClient):
        self.client = client

    async def run(self, text: str, clauses: Sequence[ClauseRecord]) -> DocumentInsights:
        """
        Summarize the document and score its overall risk.

        Args:
            text: Extracted document text
            clauses: Output of the clause analysis stage

        Returns:
            DocumentInsights from the model, or the deterministic fallback
        """
        counts = risk_counts(clauses)
        categories = list(dict.fromkeys(clause.category for clause in clauses))

        insights = await self.client.infer(
            prompt_template=INSIGHT_PROMPT,
            inputs={
                "clause_count": len(clauses),
                "high_count": counts[RiskLevel.HIGH],
                "medium_count": counts[RiskLevel.MEDIUM],
                "low_count": counts[RiskLevel.LOW],
                "categories": ", ".join(categories) or "None identified",
                "excerpt": text[:INSIGHT_EXCERPT_CHARS],
            },
            validator=parse_insights,
            fallback_builder=lambda failure: fallback_insights(clauses),
            operation="insight_aggregation",
        )

        logger.info(
            "insight_aggregation_complete",
            document_type=insights.document_type,
            risk_score=insights.overall_risk_score
        )
        return insights


def parse_insights(data: Dict[str, Any]) -> DocumentInsights:
    """
    Validate a document insights reply.

    At least one of the expected fields must be present; the rest are
    back-filled. Scores outside 0-100 are clamped.

    Raises:
        ResponseShapeError: If none of the expected fields are present
        ValidationError: If a field has the wrong type
    """
    if not any(field in data for field in INSIGHT_FIELDS):
        raise ResponseShapeError(f"reply has none of the fields {', '.join(INSIGHT_FIELDS)}")

    return DocumentInsights.model_validate(backfill(data, INSIGHT_DEFAULTS))


def fallback_insights(clauses: Sequence[ClauseRecord]) -> DocumentInsights:
    """Insights assembled from clause counts alone."""
    high_risk_count = risk_counts(clauses)[RiskLevel.HIGH]

    return DocumentInsights(
        summary="This document contains legal terms and conditions that require careful review.",
        document_type="Legal Document",
        key_insights=[
            f"Document contains {len(clauses)} identifiable clauses",
            f"{high_risk_count} clauses marked as high risk",
            "Consider professional legal review for complex terms",
        ],
        recommended_actions=[
            "Review all high-risk clauses carefully",
            "Seek clarification on unclear terms",
            "Consider legal consultation if needed",
        ],
        overall_risk_score=fallback_risk_score(high_risk_count),
    )
