"""
Unit tests for the clause analysis and insight aggregation stages.
"""

import json

import pytest

from legalease.core.exceptions import ResponseShapeError
from legalease.models.schemas import ClauseRecord, RiskLevel
from legalease.workflows.stages import (
    ClauseAnalysisStage,
    InsightAggregationStage,
    fallback_clauses,
    fallback_risk_score,
    parse_clauses,
    parse_insights,
)


def _clauses(*levels):
    return [ClauseRecord(text=f"clause {i}", risk_level=level, category="Payment")
            for i, level in enumerate(levels)]


class TestParseClauses:
    """Test validation of clause analysis replies."""

    def test_missing_fields_are_backfilled(self):
        clauses = parse_clauses({"clauses": [{"text": "Rent is due monthly."}]})

        assert clauses[0].summary == ""
        assert clauses[0].risk_level == RiskLevel.MEDIUM
        assert clauses[0].category == "General"
        assert clauses[0].is_standard is False

    def test_elements_without_text_are_dropped(self):
        clauses = parse_clauses({"clauses": [
            {"summary": "no text"},
            "not an object",
            {"text": "   "},
            {"text": "Kept clause"},
        ]})

        assert [c.text for c in clauses] == ["Kept clause"]

    def test_invalid_element_is_dropped(self):
        clauses = parse_clauses({"clauses": [
            {"text": "Bad factors", "riskFactors": "not a list"},
            {"text": "Good clause"},
        ]})

        assert [c.text for c in clauses] == ["Good clause"]

    def test_missing_list_is_rejected(self):
        with pytest.raises(ResponseShapeError):
            parse_clauses({"sections": []})

    def test_empty_list_is_rejected(self):
        with pytest.raises(ResponseShapeError):
            parse_clauses({"clauses": []})

    def test_order_is_preserved(self):
        clauses = parse_clauses({"clauses": [{"text": "first"}, {"text": "second"}]})
        assert [c.text for c in clauses] == ["first", "second"]


class TestClauseAnalysisStage:
    """Test the clause analysis stage end to end over a fake model."""

    @pytest.mark.asyncio
    async def test_returns_model_clauses(self, fake_client, clause_reply, sample_contract_text):
        stage = ClauseAnalysisStage(fake_client(clause_reply))

        clauses = await stage.run(sample_contract_text)

        assert len(clauses) == 3
        assert clauses[1].risk_level == RiskLevel.HIGH
        assert clauses[1].risk_factors == ["Forfeiture of deposit"]

    @pytest.mark.asyncio
    async def test_prompt_contains_truncated_text(self, fake_client, clause_reply):
        client = fake_client(clause_reply)
        stage = ClauseAnalysisStage(client, max_prompt_chars=10)

        await stage.run("0123456789ABCDEF")

        prompt = client.model.generate.await_args.args[0]
        assert "0123456789" in prompt
        assert "ABCDEF" not in prompt

    @pytest.mark.asyncio
    async def test_model_failure_yields_single_fallback_clause(self, fake_client):
        text = "x" * 600
        stage = ClauseAnalysisStage(fake_client(RuntimeError("down")))

        clauses = await stage.run(text)

        assert len(clauses) == 1
        assert clauses[0].text == "x" * 500 + "..."
        assert clauses[0].risk_level == RiskLevel.MEDIUM
        assert clauses[0].category == "Unknown"
        assert clauses[0].risk_factors == ["Automatic analysis failed"]

    @pytest.mark.asyncio
    async def test_all_invalid_clauses_fall_back(self, fake_client):
        stage = ClauseAnalysisStage(fake_client(json.dumps({"clauses": [{"summary": "x"}]})))

        clauses = await stage.run("Short document")

        assert clauses == fallback_clauses("Short document")

    def test_fallback_excerpt_of_short_text(self):
        assert fallback_clauses("Short")[0].text == "Short..."


class TestFallbackRiskScore:
    """Test the deterministic risk score."""

    @pytest.mark.parametrize("high_count, expected", [
        (0, 30),
        (1, 50),
        (3, 90),
        (5, 90),
    ])
    def test_score(self, high_count, expected):
        assert fallback_risk_score(high_count) == expected


class TestParseInsights:
    """Test validation of insight replies."""

    def test_partial_reply_is_backfilled(self):
        insights = parse_insights({"summary": "A lease."})

        assert insights.summary == "A lease."
        assert insights.document_type == "Legal Document"
        assert insights.overall_risk_score == 50
        assert insights.key_insights == []

    def test_out_of_range_score_is_clamped(self):
        assert parse_insights({"overallRiskScore": 250}).overall_risk_score == 100

    def test_reply_without_expected_fields_is_rejected(self):
        with pytest.raises(ResponseShapeError):
            parse_insights({"foo": "bar"})


class TestInsightAggregationStage:
    """Test the insight aggregation stage over a fake model."""

    @pytest.mark.asyncio
    async def test_returns_model_insights(self, fake_client, insight_reply):
        stage = InsightAggregationStage(fake_client(insight_reply))

        insights = await stage.run("text", _clauses(RiskLevel.HIGH, RiskLevel.LOW))

        assert insights.document_type == "Rental Agreement"
        assert insights.overall_risk_score == 72

    @pytest.mark.asyncio
    async def test_prompt_reports_counts_and_categories(self, fake_client, insight_reply):
        client = fake_client(insight_reply)
        clauses = [
            ClauseRecord(text="a", risk_level="high", category="Termination"),
            ClauseRecord(text="b", risk_level="high", category="Payment"),
            ClauseRecord(text="c", risk_level="low", category="Termination"),
        ]

        await InsightAggregationStage(client).run("text", clauses)

        prompt = client.model.generate.await_args.args[0]
        assert "Document contains 3 clauses" in prompt
        assert "- High risk: 2" in prompt
        assert "- Medium risk: 0" in prompt
        assert "- Low risk: 1" in prompt
        assert "Sample clauses categories: Termination, Payment" in prompt

    @pytest.mark.asyncio
    async def test_failure_uses_clause_counts(self, fake_client):
        stage = InsightAggregationStage(fake_client("not json"))
        clauses = _clauses(RiskLevel.HIGH, RiskLevel.HIGH, RiskLevel.LOW)

        insights = await stage.run("text", clauses)

        assert insights.overall_risk_score == 70
        assert insights.document_type == "Legal Document"
        assert insights.key_insights[0] == "Document contains 3 identifiable clauses"
        assert insights.key_insights[1] == "2 clauses marked as high risk"
        assert insights.summary == (
            "This document contains legal terms and conditions that require careful review."
        )
