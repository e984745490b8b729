"""
Unit tests for the LangGraph document analysis pipeline.

Stages run over fake models; extraction uses a real TextExtractor on pasted
text or a fake OCR engine.
"""

import json

import pytest

from legalease.core.exceptions import ExtractionError, NoContentError, UnsupportedFormatError
from legalease.models.schemas import DocumentAnalysis, RiskLevel
from legalease.services.text_extractor import TextExtractor
from legalease.workflows.document_analysis import DocumentAnalysisPipeline
from legalease.workflows.stages import ClauseAnalysisStage, InsightAggregationStage


@pytest.fixture
def build_pipeline(fake_client):
    """Pipeline factory taking the clause and insight replies."""
    def build(clause_reply, insight_reply, extractor=None):
        clause_client = fake_client(clause_reply)
        insight_client = fake_client(insight_reply)
        pipeline = DocumentAnalysisPipeline(
            extractor=extractor or TextExtractor(),
            clause_stage=ClauseAnalysisStage(clause_client),
            insight_stage=InsightAggregationStage(insight_client),
        )
        return pipeline, clause_client, insight_client
    return build


class TestDocumentAnalysisPipeline:
    """Test the full analysis flow."""

    @pytest.mark.asyncio
    async def test_successful_analysis(
        self, build_pipeline, clause_reply, insight_reply, sample_contract_text
    ):
        pipeline, _, _ = build_pipeline(clause_reply, insight_reply)

        analysis = await pipeline.analyze_text(sample_contract_text)

        assert isinstance(analysis, DocumentAnalysis)
        assert analysis.summary == "A residential lease that favours the landlord."
        assert analysis.document_type == "Rental Agreement"
        assert analysis.overall_risk_score == 72
        assert analysis.language == "en"
        assert [c.category for c in analysis.clauses] == ["Payment", "Deposit", "Termination"]

    @pytest.mark.asyncio
    async def test_all_models_failing_still_produces_analysis(self, build_pipeline):
        pipeline, _, _ = build_pipeline(RuntimeError("down"), RuntimeError("down"))

        analysis = await pipeline.analyze_text("Short lease text")

        assert len(analysis.clauses) == 1
        assert analysis.clauses[0].text == "Short lease text..."
        assert analysis.overall_risk_score == 30
        assert analysis.document_type == "Legal Document"
        assert analysis.recommended_actions[0] == "Review all high-risk clauses carefully"

    @pytest.mark.asyncio
    async def test_pasted_text_naming_a_file_is_not_read(self, build_pipeline, tmp_path):
        secret = tmp_path / "secret.env"
        secret.write_text("DB_PASSWORD=hunter2\n")
        pipeline, clause_client, _ = build_pipeline(RuntimeError("down"), RuntimeError("down"))

        analysis = await pipeline.analyze_text(str(secret))

        assert analysis.clauses[0].text == f"{secret}..."
        assert "hunter2" not in clause_client.model.generate.await_args.args[0]

    @pytest.mark.asyncio
    async def test_insight_failure_scores_from_high_risk_clauses(
        self, build_pipeline, clause_reply
    ):
        pipeline, _, _ = build_pipeline(clause_reply, "Sorry, no JSON today")

        analysis = await pipeline.analyze_text("Lease text")

        high = sum(1 for c in analysis.clauses if c.risk_level == RiskLevel.HIGH)
        assert high == 2
        assert analysis.overall_risk_score == 70

    @pytest.mark.asyncio
    async def test_ai_score_is_clamped(self, build_pipeline, clause_reply):
        pipeline, _, _ = build_pipeline(clause_reply, json.dumps({"overallRiskScore": 180}))

        analysis = await pipeline.analyze_text("Lease text")

        assert analysis.overall_risk_score == 100
        assert analysis.summary == "Document analysis completed"

    @pytest.mark.asyncio
    async def test_language_is_detected(self, build_pipeline, clause_reply, insight_reply):
        pipeline, _, _ = build_pipeline(clause_reply, insight_reply)

        analysis = await pipeline.analyze_text("यह किराया समझौता है")

        assert analysis.language == "hi"

    @pytest.mark.asyncio
    async def test_insight_prompt_sees_clause_results(
        self, build_pipeline, clause_reply, insight_reply
    ):
        pipeline, _, insight_client = build_pipeline(clause_reply, insight_reply)

        await pipeline.analyze_text("Lease text")

        prompt = insight_client.model.generate.await_args.args[0]
        assert "- High risk: 2" in prompt
        assert "Payment, Deposit, Termination" in prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n\t  "])
    async def test_empty_document_raises_no_content(self, build_pipeline, text):
        pipeline, clause_client, _ = build_pipeline("unused", "unused")

        with pytest.raises(NoContentError) as exc_info:
            await pipeline.analyze_text(text)

        assert str(exc_info.value) == "No text content found in document"
        clause_client.model.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_format_propagates(self, build_pipeline):
        pipeline, clause_client, _ = build_pipeline("unused", "unused")

        with pytest.raises(UnsupportedFormatError):
            await pipeline.analyze(b"PK\x03\x04", "application/zip")

        clause_client.model.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_extraction_failure_propagates(self, build_pipeline):
        pipeline, _, _ = build_pipeline("unused", "unused")

        with pytest.raises(ExtractionError):
            await pipeline.analyze(b"garbage", "application/pdf")

    @pytest.mark.asyncio
    async def test_image_document_uses_ocr(
        self, build_pipeline, fake_ocr, clause_reply, insight_reply
    ):
        extractor = TextExtractor(ocr_engine=fake_ocr)
        pipeline, clause_client, _ = build_pipeline(clause_reply, insight_reply, extractor)

        await pipeline.analyze(b"png-bytes", "image/png")

        assert "Scanned lease text" in clause_client.model.generate.await_args.args[0]
        fake_ocr.end.assert_called_once()
