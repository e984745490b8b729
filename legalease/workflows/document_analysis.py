"""
LangGraph workflow for legal document analysis.

Orchestrates text extraction, clause analysis, insight aggregation and
language detection into a single DocumentAnalysis record.

Flow:
    extract ─┬─> analyze_clauses ─> aggregate_insights ─┬─> assemble ─> END
             └─> detect_language ───────────────────────┘

Extraction is the only fatal step. The AI stages degrade to deterministic
fallbacks, and language detection cannot fail.
"""

from typing import Any, List, Optional, TypedDict

import structlog
from langgraph.graph import StateGraph, END

from ..core.exceptions import NoContentError
from ..models.schemas import ClauseRecord, DocumentAnalysis, DocumentInsights
from ..services.language import detect_language
from ..services.text_extractor import DocumentSource, MediaType, TextExtractor
from ..utils.performance import log_execution_time
from .stages import ClauseAnalysisStage, InsightAggregationStage


logger = structlog.get_logger()


class DocumentAnalysisState(TypedDict, total=False):
    """
    State schema for the document analysis workflow.

    Input fields:
        source: File path, raw bytes, or pasted text
        media_type: Declared media type of the source

    Intermediate fields:
        text: Extracted document text
        clauses: Clause analysis results
        insights: Document-level findings
        language: Detected language code

    Output fields:
        analysis: Assembled DocumentAnalysis
    """
    # Input
    source: Any
    media_type: str

    # Intermediate state
    text: str
    clauses: List[ClauseRecord]
    insights: Optional[DocumentInsights]
    language: str

    # Output
    analysis: DocumentAnalysis


class DocumentAnalysisPipeline:
    """
    Runs one document through extraction and AI analysis.

    Usage:
        pipeline = DocumentAnalysisPipeline(extractor, clause_stage, insight_stage)
        analysis = await pipeline.analyze("/tmp/lease.pdf", "application/pdf")
    """

    def __init__(
        self,
        extractor: TextExtractor,
        clause_stage: ClauseAnalysisStage,
        insight_stage: InsightAggregationStage,
    ):
        """
        Initialize the pipeline with its stages.

        Args:
            extractor: Text extractor for the supported media types
            clause_stage: Clause analysis stage
            insight_stage: Insight aggregation stage
        """
        self.extractor = extractor
        self.clause_stage = clause_stage
        self.insight_stage = insight_stage

        self.workflow = self._build_workflow()

    def _build_workflow(self):
        """Build and compile the LangGraph workflow."""
        workflow = StateGraph(DocumentAnalysisState)

        workflow.add_node("extract", self._extract_node)
        workflow.add_node("analyze_clauses", self._analyze_clauses_node)
        workflow.add_node("detect_language", self._detect_language_node)
        workflow.add_node("aggregate_insights", self._aggregate_insights_node)
        workflow.add_node("assemble", self._assemble_node)

        workflow.set_entry_point("extract")
        workflow.add_edge("extract", "analyze_clauses")
        workflow.add_edge("extract", "detect_language")
        workflow.add_edge("analyze_clauses", "aggregate_insights")
        # assemble waits for both branches
        workflow.add_edge(["aggregate_insights", "detect_language"], "assemble")
        workflow.add_edge("assemble", END)

        return workflow.compile()

    async def _extract_node(self, state: DocumentAnalysisState) -> dict:
        """
        Node 1: Extract text from the source.

        Raises:
            UnsupportedFormatError, ExtractionError: From the extractor
            NoContentError: If the document has no text
        """
        logger.info("[extract] Extracting text", media_type=state["media_type"])

        text = await self.extractor.aextract(state["source"], state["media_type"])

        if not text or not text.strip():
            logger.warning("[extract] Document has no text content")
            raise NoContentError()

        logger.info("[extract] Extracted text", characters=len(text))
        return {"text": text}

    async def _analyze_clauses_node(self, state: DocumentAnalysisState) -> dict:
        """Node 2: Identify and annotate clauses."""
        clauses = await self.clause_stage.run(state["text"])
        return {"clauses": clauses}

    async def _detect_language_node(self, state: DocumentAnalysisState) -> dict:
        """Node 2b: Detect the document language (runs alongside clause analysis)."""
        language = detect_language(state["text"])
        logger.info("[detect_language] Detected language", language=language)
        return {"language": language}

    async def _aggregate_insights_node(self, state: DocumentAnalysisState) -> dict:
        """Node 3: Summarize the document from its clauses."""
        insights = await self.insight_stage.run(state["text"], state["clauses"])
        return {"insights": insights}

    async def _assemble_node(self, state: DocumentAnalysisState) -> dict:
        """Node 4: Build the final record, filling any missing top-level fields."""
        insights = state.get("insights") or DocumentInsights()

        analysis = DocumentAnalysis(
            summary=insights.summary or "Document analysis completed",
            clauses=state.get("clauses") or [],
            overall_risk_score=insights.overall_risk_score,
            key_insights=insights.key_insights or [],
            recommended_actions=insights.recommended_actions or [],
            language=state.get("language") or "en",
            document_type=insights.document_type or "Legal Document",
        )
        return {"analysis": analysis}

    @log_execution_time("document_analysis")
    async def analyze(self, source: DocumentSource, media_type: str) -> DocumentAnalysis:
        """
        Analyze a document.

        Args:
            source: File path, raw bytes, or (for text/plain) the text itself
            media_type: Declared media type of the source

        Returns:
            Complete DocumentAnalysis

        Raises:
            UnsupportedFormatError: If the media type is not supported
            ExtractionError: If the document cannot be parsed
            NoContentError: If the document contains no text
        """
        logger.info("document_analysis_started", media_type=media_type)

        final_state = await self.workflow.ainvoke({
            "source": source,
            "media_type": media_type,
        })

        analysis = final_state["analysis"]
        logger.info(
            "document_analysis_completed",
            clause_count=len(analysis.clauses),
            risk_score=analysis.overall_risk_score,
            language=analysis.language,
            document_type=analysis.document_type
        )
        return analysis

    async def analyze_text(self, text: str) -> DocumentAnalysis:
        """
        Analyze pasted text.

        The text is handed to the extractor as bytes, so it is never
        resolved as a file path.
        """
        return await self.analyze(text.encode("utf-8"), MediaType.PLAIN_TEXT.value)
