"""Document analysis pipeline, Q&A and translation workflows."""

from .document_analysis import DocumentAnalysisPipeline
from .qa_workflow import QAOrchestrator
from .stages import ClauseAnalysisStage, InsightAggregationStage
from .translation_workflow import TranslationOrchestrator

__all__ = [
    "DocumentAnalysisPipeline",
    "QAOrchestrator",
    "ClauseAnalysisStage",
    "InsightAggregationStage",
    "TranslationOrchestrator",
]
