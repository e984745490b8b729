"""
FastAPI REST API for LegalEase.

Provides endpoints for:
- Document upload and analysis
- Pasted text analysis
- Questions about a document
- Translation of analysis text
"""

import logging
import os
import tempfile
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings
from .models.schemas import (
    AnalyzeTextRequest,
    DocumentAnalysis,
    ErrorResponse,
    QuestionRequest,
    SuggestedQuestionsRequest,
    TranslateRequest,
    TranslateSummaryRequest,
)
from .services.api_resilience import gemini_breaker, get_breaker_status
from .services.gemini_router import GeminiRouter, LegalExpertise
from .services.ocr import TesseractOcr
from .services.structured_inference import StructuredInferenceClient
from .services.text_extractor import SUPPORTED_MEDIA_TYPES, TextExtractor, normalize_media_type
from .utils.decorators import handle_endpoint_errors
from .utils.dependencies import (
    get_pipeline,
    get_qa_orchestrator,
    get_translation_orchestrator,
    set_pipeline,
    set_qa_orchestrator,
    set_translation_orchestrator,
)
from .utils.logging import setup_logging
from .utils.request_context import REQUEST_ID_HEADER, clear_request_context, set_request_id
from .workflows.document_analysis import DocumentAnalysisPipeline
from .workflows.qa_workflow import QAOrchestrator
from .workflows.stages import ClauseAnalysisStage, InsightAggregationStage
from .workflows.translation_workflow import TranslationOrchestrator

logger = logging.getLogger(__name__)

SERVICE_NAME = "LegalEase API"
SERVICE_VERSION = "1.0.0"

settings = Settings()


# Request Context Middleware
class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to set request ID for each request."""

    async def dispatch(self, request, call_next):
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


app = FastAPI(
    title=SERVICE_NAME,
    description="AI-assisted plain-language analysis of legal documents",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)

app.add_middleware(RequestContextMiddleware)


def build_services(config: Settings, router: GeminiRouter = None) -> None:
    """
    Wire the pipeline and orchestrators and register them for injection.

    Args:
        config: Application settings
        router: Gemini router to use (built from the settings if None)
    """
    if router is None:
        router = GeminiRouter(
            api_key=config.google_api_key,
            default_timeout=config.gemini_timeout_seconds,
            max_timeout=config.gemini_max_timeout_seconds,
        )

    def client_for(expertise: LegalExpertise) -> StructuredInferenceClient:
        return StructuredInferenceClient(router.bind(expertise))

    extractor = TextExtractor(ocr_engine=TesseractOcr(), ocr_language=config.ocr_language)

    set_pipeline(DocumentAnalysisPipeline(
        extractor=extractor,
        clause_stage=ClauseAnalysisStage(
            client_for(LegalExpertise.CLAUSE_ANALYST),
            max_prompt_chars=config.max_prompt_chars,
        ),
        insight_stage=InsightAggregationStage(client_for(LegalExpertise.DOCUMENT_ADVISOR)),
    ))
    set_qa_orchestrator(QAOrchestrator(
        client_for(LegalExpertise.QA_ASSISTANT),
        max_context_chars=config.max_prompt_chars,
    ))
    set_translation_orchestrator(TranslationOrchestrator(
        client_for(LegalExpertise.LEGAL_TRANSLATOR)
    ))


@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    """
    global settings

    settings = Settings.from_env()
    setup_logging(settings.log_level, json_format=settings.log_json)

    logger.info(f"Starting {SERVICE_NAME}...")

    if not settings.google_api_key:
        logger.warning("GOOGLE_API_KEY is not set; AI stages will return fallback results")

    try:
        build_services(settings)
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}")
        raise


def _health_payload() -> dict:
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "circuitBreaker": get_breaker_status(gemini_breaker),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/", tags=["Health"])
async def root():
    """
    Health check endpoint.
    """
    return _health_payload()


@app.get("/api/health", tags=["Health"])
async def health_check():
    """
    Health check including the Gemini circuit breaker state.
    """
    return _health_payload()


@app.post(
    "/api/analyze-document",
    response_model=DocumentAnalysis,
    tags=["Analysis"]
)
@handle_endpoint_errors("AnalysisError")
async def analyze_document(
    document: UploadFile = File(..., description="PDF, Word, text or image document"),
    pipeline=Depends(get_pipeline),
):
    """
    Upload and analyze a legal document.

    The upload is written to a temporary file for the duration of the
    analysis and removed afterwards.

    Raises:
        400: Unsupported media type
        413: File larger than the configured limit
        415/422: Document could not be processed
    """
    media_type = normalize_media_type(document.content_type)
    if media_type not in SUPPORTED_MEDIA_TYPES:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "InvalidFileType",
                "message": "Invalid file type. Only PDF, DOC, DOCX, TXT, and image files are allowed.",
                "filename": document.filename
            }
        )

    file_bytes = await document.read(settings.max_upload_bytes + 1)
    if len(file_bytes) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail={
                "error": "FileTooLarge",
                "message": f"File exceeds the {settings.max_upload_bytes} byte limit",
                "filename": document.filename
            }
        )

    logger.info(f"Received document upload: {document.filename} ({len(file_bytes)} bytes, {media_type})")

    suffix = os.path.splitext(document.filename or "")[1]
    handle, temp_path = tempfile.mkstemp(prefix="legalease-", suffix=suffix)
    try:
        with os.fdopen(handle, "wb") as temp_file:
            temp_file.write(file_bytes)
        return await pipeline.analyze(temp_path, media_type)
    finally:
        os.unlink(temp_path)


@app.post(
    "/api/analyze-text",
    response_model=DocumentAnalysis,
    tags=["Analysis"]
)
@handle_endpoint_errors("AnalysisError")
async def analyze_text(
    request: AnalyzeTextRequest,
    pipeline=Depends(get_pipeline),
):
    """
    Analyze pasted document text.

    Raises:
        400: Empty text
    """
    if not request.text.strip():
        raise HTTPException(
            status_code=400,
            detail={
                "error": "EmptyText",
                "message": "Text content is required"
            }
        )

    return await pipeline.analyze_text(request.text)


@app.post("/api/ask-question", tags=["Q&A"])
@handle_endpoint_errors("QueryError")
async def ask_question(
    request: QuestionRequest,
    qa=Depends(get_qa_orchestrator),
):
    """
    Ask a question about a document.

    Returns:
        {"answer": QAResult}
    """
    answer = await qa.ask(
        question=request.question,
        document_context=request.document_context,
        language_hint=request.language,
    )
    return {"answer": answer}


@app.post("/api/suggested-questions", tags=["Q&A"])
@handle_endpoint_errors("QueryError")
async def suggested_questions(
    request: SuggestedQuestionsRequest,
    qa=Depends(get_qa_orchestrator),
):
    """
    Suggest questions worth asking about a document.

    Returns:
        {"questions": [...]}
    """
    questions = await qa.suggest_questions(request.document_context)
    return {"questions": questions}


@app.post("/api/translate", tags=["Translation"])
@handle_endpoint_errors("TranslationError")
async def translate(
    request: TranslateRequest,
    translator=Depends(get_translation_orchestrator),
):
    """
    Translate text.

    Returns:
        {"translation": TranslationResult}
    """
    translation = await translator.translate(
        request.text,
        target_language=request.target_language,
        source_language=request.source_language,
    )
    return {"translation": translation}


@app.post("/api/translate-summary", tags=["Translation"])
@handle_endpoint_errors("TranslationError")
async def translate_summary(
    request: TranslateSummaryRequest,
    translator=Depends(get_translation_orchestrator),
):
    """
    Translate a document summary for a lay reader.

    Returns:
        {"translation": TranslationResult}
    """
    translation = await translator.translate_summary(
        request.summary,
        document_type=request.document_type,
        target_language=request.target_language,
    )
    return {"translation": translation}


@app.get("/api/languages", tags=["Translation"])
async def languages(translator=Depends(get_translation_orchestrator)):
    """
    List the languages available for translation.
    """
    return {"languages": translator.available_languages()}


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unhandled errors.
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred",
            details={"exception": str(exc)},
        ).model_dump(mode="json"),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "legalease.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
