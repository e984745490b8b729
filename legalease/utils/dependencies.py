"""
FastAPI dependency injection for the pipeline and orchestrators.

Instances are registered once by the application's startup hook and handed
to endpoints through Depends(). Tests register fakes with the same setters.
"""

from fastapi import HTTPException

# Service instances - set during app startup
_pipeline = None
_qa_orchestrator = None
_translation_orchestrator = None


def set_pipeline(pipeline) -> None:
    """Set the global document analysis pipeline."""
    global _pipeline
    _pipeline = pipeline


def set_qa_orchestrator(orchestrator) -> None:
    """Set the global Q&A orchestrator."""
    global _qa_orchestrator
    _qa_orchestrator = orchestrator


def set_translation_orchestrator(orchestrator) -> None:
    """Set the global translation orchestrator."""
    global _translation_orchestrator
    _translation_orchestrator = orchestrator


def reset_services() -> None:
    """Forget all registered instances."""
    set_pipeline(None)
    set_qa_orchestrator(None)
    set_translation_orchestrator(None)


def _unavailable(what: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={
            "error": "ServiceUnavailable",
            "message": f"{what} not initialized"
        }
    )


def get_pipeline():
    """
    FastAPI dependency for the document analysis pipeline.

    Raises:
        HTTPException: 503 if the pipeline is not initialized
    """
    if _pipeline is None:
        raise _unavailable("Document analysis pipeline")
    return _pipeline


def get_qa_orchestrator():
    """
    FastAPI dependency for the Q&A orchestrator.

    Raises:
        HTTPException: 503 if the orchestrator is not initialized
    """
    if _qa_orchestrator is None:
        raise _unavailable("Q&A service")
    return _qa_orchestrator


def get_translation_orchestrator():
    """
    FastAPI dependency for the translation orchestrator.

    Raises:
        HTTPException: 503 if the orchestrator is not initialized
    """
    if _translation_orchestrator is None:
        raise _unavailable("Translation service")
    return _translation_orchestrator
