"""
Shared pytest fixtures for LegalEase tests.

Provides fake models, fake OCR engines and sample documents so that no test
talks to Gemini or needs a Tesseract installation.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from legalease.services.api_resilience import gemini_breaker
from legalease.services.structured_inference import StructuredInferenceClient


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


@pytest.fixture(autouse=True)
def reset_gemini_breaker():
    """Each test starts with a closed circuit breaker."""
    gemini_breaker.close()
    yield
    gemini_breaker.close()


def make_model(*replies):
    """
    Fake text model.

    Each reply is returned in turn; an exception instance is raised instead.
    """
    model = MagicMock()
    model.generate = AsyncMock(side_effect=list(replies))
    return model


def make_client(*replies) -> StructuredInferenceClient:
    """StructuredInferenceClient over a fake model."""
    return StructuredInferenceClient(make_model(*replies))


@pytest.fixture
def fake_model():
    """Factory fixture building fake models from canned replies."""
    return make_model


@pytest.fixture
def fake_client():
    """Factory fixture building inference clients from canned replies."""
    return make_client


@pytest.fixture
def fake_ocr():
    """OCR engine double recording begin/recognize/end."""
    engine = MagicMock()
    engine.begin = MagicMock(return_value="ocr-handle")
    engine.recognize = MagicMock(return_value="Scanned lease text")
    engine.end = MagicMock()
    return engine


@pytest.fixture
def mock_gemini_response():
    """Mock Gemini API response with usage metadata."""
    response = MagicMock()
    response.text = '{"answer": "Test response from Gemini"}'

    usage_metadata = MagicMock()
    usage_metadata.prompt_token_count = 100
    usage_metadata.candidates_token_count = 50
    usage_metadata.total_token_count = 150

    response.usage_metadata = usage_metadata
    return response


@pytest.fixture
def sample_contract_text():
    """Sample rental agreement text for testing."""
    return """
RESIDENTIAL RENTAL AGREEMENT

This Rental Agreement is entered into on January 1, 2024 between
Landlord Ravi Kumar ("Landlord") and Tenant Priya Sharma ("Tenant").

1. RENT
Tenant shall pay monthly rent of INR 25,000 on or before the 5th day of
each month. A late fee of INR 500 per day applies after the due date.

2. SECURITY DEPOSIT
Tenant shall pay a security deposit of INR 150,000, which the Landlord may
retain in full if Tenant vacates before the end of the term.

3. TERMINATION
Landlord may terminate this agreement at any time with 7 days notice.
Tenant may terminate only with 3 months notice.

4. GOVERNING LAW
This agreement is governed by the laws of India. Disputes shall be resolved
by arbitration in Mumbai.
"""


@pytest.fixture
def clause_reply():
    """Model reply for clause analysis, wrapped in a markdown fence."""
    payload = {
        "clauses": [
            {
                "text": "Tenant shall pay monthly rent of INR 25,000",
                "summary": "You pay 25,000 rupees every month.",
                "riskLevel": "low",
                "riskFactors": [],
                "explanation": "Standard rent clause.",
                "category": "Payment",
                "isStandard": True,
            },
            {
                "text": "Landlord may retain the deposit in full",
                "summary": "You can lose the whole deposit.",
                "riskLevel": "HIGH",
                "riskFactors": ["Forfeiture of deposit"],
                "explanation": "Unusually harsh.",
                "category": "Deposit",
                "isStandard": False,
            },
            {
                "text": "Landlord may terminate at any time with 7 days notice",
                "summary": "The landlord can end the lease quickly.",
                "riskLevel": "high",
                "riskFactors": ["One-sided termination"],
                "explanation": "Notice periods are not mutual.",
                "category": "Termination",
                "isStandard": False,
            },
        ]
    }
    return "Here is the analysis:\n```json\n" + json.dumps(payload, indent=2) + "\n```"


@pytest.fixture
def insight_reply():
    """Model reply for insight aggregation."""
    return json.dumps({
        "summary": "A residential lease that favours the landlord.",
        "documentType": "Rental Agreement",
        "keyInsights": ["Deposit can be forfeited", "Termination notice is one-sided"],
        "recommendedActions": ["Negotiate mutual notice periods"],
        "overallRiskScore": 72,
    })
