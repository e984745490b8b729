"""
Q&A workflow for questions about an analyzed document.

Stateless: every question is answered from the question and the document
context supplied with it. Conversation history, if any, is the caller's
business.

The workflow never raises. When the model is unavailable or replies with
something unusable, the caller still gets a renderable QAResult.
"""

from typing import Any, Dict, List

import structlog

from ..core.exceptions import ResponseShapeError
from ..models.schemas import QAResult
from ..services.language import language_display_name
from ..services.structured_inference import InferenceFailure, StructuredInferenceClient


logger = structlog.get_logger()


QA_PROMPT = """{language_instruction}

Document Context:
{context}

User Question: {question}

Please provide:
1. A clear, comprehensive answer in plain language
2. Specific references to relevant clauses/sections
3. Any important implications or warnings
4. 2-3 helpful follow-up questions the user might want to ask

Guidelines:
- Use simple, non-technical language
- Explain legal terms when necessary
- Be specific about risks or benefits
- Include relevant Indian law context when applicable
- If you cannot answer definitively, clearly state limitations

Format your response as JSON:
{{
  "answer": "comprehensive answer in plain language",
  "relatedClauses": ["clause 1 text", "clause 2 text"],
  "confidence": confidence_score_0_to_100,
  "followUpQuestions": ["question 1", "question 2", "question 3"]
}}
"""

QA_DEFAULTS: Dict[str, Any] = {
    "relatedClauses": [],
    "confidence": 50,
    "followUpQuestions": [],
}

FALLBACK_FOLLOW_UPS = [
    "Can you explain this in simpler terms?",
    "What are the main risks I should be aware of?",
    "Are there any standard alternatives to this clause?",
]

SUGGESTED_QUESTIONS_PROMPT = """Based on the following legal document, generate 5-7 important questions that ordinary users should ask to better understand their rights and obligations:

Document Context:
{context}

Generate practical questions that focus on:
- Key rights and obligations
- Potential risks or penalties
- Important deadlines or conditions
- Financial implications
- Termination or cancellation procedures

Return as JSON:
{{
  "questions": ["question 1", "question 2", "question 3"]
}}
"""

DEFAULT_QUESTIONS = [
    "What are my main obligations under this agreement?",
    "How can this agreement be terminated?",
    "What penalties or fees might I face?",
    "What happens if I want to cancel early?",
    "Are there any unusual or risky clauses I should know about?",
    "What are my rights if the other party breaches the agreement?",
    "Are there any important deadlines I need to remember?",
]


def language_instruction(language_hint: str) -> str:
    """Instruction telling the model which language to answer in."""
    return f"Respond in {language_display_name(language_hint or 'en')} language."


class QAOrchestrator:
    """
    Answers questions about a legal document.

    Usage:
        orchestrator = QAOrchestrator(StructuredInferenceClient(router.bind(LegalExpertise.QA_ASSISTANT)))
        result = await orchestrator.ask(
            question="Can my landlord keep the deposit?",
            document_context=analysis.summary,
            language_hint="hi",
        )
        print(result.answer)
    """

    def __init__(self, client: StructuredInferenceClient, max_context_chars: int = 30000):
        """
        Initialize the QA orchestrator.

        Args:
            client: Structured inference client bound to the QA assistant model
            max_context_chars: Longest document context embedded in a prompt
        """
        self.client = client
        self.max_context_chars = max_context_chars

        logger.info("QAOrchestrator initialized")

    async def ask(
        self,
        question: str,
        document_context: str,
        language_hint: str = "en",
    ) -> QAResult:
        """
        Answer one question against a document context.

        Args:
            question: The user's question
            document_context: Document text, summary, or excerpts
            language_hint: Language code for the answer

        Returns:
            QAResult; on any failure a fallback with confidence 0
        """
        logger.info(
            "qa_question_received",
            question=question[:50],
            language=language_hint
        )

        def validate(data: Dict[str, Any]) -> QAResult:
            answer = data.get("answer")
            if not isinstance(answer, str) or not answer.strip():
                raise ResponseShapeError("'answer' must be a non-empty string")
            return QAResult.model_validate({**data, "question": question})

        def fallback(failure: InferenceFailure) -> QAResult:
            return QAResult(
                question=question,
                answer=(
                    "I apologize, but I encountered an error while processing your question. "
                    "Please try rephrasing your question or contact support if the issue persists. "
                    f"Error: {failure.reason}"
                ),
                related_clauses=[],
                confidence=0,
                follow_up_questions=list(FALLBACK_FOLLOW_UPS),
            )

        result = await self.client.infer(
            prompt_template=QA_PROMPT,
            inputs={
                "language_instruction": language_instruction(language_hint),
                "context": document_context[:self.max_context_chars],
                "question": question,
            },
            validator=validate,
            fallback_builder=fallback,
            defaults=QA_DEFAULTS,
            operation="qa",
        )

        logger.info("qa_complete", confidence=result.confidence)
        return result

    async def suggest_questions(self, document_context: str) -> List[str]:
        """
        Suggest questions a reader should ask about the document.

        Args:
            document_context: Document text, summary, or excerpts

        Returns:
            5-7 questions; the default list if the model fails
        """
        def validate(data: Dict[str, Any]) -> List[str]:
            questions = data.get("questions")
            if not isinstance(questions, list):
                raise ResponseShapeError("'questions' must be a list")
            cleaned = [q.strip() for q in questions if isinstance(q, str) and q.strip()]
            if not cleaned:
                raise ResponseShapeError("'questions' is empty")
            return cleaned

        return await self.client.infer(
            prompt_template=SUGGESTED_QUESTIONS_PROMPT,
            inputs={"context": document_context[:self.max_context_chars]},
            validator=validate,
            fallback_builder=lambda failure: list(DEFAULT_QUESTIONS),
            operation="suggest_questions",
        )
