"""
Gemini Router Service - the generative model behind every LegalEase analysis.

Routes prompts to a Gemini model tier by task complexity, applies a legal
persona as system instruction, tracks token usage and cost, and hands out
bound models that satisfy the plain ``generate(prompt) -> str`` contract the
inference pipeline depends on.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

import google.generativeai as genai

from .api_resilience import gemini_breaker, with_circuit_breaker


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Legal Personas
# ═══════════════════════════════════════════════════════════════════════════════

class LegalExpertise(str, Enum):
    """Pre-defined personas for the LegalEase tasks."""
    CLAUSE_ANALYST = "clause_analyst"
    DOCUMENT_ADVISOR = "document_advisor"
    QA_ASSISTANT = "qa_assistant"
    LEGAL_TRANSLATOR = "legal_translator"


LEGAL_SYSTEM_INSTRUCTIONS: Dict[LegalExpertise, str] = {
    LegalExpertise.CLAUSE_ANALYST: """You are a legal AI assistant specializing in contract analysis for ordinary people: tenants, employees, borrowers, and consumers signing standard-form agreements.

ANALYSIS FRAMEWORK:
1. SEGMENT the document into distinct clauses or sections
2. SUMMARIZE each clause in one or two sentences of plain English
3. RATE each clause: LOW (routine), MEDIUM (needs attention), HIGH (could cost the signer money, rights, or recourse)
4. FLAG clauses that deviate from what is standard for this kind of agreement
5. NAME the concrete risk factors behind every rating

COMMON RED FLAGS:
- One-sided termination or unilateral amendment rights
- Automatic renewals and long notice periods
- Penalties, late fees, and forfeited deposits
- Broad indemnities or waivers of liability
- Mandatory arbitration or distant exclusive jurisdiction
- Non-compete and confidentiality terms that outlive the agreement

OUTPUT STANDARDS:
- Quote clause text verbatim
- Prefer plain words over legal terms; define any legal term you must use
- Return exactly the JSON structure you are asked for""",

    LegalExpertise.DOCUMENT_ADVISOR: """You are a legal advisor who explains whole documents to people without legal training.

YOUR JOB:
- Identify what kind of document this is
- Summarize what it means for the person signing it in two or three sentences
- Pick out the insights that matter most to an ordinary reader
- Recommend concrete, practical next steps
- Give an overall risk score from 0 (harmless) to 100 (dangerous to sign as written)

Be calm and specific. Do not give legal advice beyond recommending professional review where it is warranted. Return exactly the JSON structure you are asked for.""",

    LegalExpertise.QA_ASSISTANT: """You are a legal AI assistant helping ordinary users understand legal documents.

RESPONSE GUIDELINES:
- Answer the question directly, in simple non-technical language
- Quote or point to the relevant clauses when they exist
- Explain legal terms when you use them
- Be specific about risks and benefits
- Include relevant Indian law context when applicable
- If the document does not answer the question, say so clearly

LIMITATIONS:
- Do not provide legal advice, only explanation of the document
- Recommend consulting a lawyer for important decisions""",

    LegalExpertise.LEGAL_TRANSLATOR: """You are a legal translation specialist.

GUIDELINES:
1. Preserve legal meaning and nuance
2. Maintain a formal but readable tone
3. Explain legal terms that have no direct equivalent
4. Keep technical terms in brackets when needed: [original term]
5. Make the cultural and legal context appropriate for the target language
6. For Indian regional languages, consider the Indian legal system

Favor clarity and legal accuracy over literal word-for-word translation.""",
}


def get_legal_system_instruction(expertise: LegalExpertise) -> str:
    """Get the system instruction for a specific legal persona."""
    return LEGAL_SYSTEM_INSTRUCTIONS[expertise]


class TaskComplexity(str, Enum):
    """Task complexity levels for model routing."""
    SIMPLE = "simple"        # Q&A, translation, question suggestions
    BALANCED = "balanced"    # Clause analysis, document insights
    COMPLEX = "complex"      # Long or unusual documents


@dataclass
class ModelConfig:
    """Configuration for a Gemini model."""
    name: str
    input_cost_per_1m: float  # Cost per 1M input tokens in USD
    output_cost_per_1m: float  # Cost per 1M output tokens in USD


@dataclass
class GenerationResult:
    """Result from a generation request."""
    text: str
    model_name: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    cost: float
    generation_time_ms: float


class GeminiRouter:
    """
    Routes requests to appropriate Gemini models based on task complexity.

    One router is built by the application's composition root with an
    explicit API key and shared by every component that needs the model.
    """

    MODEL_CONFIGS: Dict[TaskComplexity, ModelConfig] = {
        TaskComplexity.SIMPLE: ModelConfig(
            name="gemini-2.5-flash-lite",
            input_cost_per_1m=0.075,
            output_cost_per_1m=0.30,
        ),
        TaskComplexity.BALANCED: ModelConfig(
            name="gemini-2.5-flash",
            input_cost_per_1m=0.15,
            output_cost_per_1m=0.60,
        ),
        TaskComplexity.COMPLEX: ModelConfig(
            name="gemini-2.5-pro",
            input_cost_per_1m=1.25,
            output_cost_per_1m=5.00,
        ),
    }

    def __init__(
        self,
        api_key: str,
        default_timeout: float = 30.0,
        max_timeout: float = 120.0
    ):
        """
        Initialize the Gemini router.

        Args:
            api_key: Google AI API key for authentication
            default_timeout: Default timeout in seconds for API calls
            max_timeout: Maximum allowed timeout in seconds
        """
        genai.configure(api_key=api_key)
        self._api_key = api_key
        self.default_timeout = default_timeout
        self.max_timeout = max_timeout
        logger.info(
            f"GeminiRouter initialized with model configurations "
            f"(timeout: {default_timeout}s, max: {max_timeout}s)"
        )

    def get_model(
        self,
        complexity: TaskComplexity,
        system_instruction: Optional[str] = None,
    ) -> genai.GenerativeModel:
        """
        Get the appropriate Gemini model for the given complexity level.

        Args:
            complexity: Task complexity level
            system_instruction: System instruction to configure model behavior

        Returns:
            Configured GenerativeModel instance
        """
        config = self.MODEL_CONFIGS[complexity]

        generation_config = genai.GenerationConfig(
            temperature=0.2,  # Lower temperature for legal analysis
            top_p=0.95,
            top_k=40,
            max_output_tokens=8192,
        )

        model = genai.GenerativeModel(
            model_name=config.name,
            generation_config=generation_config,
            system_instruction=system_instruction,
        )

        logger.debug(f"Created model {config.name} for complexity {complexity.value}")

        return model

    async def generate(
        self,
        prompt: str,
        complexity: TaskComplexity,
        system_instruction: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> GenerationResult:
        """
        Generate content using the appropriate model for the task complexity.

        Single attempt: a failed call is reported to the caller immediately,
        which substitutes its own fallback. The circuit breaker fails fast
        while Gemini is unhealthy.

        Args:
            prompt: Input prompt for generation
            complexity: Task complexity level
            system_instruction: System instruction to configure model behavior
            timeout: Optional timeout in seconds (defaults to default_timeout)

        Returns:
            GenerationResult with text, tokens, and cost information

        Raises:
            TimeoutError: If generation exceeds timeout
            ServiceUnavailableError: If circuit breaker is open
            Exception: If generation fails
        """
        start_time = time.time()

        effective_timeout = min(
            timeout or self.default_timeout,
            self.max_timeout
        )

        try:
            model = self.get_model(
                complexity=complexity,
                system_instruction=system_instruction,
            )

            # Run blocking generate_content in thread pool with timeout
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    _generate_content,
                    model,
                    prompt
                ),
                timeout=effective_timeout
            )

            text = response.text

            usage_metadata = response.usage_metadata
            input_tokens = usage_metadata.prompt_token_count
            output_tokens = usage_metadata.candidates_token_count
            total_tokens = usage_metadata.total_token_count

            cost = self._calculate_cost(
                complexity=complexity,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
            )

            generation_time_ms = (time.time() - start_time) * 1000

            config = self.MODEL_CONFIGS[complexity]

            logger.info(
                f"Generated content using {config.name}: "
                f"{input_tokens} input + {output_tokens} output tokens = ${cost:.6f}"
            )

            return GenerationResult(
                text=text,
                model_name=config.name,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=total_tokens,
                cost=cost,
                generation_time_ms=generation_time_ms,
            )

        except asyncio.TimeoutError:
            logger.error(
                f"Gemini API call timed out after {effective_timeout}s "
                f"for {complexity.value} task"
            )
            raise TimeoutError(
                f"Gemini API call timed out after {effective_timeout}s"
            )
        except Exception as e:
            generation_time_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Generation failed for {complexity.value} task "
                f"after {generation_time_ms:.2f}ms: {e}"
            )
            raise

    def _calculate_cost(
        self,
        complexity: TaskComplexity,
        input_tokens: int,
        output_tokens: int,
    ) -> float:
        """
        Calculate the cost of a generation request.

        Args:
            complexity: Task complexity level
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens

        Returns:
            Total cost in USD
        """
        config = self.MODEL_CONFIGS[complexity]

        input_cost = (input_tokens / 1_000_000) * config.input_cost_per_1m
        output_cost = (output_tokens / 1_000_000) * config.output_cost_per_1m

        return round(input_cost + output_cost, 6)

    async def generate_with_expertise(
        self,
        prompt: str,
        expertise: LegalExpertise,
        complexity: Optional[TaskComplexity] = None,
        timeout: Optional[float] = None,
    ) -> GenerationResult:
        """
        Generate content using a pre-defined legal persona.

        Args:
            prompt: Input prompt for generation
            expertise: Persona to apply as system instruction
            complexity: Task complexity level (defaults based on persona and prompt length)
            timeout: Optional timeout in seconds

        Returns:
            GenerationResult with text, tokens, and cost information
        """
        if complexity is None:
            complexity = route_complexity(expertise, prompt)

        system_instruction = get_legal_system_instruction(expertise)

        logger.info(
            f"Generating with {expertise.value} expertise using {complexity.value} model"
        )

        return await self.generate(
            prompt=prompt,
            complexity=complexity,
            system_instruction=system_instruction,
            timeout=timeout,
        )

    def bind(
        self,
        expertise: LegalExpertise,
        complexity: Optional[TaskComplexity] = None,
    ) -> "GeminiModel":
        """
        Fix a persona and tier, returning a plain text-in/text-out model.

        Example:
            model = router.bind(LegalExpertise.QA_ASSISTANT)
            reply = await model.generate("What does clause 4 mean?")
        """
        return GeminiModel(router=self, expertise=expertise, complexity=complexity)


@with_circuit_breaker(gemini_breaker)
def _generate_content(model: genai.GenerativeModel, prompt: str):
    """Blocking Gemini call, counted by the circuit breaker."""
    return model.generate_content(prompt)


DEFAULT_COMPLEXITY: Dict[LegalExpertise, TaskComplexity] = {
    LegalExpertise.CLAUSE_ANALYST: TaskComplexity.BALANCED,
    LegalExpertise.DOCUMENT_ADVISOR: TaskComplexity.BALANCED,
    LegalExpertise.QA_ASSISTANT: TaskComplexity.SIMPLE,
    LegalExpertise.LEGAL_TRANSLATOR: TaskComplexity.SIMPLE,
}

# Document prompts longer than this go to the COMPLEX tier
LONG_PROMPT_CHARS = 20_000


def route_complexity(expertise: LegalExpertise, prompt: str) -> TaskComplexity:
    """Pick a tier from the persona default, escalating long document prompts."""
    complexity = DEFAULT_COMPLEXITY.get(expertise, TaskComplexity.BALANCED)
    if complexity == TaskComplexity.BALANCED and len(prompt) > LONG_PROMPT_CHARS:
        return TaskComplexity.COMPLEX
    return complexity


@dataclass
class GeminiModel:
    """A router bound to one persona and tier."""
    router: GeminiRouter
    expertise: LegalExpertise
    complexity: Optional[TaskComplexity] = None

    async def generate(self, prompt: str) -> str:
        result = await self.router.generate_with_expertise(
            prompt=prompt,
            expertise=self.expertise,
            complexity=self.complexity,
        )
        return result.text
