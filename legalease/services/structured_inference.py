"""
Structured inference on top of an unreliable text model.

Every AI-backed operation in LegalEase follows the same recipe: render a
prompt, ask the model, dig the JSON object out of whatever prose surrounds
it, check it has the expected shape, and if any of that goes wrong return a
deterministic fallback instead. StructuredInferenceClient implements the
recipe once; callers supply the template, a validator and a fallback
builder.

The client never raises for model trouble. Provider errors, replies without
JSON, unparsable JSON and wrongly shaped JSON all end in the fallback.
"""

import copy
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Protocol, TypeVar

import structlog

from ..core.exceptions import ResponseShapeError


logger = structlog.get_logger()

T = TypeVar("T")


class ModelCapability(Protocol):
    """A generative model: prompt text in, reply text out."""

    async def generate(self, prompt: str) -> str:
        ...


@dataclass(frozen=True)
class InferenceFailure:
    """
    Why an inference call fell back.

    stage is one of "render", "model_call", "no_json" or "shape".
    """
    stage: str
    reason: str
    error: Optional[BaseException] = None
    raw_reply: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# JSON extraction
# ═══════════════════════════════════════════════════════════════════════════════

def _match_brace(text: str, start: int) -> Optional[int]:
    """
    Find the index of the ``}`` closing the ``{`` at ``start``.

    Braces inside JSON string literals are ignored. Returns None when the
    object is never closed (a truncated reply).
    """
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index

    return None


def iter_balanced_objects(text: str) -> Iterator[str]:
    """
    Yield each top-level brace-balanced ``{...}`` span in order.

    Scanning stops at the first ``{`` that is never closed, since everything
    after it belongs to the truncated object.
    """
    start = text.find("{")
    while start != -1:
        end = _match_brace(text, start)
        if end is None:
            return
        yield text[start:end + 1]
        start = text.find("{", end + 1)


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(reply: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Extract the JSON object embedded in a model reply.

    Models are asked for prose plus one JSON object, and often wrap it in
    markdown fences or add commentary around it. Tries, in order:

    1. each top-level balanced object, first one that parses wins
    2. the greedy slice from the first ``{`` to the last ``}``

    Args:
        reply: Raw model reply

    Returns:
        The parsed object, or None if no JSON object could be recovered

    Example:
        >>> extract_json_object('Sure! ```json\\n{"answer": "yes"}\\n```')
        {'answer': 'yes'}
    """
    return next(iter_json_objects(reply), None)


def iter_json_objects(reply: Optional[str]) -> Iterator[Dict[str, Any]]:
    """
    Yield every JSON object recoverable from a reply, in the order
    extract_json_object tries them.

    The greedy slice is only yielded when it differs from the balanced
    candidates already seen.
    """
    if not isinstance(reply, str):
        return

    seen = set()
    for candidate in iter_balanced_objects(reply):
        seen.add(candidate)
        parsed = _loads_object(candidate)
        if parsed is not None:
            yield parsed

    first = reply.find("{")
    last = reply.rfind("}")
    if first == -1 or last <= first:
        return

    greedy = reply[first:last + 1]
    if greedy not in seen:
        parsed = _loads_object(greedy)
        if parsed is not None:
            yield parsed


def backfill(parsed: Dict[str, Any], defaults: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Fill keys that are missing or null from per-field defaults.

    Defaults are deep-copied so mutable defaults are never shared.
    """
    if not defaults:
        return dict(parsed)

    filled = dict(parsed)
    for key, value in defaults.items():
        if filled.get(key) is None:
            filled[key] = copy.deepcopy(value)
    return filled


# ═══════════════════════════════════════════════════════════════════════════════
# Client
# ═══════════════════════════════════════════════════════════════════════════════

SHAPE_ERRORS = (ValueError, TypeError, KeyError, ResponseShapeError)


class StructuredInferenceClient:
    """
    Turns a text model into a source of validated, typed results.

    Usage:
        client = StructuredInferenceClient(model)
        result = await client.infer(
            prompt_template=QA_PROMPT,
            inputs={"question": "Can I sublet?"},
            validator=lambda data: QAResult(question="Can I sublet?", **data),
            fallback_builder=lambda failure: QAResult(...),
            defaults={"confidence": 50},
        )
    """

    def __init__(self, model: ModelCapability):
        """
        Initialize the client.

        Args:
            model: Object with an async ``generate(prompt) -> str`` method
        """
        self.model = model

    async def infer(
        self,
        prompt_template: str,
        inputs: Mapping[str, Any],
        validator: Callable[[Dict[str, Any]], T],
        fallback_builder: Callable[[InferenceFailure], T],
        defaults: Optional[Mapping[str, Any]] = None,
        operation: str = "inference",
    ) -> T:
        """
        Run one structured inference call.

        Args:
            prompt_template: ``str.format`` template; literal braces doubled
            inputs: Values substituted into the template
            validator: Builds the result from the parsed object, raising
                ValueError/TypeError/ResponseShapeError if the shape is wrong
            fallback_builder: Builds the deterministic result used on failure
            defaults: Per-field values for keys the model left out
            operation: Name used in log events

        Returns:
            The validated result, or the fallback
        """
        try:
            prompt = prompt_template.format(**inputs)
        except (KeyError, IndexError, ValueError) as e:
            logger.error("prompt_render_failed", operation=operation, error=str(e))
            return fallback_builder(
                InferenceFailure(stage="render", reason=f"Prompt rendering failed: {e}", error=e)
            )

        try:
            reply = await self.model.generate(prompt)
        except Exception as e:
            logger.error(
                "inference_model_error",
                operation=operation,
                error_type=type(e).__name__,
                error=str(e)
            )
            return fallback_builder(
                InferenceFailure(stage="model_call", reason=str(e) or type(e).__name__, error=e)
            )

        shape_error = None
        for parsed in iter_json_objects(reply):
            try:
                result = validator(backfill(parsed, defaults))
            except SHAPE_ERRORS as e:
                # A later object may still be the real payload
                shape_error = shape_error or e
                continue
            logger.info("inference_complete", operation=operation)
            return result

        if shape_error is None:
            logger.warning(
                "inference_no_json",
                operation=operation,
                reply_preview=str(reply)[:200]
            )
            return fallback_builder(
                InferenceFailure(stage="no_json", reason="Invalid AI response format", raw_reply=reply)
            )

        logger.warning(
            "inference_shape_rejected",
            operation=operation,
            error=str(shape_error)
        )
        return fallback_builder(
            InferenceFailure(
                stage="shape",
                reason=f"Unexpected AI response structure: {shape_error}",
                error=shape_error,
                raw_reply=reply,
            )
        )
