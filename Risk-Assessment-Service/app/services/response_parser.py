"""
Turns the oracle's raw text into a validated RiskAnalysis.

The oracle is asked for bare JSON but often wraps it in prose or code
fences. The parser pulls out the first balanced {...} object, decodes it
through the OracleAnalysis schema, and on any failure hands back the
rule-based analysis instead of raising.
"""
import json
import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from app.models.request_models import HealthData
from app.models.response_models import OracleAnalysis, RiskAnalysis
from app.services import fallback_scorer
from app.services.diagnostics import (
    ORACLE_RESPONSE_UNPARSABLE,
    SOURCE_FALLBACK,
    SOURCE_ORACLE,
    DiagnosticEvent,
    DiagnosticsSink,
)

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 120


class UnparsableOracleResponse(ValueError):
    """The oracle answered, but not with a decodable analysis object."""


def extract_json_object(raw_text: str) -> Optional[str]:
    """
    Returns the first balanced {...} substring of raw_text, or None.

    Braces inside JSON string literals are ignored. An opening brace that
    is never closed (truncated output) yields None.
    """
    start = raw_text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(raw_text)):
        char = raw_text[index]
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
                return raw_text[start:index + 1]
    return None


def decode_analysis(raw_text: str) -> RiskAnalysis:
    """Strict decode; raises UnparsableOracleResponse instead of falling back."""
    candidate = extract_json_object(raw_text)
    if candidate is None:
        raise UnparsableOracleResponse("No JSON object found in oracle response")

    # ValueError covers JSONDecodeError and the interpreter's integer digit limit.
    try:
        payload: Any = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        raise UnparsableOracleResponse(f"Invalid JSON in oracle response ({type(e).__name__})") from e

    if not isinstance(payload, dict):
        raise UnparsableOracleResponse("Oracle response is not a JSON object")

    try:
        return OracleAnalysis.model_validate(payload).to_analysis()
    except ValidationError as e:
        raise UnparsableOracleResponse(f"Oracle response failed schema validation ({e.error_count()} errors)") from e


def _preview(raw_text: str) -> str:
    text = " ".join(raw_text.split())
    return text if len(text) <= PREVIEW_LENGTH else text[:PREVIEW_LENGTH] + "..."


def parse_with_source(
        raw_text: str,
        original_data: HealthData,
        diagnostics: Optional[DiagnosticsSink] = None,
) -> Tuple[RiskAnalysis, str]:
    """Like parse, but also reports which path produced the analysis."""
    try:
        return decode_analysis(raw_text), SOURCE_ORACLE
    except UnparsableOracleResponse as e:
        detail: Dict[str, Any] = {"preview": _preview(raw_text), "length": len(raw_text)}
        if diagnostics is not None:
            diagnostics.emit(DiagnosticEvent(
                name=ORACLE_RESPONSE_UNPARSABLE,
                source=SOURCE_FALLBACK,
                reason=str(e),
                detail=detail,
            ))
        else:
            logger.warning(f"Falling back to rule-based scoring: {e}")
        return fallback_scorer.score(original_data), SOURCE_FALLBACK


def parse(raw_text: str, original_data: HealthData, diagnostics: Optional[DiagnosticsSink] = None) -> RiskAnalysis:
    """
    Decodes the oracle's answer, or scores original_data with the rule-based
    scorer if the answer cannot be decoded. Never raises.
    """
    analysis, _ = parse_with_source(raw_text, original_data, diagnostics)
    return analysis
