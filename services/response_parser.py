"""
PlantCare AI - Response Parser
Recovers structured JSON from Gemini text and coerces it into declared result shapes.

Gemini is asked for pure JSON but may wrap it in code fences, add commentary,
emit the object twice, or return strings where lists were requested.
Parse failures are returned as values, never raised.
"""

import enum
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

UNSPECIFIED_ERROR = "AI service returned an unspecified error."

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```", re.IGNORECASE)
_BULLET_RE = re.compile(r"^-\s*")
_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class ExtractionError:
    """Returned by extract_json when no JSON value could be recovered."""
    message: str
    raw_text: str


def _first_decodable(text: str, opener: str, expected: type) -> Optional[Any]:
    """Decode the first `opener`-started JSON value of type `expected` found in text."""
    start = text.find(opener)
    while start != -1:
        try:
            value, end = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find(opener, start + 1)
            continue
        except RecursionError:
            # every later opener sits inside the same runaway nesting
            logger.warning("AI response nested JSON too deeply to decode.")
            return None
        if isinstance(value, expected):
            trailing = text[end:].strip()
            if trailing.startswith(("{", "[")):
                logger.warning("AI response held more than one JSON value; using the first.")
            return value
        start = text.find(opener, start + 1)
    return None


def extract_json(raw_text: str) -> Union[Any, ExtractionError]:
    """
    Pull one JSON value out of a model reply.

    Order of attempts:
      1. content of the first fenced code block, if any
      2. the first complete JSON object in that text
      3. failing that, the first complete JSON array
    Anything else yields an ExtractionError carrying the original text.
    """
    text = (raw_text or "").strip()

    fence = _FENCE_RE.search(text)
    if fence and fence.group(1).strip():
        text = fence.group(1).strip()

    value = _first_decodable(text, "{", dict)
    if value is None:
        value = _first_decodable(text, "[", list)
    if value is not None:
        return value

    logger.error(f"Failed to parse JSON response. Original text: {raw_text!r}")
    return ExtractionError(
        message=(
            "Failed to parse AI response. The response might not be valid JSON."
            f"\n---\n{raw_text}"
        ),
        raw_text=raw_text,
    )


# ── Field normalization ───────────────────────────────────────────────────────

class FieldKind(enum.Enum):
    STRING = "string"
    STRING_LIST = "string_list"
    OPTIONAL_NUMBER = "optional_number"


@dataclass(frozen=True)
class ResultSchema:
    """Declared shape of one AI result type.

    `required_key` is the discriminating key: a parsed object without it
    counts as a failed call.
    """
    required_key: str
    fields: Dict[str, FieldKind] = field(default_factory=dict)


def to_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = []
        for line in value.split("\n"):
            line = _BULLET_RE.sub("", line.strip()).strip()
            if line:
                items.append(line)
        return items
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def to_optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = value.strip().rstrip("%").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "\n".join(str(item) for item in value if item is not None)
    return str(value)


_COERCERS = {
    FieldKind.STRING: to_string,
    FieldKind.STRING_LIST: to_string_list,
    FieldKind.OPTIONAL_NUMBER: to_optional_number,
}


def normalize(payload: Dict[str, Any], schema: ResultSchema) -> Dict[str, Any]:
    """Coerce every declared field of `payload` to its canonical type.

    Undeclared keys are dropped.
    """
    return {
        name: _COERCERS[kind](payload.get(name))
        for name, kind in schema.fields.items()
    }


@dataclass(frozen=True)
class ParseOutcome:
    """Either normalized fields or an error message, never both."""
    fields: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_ai_response(raw_text: str, schema: ResultSchema) -> ParseOutcome:
    """Extractor + Normalizer in one step, keyed on the schema's discriminating key."""
    parsed = extract_json(raw_text)
    if isinstance(parsed, ExtractionError):
        return ParseOutcome(error=parsed.message)

    if not isinstance(parsed, dict) or schema.required_key not in parsed:
        model_error = parsed.get("error") if isinstance(parsed, dict) else None
        return ParseOutcome(error=to_string(model_error) or UNSPECIFIED_ERROR)

    return ParseOutcome(fields=normalize(parsed, schema))
