"""Recover structured fields from free-form generation output.

Model output is unreliable: the JSON may be fenced, wrapped in prose,
malformed or missing. Parsing never raises to the caller; it yields either
a parsed field set or one carrying an ``unparsed`` failure marker and the
raw text.
"""

import json
import re
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

import structlog

from .exceptions import ExtractionError
from .models import (
    FIELD_VOCABULARY,
    MONEY_FIELDS,
    TEXT_FIELDS,
    ExtractedFields,
    ExtractedFieldSet,
    ExtractionFailureKind,
    parse_filing_status,
    parse_money,
    parse_ssn,
    parse_text,
    parse_zip,
)

logger = structlog.get_logger()

# Stage one: a fenced block labelled as JSON
FENCED_JSON_PATTERN = re.compile(r"```json[ \t]*\r?\n?(.*?)\r?\n?```", re.DOTALL | re.IGNORECASE)

# Stage two: first opening brace through the last closing brace
BRACED_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

FIELD_PARSERS: dict[str, Callable[[Any], Any]] = {
    **{name: parse_text for name in TEXT_FIELDS},
    **{name: parse_money for name in MONEY_FIELDS},
    "ssn": parse_ssn,
    "filingStatus": parse_filing_status,
    "zip": parse_zip,
}


def find_json_text(text: str) -> Optional[str]:
    """Locate the JSON object in model output using the two-stage search."""
    fenced = FENCED_JSON_PATTERN.search(text)
    if fenced:
        return fenced.group(1).strip()

    braced = BRACED_PATTERN.search(text)
    if braced:
        return braced.group(0).strip()

    return None


def load_json_object(text: str, *, document_id: Optional[str] = None) -> dict[str, Any]:
    """Find and decode the JSON object in ``text``.

    Raises:
        ExtractionError: If no JSON is present, it does not decode, or it is
            not an object.
    """
    json_text = find_json_text(text)
    if json_text is None:
        raise ExtractionError(
            "No JSON object found in model response",
            document_id=document_id,
            raw_text=text,
        )

    try:
        data = json.loads(json_text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ExtractionError(
            f"Invalid JSON in model response: {e.msg} at position {e.pos}",
            document_id=document_id,
            raw_text=text,
        ) from e

    if not isinstance(data, dict):
        raise ExtractionError(
            f"Expected a JSON object, got {type(data).__name__}",
            document_id=document_id,
            raw_text=text,
        )
    return data


def coerce_fields(data: Mapping[str, Any]) -> tuple[ExtractedFields, list[str]]:
    """Keep vocabulary keys only and null out values of the wrong type.

    Returns:
        The typed fields and the names that were discarded or nulled.
    """
    dropped = [key for key in data if key not in FIELD_VOCABULARY]
    values: dict[str, Any] = {}

    for name in FIELD_VOCABULARY:
        try:
            values[name] = FIELD_PARSERS[name](data.get(name))
        except ValueError:
            values[name] = None
            dropped.append(name)

    return ExtractedFields.model_validate(values), dropped


def parse_extraction_response(document_id: str, text: str) -> ExtractedFieldSet:
    """Turn raw model text into a field set for one document."""
    try:
        data = load_json_object(text, document_id=document_id)
    except ExtractionError as e:
        logger.warning(
            "extraction_unparsed",
            document_id=document_id,
            reason=e.message,
            response_length=len(text),
        )
        return ExtractedFieldSet.failed(
            document_id,
            ExtractionFailureKind.UNPARSED,
            e.message,
            raw_text=text,
        )

    fields, dropped = coerce_fields(data)
    if dropped:
        logger.info("extraction_fields_dropped", document_id=document_id, fields=dropped)

    logger.info(
        "extraction_parsed",
        document_id=document_id,
        found=list(fields.found_fields),
    )
    return ExtractedFieldSet.parsed(document_id, fields)
