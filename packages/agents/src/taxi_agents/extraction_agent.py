"""Extraction Adapter: one raw document in, one field set out."""

import json

import structlog

from taxi_core.exceptions import GenerationError
from taxi_core.models import (
    FIELD_VOCABULARY,
    ExtractedFieldSet,
    ExtractionFailureKind,
    FilingStatus,
    RawDocument,
)
from taxi_core.response_parser import parse_extraction_response

from .interfaces.base import GenerationClient

logger = structlog.get_logger()

FIELD_DESCRIPTIONS: dict[str, str] = {
    "firstName": "Taxpayer's first name",
    "lastName": "Taxpayer's last name",
    "ssn": "Taxpayer's 9-digit Social Security number, as a string",
    "filingStatus": "Filing status, one of: "
    + ", ".join(status.value for status in FilingStatus),
    "address": "Street address",
    "city": "City",
    "state": "State (2-letter code)",
    "zip": "ZIP code, as a string",
    "wages": "Wages, salaries, tips (W-2 box 1) as a number",
    "interest": "Taxable interest as a number",
    "dividends": "Ordinary dividends as a number",
    "capitalGains": "Capital gains as a number",
    "otherIncome": "Any other income as a number",
    "adjustments": "Adjustments to income as a number",
    "deductions": "Itemized deductions total as a number",
}


def build_extraction_prompt() -> str:
    """Build the fixed instructional prompt for tax field extraction."""
    field_descriptions = "\n".join(
        f"- {name}: {FIELD_DESCRIPTIONS[name]}" for name in FIELD_VOCABULARY
    )
    example = json.dumps({name: None for name in FIELD_VOCABULARY}, indent=2)

    return f"""You are a tax document data extraction assistant. Analyze the attached tax document and extract the information needed for an IRS Form 1040.

FIELDS TO EXTRACT:
{field_descriptions}

INSTRUCTIONS:
1. Return a JSON object with exactly the keys listed above and no others
2. If a field is not found in the document, set it to null
3. For monetary amounts, return just the number (no $ signs or commas)
4. Do not guess values that are not present in the document

Return ONLY the JSON object. No explanation or additional text.

Example format:
{example}

JSON:"""


EXTRACTION_PROMPT = build_extraction_prompt()


class DocumentExtractor:
    """
    Extract tax fields from one document with a generation model.

    Generation failures become an error-marked field set; configuration
    errors propagate and fail the whole request.
    """

    def __init__(self, client: GenerationClient, prompt: str = EXTRACTION_PROMPT):
        self.client = client
        self.prompt = prompt

    async def extract(self, document: RawDocument) -> ExtractedFieldSet:
        """
        Extract the fixed field vocabulary from a document.

        Args:
            document: Raw bytes and MIME type of the document

        Returns:
            Parsed fields, or a field set with an error marker
        """
        logger.info(
            "extraction_started",
            document_id=document.document_id,
            mime_type=document.mime_type,
            size=len(document.content),
        )

        try:
            text = await self.client.generate(
                self.prompt,
                content=document.content,
                mime_type=document.mime_type,
            )
        except GenerationError as e:
            logger.warning(
                "extraction_generation_failed",
                document_id=document.document_id,
                error=e.message,
            )
            return ExtractedFieldSet.failed(
                document.document_id,
                ExtractionFailureKind.GENERATION_FAILED,
                e.message,
            )

        return parse_extraction_response(document.document_id, text)
