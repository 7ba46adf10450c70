"""Tests for recovering fields from model output."""

from decimal import Decimal

import pytest

from taxi_core.exceptions import ExtractionError
from taxi_core.models import ExtractionFailureKind, FilingStatus
from taxi_core.response_parser import (
    coerce_fields,
    find_json_text,
    load_json_object,
    parse_extraction_response,
)


FENCED_RESPONSE = """Here is what I found on the W-2:

```json
{
  "firstName": "John",
  "lastName": "Doe",
  "ssn": "123-45-6789",
  "wages": 75000.10,
  "interest": null
}
```

Let me know if you need anything else."""


class TestFindJsonText:
    """Tests for the two-stage JSON search."""

    def test_fenced_block(self):
        text = find_json_text(FENCED_RESPONSE)

        assert text.startswith("{")
        assert text.endswith("}")
        assert '"firstName": "John"' in text

    def test_fenced_block_preferred_over_earlier_braces(self):
        response = 'Format: {like this}\n```json\n{"wages": 1}\n```'

        assert find_json_text(response) == '{"wages": 1}'

    def test_braces_in_prose(self):
        response = 'Sure! {"wages": 5000, "city": "Austin"} Hope that helps.'

        assert find_json_text(response) == '{"wages": 5000, "city": "Austin"}'

    def test_no_json(self):
        assert find_json_text("I could not read this document.") is None


class TestLoadJsonObject:
    """Tests for decoding the located JSON."""

    def test_invalid_json_raises_extraction_error(self):
        with pytest.raises(ExtractionError) as exc_info:
            load_json_object("{wages: 12,}", document_id="doc-1")

        assert exc_info.value.recoverable is True
        assert exc_info.value.details["document_id"] == "doc-1"

    def test_numbers_decode_as_decimal(self):
        data = load_json_object('{"wages": 75000.10}')

        assert data["wages"] == Decimal("75000.10")


class TestCoerceFields:
    """Tests for vocabulary filtering and type coercion."""

    def test_unknown_keys_discarded(self):
        fields, dropped = coerce_fields({"wages": 100, "employerEin": "12-3456789"})

        assert fields.wages == Decimal("100.00")
        assert "employerEin" in dropped
        assert "employerEin" not in fields.as_dict()

    @pytest.mark.parametrize(
        "name,value",
        [
            ("wages", "a lot"),
            ("wages", True),
            ("wages", -100),
            ("wages", {"box1": 100}),
            ("ssn", "12345"),
            ("ssn", 123456789),
            ("filingStatus", "married"),
            ("firstName", 42),
            ("zip", 123456),
            ("zip", 3.5),
        ],
    )
    def test_wrong_types_become_null(self, name, value):
        fields, dropped = coerce_fields({name: value})

        assert fields.as_dict()[name] is None
        assert name in dropped

    def test_numeric_zip_kept(self):
        fields, dropped = coerce_fields({"zip": 2134})

        assert fields.zip == "02134"
        assert dropped == []

    def test_out_of_range_amount_becomes_null(self):
        fields, dropped = coerce_fields({"wages": Decimal("1E+30"), "interest": 5})

        assert fields.wages is None
        assert fields.interest == Decimal("5.00")
        assert dropped == ["wages"]

    def test_valid_values_normalised(self):
        fields, dropped = coerce_fields(
            {
                "filingStatus": "Married Filing Jointly",
                "ssn": "123 45 6789",
                "dividends": "$850.00",
                "city": "  Springfield ",
            }
        )

        assert dropped == []
        assert fields.filing_status == FilingStatus.MARRIED_JOINT
        assert fields.ssn == "123456789"
        assert fields.dividends == Decimal("850.00")
        assert fields.city == "Springfield"


class TestParseExtractionResponse:
    """Tests for the parsed / unparsed field set outcome."""

    def test_parsed_response(self):
        field_set = parse_extraction_response("doc-1", FENCED_RESPONSE)

        assert not field_set.is_error
        assert field_set.fields.first_name == "John"
        assert field_set.fields.wages == Decimal("75000.10")
        assert field_set.fields.interest is None
        assert field_set.found_fields == ("firstName", "lastName", "ssn", "wages")

    def test_prose_only_is_unparsed(self):
        text = "This appears to be a W-2 but the image is too blurry to read."

        field_set = parse_extraction_response("doc-2", text)

        assert field_set.is_error
        assert field_set.error.kind == ExtractionFailureKind.UNPARSED
        assert field_set.error.raw_text == text
        assert all(value is None for value in field_set.fields.as_dict().values())

    def test_malformed_json_is_unparsed(self):
        field_set = parse_extraction_response("doc-3", '{"wages": 100,, }')

        assert field_set.error.kind == ExtractionFailureKind.UNPARSED
        assert "Invalid JSON" in field_set.error.reason

    def test_huge_amount_does_not_fail_document(self):
        field_set = parse_extraction_response("doc-6", '{"wages": 1e30, "interest": 5}')

        assert not field_set.is_error
        assert field_set.fields.wages is None
        assert field_set.fields.interest == Decimal("5.00")

    def test_json_array_is_unparsed(self):
        field_set = parse_extraction_response("doc-4", '```json\n[1, 2]\n```')

        assert field_set.error.kind == ExtractionFailureKind.UNPARSED

    def test_empty_object_is_parsed_with_no_fields(self):
        field_set = parse_extraction_response("doc-5", "{}")

        assert not field_set.is_error
        assert field_set.found_fields == ()
