"""Custom exceptions for the Taxi return preparation core.

All exceptions inherit from TaxiError, so callers can catch every
application-specific failure in one place while still telling the kinds
apart:

- per-document problems (ExtractionError, GenerationError, StorageError) are
  recoverable and end up as error markers on a document's field set;
- precondition violations (IncompleteReturnError, ReturnNotComputedError)
  mean the caller skipped a step;
- ConfigurationError is fatal for the whole request.

Example:
    try:
        computed = calculator.compute(record)
    except IncompleteReturnError as e:
        ask_user_for(e.missing_fields)
    except TaxiError as e:
        logger.error("computation_failed", error=str(e))
"""

from typing import Any, Optional, Sequence


class TaxiError(Exception):
    """Base exception for all Taxi errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.
        recoverable: Whether retrying or correcting input could succeed.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ExtractionError(TaxiError):
    """Error raised when structured fields cannot be read from model output.

    Attributes:
        document_id: Identifier of the document being extracted.
        raw_text: The model text that could not be parsed (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        document_id: Optional[str] = None,
        raw_text: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.document_id = document_id
        self.raw_text = raw_text

        if document_id:
            self.details["document_id"] = document_id


class GenerationError(TaxiError):
    """Error raised when the generation capability fails.

    Covers quota exhaustion, timeouts, transport failures and documents the
    model cannot accept. These are recoverable per document: the batch keeps
    going and the document is marked as failed.

    Attributes:
        api_error: The underlying API error message.
        attempts: How many calls were made before giving up.
    """

    def __init__(
        self,
        message: str,
        *,
        api_error: Optional[str] = None,
        attempts: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.api_error = api_error
        self.attempts = attempts

        if api_error:
            self.details["api_error"] = api_error
        if attempts is not None:
            self.details["attempts"] = attempts


class StorageError(TaxiError):
    """Error raised when a document's bytes cannot be retrieved.

    Attributes:
        location: The opaque location token that was requested.
        not_found: True when the object does not exist, False for transient
            failures.
    """

    def __init__(
        self,
        message: str,
        *,
        location: Optional[str] = None,
        not_found: bool = False,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.location = location
        self.not_found = not_found

        if location:
            self.details["location"] = location
        self.details["not_found"] = not_found


class ValidationError(TaxiError):
    """Error raised when a supplied value fails validation.

    Raised for user answers that name an unknown field or carry a value
    that cannot be used for that field.

    Attributes:
        field: The field that failed validation.
        constraint: The rule that was violated.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if constraint:
            self.details["constraint"] = constraint


class IncompleteReturnError(TaxiError):
    """Error raised when computing a record that still has missing fields.

    Attributes:
        missing_fields: Required field names still absent, in canonical order.
    """

    def __init__(
        self,
        missing_fields: Sequence[str],
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        fields = tuple(missing_fields)
        super().__init__(
            f"Tax record is incomplete; missing: {', '.join(fields)}",
            details=details,
            recoverable=False,
        )
        self.missing_fields = fields
        self.details["missing_fields"] = list(fields)


class ReturnNotComputedError(TaxiError):
    """Error raised when assembling a record whose derived fields are absent."""

    def __init__(
        self,
        message: str = "Tax record has not been computed",
        *,
        missing_derived: Sequence[str] = (),
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.missing_derived = tuple(missing_derived)
        if self.missing_derived:
            self.details["missing_derived"] = list(self.missing_derived)


class ConfigurationError(TaxiError):
    """Error raised when configuration or credentials are missing or invalid.

    Configuration errors fail the entire request and are never retried.

    Attributes:
        config_key: The configuration key that is problematic.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key

        if config_key:
            self.details["config_key"] = config_key


__all__ = [
    "TaxiError",
    "ExtractionError",
    "GenerationError",
    "StorageError",
    "ValidationError",
    "IncompleteReturnError",
    "ReturnNotComputedError",
    "ConfigurationError",
]
