"""Audit trail entries recorded while computing a return."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


class AuditEntry(BaseModel):
    """Single calculation step.

    Attributes:
        step: Name of the step (e.g., "total_income", "estimated_tax")
        input_value: Inputs to the step, rendered as text
        output_value: Result of the step, rendered as text
        source: Rule or table the step applied
        notes: Additional context
        timestamp: When the step ran (UTC)
    """

    model_config = ConfigDict(frozen=True)

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utc_now)
