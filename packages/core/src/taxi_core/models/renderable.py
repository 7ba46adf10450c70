"""Display-ordered projection of a computed return."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from .fields import FilingStatus


class LineItem(BaseModel):
    """One labelled amount on the rendered return."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    amount: Decimal


class RenderableReturn(BaseModel):
    """Read-only view of a computed TaxRecord for the form renderer.

    Carries only a masked SSN. Line items are in form presentation order.
    """

    model_config = ConfigDict(frozen=True)

    taxpayer_name: str
    masked_ssn: str
    filing_status: FilingStatus
    filing_status_label: str
    address_lines: tuple[str, ...]
    line_items: tuple[LineItem, ...]

    def amount(self, key: str) -> Decimal:
        """Return the amount of the line item with the given key."""
        for item in self.line_items:
            if item.key == key:
                return item.amount
        raise KeyError(key)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-safe structure; amounts become decimal strings."""
        return self.model_dump(mode="json")
