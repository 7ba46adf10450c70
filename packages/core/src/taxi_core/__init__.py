"""Taxi Core - Tax field reconciliation, computation and return assembly."""

__version__ = "0.1.0"

from .assembler import assemble
from .calculator import TaxCalculator, compute
from .models import ExtractedFieldSet, RenderableReturn, TaxRecord
from .reconciler import ReconciliationResult, fill_missing, reconcile
from .response_parser import parse_extraction_response

__all__ = [
    "TaxCalculator",
    "compute",
    "reconcile",
    "fill_missing",
    "assemble",
    "parse_extraction_response",
    "ExtractedFieldSet",
    "ReconciliationResult",
    "RenderableReturn",
    "TaxRecord",
]
