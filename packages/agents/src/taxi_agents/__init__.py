"""Taxi Agents - Document extraction pipeline for return preparation."""

__version__ = "0.1.0"

from .config import LLMConfig, PipelineConfig, TaxiConfig
from .extraction_agent import DocumentExtractor
from .pipeline import ExtractionBatch, ReturnPipeline

__all__ = [
    "TaxiConfig",
    "LLMConfig",
    "PipelineConfig",
    "DocumentExtractor",
    "ExtractionBatch",
    "ReturnPipeline",
]
