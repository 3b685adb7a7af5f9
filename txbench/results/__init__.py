"""Reporting, aggregation and charting of run summaries."""

from .aggregator import ResultAggregator
from .report import format_summary, print_summary, save_summary_json

__all__ = ["ResultAggregator", "format_summary", "print_summary", "save_summary_json"]
