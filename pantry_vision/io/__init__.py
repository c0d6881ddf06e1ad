"""Filesystem output for detection results."""

from .results_writer import ResultsWriter

__all__ = ["ResultsWriter"]
