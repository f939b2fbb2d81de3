"""
Record preprocessing.

Provides:
- Line parsing with quote-aware comma splitting
- Quote stripping for individual field values
"""

from dataset_classifier.preprocessing.line_parser import (
    parse_line,
    strip_quotes,
)

__all__ = [
    "parse_line",
    "strip_quotes",
]
