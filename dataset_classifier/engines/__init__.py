"""
Classification engines.

- key_extractor: map a record to its classification keys
- aggregator: render a group of records as a report entry
- local_runner: in-process execution of the whole pipeline
"""

from dataset_classifier.engines.key_extractor import KeyExtractor, extract_keys
from dataset_classifier.engines.aggregator import (
    ReportEntry,
    aggregate,
    format_details,
    format_header,
)
from dataset_classifier.engines.local_runner import JobCounters, JobResult, LocalJobRunner

__all__ = [
    "KeyExtractor",
    "extract_keys",
    "ReportEntry",
    "aggregate",
    "format_details",
    "format_header",
    "JobCounters",
    "JobResult",
    "LocalJobRunner",
]
