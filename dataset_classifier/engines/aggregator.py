"""
Aggregator - turn one complete group into a report entry.

The group is rendered in the order the grouping stage delivered it; no
re-sorting happens here.
"""

from dataclasses import dataclass
from typing import Iterable

from dataset_classifier.core.exceptions import FormattingIndexError
from dataset_classifier.core.schema import Schema
from dataset_classifier.preprocessing.line_parser import parse_line

HEADER_RULE = "-" * 63
BLOCK_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ReportEntry:
    """Summary of every record classified under one key."""
    key: str
    count: int
    header: str
    body: str


def format_header(key: str, count: int) -> str:
    """Build the report header line for a key."""
    return f"{HEADER_RULE}\n{key} ({count}) matched. The details are listed as follows:\n"


def format_details(schema: Schema, line: str) -> str:
    """
    Render a raw line as a "Field: value" block in schema order.
    
    Raises:
        FormattingIndexError: If the line has fewer fields than the schema
    """
    fields = parse_line(line)
    if len(fields) < len(schema):
        raise FormattingIndexError(line, len(fields), len(schema))
    
    return "\n".join(
        f"{name}: {value}" for name, value in zip(schema.fields, fields)
    )


def aggregate(schema: Schema, key: str, lines: Iterable[str]) -> ReportEntry:
    """
    Count a group and render its detail blocks.
    
    Duplicate lines are counted and rendered once per occurrence.
    """
    blocks = [format_details(schema, line) for line in lines]
    count = len(blocks)
    return ReportEntry(
        key=key,
        count=count,
        header=format_header(key, count),
        body=BLOCK_SEPARATOR.join(blocks),
    )
