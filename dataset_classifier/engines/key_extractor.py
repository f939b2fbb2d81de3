"""
Key Extractor - map one record to its classification keys.

A record yields one (key, line) pair per sub-value of its target column,
so a comma-separated symptom list classifies the same record under every
symptom it names.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from dataset_classifier.core.config import DEFAULT_TARGET_COLUMN, NHS_COLUMN
from dataset_classifier.core.exceptions import UnresolvedColumnError
from dataset_classifier.core.schema import Schema
from dataset_classifier.preprocessing.line_parser import parse_line

logger = logging.getLogger(__name__)

SUB_VALUE_SEPARATOR = re.compile(r",\s*")

Emission = Tuple[str, str]


def split_sub_values(value: str) -> List[str]:
    """
    Split a field value on a comma followed by optional whitespace.
    
    Trailing empty sub-values are dropped; a value with no separator
    (including the empty string) comes back as a single sub-value.
    """
    parts = SUB_VALUE_SEPARATOR.split(value)
    if len(parts) == 1:
        return parts
    while parts and parts[-1] == "":
        parts.pop()
    return parts


def resolve_column(schema: Schema, column_name: Optional[str]) -> Optional[int]:
    """Resolve a column name, falling back to the default target column."""
    if column_name is None or not column_name.strip():
        column_name = DEFAULT_TARGET_COLUMN
    return schema.index_of(column_name)


def emit_keys(
    fields: Sequence[str],
    line: str,
    target_index: Optional[int],
    nhs_index: Optional[int],
) -> List[Emission]:
    """
    Emit one (key, line) pair per sub-value of the target field.
    
    An unresolved position (None) can never be satisfied, and a record too
    short to reach either position yields nothing.
    """
    if target_index is None or nhs_index is None:
        return []
    
    if len(fields) <= target_index or len(fields) <= nhs_index:
        return []
    
    return [(key, line) for key in split_sub_values(fields[target_index])]


def extract_keys(
    schema: Schema,
    target_column: Optional[str],
    nhs_column: str,
    fields: Sequence[str],
    line: str,
) -> List[Emission]:
    """
    Produce the (key, line) emissions for one parsed record.
    
    An unresolvable column behaves as a position no record can reach, so
    every record is dropped. LocalJobRunner refuses to start in that case;
    use KeyExtractor to get the error up front.
    
    Args:
        schema: Record schema
        target_column: Column to classify by (None or blank means "Region")
        nhs_column: Column holding the NHS number
        fields: Parsed fields of the record
        line: The original raw line, carried as the emitted value
        
    Returns:
        One (key, line) pair per sub-value; empty if the record is too short
    """
    return emit_keys(
        fields,
        line,
        resolve_column(schema, target_column),
        schema.index_of(nhs_column),
    )


@dataclass(frozen=True)
class KeyExtractor:
    """
    Key extraction with columns resolved once per run.
    
    Usage:
        extractor = KeyExtractor.create(DEFAULT_SCHEMA, "Symptoms")
        for key, line in extractor.extract(raw_line):
            ...
    """
    schema: Schema
    target_column: str
    target_index: int
    nhs_index: int
    
    @classmethod
    def create(
        cls,
        schema: Schema,
        target_column: Optional[str] = None,
        nhs_column: str = NHS_COLUMN,
    ) -> "KeyExtractor":
        """
        Resolve the target and NHS columns against the schema.
        
        Raises:
            UnresolvedColumnError: If either column is not in the schema
        """
        if target_column is None or not target_column.strip():
            target_column = DEFAULT_TARGET_COLUMN
        
        target_index = schema.index_of(target_column)
        if target_index is None:
            raise UnresolvedColumnError(target_column, schema.fields)
        
        nhs_index = schema.index_of(nhs_column)
        if nhs_index is None:
            raise UnresolvedColumnError(nhs_column, schema.fields)
        
        logger.debug(
            f"Resolved target column '{target_column}' -> {target_index}, "
            f"'{nhs_column}' -> {nhs_index}"
        )
        return cls(
            schema=schema,
            target_column=target_column,
            target_index=target_index,
            nhs_index=nhs_index,
        )
    
    @property
    def min_fields(self) -> int:
        """Fewest fields a record needs to be classified."""
        return max(self.target_index, self.nhs_index) + 1
    
    def extract(self, line: str) -> List[Emission]:
        """Parse a raw line and return its (key, line) emissions."""
        return emit_keys(parse_line(line), line, self.target_index, self.nhs_index)
