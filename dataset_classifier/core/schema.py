"""
Record schema.

The canonical column layout of the medical dataset. It is fixed for the
life of a run and is never read from the input file's header line.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


DEFAULT_CSV_HEADER = (
    "NHS_Number,Name,Age,Gender,Admission_Date,Year,Record_Number,Symptoms,"
    "Illness_History,Chief_Complaint,Physical_Examination,Assessment_Plan,Region"
)


@dataclass(frozen=True)
class Schema:
    """
    Immutable ordered list of field names.
    
    Used for two things:
    - resolving a column name to its zero-based position
    - labelling values when a record is rendered as a detail block
    """
    fields: Tuple[str, ...]
    
    @classmethod
    def from_header(cls, header: str) -> "Schema":
        """Build a schema from a comma-separated header string."""
        return cls(fields=tuple(header.split(",")))
    
    def index_of(self, column_name: str) -> Optional[int]:
        """
        Resolve a column name to its position.
        
        Matching is case-insensitive and ignores surrounding whitespace
        in the requested name.
        
        Returns:
            Zero-based position, or None if the name is not in the schema
        """
        wanted = column_name.strip().lower()
        for i, name in enumerate(self.fields):
            if name.lower() == wanted:
                return i
        return None
    
    def __len__(self) -> int:
        return len(self.fields)
    
    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)


DEFAULT_SCHEMA = Schema.from_header(DEFAULT_CSV_HEADER)
