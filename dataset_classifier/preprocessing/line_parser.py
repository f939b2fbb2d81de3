"""
Line Parser - split one raw CSV line into field values.

The input is not strictly RFC 4180: a field may or may not be wrapped in
double quotes, and a quoted field may contain commas. Doubled quotes
inside a quoted field are not unescaped.
"""

import re
from typing import List

# A comma is a separator only when an even number of quotes follows it
# on the rest of the line, i.e. it sits outside any quoted segment.
FIELD_SEPARATOR = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')

_OUTER_QUOTE = re.compile(r'^"|"$')


def strip_quotes(value: str) -> str:
    """
    Trim a field and drop one quote at its very start and one at its very end.
    
    Quotes elsewhere in the value are kept.
    """
    return _OUTER_QUOTE.sub("", value.strip())


def split_fields(line: str) -> List[str]:
    """Split a line on unquoted commas, keeping empty (including trailing) fields."""
    return FIELD_SEPARATOR.split(line)


def parse_line(line: str) -> List[str]:
    """
    Parse a raw line into quote-stripped field values.
    
    Short lines are not an error here; callers check the length.
    
    Example:
        >>> parse_line('"A,B",C,D')
        ['A,B', 'C', 'D']
    """
    return [strip_quotes(field) for field in split_fields(line)]
