"""
Core building blocks shared by every pipeline stage.
"""

from dataset_classifier.core.schema import Schema, DEFAULT_CSV_HEADER, DEFAULT_SCHEMA
from dataset_classifier.core.exceptions import (
    ClassifierError,
    ConfigurationError,
    UnresolvedColumnError,
    FormattingIndexError,
    OutputExistsError,
    SubstrateError,
)

__all__ = [
    "Schema",
    "DEFAULT_CSV_HEADER",
    "DEFAULT_SCHEMA",
    "ClassifierError",
    "ConfigurationError",
    "UnresolvedColumnError",
    "FormattingIndexError",
    "OutputExistsError",
    "SubstrateError",
]
