"""
Shared fixtures for the dataset classifier tests.
"""

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from dataset_classifier.core import config
from dataset_classifier.core.schema import DEFAULT_CSV_HEADER, DEFAULT_SCHEMA, Schema


EAST_1 = (
    '5723986104,John Smith,67,Male,2023-01-15,2023,R001,'
    '"Hypertension, Type 2 Diabetes Mellitus, Chronic Kidney Disease",'
    'Smoker,Chest pain,BP 150/95,Monitor renal function,East_of_England'
)
EAST_2 = (
    '4829301756,"Jane Doe",54,Female,2023-02-03,2023,R002,Asthma,'
    'None,Shortness of breath,Wheeze,Inhaler review,East_of_England'
)
LONDON = (
    '3918274650,Ali Khan,41,Male,2023-03-09,2023,R003,"Migraine, Asthma",'
    'None,Headache,Normal,Rest,London'
)
SHORT = "1102938475,Short Record"


@pytest.fixture
def schema() -> Schema:
    return DEFAULT_SCHEMA


@pytest.fixture
def sample_lines() -> List[str]:
    """Three well-formed records: two in East_of_England, one in London."""
    return [EAST_1, EAST_2, LONDON]


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a CSV file whose first line is the header."""
    def _write(lines: List[str], name: str = "MedicalFiles.csv", header: Optional[str] = None) -> Path:
        path = tmp_path / name
        content = "\n".join([header if header is not None else DEFAULT_CSV_HEADER] + lines) + "\n"
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep CLASSIFIER_* variables, stray config files and cached settings out of every test."""
    for name in list(os.environ):
        if name.startswith("CLASSIFIER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_settings", None)


@pytest.fixture
def records() -> Dict[str, str]:
    """Raw sample lines by name."""
    return {
        "east_1": EAST_1,
        "east_2": EAST_2,
        "london": LONDON,
        "short": SHORT,
    }
