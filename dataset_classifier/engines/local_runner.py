"""
Local Job Runner - run the classification pipeline in a single process.

Stages:
- read: input lines, first line (header) skipped unconditionally
- map: parse + key extraction per record, on a thread pool
- shuffle: group every emission by key (pandas), after the map stage ends
- reduce: aggregate each complete group, on a thread pool
- commit: write all report entries through the ReportWriter

A failure in any stage fails the run and nothing is committed.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import pandas as pd

from dataset_classifier.core.config import Settings
from dataset_classifier.core.exceptions import (
    ClassifierError,
    ConfigurationError,
    SubstrateError,
)
from dataset_classifier.engines.aggregator import ReportEntry, aggregate
from dataset_classifier.engines.key_extractor import Emission, KeyExtractor
from dataset_classifier.storage.report_writer import ReportWriter

logger = logging.getLogger(__name__)

Group = Tuple[str, List[str]]


@dataclass
class JobCounters:
    """Record counts collected over one run."""
    input_records: int = 0
    header_skipped: bool = False
    map_output_records: int = 0
    dropped_records: int = 0
    reduce_groups: int = 0
    output_records: int = 0

    def as_dict(self) -> dict:
        return {
            "input_records": self.input_records,
            "header_skipped": self.header_skipped,
            "map_output_records": self.map_output_records,
            "dropped_records": self.dropped_records,
            "reduce_groups": self.reduce_groups,
            "output_records": self.output_records,
        }


@dataclass
class JobResult:
    """Outcome of a successful run."""
    job_name: str
    entries: List[ReportEntry] = field(default_factory=list)
    counters: JobCounters = field(default_factory=JobCounters)
    output_path: Optional[Path] = None
    elapsed_seconds: float = 0.0

    @property
    def keys(self) -> List[str]:
        return [entry.key for entry in self.entries]


class LocalJobRunner:
    """
    Runs the full pipeline over one input file.

    Usage:
        settings = Settings(output_location="out/by_symptom", target_column="Symptoms")
        result = LocalJobRunner(settings).run()
        print(result.counters.reduce_groups)
    """

    def __init__(self, settings: Settings, writer: Optional[ReportWriter] = None):
        self.settings = settings
        self.schema = settings.record_schema
        self._writer = writer

    @property
    def writer(self) -> ReportWriter:
        """Writer for the configured output location."""
        if self._writer is None:
            if not self.settings.output_location:
                raise ConfigurationError("output_location is required", field="output_location")
            self._writer = ReportWriter(
                self.settings.output_location,
                encoding=self.settings.encoding,
            )
        return self._writer

    def create_extractor(self) -> KeyExtractor:
        """Resolve the configured columns; raises UnresolvedColumnError."""
        return KeyExtractor.create(
            self.schema,
            target_column=self.settings.target_column,
            nhs_column=self.settings.nhs_column,
        )

    # =========================================================================
    # Stages
    # =========================================================================

    def read_records(self, counters: JobCounters) -> Iterator[str]:
        """
        Yield input lines without their line terminator, header excluded.

        Raises:
            SubstrateError: If the input file cannot be read
        """
        input_path = Path(self.settings.input_path)
        try:
            with open(input_path, "r", encoding=self.settings.encoding) as f:
                for line_number, raw in enumerate(f):
                    if line_number == 0:
                        counters.header_skipped = True
                        continue
                    yield raw.rstrip("\n")
        except (OSError, UnicodeDecodeError) as e:
            raise SubstrateError("read", f"{input_path}: {e}") from e

    def map_stage(
        self,
        extractor: KeyExtractor,
        lines: Iterable[str],
        counters: JobCounters,
    ) -> List[Emission]:
        """Extract (key, line) pairs from every record, preserving input order."""
        emissions: List[Emission] = []
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            for pairs in executor.map(extractor.extract, lines):
                counters.input_records += 1
                if not pairs:
                    counters.dropped_records += 1
                    continue
                emissions.extend(pairs)

        counters.map_output_records = len(emissions)
        return emissions

    @staticmethod
    def shuffle(emissions: List[Emission]) -> List[Group]:
        """
        Group emitted lines by key.

        Keys come back sorted; lines keep their emission order within a key.
        """
        if not emissions:
            return []

        frame = pd.DataFrame(emissions, columns=["key", "line"])
        return [
            (key, group["line"].tolist())
            for key, group in frame.groupby("key", sort=True)
        ]

    def reduce_stage(self, groups: List[Group], counters: JobCounters) -> List[ReportEntry]:
        """
        Aggregate every group, one task per key.

        Raises:
            FormattingIndexError: If any grouped record is short of the schema
            SubstrateError: If a reduce task fails for any other reason
        """
        counters.reduce_groups = len(groups)
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            futures = [
                (key, executor.submit(aggregate, self.schema, key, lines))
                for key, lines in groups
            ]
            entries: List[ReportEntry] = []
            for key, future in futures:
                try:
                    entries.append(future.result())
                except ClassifierError:
                    logger.error(f"Aggregation failed for key '{key}'")
                    for _, pending in futures:
                        pending.cancel()
                    raise
                except Exception as e:
                    for _, pending in futures:
                        pending.cancel()
                    raise SubstrateError("reduce", f"key '{key}': {e}") from e

        counters.output_records = len(entries)
        return entries

    # =========================================================================
    # Orchestration
    # =========================================================================

    def classify_lines(
        self,
        lines: Iterable[str],
        counters: Optional[JobCounters] = None,
        extractor: Optional[KeyExtractor] = None,
    ) -> List[ReportEntry]:
        """Run map, shuffle and reduce over already-read records (header excluded)."""
        counters = counters if counters is not None else JobCounters()
        extractor = extractor or self.create_extractor()

        emissions = self.map_stage(extractor, lines, counters)
        logger.info(
            f"Map stage complete: {counters.input_records} records in, "
            f"{counters.map_output_records} emitted, {counters.dropped_records} dropped"
        )

        groups = self.shuffle(emissions)
        entries = self.reduce_stage(groups, counters)
        logger.info(f"Reduce stage complete: {counters.reduce_groups} groups")
        return entries

    def run(self) -> JobResult:
        """
        Run the whole job and commit its output.

        Raises:
            ClassifierError: On any configuration, formatting or substrate failure
        """
        start = time.time()
        logger.info(
            f"Starting job '{self.settings.job_name}': input={self.settings.input_path}, "
            f"target_column={self.settings.target_column}, "
            f"output={self.settings.output_location}"
        )

        # Configuration problems surface before any input is read
        extractor = self.create_extractor()
        writer = self.writer
        writer.check_output()

        counters = JobCounters()
        entries = self.classify_lines(
            self.read_records(counters),
            counters=counters,
            extractor=extractor,
        )
        output_path = writer.commit(entries)

        elapsed = time.time() - start
        logger.info(f"Job '{self.settings.job_name}' completed in {elapsed:.2f}s")
        for name, value in counters.as_dict().items():
            logger.info(f"  {name}={value}")

        return JobResult(
            job_name=self.settings.job_name,
            entries=entries,
            counters=counters,
            output_path=output_path,
            elapsed_seconds=elapsed,
        )
