"""
Report Writer - persist report entries to the output location.

Output layout (one directory per run):
    <output_location>/part-r-00000   one "header<TAB>body" record per key
    <output_location>/_SUCCESS       empty marker, written last

The directory must not exist when the run starts. Nothing is written
until commit(), so a failed run leaves no partial output behind.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Union

from dataset_classifier.core.exceptions import OutputExistsError, SubstrateError

if TYPE_CHECKING:
    from dataset_classifier.engines.aggregator import ReportEntry

logger = logging.getLogger(__name__)

PART_FILE_NAME = "part-r-00000"
SUCCESS_MARKER = "_SUCCESS"
KEY_VALUE_SEPARATOR = "\t"


class ReportWriter:
    """
    Writes report entries as newline-delimited key/value text.
    
    Usage:
        writer = ReportWriter("results/by_region")
        writer.check_output()          # before any processing
        ...
        path = writer.commit(entries)  # after every group is aggregated
    """
    
    def __init__(self, location: Union[str, Path], encoding: str = "utf-8"):
        self.location = Path(location)
        self.encoding = encoding
        self._committed = False
    
    @property
    def part_path(self) -> Path:
        return self.location / PART_FILE_NAME
    
    @property
    def success_path(self) -> Path:
        return self.location / SUCCESS_MARKER
    
    def check_output(self) -> None:
        """
        Fail early if the output location is already taken.
        
        Raises:
            OutputExistsError: If the location exists
        """
        if self.location.exists():
            raise OutputExistsError(str(self.location))
    
    @staticmethod
    def format_record(entry: "ReportEntry") -> str:
        """Serialize one entry as a single output record."""
        return f"{entry.header}{KEY_VALUE_SEPARATOR}{entry.body}\n"
    
    def commit(self, entries: Iterable["ReportEntry"]) -> Path:
        """
        Write every entry, exactly once each, then mark the output complete.
        
        Returns:
            Path of the written part file
            
        Raises:
            OutputExistsError: If the location appeared after check_output()
            SubstrateError: If the filesystem write fails
        """
        if self._committed:
            raise SubstrateError("commit", f"output already committed: {self.location}")
        
        self.check_output()
        count = 0
        created = False
        try:
            self.location.mkdir(parents=True)
            created = True
            tmp_path = self.location / f".{PART_FILE_NAME}.tmp"
            with open(tmp_path, "w", encoding=self.encoding, newline="\n") as f:
                for entry in entries:
                    f.write(self.format_record(entry))
                    count += 1
            os.replace(tmp_path, self.part_path)
            self.success_path.touch()
        except FileExistsError:
            raise OutputExistsError(str(self.location))
        except OSError as e:
            if created:
                shutil.rmtree(self.location, ignore_errors=True)
            raise SubstrateError("write", str(e)) from e
        
        self._committed = True
        logger.info(f"Wrote {count} report records to {self.part_path}")
        return self.part_path
