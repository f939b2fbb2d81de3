"""
End-to-end tests for the local job runner.
"""

import pytest

from dataset_classifier.core.config import Settings
from dataset_classifier.core.schema import DEFAULT_CSV_HEADER
from dataset_classifier.core.exceptions import (
    ConfigurationError,
    FormattingIndexError,
    OutputExistsError,
    SubstrateError,
    UnresolvedColumnError,
)
from dataset_classifier.engines.local_runner import JobCounters, LocalJobRunner
from dataset_classifier.storage.report_writer import PART_FILE_NAME, SUCCESS_MARKER


def make_runner(input_path, output_dir, target_column=None, **kwargs) -> LocalJobRunner:
    settings = Settings(
        input_path=str(input_path),
        output_location=str(output_dir),
        target_column=target_column,
        max_workers=2,
        **kwargs,
    )
    return LocalJobRunner(settings)


class TestRunByRegion:
    """Classify the sample records by the default column."""
    
    def test_groups_and_counts(self, tmp_path, write_csv, sample_lines, records):
        csv_path = write_csv(sample_lines + [records["short"]])
        result = make_runner(csv_path, tmp_path / "out").run()
        
        assert result.keys == ["East_of_England", "London"]
        counts = {entry.key: entry.count for entry in result.entries}
        assert counts == {"East_of_England": 2, "London": 1}
        
        east = result.entries[0]
        assert len(east.body.split("\n\n")) == 2
    
    def test_counters(self, tmp_path, write_csv, sample_lines, records):
        csv_path = write_csv(sample_lines + [records["short"]])
        counters = make_runner(csv_path, tmp_path / "out").run().counters
        
        assert counters.header_skipped is True
        assert counters.input_records == 4
        assert counters.dropped_records == 1
        assert counters.map_output_records == 3
        assert counters.reduce_groups == 2
        assert counters.output_records == 2
    
    def test_header_never_grouped(self, tmp_path, write_csv, sample_lines):
        """The first line is skipped even when it looks like a record."""
        csv_path = write_csv(sample_lines)
        result = make_runner(csv_path, tmp_path / "out").run()
        
        assert "Region" not in result.keys
        assert all("NHS_Number: NHS_Number" not in e.body for e in result.entries)
    
    def test_first_data_like_line_is_still_skipped(self, tmp_path, write_csv, records):
        csv_path = write_csv([records["london"]], header=records["east_1"])
        result = make_runner(csv_path, tmp_path / "out").run()
        
        assert result.keys == ["London"]
    
    def test_output_written(self, tmp_path, write_csv, sample_lines):
        out_dir = tmp_path / "out"
        result = make_runner(write_csv(sample_lines), out_dir).run()
        
        assert result.output_path == out_dir / PART_FILE_NAME
        assert (out_dir / SUCCESS_MARKER).exists()
        content = result.output_path.read_text(encoding="utf-8")
        assert content.startswith(result.entries[0].header + "\t")
    
    def test_empty_input(self, tmp_path):
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("", encoding="utf-8")
        result = make_runner(csv_path, tmp_path / "out").run()
        
        assert result.entries == []
        assert result.counters.header_skipped is False
        assert result.output_path.read_text(encoding="utf-8") == ""


class TestRunBySymptom:
    """Classify by a multi-valued column."""
    
    def test_each_symptom_is_a_group(self, tmp_path, write_csv, sample_lines):
        result = make_runner(write_csv(sample_lines), tmp_path / "out", "Symptoms").run()
        counts = {entry.key: entry.count for entry in result.entries}
        
        assert counts == {
            "Asthma": 2,
            "Chronic Kidney Disease": 1,
            "Hypertension": 1,
            "Migraine": 1,
            "Type 2 Diabetes Mellitus": 1,
        }
        assert result.counters.map_output_records == 6
    
    def test_windows_line_endings(self, tmp_path, sample_lines):
        csv_path = tmp_path / "crlf.csv"
        csv_path.write_bytes("\r\n".join([DEFAULT_CSV_HEADER] + sample_lines).encode("utf-8"))
        result = make_runner(csv_path, tmp_path / "out", "Region").run()
        
        assert result.keys == ["East_of_England", "London"]


class TestRunFailures:
    """Failures stop the run before anything is committed."""
    
    def test_unresolved_column(self, tmp_path, write_csv, sample_lines):
        out_dir = tmp_path / "out"
        runner = make_runner(write_csv(sample_lines), out_dir, "Blood_Type")
        
        with pytest.raises(UnresolvedColumnError):
            runner.run()
        assert not out_dir.exists()
    
    def test_output_exists(self, tmp_path, write_csv, sample_lines):
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        
        with pytest.raises(OutputExistsError):
            make_runner(write_csv(sample_lines), out_dir).run()
    
    def test_missing_output_location(self, write_csv, sample_lines):
        runner = LocalJobRunner(Settings(input_path=str(write_csv(sample_lines))))
        
        with pytest.raises(ConfigurationError):
            runner.run()
    
    def test_missing_input(self, tmp_path):
        out_dir = tmp_path / "out"
        
        with pytest.raises(SubstrateError):
            make_runner(tmp_path / "missing.csv", out_dir).run()
        assert not out_dir.exists()
    
    def test_short_record_reaching_formatter(self, tmp_path, write_csv, sample_lines, records):
        """A record that has its target column but not every field fails the run."""
        out_dir = tmp_path / "out"
        runner = make_runner(write_csv(sample_lines + [records["short"]]), out_dir, "Name")
        
        with pytest.raises(FormattingIndexError):
            runner.run()
        assert not out_dir.exists()


class TestStages:
    """Test individual runner stages."""
    
    def test_shuffle_keeps_emission_order(self):
        emissions = [("b", "line1"), ("a", "line2"), ("b", "line3"), ("a", "line4")]
        
        assert LocalJobRunner.shuffle(emissions) == [
            ("a", ["line2", "line4"]),
            ("b", ["line1", "line3"]),
        ]
    
    def test_shuffle_empty(self):
        assert LocalJobRunner.shuffle([]) == []
    
    def test_classify_lines_without_io(self, sample_lines):
        runner = LocalJobRunner(Settings(target_column="Gender", max_workers=1))
        counters = JobCounters()
        entries = runner.classify_lines(sample_lines, counters=counters)
        
        assert [(e.key, e.count) for e in entries] == [("Female", 1), ("Male", 2)]
        assert counters.input_records == 3
