"""
Output storage for classification reports.
"""

from dataset_classifier.storage.report_writer import ReportWriter

__all__ = ["ReportWriter"]
