"""
Dataset Classifier.

Groups patient records by the value(s) of one configurable column and
renders a per-group summary of every matching record.
"""

__version__ = "1.0.0"
