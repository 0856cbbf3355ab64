"""
Record sources: asynchronous providers of records with equality filters.

Key exports:
    - RecordSource: Protocol implemented by all sources
    - MockDataSource: In-memory sample contracts
    - FileDataSource: Records from a JSON/YAML file
"""

from .base import RecordSource, apply_filters, matches_filters
from .file import FileDataSource
from .mock import CONTRACT_COLUMNS, SAMPLE_CONTRACTS, MockDataSource

__all__ = [
    "CONTRACT_COLUMNS",
    "FileDataSource",
    "MockDataSource",
    "RecordSource",
    "SAMPLE_CONTRACTS",
    "apply_filters",
    "matches_filters",
]
