"""
File-backed record source.

Reads records from a JSON or YAML file on each call and applies equality
filters. File reading runs in a worker thread so callers on an event loop
aren't blocked.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config.loader import load_records
from .base import apply_filters

logger = logging.getLogger(__name__)


@dataclass
class FileDataSource:
    """
    RecordSource backed by a .json, .yaml or .yml file.

    Attributes:
        path: Records file containing a list of mappings
    """

    path: Path

    async def get_records(
        self, filters: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """
        Load the file and return records matching all equality filters.

        Raises:
            RecordSourceError: If the file can't be loaded
        """
        records = await asyncio.to_thread(load_records, self.path)
        matched = apply_filters(records, filters)
        logger.info(
            f"Loaded {len(matched)} of {len(records)} records from {self.path}",
        )
        return matched
