"""
JSON file storage for FSS lookup caches
Each cache is one JSON object mapping stringified ids to display names
"""

import json
import os
from pathlib import Path
from typing import Optional

import structlog

from shared.config import DATA_DIR

logger = structlog.get_logger()


class JsonCacheStorage:
    """Reads and writes whole id -> name mappings under a data directory"""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR

    def path_for(self, filename: str) -> Path:
        return self.data_dir / filename

    def read(self, filename: str) -> dict[int, str]:
        """
        Read a mapping from disk

        Returns an empty mapping when the file is missing or unreadable.
        Entries whose key is not an integer are skipped; other values are
        kept as their string form.
        """
        path = self.path_for(filename)
        if not path.exists():
            logger.info("No cache file found", file=str(path))
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read cache file", file=str(path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("Cache file is not a JSON object", file=str(path))
            return {}

        mapping = {}
        for key, value in data.items():
            try:
                mapping[int(key)] = value if isinstance(value, str) else str(value)
            except (TypeError, ValueError):
                logger.debug("Skipping bad cache key", file=str(path), key=key)
        return mapping

    def write(self, filename: str, mapping: dict[int, str]):
        """
        Overwrite a mapping on disk

        Writes to a temp file first and renames it into place.

        Raises:
            OSError: if the directory or file cannot be written
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(filename)
        tmp_path = path.with_suffix(path.suffix + ".tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({str(k): v for k, v in mapping.items()}, f, indent=2, sort_keys=True)
        os.replace(tmp_path, path)
