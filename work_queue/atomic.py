"""
Crash-safe JSON files for the configuration and the checkpoint log.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


class AtomicFileWriter:
    """
    JSON reads and writes that never leave a half-written file behind.

    Data goes to a hidden temp file in the target directory, which then
    replaces the target with os.replace().
    """

    @staticmethod
    def write_json(filepath: Path, data: Any, indent: int = 2) -> None:
        """
        Write data as JSON, replacing the file in one step.

        Raises:
            OSError: If the file cannot be written (the temp file is removed)
            TypeError: If data is not JSON serializable
        """
        target = Path(filepath)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                json.dump(data, tmp_file, indent=indent, default=str)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, target)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    @staticmethod
    def read_json(filepath: Path, default: Any = None) -> Any:
        """Parsed contents of a JSON file, or default if it is missing or unreadable."""
        source = Path(filepath)
        if not source.is_file():
            return default

        try:
            return json.loads(source.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read {source}: {e}")
            return default
