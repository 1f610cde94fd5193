# File: entitygen/filestore.py
"""
entitygen - Source File Store
===============================
The generator's only door to the file system.

Reads go straight to disk.  Writes are atomic (write-to-temp then rename,
see ``entitygen.utils.write_file``).  In dry-run mode writes are kept in
memory under ``pending`` instead, so a full run can be previewed without
side effects.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from entitygen.utils import ensure_directory, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.filestore")


class SourceFileStore:
    """File access used by the analysis and export steps."""

    __slots__ = ("dry_run", "pending", "bytes_written")

    def __init__(self, dry_run: bool = False) -> None:
        self.dry_run: bool = dry_run
        self.pending: Dict[Path, str] = {}
        self.bytes_written: int = 0

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def make_directories(self, path: Path) -> None:
        if self.dry_run:
            logger.debug("Dry run: would create %s", path)
            return
        ensure_directory(path)

    def write(self, path: Path, text: str) -> int:
        """Write *text* to *path* and return the byte count."""
        if self.dry_run:
            self.pending[path] = text
            size: int = len(text.encode("utf-8"))
            logger.info("Dry run: %d bytes not written to %s", size, path)
            return size

        size = write_file(path, text)
        self.bytes_written += size
        return size


__all__: List[str] = ["SourceFileStore"]
