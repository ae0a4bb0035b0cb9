from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

from .errors import GnuplotNotFoundError, GnuplotSetupError, TempFileLimitError


logger = logging.getLogger(__name__)

TMPFILE_PREFIX = "gnuplot_i"


class TempFileRegistry:
    """Temporary data files owned by one session.

    The number of files alive is also tracked across every registry in the
    process and capped at ``max_files - 1``.
    """

    _alive_count: int = 0

    def __init__(self, tmp_dir: str | Path, max_files: int) -> None:
        self.tmp_dir = Path(tmp_dir)
        self.max_files = int(max_files)
        self._names: list[str] = []

    @classmethod
    def alive_count(cls) -> int:
        return TempFileRegistry._alive_count

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def create(self) -> str:
        if TempFileRegistry._alive_count >= self.max_files - 1:
            raise TempFileLimitError(
                f"Maximum number of temporary files reached ({self.max_files}): "
                "cannot open more files"
            )
        try:
            fd, name = tempfile.mkstemp(prefix=TMPFILE_PREFIX, dir=str(self.tmp_dir))
        except OSError as exc:
            raise GnuplotSetupError(
                f'Cannot create temporary file in "{self.tmp_dir}": {exc}'
            ) from exc
        os.close(fd)
        self._names.append(name)
        TempFileRegistry._alive_count += 1
        logger.debug("Created temp file %s", name)
        return name

    def write_rows(self, rows: Iterable[str]) -> str:
        name = self.create()
        with open(name, "w", encoding="utf-8") as handle:
            for row in rows:
                handle.write(row)
                handle.write("\n")
        return name

    def remove_all(self) -> int:
        """Delete every recorded file and forget it; return how many were removed.

        A recorded file that has already vanished is dropped from the record
        and reported with ``GnuplotNotFoundError``; files after it stay
        recorded for the next call.
        """
        removed = 0
        try:
            while self._names:
                name = self._names.pop(0)
                removed += 1
                try:
                    os.remove(name)
                except FileNotFoundError:
                    raise GnuplotNotFoundError(
                        f'Cannot remove temporary file "{name}": it does not exist'
                    ) from None
                except OSError:
                    self._names.insert(0, name)
                    removed -= 1
                    raise
                logger.debug("Removed temp file %s", name)
        finally:
            TempFileRegistry._alive_count = max(0, TempFileRegistry._alive_count - removed)
        return removed
