"""Streaming readers for fixed-width extract files on disk."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from logging import getLogger
from typing import TYPE_CHECKING

from bizname.domain.model import RawRecordLine, RecordKind
from bizname.domain.ports.sources import SourceReadError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


log = getLogger(__name__)

DEFAULT_ENCODING = "latin-1"


@dataclass(frozen=True, slots=True)
class FixedWidthFileSource:
    """Yield one ``RawRecordLine`` per non-blank line of ``path``.

    The file is read lazily, one line at a time. Only the line terminator is
    removed, because trailing spaces are part of the fixed-width record. Blank
    lines are skipped but still advance the line number.
    """

    path: Path
    kind: RecordKind
    encoding: str = DEFAULT_ENCODING

    @property
    def description(self) -> str:
        return str(self.path)

    def __iter__(self) -> Iterator[RawRecordLine]:
        try:
            handle = self.path.open("r", encoding=self.encoding, newline="")
        except (OSError, LookupError) as exc:
            raise SourceReadError(f"Cannot open {self.path}: {exc}") from exc

        with handle:
            line_number = 0
            while True:
                try:
                    raw = handle.readline()
                except (OSError, UnicodeDecodeError) as exc:
                    raise SourceReadError(
                        f"Failed reading {self.path} after line {line_number}: {exc}"
                    ) from exc
                if not raw:
                    return
                line_number += 1
                text = raw.rstrip("\r\n")
                if text:
                    yield RawRecordLine(kind=self.kind, text=text, line_number=line_number)


def find_source_files(directory: Path, pattern: str) -> list[Path]:
    """Files in ``directory`` whose name matches ``pattern`` (case-insensitive), sorted."""

    if not directory.is_dir():
        raise SourceReadError(f"Not a directory: {directory}")
    lowered = pattern.lower()
    matches = sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and fnmatch(path.name.lower(), lowered)
    )
    log.debug("Found %d files matching %s in %s", len(matches), pattern, directory)
    return matches
