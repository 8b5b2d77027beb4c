"""Ports for reading raw record lines from source extracts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from bizname.domain.model import RawRecordLine, RecordKind


class SourceReadError(RuntimeError):
    """Raised when a source extract cannot be opened or read any further."""


@runtime_checkable
class LineSource(Protocol):
    """Iterable of raw lines for one record kind.

    Implementations stream lazily and raise ``SourceReadError`` for failures
    that prevent any further progress.
    """

    @property
    def kind(self) -> RecordKind: ...

    @property
    def description(self) -> str:
        """Human-readable origin, recorded on the sync run."""
        ...

    def __iter__(self) -> Iterator[RawRecordLine]: ...


__all__ = ["LineSource", "SourceReadError"]
