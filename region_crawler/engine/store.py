"""Append-oriented CSV persistence for region records."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .errors import DestinationNotFoundError, InvalidRowError
from .locks import FileMutexRegistry
from .records import RegionalRecord

HEADER = "code,name"
DELIMITER = ","


@dataclass(slots=True)
class CsvOptions:
    """Options applied to a single append call."""

    include_header: bool = True
    ignore_null_values: bool = True
    transform: Callable[[str], str] | None = None
    encoding: str = "utf-8"


class RecordStore:
    """Read and append two-column ``code,name`` files.

    Appends hold the destination's lock from the registry for the whole call, so
    the header decision and the rows of one call are never interleaved with
    another writer of the same file.
    """

    def __init__(self, locks: FileMutexRegistry, buffer_size: int = 8192) -> None:
        self.locks = locks
        self.buffer_size = buffer_size

    async def append(
        self,
        destination: Path | str,
        records: Iterable[RegionalRecord],
        options: CsvOptions | None = None,
    ) -> Path:
        path = Path(destination)
        options = options or CsvOptions()
        rows = list(records)
        async with self.locks.get(path):
            return await asyncio.to_thread(self._write, path, rows, options)

    def _write(self, path: Path, records: list[RegionalRecord], options: CsvOptions) -> Path:
        is_new = not path.exists() or path.stat().st_size == 0
        lines: list[str] = []
        if is_new and options.include_header:
            lines.append(HEADER)
        for record in records:
            if options.ignore_null_values and not record.is_complete:
                continue
            name = record.name or ""
            if options.transform is not None:
                name = options.transform(name)
            # Fields are quoted verbatim; embedded quotes are not escaped.
            lines.append(f'"{record.code or ""}"{DELIMITER}"{name}"')
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = "".join(f"{line}\n" for line in lines)
        with path.open("a", encoding=options.encoding, newline="") as stream:
            stream.write(payload)
        return path

    def read_all(self, destination: Path | str) -> Iterator[RegionalRecord]:
        """Stream records lazily, skipping the header, blank and short lines."""

        path = Path(destination)
        if not path.exists():
            raise DestinationNotFoundError(f"Destination not found: {path}")
        with path.open("r", encoding="utf-8", buffering=self.buffer_size) as stream:
            stream.readline()
            for raw in stream:
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                parts = line.split(DELIMITER)
                if len(parts) < 2:
                    continue
                yield RegionalRecord(code=parts[0].strip('"'), name=parts[1].strip('"'))

    async def read_all_buffered(self, destination: Path | str) -> list[RegionalRecord]:
        """Load every record under the destination lock; short lines are fatal."""

        path = Path(destination)
        async with self.locks.get(path):
            return await asyncio.to_thread(self._read_strict, path)

    def _read_strict(self, path: Path) -> list[RegionalRecord]:
        if not path.exists():
            raise DestinationNotFoundError(f"Destination not found: {path}")
        records: list[RegionalRecord] = []
        with path.open("r", encoding="utf-8", buffering=self.buffer_size) as stream:
            stream.readline()
            for line_number, raw in enumerate(stream, start=2):
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                parts = line.split(DELIMITER)
                if len(parts) < 2:
                    raise InvalidRowError(
                        f"{path.name}:{line_number}: each line must contain at least two columns",
                        line_number=line_number,
                        line=line,
                    )
                records.append(RegionalRecord(code=parts[0].strip('"'), name=parts[1].strip('"')))
        return records

    async def count(self, destination: Path | str) -> int:
        return len(await self.read_all_buffered(destination))


__all__ = ["CsvOptions", "DELIMITER", "HEADER", "RecordStore"]
