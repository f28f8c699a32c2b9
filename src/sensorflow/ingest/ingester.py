"""
StreamingRecordIngester: decodes a CSV byte stream and writes one table item per row.

Writes are dispatched through a bounded pool: at most ``max_in_flight``
PutItem calls run at once, and decoding pauses while the pool is full.
Reading and decoding happen in a worker thread, a batch at a time, so a
slow object body never stalls the event loop. ``ingest`` returns only after
every write has settled. Lines that cannot be decoded, rows that are too
short and writes that fail are collected and raised together as
RowWriteFailure once the pool has drained.
"""

from __future__ import annotations

import asyncio
import csv
from itertools import islice
from typing import Any, BinaryIO, Iterator, NamedTuple

from sensorflow.core.config import IngestConfig
from sensorflow.core.exceptions import RowWriteFailure
from sensorflow.core.logging import get_logger
from sensorflow.core.protocols import ITableStore
from sensorflow.models.events import Row

READ_CHUNK_SIZE = 64 * 1024


class DecodedLine(NamedTuple):
    line: int
    fields: list[str] | None
    error: str | None = None


def iter_byte_lines(stream: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[bytes]:
    """Split ``stream`` on ``\\n`` using plain ``read`` calls; the final line may lack a newline."""
    buffered = b""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        buffered += chunk
        *complete, buffered = buffered.split(b"\n")
        yield from complete
    if buffered:
        yield buffered


def decode_rows(stream: BinaryIO, encoding: str = "utf-8",
                delimiter: str = ",") -> Iterator[DecodedLine]:
    """Yield a DecodedLine for every non-blank line of ``stream``.

    Each line is decoded on its own, so ``encoding`` must keep ``\\n`` as a
    single byte (UTF-8, Latin-1 and other ASCII supersets do). A line that
    does not decode yields ``fields=None`` and the decoder's message in
    ``error``; the lines around it are unaffected.
    """
    for number, raw in enumerate(iter_byte_lines(stream), start=1):
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as exc:
            yield DecodedLine(number, None, f"undecodable line: {exc}")
            continue
        fields = next(csv.reader([text], delimiter=delimiter), [])
        if not fields or all(not f.strip() for f in fields):
            continue
        yield DecodedLine(number, fields)


def _take(lines: Iterator[DecodedLine], count: int) -> list[DecodedLine]:
    return list(islice(lines, count))


class StreamingRecordIngester:
    """Streams rows from an object into the configured table."""

    def __init__(self, table_store: ITableStore, config: IngestConfig) -> None:
        self._table_store = table_store
        self._config = config
        self.logger = get_logger("ingest.ingester")

    async def ingest(self, stream: BinaryIO) -> int:
        """Write every row of ``stream``; return the number of rows written."""
        log = self.logger.bind(table=self._config.table_name, max_in_flight=self._config.max_in_flight)
        slots = asyncio.Semaphore(self._config.max_in_flight)
        failures: list[dict[str, Any]] = []
        pending: set[asyncio.Task] = set()
        written = 0

        async def write(line: int, row: Row) -> None:
            nonlocal written
            try:
                await asyncio.to_thread(self._table_store.put_item, self._config.table_name, row.to_item())
                written += 1
            except Exception as exc:
                failures.append({"line": line, "row": row.model_dump(), "error": str(exc)})
            finally:
                slots.release()

        lines = decode_rows(stream, self._config.encoding, self._config.delimiter)
        try:
            while batch := await asyncio.to_thread(_take, lines, self._config.max_in_flight):
                for decoded in batch:
                    if decoded.fields is None:
                        failures.append({"line": decoded.line, "row": None, "error": decoded.error})
                        continue
                    try:
                        row = Row.from_fields(decoded.fields)
                    except ValueError as exc:
                        failures.append({"line": decoded.line, "row": decoded.fields, "error": str(exc)})
                        continue
                    await slots.acquire()
                    task = asyncio.create_task(write(decoded.line, row))
                    pending.add(task)
                    task.add_done_callback(pending.discard)
        finally:
            # drain barrier: nothing is reported until every write has settled
            if pending:
                await asyncio.gather(*pending)

        log.info("Ingestion drained", rows_written=written, rows_failed=len(failures))
        if failures:
            failures.sort(key=lambda f: f["line"])
            raise RowWriteFailure(failures, rows_written=written)
        return written
