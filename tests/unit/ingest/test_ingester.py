"""Tests for StreamingRecordIngester decoding, bounded writes and failure reporting."""

from __future__ import annotations

import asyncio
import io
import threading
import time

import pytest

from sensorflow.core.config import IngestConfig
from sensorflow.core.exceptions import RowWriteFailure
from sensorflow.ingest.ingester import StreamingRecordIngester, decode_rows, iter_byte_lines
from tests.fakes import MemoryTableStore

TABLE = "sensor_data"


def ingest(store, data: bytes, **config):
    ingester = StreamingRecordIngester(store, IngestConfig(**config))
    return asyncio.run(ingester.ingest(io.BytesIO(data)))


class TestDecodeRows:
    def test_yields_fields_with_line_numbers(self):
        rows = list(decode_rows(io.BytesIO(b"s1,100,3.5\ns2,200,4.1\n")))
        assert rows == [(1, ["s1", "100", "3.5"], None), (2, ["s2", "200", "4.1"], None)]

    def test_skips_blank_lines(self):
        rows = list(decode_rows(io.BytesIO(b"s1,100,3.5\n\n  \ns2,200,4.1")))
        assert [r.fields[0] for r in rows] == ["s1", "s2"]
        assert [r.line for r in rows] == [1, 4]

    def test_handles_crlf_and_quotes(self):
        rows = list(decode_rows(io.BytesIO(b'"s,1",100,3.5\r\n')))
        assert rows[0][1] == ["s,1", "100", "3.5"]

    def test_custom_delimiter(self):
        rows = list(decode_rows(io.BytesIO(b"s1;100;3.5\n"), delimiter=";"))
        assert rows[0][1] == ["s1", "100", "3.5"]

    def test_undecodable_line_is_flagged_and_neighbours_survive(self):
        rows = list(decode_rows(io.BytesIO(b"s1,1,1\n\xff\xfe,2,2\ns3,3,3\n")))
        assert [r.line for r in rows] == [1, 2, 3]
        assert rows[1].fields is None
        assert "undecodable" in rows[1].error
        assert rows[2].fields == ["s3", "3", "3"]

    def test_lines_split_across_reads(self):
        lines = list(iter_byte_lines(io.BytesIO(b"s1,100,3.5\ns2,200,4.1"), chunk_size=4))
        assert lines == [b"s1,100,3.5", b"s2,200,4.1"]


class TestIngest:
    def test_two_rows_two_writes(self):
        store = MemoryTableStore()
        written = ingest(store, b"s1,100,3.5\ns2,200,4.1\n")

        assert written == 2
        items = sorted(store.items[TABLE], key=lambda i: i["sensor_id"]["S"])
        assert items == [
            {"sensor_id": {"S": "s1"}, "timestamp": {"N": "100"}, "value": {"N": "3.5"}},
            {"sensor_id": {"S": "s2"}, "timestamp": {"N": "200"}, "value": {"N": "4.1"}},
        ]

    def test_custom_table_name(self):
        store = MemoryTableStore()
        ingest(store, b"s1,100,3.5\n", table_name="readings-dev")
        assert list(store.items) == ["readings-dev"]

    def test_empty_stream_writes_nothing(self):
        store = MemoryTableStore()
        assert ingest(store, b"") == 0
        assert store.items == {}

    def test_all_writes_finish_before_return(self):
        store = MemoryTableStore()
        original = store.put_item

        def slow_put(table, item):
            time.sleep(0.02)
            original(table, item)

        store.put_item = slow_put
        data = b"".join(f"s{i},{i},1.0\n".encode() for i in range(10))
        assert ingest(store, data, max_in_flight=4) == 10
        assert len(store.items[TABLE]) == 10

    def test_in_flight_writes_are_bounded(self):
        store = MemoryTableStore()
        original = store.put_item
        lock = threading.Lock()
        in_flight = 0
        peak = 0

        def tracking_put(table, item):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.01)
            original(table, item)
            with lock:
                in_flight -= 1

        store.put_item = tracking_put
        data = b"".join(f"s{i},{i},1.0\n".encode() for i in range(20))
        assert ingest(store, data, max_in_flight=3) == 20
        assert 1 <= peak <= 3


class TestFailures:
    def test_write_failures_are_aggregated(self):
        store = MemoryTableStore()
        store.reject("sensor_id", "s2")

        with pytest.raises(RowWriteFailure) as excinfo:
            ingest(store, b"s1,100,3.5\ns2,200,4.1\ns3,300,5.0\n")

        failure = excinfo.value
        assert failure.rows_written == 2
        assert len(failure.failures) == 1
        assert failure.failures[0]["line"] == 2
        assert failure.failures[0]["row"]["sensor_id"] == "s2"
        assert "rejected" in failure.failures[0]["error"]

    def test_successful_rows_still_written_when_others_fail(self):
        store = MemoryTableStore()
        store.reject("sensor_id", "s1")
        with pytest.raises(RowWriteFailure):
            ingest(store, b"s1,100,3.5\ns2,200,4.1\n")
        assert [i["sensor_id"]["S"] for i in store.items[TABLE]] == ["s2"]

    def test_short_rows_are_reported_not_written(self):
        store = MemoryTableStore()
        with pytest.raises(RowWriteFailure) as excinfo:
            ingest(store, b"s1,100,3.5\ns2,200\n")
        assert excinfo.value.rows_written == 1
        assert excinfo.value.failures[0]["row"] == ["s2", "200"]
        assert "expected 3 fields" in excinfo.value.failures[0]["error"]
        assert len(store.items[TABLE]) == 1

    def test_failures_sorted_by_line(self):
        store = MemoryTableStore()
        store.reject("value", "bad")
        with pytest.raises(RowWriteFailure) as excinfo:
            ingest(store, b"s1,1,bad\ns2\ns3,3,bad\n", max_in_flight=1)
        assert [f["line"] for f in excinfo.value.failures] == [1, 2, 3]

    def test_undecodable_line_is_reported_and_valid_rows_written(self):
        store = MemoryTableStore()
        with pytest.raises(RowWriteFailure) as excinfo:
            ingest(store, b"s1,1,1\n\xff\xfe,2,2\n")

        failure = excinfo.value
        assert failure.rows_written == 1
        assert [f["line"] for f in failure.failures] == [2]
        assert failure.failures[0]["row"] is None
        assert "undecodable" in failure.failures[0]["error"]
        assert [i["sensor_id"]["S"] for i in store.items[TABLE]] == ["s1"]


class _SlowStream:
    """Returns one line per ``read`` and blocks for ``delay`` seconds each time."""

    def __init__(self, lines: list[bytes], delay: float) -> None:
        self._lines = list(lines)
        self._delay = delay

    def read(self, size: int = -1) -> bytes:
        time.sleep(self._delay)
        return self._lines.pop(0) if self._lines else b""


class TestEventLoop:
    def test_slow_reads_do_not_block_the_loop(self):
        store = MemoryTableStore()
        stream = _SlowStream([f"s{i},{i},1.0\n".encode() for i in range(5)], delay=0.05)
        ingester = StreamingRecordIngester(store, IngestConfig())
        interval = 0.01

        async def run():
            ticks = 0
            done = asyncio.Event()

            async def heartbeat():
                nonlocal ticks
                while not done.is_set():
                    await asyncio.sleep(interval)
                    ticks += 1

            async def ingest_then_stop():
                try:
                    return await ingester.ingest(stream)
                finally:
                    done.set()

            started = time.monotonic()
            written, _ = await asyncio.gather(ingest_then_stop(), heartbeat())
            return written, ticks, time.monotonic() - started

        written, ticks, elapsed = asyncio.run(run())
        assert written == 5
        assert ticks > elapsed / (interval * 3)
