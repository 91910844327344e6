import threading
import time

import pytest

from kvmigrate.batchqueue import BatchQueue
from kvmigrate.producer import ScanProducer
from kvmigrate.libs.exceptions import DumpError


def test_one_batch_per_page_and_queue_closed(make_store, markers):
    source = make_store(count=7, page_size=3)
    q = BatchQueue(maxsize=10)
    producer = ScanProducer(source, q, progress=markers.append)

    assert producer.run() == 7
    batches = list(q)
    assert [len(b) for b in batches] == [3, 3, 1]
    assert batches[0] == {b'key:0': b'dump:value:0', b'key:1': b'dump:value:1', b'key:2': b'dump:value:2'}
    assert q.closed
    assert markers == ['>', '>', '>']


def test_empty_store_yields_one_empty_batch(make_store, markers):
    source = make_store(count=0)
    q = BatchQueue(maxsize=10)
    assert ScanProducer(source, q, progress=markers.append).run() == 0
    assert list(q) == [{}]
    assert source.scanned_pages == 1


def test_dump_error_stops_the_scan(make_store, markers):
    source = make_store(count=15, page_size=3)
    source.fail_dump_on_page = 2
    q = BatchQueue(maxsize=10)
    with pytest.raises(DumpError):
        ScanProducer(source, q, progress=markers.append).run()
    assert source.scanned_pages == 2
    assert q.qsize() == 1
    assert not q.closed


def test_vanished_key_is_fatal_by_default(make_store, markers):
    source = make_store(count=3)
    source.pipelined_dump = lambda keys: [b'x', None, b'y']
    with pytest.raises(DumpError, match='vanished'):
        ScanProducer(source, BatchQueue(), progress=markers.append).run()


def test_vanished_key_can_be_skipped(make_store, markers):
    source = make_store(count=3)
    source.pipelined_dump = lambda keys: [b'x', None, b'y']
    q = BatchQueue()
    assert ScanProducer(source, q, skip_vanished_keys=True, progress=markers.append).run() == 2
    assert list(q) == [{b'key:0': b'x', b'key:2': b'y'}]


def test_backpressure_bounds_batches_in_flight(make_store, markers):
    capacity = 2
    source = make_store(count=30, page_size=1)
    q = BatchQueue(maxsize=capacity)
    producer = ScanProducer(source, q, progress=markers.append)
    t = threading.Thread(target=producer.run, daemon=True)
    t.start()

    deadline = time.monotonic() + 2
    while q.qsize() < capacity and time.monotonic() < deadline:
        time.sleep(0.01)
    time.sleep(0.1)
    # C batches buffered, one more built and waiting on put.
    assert q.qsize() == capacity
    assert source.scanned_pages == capacity + 1

    assert len(list(q)) == 30
    t.join(2)
    assert not t.is_alive()
