import threading
from typing import Dict, List, Optional

import pytest

from kvmigrate.libs.exceptions import DumpError, RestoreError


class FakeStore:
    """In-memory stand-in for a StoreHandle.

    Keys are enumerated in insertion order, `page_size` keys per SCAN page,
    and the cursor is the offset of the next page. DUMP wraps the value so a
    restored key is distinguishable from a plain write.
    """

    def __init__(self, name: str = 'fake', data: Optional[Dict[bytes, bytes]] = None, page_size: int = 3):
        self.name = name
        self.data: Dict[bytes, bytes] = dict(data or {})
        self.page_size = page_size
        self.scanned_pages = 0
        self.restored: List[Dict[bytes, bytes]] = []
        self.fail_dump_on_page: Optional[int] = None
        self.fail_restore_on_batch: Optional[int] = None
        self.restore_gate: Optional[threading.Event] = None
        self.closed = False

    def scan_page(self, cursor, count=None):
        self.scanned_pages += 1
        keys = list(self.data)[cursor:cursor + self.page_size]
        next_cursor = cursor + self.page_size
        if next_cursor >= len(self.data):
            next_cursor = 0
        return next_cursor, keys

    def pipelined_dump(self, keys):
        if self.fail_dump_on_page == self.scanned_pages:
            raise DumpError(f'dump failed on page {self.scanned_pages}')
        return [b'dump:' + self.data[key] if key in self.data else None for key in keys]

    def pipelined_restore(self, batch):
        if self.restore_gate is not None:
            self.restore_gate.wait()
        if self.fail_restore_on_batch == len(self.restored) + 1:
            raise RestoreError(f'restore failed on batch {len(self.restored) + 1}')
        self.restored.append(dict(batch))
        for key, value in batch.items():
            self.data[key] = value[len(b'dump:'):]

    def close(self):
        self.closed = True


@pytest.fixture
def make_store():
    def _make(count: int = 0, page_size: int = 3, name: str = 'fake'):
        data = {f'key:{i}'.encode(): f'value:{i}'.encode() for i in range(count)}
        return FakeStore(name=name, data=data, page_size=page_size)
    return _make


@pytest.fixture
def markers():
    emitted: List[str] = []
    return emitted
