#!/usr/bin/env python
# -*- coding: utf-8 -*-

import threading
from collections import deque
from typing import Dict, Iterator, Optional

from .libs.exceptions import QueueClosed

Batch = Dict[bytes, bytes]


class BatchQueue():
    """Bounded FIFO of batches between one producer and one consumer.

    `put` blocks while the queue is full, `get` blocks while it is empty and
    still open. Once closed, the remaining batches are handed out in order and
    `get` then returns None, every time, without blocking.
    `abort` stops both sides: pending batches are dropped, a blocked `put`
    raises QueueClosed and `get` raises the error given to `abort`.
    """

    def __init__(self, maxsize: int=100):
        if maxsize < 1:
            raise ValueError(f'The queue needs room for at least one batch (got {maxsize}).')
        self.maxsize = maxsize
        self._batches: deque = deque()
        self._closed = False
        self._error: Optional[BaseException] = None
        self._mutex = threading.Lock()
        self._not_empty = threading.Condition(self._mutex)
        self._not_full = threading.Condition(self._mutex)

    def put(self, batch: Batch) -> None:
        with self._not_full:
            while len(self._batches) >= self.maxsize and not self._closed:
                self._not_full.wait()
            if self._closed:
                raise QueueClosed('Cannot queue a batch on a closed queue.')
            self._batches.append(batch)
            self._not_empty.notify()

    def get(self) -> Optional[Batch]:
        with self._not_empty:
            while not self._batches and not self._closed:
                self._not_empty.wait()
            if self._error is not None:
                raise self._error
            if not self._batches:
                # Closed and drained
                return None
            batch = self._batches.popleft()
            self._not_full.notify()
            return batch

    def close(self) -> None:
        with self._mutex:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def abort(self, error: BaseException) -> None:
        with self._mutex:
            if self._error is None:
                self._error = error
            self._closed = True
            self._batches.clear()
            self._not_empty.notify_all()
            self._not_full.notify_all()

    @property
    def closed(self) -> bool:
        with self._mutex:
            return self._closed

    def qsize(self) -> int:
        with self._mutex:
            return len(self._batches)

    def __iter__(self) -> Iterator[Batch]:
        while True:
            batch = self.get()
            if batch is None:
                return
            yield batch
