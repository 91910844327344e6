#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
from typing import Callable, Optional

from .batchqueue import BatchQueue
from .store import StoreHandle
from .libs.exceptions import DumpError
from .libs.helpers import print_marker


class ScanProducer():
    """Walk the source keyspace with SCAN and queue one batch of dumps per page."""

    def __init__(self, source: StoreHandle, queue: BatchQueue, scan_count: Optional[int]=None,
                 skip_vanished_keys: bool=False, progress: Callable[[str], None]=print_marker,
                 loglevel: int=logging.DEBUG):
        self.logger = logging.getLogger(f'{self.__class__.__name__}')
        self.logger.setLevel(loglevel)
        self.source = source
        self.queue = queue
        self.scan_count = scan_count
        self.skip_vanished_keys = skip_vanished_keys
        self.progress = progress
        self.pages = 0
        self.keys_queued = 0

    def _build_batch(self, keys, dumps):
        batch = {}
        for key, dump in zip(keys, dumps):
            if dump is None:
                # Deleted between SCAN and DUMP.
                if not self.skip_vanished_keys:
                    raise DumpError(f'{key!r} vanished from {self.source.name} before it could be dumped.')
                self.logger.warning(f'{key!r} vanished from {self.source.name}, skipping.')
                continue
            batch[key] = dump
        return batch

    def run(self) -> int:
        cursor = 0
        while True:
            cursor, keys = self.source.scan_page(cursor, count=self.scan_count)
            batch = self._build_batch(keys, self.source.pipelined_dump(keys))
            self.pages += 1
            self.keys_queued += len(batch)
            self.progress('>')
            self.queue.put(batch)
            if cursor == 0:
                break
        self.queue.close()
        self.logger.info(f'Scan of {self.source.name} done: {self.keys_queued} keys in {self.pages} batches.')
        return self.keys_queued
