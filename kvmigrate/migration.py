#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from .batchqueue import BatchQueue
from .consumer import RestoreConsumer
from .producer import ScanProducer
from .store import StoreHandle
from .libs.exceptions import MigrationError, QueueClosed
from .libs.helpers import print_marker


@dataclass
class MigrationContext:
    source: StoreHandle
    destination: StoreHandle
    queue: BatchQueue


@dataclass
class MigrationResult:
    keys_scanned: int
    keys_restored: int
    batches: int
    duration: float


class Migration():
    """Run one scanner and one restorer against a shared context.

    The scanner runs as a future on a dedicated thread, the restorer in the
    calling thread. The first fatal error on either side aborts the queue,
    which unblocks the other side, and is raised once both have stopped.
    """

    def __init__(self, context: MigrationContext, scan_count: Optional[int]=None,
                 skip_vanished_keys: bool=False, progress: Callable[[str], None]=print_marker,
                 loglevel: int=logging.DEBUG):
        self.logger = logging.getLogger(f'{self.__class__.__name__}')
        self.logger.setLevel(loglevel)
        self.context = context
        self.producer = ScanProducer(context.source, context.queue, scan_count=scan_count,
                                     skip_vanished_keys=skip_vanished_keys, progress=progress,
                                     loglevel=loglevel)
        self.consumer = RestoreConsumer(context.destination, context.queue, progress=progress,
                                        loglevel=loglevel)

    def _produce(self) -> int:
        try:
            return self.producer.run()
        except QueueClosed:
            # The restorer aborted the queue, its error is the one reported.
            raise
        except BaseException as e:
            self.context.queue.abort(e)
            raise

    def run(self) -> MigrationResult:
        start = time.monotonic()
        self.logger.info(f'Migrating {self.context.source.name} to {self.context.destination.name}')
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix='scanner') as executor:
            scanner = executor.submit(self._produce)
            try:
                self.consumer.run()
            except BaseException as e:
                self.context.queue.abort(e)
                # Wait for the scanner to notice, then report the first error.
                scanner.exception()
                raise
            scanned = scanner.result()
        result = MigrationResult(keys_scanned=scanned, keys_restored=self.consumer.keys_restored,
                                 batches=self.consumer.batches, duration=time.monotonic() - start)
        self.logger.info(f'{result.keys_restored} keys migrated in {result.duration:.2f}s.')
        return result


def migrate(source: str, destination: str, source_db: str='', destination_db: str='',
            source_password: str='', destination_password: str='', queue_size: int=100,
            scan_count: Optional[int]=None, replace: bool=True, skip_vanished_keys: bool=False,
            progress: Callable[[str], None]=print_marker, loglevel: int=logging.DEBUG) -> MigrationResult:
    source_name = StoreHandle.display_name(StoreHandle.connection_options(source, source_db, source_password))
    destination_name = StoreHandle.display_name(
        StoreHandle.connection_options(destination, destination_db, destination_password))
    if source_name == destination_name:
        raise MigrationError(f'Source and destination must be different (both are {source_name}).')
    with StoreHandle.connect(source, source_db, source_password, loglevel=loglevel) as source_handle, \
            StoreHandle.connect(destination, destination_db, destination_password, replace=replace,
                                loglevel=loglevel) as destination_handle:
        context = MigrationContext(source=source_handle, destination=destination_handle,
                                   queue=BatchQueue(queue_size))
        return Migration(context, scan_count=scan_count, skip_vanished_keys=skip_vanished_keys,
                         progress=progress, loglevel=loglevel).run()
