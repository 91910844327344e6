#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
from typing import Callable

from .batchqueue import BatchQueue
from .store import StoreHandle
from .libs.helpers import print_marker


class RestoreConsumer():

    def __init__(self, destination: StoreHandle, queue: BatchQueue,
                 progress: Callable[[str], None]=print_marker, loglevel: int=logging.DEBUG):
        self.logger = logging.getLogger(f'{self.__class__.__name__}')
        self.logger.setLevel(loglevel)
        self.destination = destination
        self.queue = queue
        self.progress = progress
        self.batches = 0
        self.keys_restored = 0

    def run(self) -> int:
        for batch in self.queue:
            self.destination.pipelined_restore(batch)
            self.batches += 1
            self.keys_restored += len(batch)
            self.progress('.')
        self.logger.info(f'Restored {self.keys_restored} keys in {self.batches} batches on {self.destination.name}.')
        return self.keys_restored
