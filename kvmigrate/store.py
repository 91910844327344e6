#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
from typing import Any, Dict, List, Optional, Tuple

from redis import ConnectionPool, Redis
from redis.backoff import NoBackoff
from redis.connection import parse_url
from redis.retry import Retry
from redis.exceptions import AuthenticationError, ConnectionError, RedisError, ResponseError, TimeoutError

from .libs.exceptions import (StoreConnectionError, AuthError, SelectionError, ScanError, DumpError,
                              RestoreError)

URL_SCHEMES = ('redis://', 'rediss://', 'unix://')


def _first_error(replies: List) -> Optional[Tuple[int, Exception]]:
    for i, reply in enumerate(replies):
        if isinstance(reply, Exception):
            return i, reply
    return None


def _release(client: Redis):
    # The pool is ours, the client does not close it.
    client.close()
    client.connection_pool.disconnect()


class StoreHandle():
    """Authenticated, database scoped connection to one Redis-compatible store.

    The redis-py client replays AUTH and SELECT on every connection it opens,
    so the pipelines below always run against the selected database.
    """

    def __init__(self, client: Redis, name: str, replace: bool=True, loglevel: int=logging.DEBUG):
        self.__init_logger(loglevel)
        self.client = client
        self.name = name
        self.replace = replace

    def __init_logger(self, loglevel):
        self.logger = logging.getLogger(f'{self.__class__.__name__}')
        self.logger.setLevel(loglevel)

    @staticmethod
    def connection_options(address: str, db: str='', password: str='') -> Dict[str, Any]:
        """Resolve an address, a database selector and a password into connection pool options.

        A URL may carry its own database and password. The explicit selector
        and password apply on top of them but must not contradict them.
        """
        if address.startswith(URL_SCHEMES):
            options = parse_url(address)
        elif ':' in address:
            host, _, port = address.rpartition(':')
            try:
                options = {'host': host or '127.0.0.1', 'port': int(port)}
            except ValueError:
                raise StoreConnectionError(f'Invalid address {address}, expected <host>:<port>.')
        else:
            options = {'host': address, 'port': 6379}

        if db in (None, ''):
            db = options.get('db', 0)
        try:
            db = int(db)
        except ValueError:
            raise SelectionError(f'Invalid database selector {db!r} for {address}.')
        if options.get('db', db) != db:
            raise SelectionError(f'{address} selects database {options["db"]}, not {db}.')
        options['db'] = db

        if password:
            if options.get('password') not in (None, password):
                raise AuthError(f'{address} carries a password different from the one given.')
            options['password'] = password
        options['retry'] = Retry(NoBackoff(), 0)
        return options

    @staticmethod
    def display_name(options: Dict[str, Any]) -> str:
        if 'path' in options:
            return f"{options['path']}/{options['db']}"
        return f"{options.get('host', 'localhost')}:{options.get('port', 6379)}/{options['db']}"

    @classmethod
    def connect(cls, address: str, db: str='', password: str='', replace: bool=True,
                loglevel: int=logging.DEBUG) -> 'StoreHandle':
        """Dial the store, authenticate when a password is given, then select the database.

        Nothing is retried: a failing command is reported as is.
        """
        options = cls.connection_options(address, db, password)
        name = cls.display_name(options)
        db = options['db']
        client = Redis(connection_pool=ConnectionPool(**options), retry=options['retry'])

        # The handshake runs on the first command.
        try:
            client.ping()
        except AuthenticationError as e:
            _release(client)
            raise AuthError(f'Authentication refused by {address}: {e}') from e
        except (ConnectionError, TimeoutError) as e:
            _release(client)
            raise StoreConnectionError(f'Unable to connect to {address}: {e}') from e
        except ResponseError as e:
            _release(client)
            raise SelectionError(f'Unable to select database {db!r} on {address}: {e}') from e
        handle = cls(client, name, replace=replace, loglevel=loglevel)
        handle.logger.debug(f'Connected to {name}')
        return handle

    def scan_page(self, cursor: int, count: Optional[int]=None) -> Tuple[int, List[bytes]]:
        try:
            next_cursor, keys = self.client.scan(cursor, count=count)
        except RedisError as e:
            raise ScanError(f'SCAN {cursor} failed on {self.name}: {e}') from e
        return int(next_cursor), keys

    def pipelined_dump(self, keys: List[bytes]) -> List[Optional[bytes]]:
        if not keys:
            return []
        p = self.client.pipeline(transaction=False)
        [p.dump(key) for key in keys]
        try:
            dumps = p.execute(raise_on_error=False)
        except RedisError as e:
            raise DumpError(f'Pipelined DUMP failed on {self.name}: {e}') from e
        failed = _first_error(dumps)
        if failed:
            i, error = failed
            raise DumpError(f'DUMP {keys[i]!r} failed on {self.name}: {error}') from error
        return dumps

    def pipelined_restore(self, batch: Dict[bytes, bytes]) -> None:
        if not batch:
            return
        keys = list(batch.keys())
        p = self.client.pipeline(transaction=False)
        [p.restore(key, 0, batch[key], replace=self.replace) for key in keys]
        try:
            replies = p.execute(raise_on_error=False)
        except RedisError as e:
            raise RestoreError(f'Pipelined RESTORE failed on {self.name}: {e}') from e
        failed = _first_error(replies)
        if failed:
            i, error = failed
            raise RestoreError(f'RESTORE {keys[i]!r} failed on {self.name}: {error}') from error

    def close(self):
        _release(self.client)
        self.logger.debug(f'Connection to {self.name} released')

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
