#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import logging
import sys

import redis

from kvmigrate.migration import migrate
from kvmigrate.libs.exceptions import KVMigrateException
from kvmigrate.libs.helpers import get_config

if redis.VERSION < (5, ):
    print('redis-py >= 5 is required.')
    sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description='Copy every key of a Redis database to another one with DUMP/RESTORE.')
    parser.add_argument('--from', dest='source', required=True, help='example: 127.0.0.1:6379')
    parser.add_argument('--to', dest='destination', required=True, help='example: 127.0.0.1:6379')
    parser.add_argument('--from_pwd', default='', help='from redis password')
    parser.add_argument('--to_pwd', default='', help='to redis password')
    parser.add_argument('--from_db', default='', help='from db (default: 0 or the one in the URL)')
    parser.add_argument('--to_db', default='', help='to db (default: 0 or the one in the URL)')
    parser.add_argument('--queue-size', type=int, default=get_config('queue_size'),
                        help='Maximum number of batches waiting to be restored.')
    parser.add_argument('--count', type=int, default=get_config('scan_count'), help='COUNT hint for SCAN.')
    parser.add_argument('--no-replace', dest='replace', action='store_false', default=get_config('replace'),
                        help='Fail on keys already present on the destination.')
    parser.add_argument('--skip-vanished', action='store_true', default=get_config('skip_vanished_keys'),
                        help='Skip keys deleted between SCAN and DUMP instead of aborting.')
    parser.add_argument('--loglevel', type=str.upper, default=get_config('loglevel'),
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], help='Log level.')
    args = parser.parse_args()

    logging.basicConfig(format='%(asctime)s %(name)s %(levelname)s:%(message)s',
                        level=args.loglevel)
    loglevel = logging.getLevelName(args.loglevel)

    try:
        migrate(args.source, args.destination, source_db=args.from_db, destination_db=args.to_db,
                source_password=args.from_pwd, destination_password=args.to_pwd,
                queue_size=args.queue_size, scan_count=args.count, replace=args.replace,
                skip_vanished_keys=args.skip_vanished, loglevel=loglevel)
    except KVMigrateException as e:
        print()
        print(e)
        sys.exit(1)
    print()
    print('Migration done.')


if __name__ == '__main__':
    main()
