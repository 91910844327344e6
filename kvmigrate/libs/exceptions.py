#!/usr/bin/env python
# -*- coding: utf-8 -*-


class KVMigrateException(Exception):
    pass


class MissingConfigFile(KVMigrateException):
    pass


class MissingConfigEntry(KVMigrateException):
    pass


class QueueClosed(KVMigrateException):
    pass


class MigrationError(KVMigrateException):
    pass


class StoreConnectionError(MigrationError):
    pass


class AuthError(MigrationError):
    pass


class SelectionError(MigrationError):
    pass


class ScanError(MigrationError):
    pass


class DumpError(MigrationError):
    pass


class RestoreError(MigrationError):
    pass
