"""
Error kinds surfaced by daykeeper

Each kind carries the process exit code the CLI reports for it.
"""


class KeeperError(Exception):
    """Base class for every failure reported to the user"""
    exit_code = 1


class InvalidArguments(KeeperError):
    exit_code = 2


class InvalidDate(KeeperError):
    exit_code = 3


class InvalidHour(KeeperError):
    exit_code = 4


class NotFound(KeeperError):
    exit_code = 5


class StorageFailure(KeeperError):
    exit_code = 6
