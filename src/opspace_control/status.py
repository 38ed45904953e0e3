#!/usr/bin/env python3
"""
Operation results for the control core
Every public operation returns a Status instead of raising
"""

import logging
from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Failure categories"""
    NONE = 0
    CONFIGURATION = 1   # Bad or uninitialized dependencies, size mismatches
    COMPUTATION = 2     # Per-tick model/servo failures
    LOOKUP = 3          # Unknown task names


class ControlError(RuntimeError):
    """Base error, only raised through Status.raise_for_status()"""


class ConfigurationError(ControlError):
    pass


class ComputationError(ControlError):
    pass


class TaskLookupError(ControlError):
    pass


_ERRORS = {
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.COMPUTATION: ComputationError,
    ErrorKind.LOOKUP: TaskLookupError,
}


@dataclass(frozen=True)
class Status:
    """Outcome of an operation (truthy on success)"""
    ok: bool = True
    kind: ErrorKind = ErrorKind.NONE
    message: str = ""

    def __bool__(self):
        return self.ok

    @classmethod
    def success(cls) -> 'Status':
        return cls()

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> 'Status':
        return cls(ok=False, kind=kind, message=message)

    def raise_for_status(self):
        """Raise the matching ControlError if this is a failure"""
        if not self.ok:
            raise _ERRORS.get(self.kind, ControlError)(self.message)


def fail(
    logger: logging.Logger,
    where: str,
    kind: ErrorKind,
    message: str
) -> Status:
    """Log a failure for an operation and return it as a Status"""
    logger.error("%s : Failed. %s", where, message)
    return Status.failure(kind, message)
