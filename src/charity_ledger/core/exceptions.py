"""Domain exceptions for the charity ledger"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    CONFLICT = "ConflictError"
    NOT_FOUND = "NotFoundError"


class CharityLedgerError(Exception):
    """Base exception for expected domain failures"""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CharityLedgerError):
    """Malformed or missing required input"""

    kind = ErrorKind.VALIDATION


class ConflictError(CharityLedgerError):
    """Uniqueness violation, e.g. a duplicate charity name"""

    kind = ErrorKind.CONFLICT


class NotFoundError(CharityLedgerError):
    """Referenced id does not exist in its collection"""

    kind = ErrorKind.NOT_FOUND


class StaleRecordError(ConflictError):
    """A conditional write lost to a concurrent writer"""
