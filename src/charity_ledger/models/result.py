"""Tagged success/failure values returned by the operation facade"""

from typing import Any, Generic, TypeVar
from pydantic import BaseModel

from charity_ledger.core.exceptions import CharityLedgerError, ErrorKind

T = TypeVar("T")


class OperationError(BaseModel):
    kind: ErrorKind
    message: str


class Result(BaseModel, Generic[T]):
    ok: T | None = None
    err: OperationError | None = None

    @property
    def is_ok(self) -> bool:
        return self.err is None

    @classmethod
    def success(cls, value: Any) -> "Result":
        return cls(ok=value)

    @classmethod
    def failure(cls, error: CharityLedgerError) -> "Result":
        return cls(err=OperationError(kind=error.kind, message=error.message))
