"""Last-error bookkeeping with origin tracking."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.errors import ErrorCode, code_of


class ErrorOrigin(Enum):
    REFRESH = "refresh"
    OPERATION = "operation"


@dataclass
class ErrorRecord:
    message: str
    origin: ErrorOrigin
    code: ErrorCode = ErrorCode.UNKNOWN
    at: float = 0.0
    warning: bool = False


class ErrorState:
    """Holds at most one error; refresh success only clears refresh errors."""

    def __init__(self):
        self.last: Optional[ErrorRecord] = None

    def record(
        self,
        message: str,
        origin: ErrorOrigin,
        *,
        code: ErrorCode = ErrorCode.UNKNOWN,
        warning: bool = False,
        now: Optional[float] = None,
    ) -> ErrorRecord:
        self.last = ErrorRecord(message, origin, code, now if now is not None else time.time(), warning)
        return self.last

    def record_exception(self, exc: BaseException, origin: ErrorOrigin, prefix: str = "") -> ErrorRecord:
        message = getattr(exc, "message", "") or str(exc) or exc.__class__.__name__
        if prefix:
            message = f"{prefix}: {message}"
        return self.record(message, origin, code=code_of(exc))

    def clear_refresh(self) -> None:
        if self.last is not None and self.last.origin is ErrorOrigin.REFRESH:
            self.last = None

    def dismiss(self) -> bool:
        had = self.last is not None
        self.last = None
        return had

    @property
    def message(self) -> str:
        return self.last.message if self.last else ""

    @property
    def origin(self) -> Optional[ErrorOrigin]:
        return self.last.origin if self.last else None

    def __bool__(self) -> bool:
        return self.last is not None


__all__ = ["ErrorOrigin", "ErrorRecord", "ErrorState"]
