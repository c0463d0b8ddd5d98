"""
Result values returned by the booking core.

Rejections (unknown id, wrong rider, wrong state, no driver, busy driver)
are ordinary outcomes of a request, so they are returned rather than
raised.  An ``Outcome`` is truthy on success, which lets callers that only
care about success/failure treat it as a bool.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from .enums import ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Rejection:
    code: ErrorCode
    detail: str


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Optional[T] = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def reject(cls, code: ErrorCode, detail: str) -> Outcome[T]:
        return cls(rejection=Rejection(code, detail))
