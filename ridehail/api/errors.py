"""
Mapping of core rejections onto HTTP errors.

Routes call :func:`unwrap` on every ``Outcome``; a rejection is raised as
``RejectionError`` and rendered by :func:`rejection_handler`, registered
on the app next to slowapi's rate-limit handler.
"""

from __future__ import annotations

from typing import TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse

from ridehail.domain.enums import ErrorCode
from ridehail.domain.outcomes import Outcome, Rejection

T = TypeVar("T")

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED: 403,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.CONFLICT: 409,
    ErrorCode.UNAVAILABLE: 503,
    ErrorCode.INVALID_INPUT: 422,
}


class RejectionError(Exception):
    def __init__(self, rejection: Rejection):
        super().__init__(rejection.detail)
        self.rejection = rejection


def unwrap(outcome: Outcome[T]) -> T:
    if outcome.rejection is not None:
        raise RejectionError(outcome.rejection)
    return outcome.value


async def rejection_handler(request: Request, exc: RejectionError) -> JSONResponse:
    rejection = exc.rejection
    return JSONResponse(
        status_code=STATUS_BY_CODE[rejection.code],
        content={"detail": rejection.detail, "code": rejection.code.value},
    )
