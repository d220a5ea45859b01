"""
Tagged result type used at service boundaries.

Services return ``Ok(value)`` or ``Err(kind, message)`` instead of raising;
the API layer turns an ``Err`` into an HTTP error response with
``raise_for_error``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from fastapi import HTTPException, status

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Error taxonomy shared by all services"""
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    NOT_FOUND_UPSTREAM = "not_found_upstream"
    DUPLICATE = "duplicate"
    PERSISTENCE_FAILURE = "persistence_failure"
    UPSTREAM_FAILURE = "upstream_failure"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOUND_UPSTREAM: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE: status.HTTP_409_CONFLICT,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UPSTREAM_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UPSTREAM_TIMEOUT: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


Result = Union[Ok[T], Err]


def raise_for_error(result: "Result[T]") -> T:
    """
    Unwrap a result for an endpoint.

    Returns:
        The wrapped value of an ``Ok``

    Raises:
        HTTPException: With the status mapped from the ``Err`` kind
    """
    if isinstance(result, Err):
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return result.value
