"""
Outcome types shared by the data adapter, the service and the
response formatter.

Every repository and service operation returns exactly one of the
variants below instead of raising for expected failures.  The
formatter in ``core.responses`` maps each variant to an HTTP response,
so the status code travels with the outcome that produced it.
"""

from dataclasses import dataclass, field
from typing import Any, List, Union

INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class Ok:
    """Successful read or write; ``data`` is a movie, a list or ``None``."""

    data: Any
    status: int = 200


@dataclass(frozen=True)
class Message:
    """Successful operation reported with a human readable message."""

    message: str
    status: int = 200


@dataclass(frozen=True)
class NotFound:
    error: str
    status: int = 404


@dataclass(frozen=True)
class Conflict:
    error: str
    status: int = 409


@dataclass(frozen=True)
class Invalid:
    """Schema violations, one entry per offending field."""

    errors: List[str] = field(default_factory=list)
    status: int = 400

    @property
    def error(self) -> str:
        return ", ".join(self.errors)


@dataclass(frozen=True)
class Internal:
    """Unexpected failure; the cause is logged, never returned."""

    error: str = INTERNAL_ERROR_MESSAGE
    status: int = 500


Result = Union[Ok, Message, NotFound, Conflict, Invalid, Internal]

# Variants that carry an ``error`` string for the response envelope.
ERROR_RESULTS = (Invalid, NotFound, Conflict, Internal)
