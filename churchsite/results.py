"""Result values for durable-backend calls."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class Availability(enum.Enum):
    """Outcome of probing the durable backend."""

    AVAILABLE = "available"
    UNREACHABLE = "unreachable"
    DISABLED = "disabled"

    @property
    def is_available(self) -> bool:
        return self is Availability.AVAILABLE


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    reason: str


BackendResult = Union[Ok[T], Err]
