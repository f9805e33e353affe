"""Result Values: explicit success / failure outcomes of a pipeline call.

Invariants:
    - Exactly one of Success / Failure per pipeline invocation
    - Failure always carries a GeoPrivacyError, never a bare exception
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from geoprivacy.core.errors import GeoPrivacyError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    error: GeoPrivacyError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code


Result = Success[T] | Failure
