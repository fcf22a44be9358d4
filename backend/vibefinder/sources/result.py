from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    GEOCODE_FAILURE = "geocode_failure"
    MALFORMED_RESPONSE = "malformed_response"
    PARTIAL_ENRICHMENT_FAILURE = "partial_enrichment_failure"


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err:
    kind: ErrorKind
    detail: str = ""


Result = Union[Ok[T], Err]


def unwrap_or(result: Result[T], default: T) -> T:
    if isinstance(result, Ok):
        return result.value
    return default
