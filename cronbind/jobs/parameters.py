"""
Job parameters: the typed, ordered parameter set of a job.

A parameter value is one of four kinds (text, floating-point, integer,
timestamp). Callers either build JobParameter values directly through
the typed constructors, or hand raw values to classify().

    params = JobParameters({"region": text_param("us-east")})
    params = params.with_parameter("retries", int_param(5))

Non-identifying parameters travel with the job but are left out of the
execution key, so changing them never makes a run look novel.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from cronbind.core.errors import UnsupportedParameterTypeError


class ParameterKind(str, Enum):
    """The closed set of parameter value kinds."""

    STRING = "string"
    DOUBLE = "double"
    LONG = "long"
    DATE = "date"


_KIND_TYPES: dict[ParameterKind, type] = {
    ParameterKind.STRING: str,
    ParameterKind.DOUBLE: float,
    ParameterKind.LONG: int,
    ParameterKind.DATE: datetime,
}


@dataclass(frozen=True, slots=True)
class JobParameter:
    """A single typed parameter value."""

    value: Any
    kind: ParameterKind
    identifying: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ParameterKind(self.kind))
        expected = _KIND_TYPES[self.kind]
        # bool is an int subclass but not a supported kind
        if isinstance(self.value, bool) or not isinstance(self.value, expected):
            raise UnsupportedParameterTypeError("", self.value)


# ━━━ Typed constructors ━━━


def text_param(value: str, identifying: bool = True) -> JobParameter:
    return JobParameter(value, ParameterKind.STRING, identifying)


def float_param(value: float, identifying: bool = True) -> JobParameter:
    if isinstance(value, int) and not isinstance(value, bool):
        value = float(value)
    return JobParameter(value, ParameterKind.DOUBLE, identifying)


def int_param(value: int, identifying: bool = True) -> JobParameter:
    return JobParameter(value, ParameterKind.LONG, identifying)


def date_param(value: datetime, identifying: bool = True) -> JobParameter:
    return JobParameter(value, ParameterKind.DATE, identifying)


def classify(key: str, value: Any) -> JobParameter:
    """
    Wrap a raw value in the JobParameter of its kind.

    JobParameter instances pass through unchanged.

    Raises:
        UnsupportedParameterTypeError: value is not str, float, int
            (bool excluded), datetime or JobParameter.
    """
    if isinstance(value, JobParameter):
        return value
    if isinstance(value, bool):
        raise UnsupportedParameterTypeError(key, value)
    if isinstance(value, str):
        return text_param(value)
    if isinstance(value, float):
        return float_param(value)
    if isinstance(value, int):
        return int_param(value)
    if isinstance(value, datetime):
        return date_param(value)
    raise UnsupportedParameterTypeError(key, value)


class JobParameters(Mapping[str, JobParameter]):
    """
    Immutable, insertion-ordered mapping of parameter key to JobParameter.

    Compares equal to any mapping with the same items. Hashable, so it can
    take part in an execution key.
    """

    __slots__ = ("_params",)

    def __init__(self, params: Mapping[str, Any] | None = None) -> None:
        self._params: dict[str, JobParameter] = {
            key: classify(key, value) for key, value in (params or {}).items()
        }

    def __getitem__(self, key: str) -> JobParameter:
        return self._params[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __hash__(self) -> int:
        return hash(self.identity())

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={p.value!r}" for k, p in self._params.items())
        return f"JobParameters({inner})"

    def with_parameter(self, key: str, parameter: JobParameter) -> JobParameters:
        """Return a copy with key set to parameter (this instance is untouched)."""
        params = dict(self._params)
        params[key] = parameter
        return JobParameters(params)

    def identifying(self) -> JobParameters:
        """Only the parameters that take part in the execution key."""
        return JobParameters({k: p for k, p in self._params.items() if p.identifying})

    def identity(self) -> tuple[tuple[str, str, Any], ...]:
        """Canonical, order-independent identity of the identifying parameters."""
        return tuple(
            (key, p.kind.value, p.value)
            for key, p in sorted(self._params.items())
            if p.identifying
        )

    def to_values(self) -> dict[str, Any]:
        """Raw values keyed by parameter name, in insertion order."""
        return {key: p.value for key, p in self._params.items()}
