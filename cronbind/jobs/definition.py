"""
Job definitions: the frozen (name, parameters) identity of a schedulable job.

JobDefinitionSpec is a plain mutable struct; build_job_definition() is the
pure validating constructor that turns it into an immutable JobDefinition.
JobDefinitionBuilder is the fluent front-end over both.

Builder reuse: build() snapshots the current state. Definitions already
built never change, but parameters added after a build() show up in the
next one.

Usage:
    definition = (
        job_definition_builder()
        .set_name("nightly-report")
        .add_parameter("region", "us-east")
        .build()
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from cronbind.core.config import CronbindConfig
from cronbind.core.errors import (
    MissingJobNameError,
    ReservedKeyError,
    UnsupportedParameterTypeError,
)
from cronbind.jobs.parameters import (
    JobParameter,
    JobParameters,
    classify,
    date_param,
    float_param,
    int_param,
    text_param,
)

logger = logging.getLogger(__name__)

# Identity metadata keys used by schedulers that carry job data as a flat map
JOB_NAME_KEY = "jobName"
JOB_PARAMETERS_KEY = "jobParameters"
RESERVED_KEYS = frozenset({JOB_NAME_KEY, JOB_PARAMETERS_KEY})


@dataclass(frozen=True, slots=True)
class JobDefinition:
    """A named job and its frozen parameter set."""

    name: str
    parameters: JobParameters = field(default_factory=JobParameters)
    durable: bool = True
    requests_recovery: bool = True


@dataclass
class JobDefinitionSpec:
    """Mutable configuration consumed by build_job_definition()."""

    name: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    durable: bool = True
    requests_recovery: bool = True


def build_job_definition(spec: JobDefinitionSpec) -> JobDefinition:
    """
    Validate a spec and freeze it into a JobDefinition.

    Raises:
        MissingJobNameError: name unset or blank
        ReservedKeyError: a parameter uses jobName or jobParameters
        UnsupportedParameterTypeError: a parameter value has no kind
    """
    if not spec.name or not spec.name.strip():
        raise MissingJobNameError()

    for key in spec.parameters:
        _check_key(key)

    definition = JobDefinition(
        name=spec.name,
        parameters=JobParameters(spec.parameters),
        durable=spec.durable,
        requests_recovery=spec.requests_recovery,
    )
    logger.debug(
        f"Built job definition {definition.name!r} "
        f"with parameters {list(definition.parameters)}"
    )
    return definition


def _check_key(key: str) -> None:
    if key in RESERVED_KEYS:
        raise ReservedKeyError(key)


class JobDefinitionBuilder:
    """
    Fluent builder for JobDefinition.

    Durability and recovery default to the [job] section of the config
    (both True unless configured otherwise).
    """

    def __init__(self, config: CronbindConfig | None = None) -> None:
        defaults = (config or CronbindConfig()).job
        self._spec = JobDefinitionSpec(
            durable=defaults.durable,
            requests_recovery=defaults.requests_recovery,
        )

    @property
    def parameters(self) -> JobParameters:
        """Snapshot of the parameters accumulated so far."""
        return JobParameters(self._spec.parameters)

    def set_name(self, name: str) -> JobDefinitionBuilder:
        self._spec.name = name
        return self

    def set_durability(self, durable: bool) -> JobDefinitionBuilder:
        """False lets the scheduler drop the job once no trigger references it."""
        self._spec.durable = durable
        return self

    def set_requests_recovery(self, requests_recovery: bool) -> JobDefinitionBuilder:
        """True re-runs an interrupted execution after scheduler recovery."""
        self._spec.requests_recovery = requests_recovery
        return self

    def add_parameter(self, key: str, value: Any) -> JobDefinitionBuilder:
        """
        Add a parameter, classifying the value by kind.

        Re-adding a key overwrites the previous value. On error the
        accumulated parameters are left unchanged.

        Raises:
            ReservedKeyError: key is jobName or jobParameters
            UnsupportedParameterTypeError: value is not a supported kind
        """
        _check_key(key)
        self._spec.parameters[key] = classify(key, value)
        return self

    def add_string(self, key: str, value: str, identifying: bool = True) -> JobDefinitionBuilder:
        return self._add(key, value, text_param, identifying)

    def add_float(self, key: str, value: float, identifying: bool = True) -> JobDefinitionBuilder:
        return self._add(key, value, float_param, identifying)

    def add_int(self, key: str, value: int, identifying: bool = True) -> JobDefinitionBuilder:
        return self._add(key, value, int_param, identifying)

    def add_date(self, key: str, value: datetime, identifying: bool = True) -> JobDefinitionBuilder:
        return self._add(key, value, date_param, identifying)

    def _add(
        self,
        key: str,
        value: Any,
        factory: Callable[[Any, bool], JobParameter],
        identifying: bool,
    ) -> JobDefinitionBuilder:
        _check_key(key)
        try:
            parameter = factory(value, identifying)
        except UnsupportedParameterTypeError as e:
            raise UnsupportedParameterTypeError(key, value) from e
        self._spec.parameters[key] = parameter
        return self

    def build(self) -> JobDefinition:
        """
        Freeze the current state into a JobDefinition.

        Raises:
            MissingJobNameError: set_name() was never called (or blank)
        """
        return build_job_definition(self._spec)


def job_definition_builder(config: CronbindConfig | None = None) -> JobDefinitionBuilder:
    """Entry point for defining a job."""
    return JobDefinitionBuilder(config)
