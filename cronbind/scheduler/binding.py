"""
Trigger bindings: a cron expression bound to a frozen JobDefinition.

The cron expression is stored verbatim; its syntax is checked by the
scheduler at registration time, not here.

Usage:
    binding = (
        trigger_binder()
        .set_cron_expression("0 0 2 * * ?")
        .set_job_definition(definition)
        .build()
    )
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cronbind.core.errors import IncompleteTriggerError, MissingJobNameError
from cronbind.jobs.definition import JOB_NAME_KEY, JOB_PARAMETERS_KEY, JobDefinition
from cronbind.jobs.parameters import JobParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JobData:
    """
    Identity metadata handed to the scheduler for a bound job.

    Name and parameters have their own fields; as_dict() flattens them
    under the jobName / jobParameters keys for schedulers that only
    carry a plain map.
    """

    job_name: str
    job_parameters: JobParameters

    @classmethod
    def from_definition(cls, definition: JobDefinition) -> JobData:
        return cls(job_name=definition.name, job_parameters=definition.parameters)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JobData:
        """
        Read job data back from a flat scheduler map.

        Raises:
            MissingJobNameError: the map has no jobName entry
        """
        name = data.get(JOB_NAME_KEY)
        if not name:
            raise MissingJobNameError(f"Job data has no {JOB_NAME_KEY!r} entry")
        params = data.get(JOB_PARAMETERS_KEY) or {}
        if not isinstance(params, JobParameters):
            params = JobParameters(params)
        return cls(job_name=name, job_parameters=params)

    def as_dict(self) -> dict[str, Any]:
        return {JOB_NAME_KEY: self.job_name, JOB_PARAMETERS_KEY: self.job_parameters}


@dataclass(frozen=True, slots=True)
class TriggerBinding:
    """A cron expression bound to a job definition plus recovery policy."""

    cron_expression: str
    job_definition: JobDefinition
    name: str | None = None  # scheduler assigns one when None
    durable: bool = True
    requests_recovery: bool = True

    @property
    def job_name(self) -> str:
        return self.job_definition.name

    @property
    def job_data(self) -> JobData:
        return JobData.from_definition(self.job_definition)


@dataclass
class TriggerSpec:
    """
    Mutable configuration consumed by build_trigger_binding().

    durable / requests_recovery left as None inherit the job definition's flags.
    """

    name: str | None = None
    cron_expression: str | None = None
    job_definition: JobDefinition | None = None
    durable: bool | None = None
    requests_recovery: bool | None = None


def build_trigger_binding(spec: TriggerSpec) -> TriggerBinding:
    """
    Validate a spec and freeze it into a TriggerBinding.

    Raises:
        IncompleteTriggerError: cron expression or job definition missing
    """
    missing = []
    if not spec.cron_expression or not spec.cron_expression.strip():
        missing.append("cron_expression")
    if spec.job_definition is None:
        missing.append("job_definition")
    if missing:
        raise IncompleteTriggerError(missing)

    definition = spec.job_definition
    binding = TriggerBinding(
        name=spec.name,
        cron_expression=spec.cron_expression,
        job_definition=definition,
        durable=definition.durable if spec.durable is None else spec.durable,
        requests_recovery=(
            definition.requests_recovery
            if spec.requests_recovery is None
            else spec.requests_recovery
        ),
    )
    logger.debug(
        f"Bound job {definition.name!r} to cron {binding.cron_expression!r} "
        f"(trigger={binding.name!r})"
    )
    return binding


class TriggerBinder:
    """Fluent builder for TriggerBinding. Setters may be called in any order."""

    def __init__(self) -> None:
        self._spec = TriggerSpec()

    def set_name(self, name: str) -> TriggerBinder:
        """Display name; when unset the scheduler assigns an identifier."""
        self._spec.name = name
        return self

    def set_cron_expression(self, expression: str) -> TriggerBinder:
        """
        Raw cron string, 5-field or Quartz-style with seconds,
        e.g. "0 0 2 * * ?".
        """
        self._spec.cron_expression = expression
        return self

    def set_job_definition(self, definition: JobDefinition) -> TriggerBinder:
        self._spec.job_definition = definition
        return self

    def set_durability(self, durable: bool) -> TriggerBinder:
        self._spec.durable = durable
        return self

    def set_requests_recovery(self, requests_recovery: bool) -> TriggerBinder:
        self._spec.requests_recovery = requests_recovery
        return self

    def build(self) -> TriggerBinding:
        return build_trigger_binding(self._spec)


def trigger_binder() -> TriggerBinder:
    """Entry point for binding a job to a cron trigger."""
    return TriggerBinder()
