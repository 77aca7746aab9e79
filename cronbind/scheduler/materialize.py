"""
Execution-request materialization: run on every trigger firing.

The execution engine deduplicates on (job name, identifying parameters).
A cron trigger fires the same definition again and again, so each firing
adds an executeDate parameter holding the firing timestamp; without it
the second firing would be rejected as a duplicate of the first.

executeDate is strictly increasing per job name within a Materializer: if
the clock hands back a timestamp that is not later than the last one
issued for that job (coarse clock, clock stepped back, or an explicit
fired_at repeated), it is moved to one microsecond past it. Different
jobs firing at the same instant keep the same executeDate; their keys
already differ by name. Nothing else is shared between calls; every
request gets a fresh parameter set.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from cronbind.jobs.definition import JobDefinition
from cronbind.jobs.parameters import JobParameters, date_param
from cronbind.scheduler.binding import JobData

logger = logging.getLogger(__name__)

EXECUTE_DATE_KEY = "executeDate"

_TICK = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ExecutionKey:
    """What the execution engine deduplicates on."""

    job_name: str
    parameters: tuple[tuple[str, str, Any], ...]


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """A single firing's (name, parameters) pair, executeDate included."""

    job_name: str
    parameters: JobParameters
    fired_at: datetime

    @property
    def key(self) -> ExecutionKey:
        return ExecutionKey(self.job_name, self.parameters.identity())

    def to_values(self) -> dict[str, Any]:
        return self.parameters.to_values()


class Materializer:
    """
    Turns frozen job definitions into per-firing execution requests.

    Safe to share between threads.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._last_issued: dict[str, datetime] = {}

    def materialize(
        self, definition: JobDefinition, fired_at: datetime | None = None
    ) -> ExecutionRequest:
        """Build the execution request for one firing of definition."""
        return self._build(definition.name, definition.parameters, fired_at)

    def materialize_job_data(
        self, job_data: JobData, fired_at: datetime | None = None
    ) -> ExecutionRequest:
        """Same as materialize(), from the job data a scheduler carries."""
        return self._build(job_data.job_name, job_data.job_parameters, fired_at)

    def _build(
        self, job_name: str, parameters: JobParameters, fired_at: datetime | None
    ) -> ExecutionRequest:
        timestamp = self._next_timestamp(job_name, fired_at)
        if EXECUTE_DATE_KEY in parameters:
            logger.warning(
                f"Job {job_name!r} defines {EXECUTE_DATE_KEY!r}; "
                "replacing it with the firing timestamp"
            )
        request = ExecutionRequest(
            job_name=job_name,
            parameters=parameters.with_parameter(EXECUTE_DATE_KEY, date_param(timestamp)),
            fired_at=timestamp,
        )
        logger.debug(f"Materialized {job_name!r} at {timestamp.isoformat()}")
        return request

    def _next_timestamp(self, job_name: str, fired_at: datetime | None) -> datetime:
        # naive datetimes are read as local time
        timestamp = (fired_at or self._clock()).astimezone(timezone.utc)
        with self._lock:
            last = self._last_issued.get(job_name)
            if last is not None and timestamp <= last:
                timestamp = last + _TICK
            self._last_issued[job_name] = timestamp
        return timestamp


_default_materializer = Materializer()


def materialize(definition: JobDefinition, fired_at: datetime | None = None) -> ExecutionRequest:
    """Materialize with the process-wide default Materializer."""
    return _default_materializer.materialize(definition, fired_at)
