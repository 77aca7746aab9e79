"""
In-memory execution engine.

Keeps every launched ExecutionKey in a set and rejects repeats. Jobs are
plain callables registered by name; they receive the request's raw
parameter values and may be sync or async.

Usage:
    engine = InMemoryExecutionEngine()
    engine.register("nightly-report", lambda params: build_report(params["region"]))
    result = await engine.launch(request)
"""

from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Callable

from cronbind.core.errors import DuplicateExecutionError
from cronbind.execution.base import ExecutionEngine, ExecutionResult, ExecutionStatus
from cronbind.scheduler.materialize import ExecutionKey, ExecutionRequest

logger = logging.getLogger(__name__)

JobHandler = Callable[[dict[str, Any]], Any]


class InMemoryExecutionEngine(ExecutionEngine):
    """Dedup-by-key engine. Unregistered job names complete with no result."""

    def __init__(self, handlers: dict[str, JobHandler] | None = None) -> None:
        self._handlers: dict[str, JobHandler] = dict(handlers or {})
        self._launched: set[ExecutionKey] = set()
        self._history: list[ExecutionResult] = []

    def register(self, job_name: str, handler: JobHandler) -> None:
        self._handlers[job_name] = handler
        logger.debug(f"Registered handler for job {job_name!r}")

    def has_run(self, key: ExecutionKey) -> bool:
        return key in self._launched

    @property
    def executions(self) -> list[ExecutionResult]:
        return list(self._history)

    async def launch(self, request: ExecutionRequest) -> ExecutionResult:
        key = request.key
        if key in self._launched:
            logger.warning(f"Rejected duplicate execution of {request.job_name!r}")
            raise DuplicateExecutionError(key, details={"job_name": request.job_name})
        # claim the key before any await so concurrent launches cannot both pass
        self._launched.add(key)

        handler = self._handlers.get(request.job_name)
        started = time.monotonic()
        try:
            value = handler(request.to_values()) if handler else None
            if inspect.isawaitable(value):
                value = await value
            result = ExecutionResult(request, ExecutionStatus.COMPLETED, result=value)
        except Exception as e:
            logger.warning(f"Job {request.job_name!r} failed: {e}")
            result = ExecutionResult(request, ExecutionStatus.FAILED, error=str(e))
        result.duration = time.monotonic() - started

        self._history.append(result)
        logger.info(
            f"Job {request.job_name!r} {result.status.value} "
            f"in {result.duration:.3f}s"
        )
        return result
