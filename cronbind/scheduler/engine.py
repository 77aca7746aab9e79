"""
CronScheduler: in-memory reference scheduler for trigger bindings.

Design:
- register() validates the cron expression (the only place it is checked),
  assigns a trigger name when the binding has none, and records the job
- Each firing materializes a fresh ExecutionRequest from the binding's
  JobData and hands it to the ExecutionEngine; the engine owns
  deduplication
- tick() fires every due trigger once and advances it from "now"; firings
  missed while the scheduler was stopped are not replayed
- Non-durable jobs are forgotten once their last trigger is unscheduled
- start()/stop() run tick() on an asyncio polling loop
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from cronbind.core.config import CronbindConfig
from cronbind.core.errors import DuplicateExecutionError, SchedulerError
from cronbind.execution.base import ExecutionEngine, ExecutionResult
from cronbind.jobs.definition import JobDefinition
from cronbind.scheduler.binding import TriggerBinding
from cronbind.scheduler.materialize import Materializer
from cronbind.scheduler.triggers import CronTrigger

logger = logging.getLogger(__name__)


@dataclass
class _RegisteredJob:
    definition: JobDefinition
    durable: bool
    requests_recovery: bool


@dataclass
class _ScheduledTrigger:
    binding: TriggerBinding
    trigger: CronTrigger
    next_fire: datetime


class CronScheduler:
    """Fires registered trigger bindings on their cron schedules."""

    def __init__(
        self,
        engine: ExecutionEngine,
        materializer: Materializer | None = None,
        config: CronbindConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._engine = engine
        self._materializer = materializer or Materializer()
        self._config = config or CronbindConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._jobs: dict[str, _RegisteredJob] = {}
        self._triggers: dict[str, _ScheduledTrigger] = {}
        self._task: asyncio.Task | None = None
        self._running = False

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, binding: TriggerBinding) -> str:
        """
        Schedule a binding. Returns the trigger name.

        Raises:
            CronExpressionError: cron expression is not valid
            SchedulerError: trigger name taken, or the job name is already
                registered with a different definition or different flags
        """
        trigger = CronTrigger(binding.cron_expression)
        name = binding.name or f"trigger-{uuid.uuid4().hex[:8]}"
        if name in self._triggers:
            raise SchedulerError(f"Trigger {name!r} is already scheduled")

        job_name = binding.job_name
        existing = self._jobs.get(job_name)
        if existing is None:
            self._jobs[job_name] = _RegisteredJob(
                definition=binding.job_definition,
                durable=binding.durable,
                requests_recovery=binding.requests_recovery,
            )
        elif existing.definition != binding.job_definition:
            raise SchedulerError(
                f"Job {job_name!r} is already registered with a different definition"
            )
        elif (existing.durable, existing.requests_recovery) != (
            binding.durable,
            binding.requests_recovery,
        ):
            raise SchedulerError(
                f"Job {job_name!r} is already registered with different "
                "durability or recovery flags"
            )

        next_fire = trigger.next_fire_time(self._clock())
        self._triggers[name] = _ScheduledTrigger(binding, trigger, next_fire)
        logger.info(
            f"Scheduled job {job_name!r} as {name!r} "
            f"({trigger.description}, next at {next_fire.isoformat()})"
        )
        return name

    def unschedule(self, trigger_name: str) -> bool:
        """Remove a trigger. Returns False if it was not scheduled."""
        scheduled = self._triggers.pop(trigger_name, None)
        if scheduled is None:
            return False

        job_name = scheduled.binding.job_name
        still_bound = any(t.binding.job_name == job_name for t in self._triggers.values())
        job = self._jobs.get(job_name)
        if job is not None and not job.durable and not still_bound:
            del self._jobs[job_name]
            logger.debug(f"Non-durable job {job_name!r} removed with its last trigger")

        logger.info(f"Unscheduled trigger {trigger_name!r}")
        return True

    @property
    def jobs(self) -> list[str]:
        return list(self._jobs)

    @property
    def triggers(self) -> list[str]:
        return list(self._triggers)

    def next_fire_time(self, trigger_name: str) -> datetime | None:
        scheduled = self._triggers.get(trigger_name)
        return scheduled.next_fire if scheduled else None

    def recoverable_jobs(self) -> list[str]:
        """Jobs whose interrupted executions should be re-run on recovery."""
        return [name for name, job in self._jobs.items() if job.requests_recovery]

    # ── Firing ────────────────────────────────────────────────────────────────

    async def fire(
        self, trigger_name: str, fired_at: datetime | None = None
    ) -> ExecutionResult:
        """
        Fire one trigger now: materialize and launch.

        Raises:
            SchedulerError: unknown trigger
            DuplicateExecutionError: the engine rejected the request
        """
        scheduled = self._triggers.get(trigger_name)
        if scheduled is None:
            raise SchedulerError(f"Trigger {trigger_name!r} is not scheduled")

        request = self._materializer.materialize_job_data(scheduled.binding.job_data, fired_at)
        logger.info(
            f"Firing {trigger_name!r} for job {request.job_name!r} "
            f"(executeDate={request.fired_at.isoformat()})"
        )
        try:
            return await self._engine.launch(request)
        except DuplicateExecutionError:
            logger.warning(f"Engine rejected firing of {trigger_name!r} as a duplicate")
            raise

    async def tick(self, now: datetime | None = None) -> list[ExecutionResult]:
        """Fire every due trigger once and advance its next fire time."""
        now = now or self._clock()
        results: list[ExecutionResult] = []
        for name, scheduled in list(self._triggers.items()):
            if scheduled.next_fire > now:
                continue
            scheduled.next_fire = scheduled.trigger.next_fire_time(now)
            try:
                results.append(await self.fire(name, fired_at=now))
            except DuplicateExecutionError:
                continue
        return results

    # ── Background loop ───────────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the background polling loop."""
        if self._running:
            return
        if not self._config.scheduler.enabled:
            logger.info("CronScheduler disabled by config, not starting")
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="cronbind-scheduler")
        logger.info("CronScheduler started")

    async def stop(self) -> None:
        """Gracefully stop the background loop."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("CronScheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.tick()
            except Exception as e:
                logger.warning(f"Scheduler tick error (non-fatal): {e}")
            await asyncio.sleep(self._config.scheduler.poll_interval)
