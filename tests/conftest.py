"""Shared test fixtures for cronbind."""

from datetime import datetime, timedelta, timezone

import pytest

from cronbind.core.config import CronbindConfig
from cronbind.execution.memory import InMemoryExecutionEngine
from cronbind.jobs.definition import job_definition_builder
from cronbind.scheduler.materialize import Materializer


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def config():
    """Create a default config without loading from disk."""
    return CronbindConfig()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def materializer(clock):
    return Materializer(clock=clock)


@pytest.fixture
def engine():
    return InMemoryExecutionEngine()


@pytest.fixture
def report_definition():
    """The nightly-report job used across tests."""
    return (
        job_definition_builder()
        .set_name("nightly-report")
        .add_parameter("region", "us-east")
        .build()
    )
