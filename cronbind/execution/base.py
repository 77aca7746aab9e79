"""
Execution engine interface.

An engine accepts execution requests and runs each distinct
ExecutionKey at most once. Per-run success or failure is reported in
the returned ExecutionResult rather than raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cronbind.scheduler.materialize import ExecutionRequest


class ExecutionStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ExecutionResult:
    """Outcome of one execution."""

    request: ExecutionRequest
    status: ExecutionStatus
    result: Any = None
    error: str | None = None
    duration: float = 0.0  # seconds

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED


class ExecutionEngine(ABC):
    """Runs job execution requests, at most once per execution key."""

    @abstractmethod
    async def launch(self, request: ExecutionRequest) -> ExecutionResult:
        """
        Run the job for request.

        Raises:
            DuplicateExecutionError: request.key was already launched
        """
        ...
