"""Task records and sub-unit outcomes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class SubTaskResult(BaseModel):
    """Outcome of dispatching one decomposed sub-unit."""

    model_config = ConfigDict(frozen=True)

    index: int
    text: str
    tool_name: str | None = None
    output: Any | None = None
    error: str | None = None
    rendered: str = ""
    execution_time_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.tool_name is not None and self.error is None


class Task(BaseModel):
    """A unit of requested work.

    Instances are frozen; the ledger replaces a task with an updated copy
    rather than mutating it in place.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    result: Any | None = None
    error: str | None = None
    subtasks: tuple[SubTaskResult, ...] = ()

    created_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None

    def summary(self) -> dict[str, Any]:
        """Compact dictionary view for logging and reporting."""
        return {
            "id": self.id,
            "description": self.description,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "subtasks": len(self.subtasks),
        }
