"""Append-only ledger of tasks."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import structlog

from agentcore.agent.state import SubTaskResult, Task, TaskStatus
from agentcore.errors import ValidationError

logger = structlog.get_logger()

_UNSET: Any = object()


class TaskLedger:
    """Ordered collection of every task submitted to one agent.

    Tasks are never removed. Lookups return shallow copies of the frozen task
    models; raw tool outputs inside ``subtasks`` are shared, not copied.
    Updates for unknown task ids are logged and reported with a ``False``
    return value instead of raising.
    """

    def __init__(self) -> None:
        self._tasks: list[Task] = []
        self._index: dict[str, int] = {}
        self._task_counter = 0
        self._lock = threading.Lock()
        self._log = logger.bind(component="task_ledger")

    def add(self, description: str) -> str:
        """Append a new pending task and return its id."""
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("Task description must be a non-empty string")

        with self._lock:
            task_id = f"task-{self._task_counter}"
            self._task_counter += 1
            self._index[task_id] = len(self._tasks)
            self._tasks.append(Task(id=task_id, description=description))

        self._log.debug("Added task", task_id=task_id)
        return task_id

    def get(self, task_id: str) -> Task | None:
        """Get a copy of a task by id."""
        with self._lock:
            idx = self._index.get(task_id)
            if idx is None:
                return None
            return self._tasks[idx].model_copy()

    def set_status(self, task_id: str, status: TaskStatus | str) -> bool:
        """Overwrite a task's status.

        Transition legality is the caller's concern; only the result/error
        exclusivity rule is enforced by the ledger.
        """
        try:
            new_status = TaskStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown task status: {status!r}") from e

        with self._lock:
            idx = self._index.get(task_id)
            if idx is None:
                self._log.warning("Status update for unknown task", task_id=task_id)
                return False

            task = self._tasks[idx]
            update: dict[str, Any] = {"status": new_status}
            if new_status == TaskStatus.COMPLETED:
                update["error"] = None
            elif new_status == TaskStatus.FAILED:
                update["result"] = None
            self._tasks[idx] = task.model_copy(update=update)

        self._log.debug("Task status updated", task_id=task_id, status=new_status.value)
        return True

    def set_outcome(
        self,
        task_id: str,
        result: Any = _UNSET,
        error: str | None = None,
    ) -> bool:
        """Record the final result or error of a task.

        Exactly one of ``result`` and ``error`` must be given. A result marks
        the task completed, an error marks it failed.
        """
        has_result = result is not _UNSET
        has_error = error is not None
        if has_result == has_error:
            raise ValidationError("Exactly one of result or error must be provided")

        with self._lock:
            idx = self._index.get(task_id)
            if idx is None:
                self._log.warning("Outcome for unknown task", task_id=task_id)
                return False

            if has_error:
                update = {"status": TaskStatus.FAILED, "error": str(error), "result": None}
            else:
                update = {"status": TaskStatus.COMPLETED, "result": result, "error": None}
            update["completed_at"] = datetime.utcnow()
            self._tasks[idx] = self._tasks[idx].model_copy(update=update)

        self._log.debug("Task outcome recorded", task_id=task_id, failed=has_error)
        return True

    def attach_subtasks(self, task_id: str, results: Iterable[SubTaskResult]) -> bool:
        """Store the per-sub-unit outcomes of a task run."""
        with self._lock:
            idx = self._index.get(task_id)
            if idx is None:
                self._log.warning("Sub-task results for unknown task", task_id=task_id)
                return False
            self._tasks[idx] = self._tasks[idx].model_copy(update={"subtasks": tuple(results)})
        return True

    def list(self) -> list[Task]:
        """Snapshot of all tasks in submission order."""
        with self._lock:
            return [t.model_copy() for t in self._tasks]

    def count_by_status(self) -> dict[str, int]:
        """Number of tasks per status."""
        counts = {status.value: 0 for status in TaskStatus}
        with self._lock:
            for task in self._tasks:
                counts[task.status.value] += 1
        return counts

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self._index
