"""Agent orchestrator - task intake, decomposition and tool dispatch."""

from __future__ import annotations

import asyncio
import re
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from agentcore.agent.ledger import TaskLedger
from agentcore.agent.memory import MemoryProvider, MemoryStore
from agentcore.agent.state import SubTaskResult, Task, TaskStatus
from agentcore.agent.store import StateStore
from agentcore.errors import ToolExecutionError, ToolNotFoundError, ValidationError
from agentcore.tools.base import BaseTool
from agentcore.tools.registry import ToolRegistry

logger = structlog.get_logger()

# Sub-unit boundaries: ";", newlines, sentence-ending periods, "and"/"then"
_SUB_UNIT_BOUNDARY = re.compile(
    r"\s*(?:;|\n|\.(?=\s|$)|\band then\b|\band\b|\bthen\b)\s*",
    re.IGNORECASE,
)


def split_sub_units(description: str) -> list[str]:
    """Split a task description into ordered, non-empty sub-units."""
    return [part.strip() for part in _SUB_UNIT_BOUNDARY.split(description) if part and part.strip()]


def join_results(results: Sequence[SubTaskResult], separator: str = " | ") -> str:
    """Join rendered sub-unit results in their original order."""
    ordered = sorted(results, key=lambda r: r.index)
    return separator.join(r.rendered for r in ordered)


@dataclass
class AgentConfig:
    """Configuration for agent execution."""

    result_separator: str = " | "
    allow_tool_overwrite: bool = False
    record_results_in_memory: bool = True
    memory_max_entries: int = 1000


class Agent:
    """Task orchestrator owning a tool registry, task ledger and state store.

    Lifecycle of a task:
    1. SUBMIT: ``submit_task`` appends a pending task to the ledger
    2. DECOMPOSE: the description is split into sub-units
    3. MATCH: each sub-unit is routed to a tool by keyword
    4. DISPATCH: all matched tools run concurrently; failures stay local
       to their sub-unit
    5. COMBINE: rendered sub-results are joined into the final result

    A task fails only when orchestration itself raises (decomposition,
    combination or the memory write). A tool that raises, or a sub-unit
    with no matching tool, yields an inline marker in the result instead.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        tool_registry: ToolRegistry | None = None,
        config: AgentConfig | None = None,
        memory: MemoryProvider | None = None,
        decomposer: Callable[[str], list[str]] | None = None,
        combiner: Callable[[Sequence[SubTaskResult]], Any] | None = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Agent name must be a non-empty string")

        self._id = str(uuid.uuid4())
        self._name = name
        self.description = description
        self.config = config or AgentConfig()

        if tool_registry is not None:
            self.tools = tool_registry
        else:
            self.tools = ToolRegistry(allow_overwrite=self.config.allow_tool_overwrite)
        if memory is not None:
            self.memory = memory
        else:
            self.memory = MemoryStore(max_entries=self.config.memory_max_entries)

        self.ledger = TaskLedger()
        self.state = StateStore()

        self._decomposer = decomposer or split_sub_units
        self._combiner = combiner

        self._log = logger.bind(component="agent", agent=name, agent_id=self._id[:8])

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    # Tools

    def add_tool(
        self,
        tool: BaseTool,
        name: str | None = None,
        triggers: Sequence[str] | None = None,
    ) -> None:
        """Register a tool with this agent's registry."""
        self.tools.register(tool, name=name, triggers=triggers)

    async def use_tool(self, name: str, args: str | dict[str, Any] | None = None) -> Any:
        """Invoke a single tool directly, bypassing decomposition."""
        tool = self.tools.resolve(name)
        if tool is None:
            raise ToolNotFoundError(name)

        if isinstance(args, str):
            arguments = _arguments_for(tool, args)
        else:
            arguments = dict(args or {})

        try:
            return await self.tools.execute(name, arguments)
        except ValidationError:
            raise
        except Exception as e:
            self._log.error("Direct tool call failed", tool=name, error=str(e))
            raise ToolExecutionError(name, e) from e

    # Tasks

    def submit_task(self, description: str) -> str:
        """Validate and record a new task; returns its id."""
        task_id = self.ledger.add(description)
        self._log.info("Task submitted", task_id=task_id, description=description[:100])
        return task_id

    def get_task(self, task_id: str) -> Task | None:
        return self.ledger.get(task_id)

    def list_tasks(self) -> list[Task]:
        return self.ledger.list()

    async def run_task(self, task_id: str) -> Task | None:
        """Decompose a pending task, dispatch its sub-units and record the outcome."""
        task = self.ledger.get(task_id)
        if task is None:
            self._log.warning("Cannot run unknown task", task_id=task_id)
            return None
        if task.status != TaskStatus.PENDING:
            self._log.warning("Task is not pending", task_id=task_id, status=task.status.value)
            return task

        # Claimed before the first await so a concurrent run_task sees it
        self.ledger.set_status(task_id, TaskStatus.PROCESSING)
        log = self._log.bind(task_id=task_id)
        log.info("Processing task")

        try:
            sub_units = self.decompose(task.description)
            log.debug("Task decomposed", sub_units=len(sub_units))

            results = await self._dispatch_all(sub_units, log)
            self.ledger.attach_subtasks(task_id, results)

            final_result = self.combine(results)

            if self.config.record_results_in_memory:
                await self.memory.set(
                    f"task:{task_id}",
                    final_result,
                    entry_type="task_result",
                    source=self.name,
                )
        except Exception as e:
            log.error("Task failed", error=str(e))
            self.ledger.set_outcome(task_id, error=str(e) or type(e).__name__)
            return self.ledger.get(task_id)

        self.ledger.set_outcome(task_id, result=final_result)
        log.info(
            "Task completed",
            sub_units=len(results),
            failed_sub_units=sum(1 for r in results if r.error is not None),
        )
        return self.ledger.get(task_id)

    async def process(self, description: str) -> Task | None:
        """Submit a task and run it immediately."""
        return await self.run_task(self.submit_task(description))

    async def run_pending(self) -> list[Task]:
        """Run every pending task in submission order."""
        finished: list[Task] = []
        for task in self.ledger.list():
            if task.status != TaskStatus.PENDING:
                continue
            outcome = await self.run_task(task.id)
            if outcome is not None:
                finished.append(outcome)
        return finished

    def decompose(self, description: str) -> list[str]:
        return list(self._decomposer(description))

    def combine(self, results: Sequence[SubTaskResult]) -> Any:
        if self._combiner is not None:
            return self._combiner(results)
        return join_results(results, separator=self.config.result_separator)

    async def _dispatch_all(self, sub_units: Sequence[str], log: Any) -> list[SubTaskResult]:
        """Run all sub-units concurrently and wait for every one to settle."""
        return list(
            await asyncio.gather(
                *(self._dispatch(index, text, log) for index, text in enumerate(sub_units))
            )
        )

    async def _dispatch(self, index: int, text: str, log: Any) -> SubTaskResult:
        tool_name = self.tools.match_name(text)
        if tool_name is None:
            log.info("No tool found for sub-unit", index=index)
            return SubTaskResult(index=index, text=text, rendered=f"No tool found for: {text}")

        tool = self.tools.resolve(tool_name)
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        # Argument building and rendering run inside the per-sub-unit guard
        try:
            output = await self.tools.execute(tool_name, _arguments_for(tool, text))
            rendered = _render(tool, output)
        except Exception as e:
            log.warning("Sub-unit tool failed", index=index, tool=tool_name, error=str(e))
            return SubTaskResult(
                index=index,
                text=text,
                tool_name=tool_name,
                error=str(e) or type(e).__name__,
                rendered=f"Error in {tool_name}: {e}",
                execution_time_ms=(loop.time() - start_time) * 1000,
            )

        return SubTaskResult(
            index=index,
            text=text,
            tool_name=tool_name,
            output=output,
            rendered=rendered,
            execution_time_ms=(loop.time() - start_time) * 1000,
        )

    # State and memory

    def set_state(self, key: str, value: Any) -> None:
        self.state.set(key, value)

    def get_state(self, key: str, default: Any = None) -> Any:
        return self.state.get(key, default)

    async def remember(self, key: str, value: Any) -> None:
        """Store a value in the agent's memory."""
        await self.memory.set(key, value, entry_type="fact", source=self.name)

    async def recall(self, key: str) -> Any | None:
        """Read a value from the agent's memory."""
        return await self.memory.get(key)

    @property
    def stats(self) -> dict[str, Any]:
        """Task, tool and state counters."""
        return {
            "agent_id": self._id,
            "name": self._name,
            "tasks": self.ledger.count_by_status(),
            "total_tasks": len(self.ledger),
            "state_keys": len(self.state),
            "tools": self.tools.get_stats(),
        }


def _arguments_for(tool: Any, text: str) -> dict[str, Any]:
    builder = getattr(tool, "arguments_from_text", None)
    if builder is not None:
        return builder(text)
    return {"input": text}


def _render(tool: Any, output: Any) -> str:
    formatter = getattr(tool, "format_output", None)
    if formatter is not None:
        return formatter(output)
    return str(output)
