"""Agent module - Orchestrator, task ledger, state and memory."""

from agentcore.agent.ledger import TaskLedger
from agentcore.agent.memory import MemoryProvider, MemoryStore
from agentcore.agent.orchestrator import Agent, AgentConfig
from agentcore.agent.state import SubTaskResult, Task, TaskStatus
from agentcore.agent.store import StateStore

__all__ = [
    "Agent",
    "AgentConfig",
    "MemoryProvider",
    "MemoryStore",
    "StateStore",
    "SubTaskResult",
    "Task",
    "TaskLedger",
    "TaskStatus",
]
