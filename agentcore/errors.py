"""Exception types raised by the orchestration core."""

from __future__ import annotations


class AgentCoreError(Exception):
    """Base class for all agentcore errors."""


class ValidationError(AgentCoreError):
    """Raised when a core operation receives malformed input."""


class InvalidKeyError(ValidationError):
    """Raised when a state or memory key is not a non-empty string."""


class DuplicateToolError(AgentCoreError):
    """Raised when a tool name is already taken in a strict registry."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool already registered: {tool_name}")
        self.tool_name = tool_name


class ToolNotFoundError(AgentCoreError):
    """Raised when no tool is bound to the requested name."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Tool not found: {tool_name}")
        self.tool_name = tool_name


class ToolExecutionError(AgentCoreError):
    """Raised when an underlying tool invocation fails."""

    def __init__(self, tool_name: str, original: BaseException) -> None:
        super().__init__(f"Tool '{tool_name}' failed: {original}")
        self.tool_name = tool_name
        self.original = original
