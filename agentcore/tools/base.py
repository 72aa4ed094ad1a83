"""Base tool interface and definitions."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ParameterType(str, Enum):
    """JSON Schema parameter types."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ToolParameter(BaseModel):
    """Definition of a tool parameter."""

    name: str
    type: ParameterType
    description: str
    required: bool = True
    default: Any | None = None
    enum: list[Any] | None = None


class ToolDefinition(BaseModel):
    """Static description of a tool."""

    name: str
    description: str
    parameters: list[ToolParameter] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.model_dump(exclude_none=True) for p in self.parameters],
            "triggers": list(self.triggers),
        }


class BaseTool(ABC):
    """Abstract base class for all tools.

    A tool is a named asynchronous capability. ``execute`` receives a dict of
    arguments; ``arguments_from_text`` turns a free-text sub-unit into such a
    dict so the agent can dispatch decomposed task text directly.
    """

    # Keywords the registry's matcher routes to this tool, in priority order
    triggers: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._call_count = 0
        self._total_execution_time = 0.0
        self._error_count = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        ...

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return []

    @abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> Any:
        """Execute the tool with given arguments."""
        ...

    def arguments_from_text(self, text: str) -> dict[str, Any]:
        """Build execution arguments from a free-text sub-unit."""
        if self.parameters:
            return {self.parameters[0].name: text}
        return {"input": text}

    def format_output(self, output: Any) -> str:
        """Render a tool output as text for combined task results."""
        if isinstance(output, dict) and output.get("error"):
            return f"Error: {output['error']}"
        return str(output)

    def get_definition(self) -> ToolDefinition:
        """Get tool definition."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
            triggers=list(self.triggers),
        )

    def validate_arguments(self, arguments: dict[str, Any]) -> tuple[bool, str | None]:
        """Validate arguments against parameter definitions."""
        for param in self.parameters:
            if param.required and param.name not in arguments:
                return False, f"Missing required parameter: {param.name}"

            if param.name in arguments:
                value = arguments[param.name]

                if param.type == ParameterType.STRING and not isinstance(value, str):
                    return False, f"Parameter {param.name} must be a string"
                elif param.type == ParameterType.NUMBER and not isinstance(value, (int, float)):
                    return False, f"Parameter {param.name} must be a number"
                elif param.type == ParameterType.INTEGER and not isinstance(value, int):
                    return False, f"Parameter {param.name} must be an integer"
                elif param.type == ParameterType.BOOLEAN and not isinstance(value, bool):
                    return False, f"Parameter {param.name} must be a boolean"
                elif param.type == ParameterType.ARRAY and not isinstance(value, list):
                    return False, f"Parameter {param.name} must be an array"
                elif param.type == ParameterType.OBJECT and not isinstance(value, dict):
                    return False, f"Parameter {param.name} must be an object"

                if param.enum and value not in param.enum:
                    return False, f"Parameter {param.name} must be one of: {param.enum}"

        return True, None

    @property
    def stats(self) -> dict[str, Any]:
        """Get tool execution statistics."""
        return {
            "call_count": self._call_count,
            "total_execution_time_ms": self._total_execution_time,
            "error_count": self._error_count,
            "average_execution_time_ms": (
                self._total_execution_time / self._call_count
                if self._call_count > 0
                else 0
            ),
        }

    def record_execution(
        self,
        execution_time_ms: float,
        success: bool,
    ) -> None:
        """Record execution statistics."""
        self._call_count += 1
        self._total_execution_time += execution_time_ms
        if not success:
            self._error_count += 1


class FunctionTool(BaseTool):
    """Adapts a plain callable (sync or async) to the tool interface.

    The callable receives the arguments dict and its return value becomes the
    tool output. Coroutine results are awaited.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[dict[str, Any]], Any | Awaitable[Any]],
        description: str = "",
        triggers: tuple[str, ...] | list[str] = (),
    ) -> None:
        super().__init__()
        self._name = name
        self._func = func
        self._description = description
        self.triggers = tuple(triggers)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, arguments: dict[str, Any]) -> Any:
        result = self._func(arguments)
        if inspect.isawaitable(result):
            result = await result
        return result
