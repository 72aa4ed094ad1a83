"""Tool registry for managing, matching and executing tools."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

import structlog

from agentcore.errors import DuplicateToolError, ToolNotFoundError, ValidationError
from agentcore.tools.base import BaseTool
from agentcore.tools.matching import Matcher, TriggerRule, match_keywords

logger = structlog.get_logger()


class ToolRegistry:
    """Registry for managing tools and their execution.

    Features:
    - Tool registration and lookup by name
    - Configurable collision policy (strict or overwrite)
    - Keyword matching from free text to a tool
    - Execution statistics tracking
    """

    def __init__(
        self,
        allow_overwrite: bool = False,
        matcher: Matcher | None = None,
    ) -> None:
        self._tools: dict[str, BaseTool] = {}
        self._rules: list[TriggerRule] = []
        self._execution_count = 0
        self.allow_overwrite = allow_overwrite
        self.matcher: Matcher = matcher or match_keywords
        self._log = logger.bind(component="tool_registry")

    def register(
        self,
        tool: BaseTool,
        name: str | None = None,
        triggers: Iterable[str] | None = None,
    ) -> None:
        """Register a tool under ``name`` (defaults to ``tool.name``)."""
        tool_name = name if name is not None else getattr(tool, "name", None)
        if not isinstance(tool_name, str) or not tool_name.strip():
            raise ValidationError("Tool name must be a non-empty string")
        if not callable(getattr(tool, "execute", None)):
            raise ValidationError(f"Tool '{tool_name}' has no callable execute()")

        keywords = list(triggers) if triggers is not None else list(getattr(tool, "triggers", ()))
        for keyword in keywords:
            if not isinstance(keyword, str) or not keyword.strip():
                raise ValidationError(f"Invalid trigger keyword for tool '{tool_name}': {keyword!r}")

        if tool_name in self._tools:
            if not self.allow_overwrite:
                raise DuplicateToolError(tool_name)
            self._log.warning("Overwriting existing tool", tool=tool_name)
            self._drop_rules(tool_name)

        self._tools[tool_name] = tool
        self._rules.extend(TriggerRule(keyword=k, tool_name=tool_name) for k in keywords)
        self._log.info("Registered tool", tool=tool_name, triggers=keywords)

    def register_many(self, tools: Iterable[BaseTool]) -> None:
        """Register multiple tools."""
        for tool in tools:
            self.register(tool)

    def unregister(self, tool_name: str) -> bool:
        """Unregister a tool."""
        if tool_name in self._tools:
            del self._tools[tool_name]
            self._drop_rules(tool_name)
            self._log.info("Unregistered tool", tool=tool_name)
            return True
        return False

    def resolve(self, tool_name: str) -> BaseTool | None:
        """Get a tool by name."""
        return self._tools.get(tool_name)

    get = resolve

    def match_name(self, text: str) -> str | None:
        """Name of the tool whose trigger keyword first matches ``text``."""
        tool_name = self.matcher(text, tuple(self._rules))
        if tool_name is None or tool_name not in self._tools:
            return None
        return tool_name

    def match(self, text: str) -> BaseTool | None:
        """Find the tool whose trigger keyword first matches ``text``."""
        tool_name = self.match_name(text)
        return self._tools[tool_name] if tool_name is not None else None

    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """Execute a tool by name.

        No timeout is applied; a tool that needs one enforces it itself.
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            raise ToolNotFoundError(tool_name)

        validate = getattr(tool, "validate_arguments", None)
        if validate is not None:
            is_valid, error = validate(arguments)
            if not is_valid:
                raise ValidationError(f"Invalid arguments for '{tool_name}': {error}")

        self._execution_count += 1
        self._log.debug("Executing tool", tool=tool_name, call_number=self._execution_count)

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        try:
            result = await tool.execute(arguments)
        except Exception as e:
            execution_time = (loop.time() - start_time) * 1000
            self._record(tool, execution_time, success=False)
            self._log.error("Tool execution failed", tool=tool_name, error=str(e))
            raise

        execution_time = (loop.time() - start_time) * 1000
        self._record(tool, execution_time, success=True)
        self._log.debug(
            "Tool execution complete",
            tool=tool_name,
            execution_time_ms=execution_time,
        )
        return result

    def get_tools_description(self) -> str:
        """Get human-readable description of all tools."""
        lines = []
        for name, tool in self._tools.items():
            lines.append(f"- {name}: {getattr(tool, 'description', '')}")

            for param in getattr(tool, "parameters", []):
                required = "(required)" if param.required else "(optional)"
                lines.append(f"    - {param.name}: {param.description} {required}")

        return "\n".join(lines)

    def get_stats(self) -> dict[str, Any]:
        """Get execution statistics for all tools."""
        stats: dict[str, Any] = {
            "total_executions": self._execution_count,
            "tools": {},
        }

        for name, tool in self._tools.items():
            if isinstance(tool, BaseTool):
                stats["tools"][name] = tool.stats

        return stats

    def _record(self, tool: Any, execution_time_ms: float, success: bool) -> None:
        if isinstance(tool, BaseTool):
            tool.record_execution(execution_time_ms, success=success)

    def _drop_rules(self, tool_name: str) -> None:
        self._rules = [r for r in self._rules if r.tool_name != tool_name]

    @property
    def rules(self) -> list[TriggerRule]:
        """Trigger rules in priority order."""
        return list(self._rules)

    @property
    def tool_names(self) -> list[str]:
        """Get list of registered tool names."""
        return list(self._tools.keys())

    @property
    def tool_count(self) -> int:
        """Get number of registered tools."""
        return len(self._tools)

    def __contains__(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
