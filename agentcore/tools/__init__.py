"""Tool system - Registry, base interfaces, matching and tool implementations."""

from agentcore.tools.base import BaseTool, FunctionTool, ToolDefinition, ToolParameter
from agentcore.tools.matching import TriggerRule, match_keywords
from agentcore.tools.registry import ToolRegistry

__all__ = [
    "BaseTool",
    "FunctionTool",
    "ToolDefinition",
    "ToolParameter",
    "ToolRegistry",
    "TriggerRule",
    "match_keywords",
]
