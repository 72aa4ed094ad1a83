"""Built-in tool implementations."""

from agentcore.tools.base import BaseTool
from agentcore.tools.builtin.calculator import CalculatorTool
from agentcore.tools.builtin.search import SearchTool

__all__ = ["CalculatorTool", "SearchTool", "get_default_tools"]


def get_default_tools(
    corpus: list[str] | None = None,
    search_api_url: str | None = None,
    api_key: str | None = None,
) -> list[BaseTool]:
    """Get list of default tools, calculator first."""
    return [
        CalculatorTool(),
        SearchTool(corpus=corpus, api_url=search_api_url, api_key=api_key),
    ]
