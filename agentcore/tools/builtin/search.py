"""Search tool over a local corpus or a remote search endpoint."""

from __future__ import annotations

import asyncio
import re
from typing import Any

import aiohttp

from agentcore.tools.base import BaseTool, ParameterType, ToolParameter

DEFAULT_CORPUS = [
    "Apple pie recipe",
    "Banana bread instructions",
    "Cherry cheesecake ingredients",
    "Date squares baking tips",
    "Elderflower cordial preparation",
]

# Everything up to and including the trigger word (and a following "for"/"about")
_QUERY_PREFIX = re.compile(r"^.*?\bsearch(?:es|ing)?\b(?:\s+(?:for|about)\b)?", re.IGNORECASE)


class SearchTool(BaseTool):
    """A search tool returning the corpus entries that contain the query.

    Without ``api_url`` the search runs against an in-memory list of strings
    (case-insensitive substring match). With ``api_url`` it issues
    ``GET <api_url>?q=<query>`` and returns the ``results`` array of the JSON
    response.
    """

    triggers = ("search",)

    def __init__(
        self,
        corpus: list[str] | None = None,
        api_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__()
        self.corpus = list(corpus) if corpus is not None else list(DEFAULT_CORPUS)
        self.api_url = api_url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        return "search"

    @property
    def description(self) -> str:
        return (
            "Search for entries matching a query. Returns the list of "
            "matching entries in their original order."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="query",
                type=ParameterType.STRING,
                description="The text to search for",
                required=True,
            ),
        ]

    def arguments_from_text(self, text: str) -> dict[str, Any]:
        """Strip the leading ``search [for|about]`` from sub-unit text."""
        query = _QUERY_PREFIX.sub("", text, count=1).strip()
        return {"query": query or text.strip()}

    def format_output(self, output: Any) -> str:
        if isinstance(output, dict):
            if output.get("error"):
                return f"Error: {output['error']}"
            results = output.get("results") or []
            if not results:
                return f"No results for: {output.get('query', '')}"
            return ", ".join(str(r) for r in results)
        return str(output)

    async def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Execute the search."""
        query = arguments.get("query", "")

        if not query or not query.strip():
            return {"error": "No query provided", "results": []}

        if self.api_url:
            return await self._remote_search(query)
        return self._local_search(query)

    def _local_search(self, query: str) -> dict[str, Any]:
        normalized = query.lower().strip()
        results = [
            item for item in self.corpus
            if isinstance(item, str) and normalized in item.lower().strip()
        ]
        return {
            "query": query,
            "results": results,
            "num_results": len(results),
        }

    async def _remote_search(self, query: str) -> dict[str, Any]:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    self.api_url,
                    headers=headers,
                    params={"q": query},
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if response.status != 200:
                        return {
                            "error": f"HTTP error! status: {response.status}",
                            "query": query,
                            "results": [],
                        }

                    data = await response.json()

        except asyncio.TimeoutError:
            return {
                "error": "Search request timed out",
                "query": query,
                "results": [],
            }
        except (aiohttp.ClientError, ValueError) as e:
            return {
                "error": f"Search failed: {e}",
                "query": query,
                "results": [],
            }

        results = data.get("results", []) if isinstance(data, dict) else []
        return {
            "query": query,
            "results": results,
            "num_results": len(results),
        }
