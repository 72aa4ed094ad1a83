"""Tests for tool system."""

from typing import Any

import aiohttp
import pytest

from agentcore.errors import DuplicateToolError, ToolNotFoundError, ValidationError
from agentcore.tools.base import FunctionTool
from agentcore.tools.builtin import get_default_tools
from agentcore.tools.builtin.calculator import CalculatorTool, extract_expression
from agentcore.tools.builtin.search import SearchTool
from agentcore.tools.matching import TriggerRule, match_keywords
from agentcore.tools.registry import ToolRegistry


class TestCalculatorTool:
    """Tests for CalculatorTool."""

    @pytest.fixture
    def calculator(self) -> CalculatorTool:
        return CalculatorTool()

    @pytest.mark.asyncio
    async def test_basic_arithmetic(self, calculator: CalculatorTool) -> None:
        """Test basic arithmetic operations."""
        result = await calculator.execute({"expression": "2 + 2"})
        assert result["result"] == 4

        result = await calculator.execute({"expression": "10 * 5"})
        assert result["result"] == 50

        result = await calculator.execute({"expression": "100 / 4"})
        assert result["result"] == 25

    @pytest.mark.asyncio
    async def test_precedence_and_parentheses(self, calculator: CalculatorTool) -> None:
        """Test operator precedence, grouping and unary minus."""
        result = await calculator.execute({"expression": "2 + 2 * 3"})
        assert result["result"] == 8

        result = await calculator.execute({"expression": "(2 + 2) * 3"})
        assert result["result"] == 12

        result = await calculator.execute({"expression": "-(3 - 5) / 4"})
        assert result["result"] == 0.5

    @pytest.mark.asyncio
    async def test_division_by_zero(self, calculator: CalculatorTool) -> None:
        """Test division by zero handling."""
        result = await calculator.execute({"expression": "1 / 0"})
        assert "error" in result
        assert "Division by zero" in result["error"]

    @pytest.mark.asyncio
    async def test_invalid_expression(self, calculator: CalculatorTool) -> None:
        """Test invalid expression handling."""
        result = await calculator.execute({"expression": "invalid expression"})
        assert "Invalid expression" in result["error"]
        assert result["result"] is None

    @pytest.mark.asyncio
    async def test_rejects_code(self, calculator: CalculatorTool) -> None:
        """Names, calls and operators outside the grammar are rejected."""
        for expression in ["__import__('os')", "abs(-1)", "2 ** 8", "7 // 2", "True + 1"]:
            result = await calculator.execute({"expression": expression})
            assert result["result"] is None, expression
            assert result["error"]

    @pytest.mark.asyncio
    async def test_empty_expression(self, calculator: CalculatorTool) -> None:
        result = await calculator.execute({"expression": "  "})
        assert result["error"] == "No expression provided"

    def test_extract_expression(self) -> None:
        """Test pulling the arithmetic span out of task text."""
        assert extract_expression("calculate 2 + 2") == "2 + 2"
        assert extract_expression("What is 25 * (37 + 100)?") == "25 * (37 + 100)"
        assert extract_expression("calculate the area of a circle") == ""

    @pytest.mark.asyncio
    async def test_text_arguments_and_format(self, calculator: CalculatorTool) -> None:
        arguments = calculator.arguments_from_text("Calculate 12 / 4")
        assert arguments == {"expression": "12 / 4"}

        result = await calculator.execute(arguments)
        assert calculator.format_output(result) == "3"

        result = await calculator.execute(calculator.arguments_from_text("calculate nothing"))
        assert calculator.format_output(result) == "Error: No expression provided"


class TestSearchTool:
    """Tests for SearchTool."""

    @pytest.fixture
    def search(self) -> SearchTool:
        return SearchTool()

    @pytest.mark.asyncio
    async def test_basic_search(self, search: SearchTool) -> None:
        """Test basic search functionality."""
        result = await search.execute({"query": "BREAD"})
        assert result["query"] == "BREAD"
        assert result["results"] == ["Banana bread instructions"]

    @pytest.mark.asyncio
    async def test_custom_corpus(self) -> None:
        """Test searching a caller-supplied corpus."""
        search = SearchTool(corpus=["Python.org", "PyPI", "Rust book"])
        result = await search.execute({"query": "py"})
        assert result["results"] == ["Python.org", "PyPI"]
        assert result["num_results"] == 2

    @pytest.mark.asyncio
    async def test_empty_query(self, search: SearchTool) -> None:
        result = await search.execute({"query": "   "})
        assert result["error"] == "No query provided"
        assert result["results"] == []

    def test_query_from_text(self, search: SearchTool) -> None:
        assert search.arguments_from_text("search for cheesecake") == {"query": "cheesecake"}
        assert search.arguments_from_text("Search Node.js") == {"query": "Node.js"}
        assert search.arguments_from_text("please search about apple pie") == {"query": "apple pie"}

    @pytest.mark.asyncio
    async def test_format_output(self, search: SearchTool) -> None:
        result = await search.execute({"query": "pie"})
        assert search.format_output(result) == "Apple pie recipe"

        result = await search.execute({"query": "lasagna"})
        assert search.format_output(result) == "No results for: lasagna"


class _FakeResponse:
    def __init__(self, status: int = 200, payload: Any = None, exc: Exception | None = None) -> None:
        self.status = status
        self._payload = payload
        self._exc = exc

    async def json(self) -> Any:
        if self._exc is not None:
            raise self._exc
        return self._payload

    async def __aenter__(self) -> "_FakeResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __aenter__(self) -> "_FakeSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


class TestRemoteSearch:
    """Tests for SearchTool against a remote endpoint."""

    API_URL = "https://api.example.com/search"

    @pytest.fixture
    def search(self) -> SearchTool:
        return SearchTool(api_url=self.API_URL, api_key="secret")

    def _install(self, monkeypatch: pytest.MonkeyPatch, session: _FakeSession) -> None:
        monkeypatch.setattr(aiohttp, "ClientSession", lambda *args, **kwargs: session)

    @pytest.mark.asyncio
    async def test_returns_results(self, search: SearchTool, monkeypatch: pytest.MonkeyPatch) -> None:
        session = _FakeSession(_FakeResponse(payload={"results": ["result1", "result2"]}))
        self._install(monkeypatch, session)

        result = await search.execute({"query": "test query"})

        assert result["results"] == ["result1", "result2"]
        url, kwargs = session.calls[0]
        assert url == self.API_URL
        assert kwargs["params"] == {"q": "test query"}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_non_200(self, search: SearchTool, monkeypatch: pytest.MonkeyPatch) -> None:
        self._install(monkeypatch, _FakeSession(_FakeResponse(status=404)))

        result = await search.execute({"query": "test query"})
        assert "HTTP error! status: 404" in result["error"]
        assert result["results"] == []

    @pytest.mark.asyncio
    async def test_transport_error(self, search: SearchTool, monkeypatch: pytest.MonkeyPatch) -> None:
        self._install(monkeypatch, _FakeSession(exc=aiohttp.ClientConnectionError("Search failed")))

        result = await search.execute({"query": "test query"})
        assert "Search failed" in result["error"]

    @pytest.mark.asyncio
    async def test_bad_json(self, search: SearchTool, monkeypatch: pytest.MonkeyPatch) -> None:
        response = _FakeResponse(exc=ValueError("JSON parsing failed"))
        self._install(monkeypatch, _FakeSession(response))

        result = await search.execute({"query": "test query"})
        assert "JSON parsing failed" in result["error"]

    @pytest.mark.asyncio
    async def test_empty_results(self, search: SearchTool, monkeypatch: pytest.MonkeyPatch) -> None:
        self._install(monkeypatch, _FakeSession(_FakeResponse(payload={"results": []})))

        result = await search.execute({"query": "test query"})
        assert result["results"] == []


class TestKeywordMatching:
    """Tests for match_keywords."""

    RULES = [
        TriggerRule(keyword="calculate", tool_name="calculator"),
        TriggerRule(keyword="search", tool_name="search"),
    ]

    def test_case_insensitive(self) -> None:
        assert match_keywords("CALCULATE 1 + 1", self.RULES) == "calculator"
        assert match_keywords("Search bread", self.RULES) == "search"

    def test_first_rule_wins(self) -> None:
        assert match_keywords("search then calculate", self.RULES) == "calculator"

    def test_no_match(self) -> None:
        assert match_keywords("hello there", self.RULES) is None
        assert match_keywords("anything", []) is None


class TestToolRegistry:
    """Tests for ToolRegistry."""

    @pytest.fixture
    def registry(self) -> ToolRegistry:
        registry = ToolRegistry()
        registry.register_many(get_default_tools())
        return registry

    def test_registration(self, registry: ToolRegistry) -> None:
        """Test tool registration."""
        assert "calculator" in registry
        assert "search" in registry
        assert registry.tool_count == 2
        assert [r.keyword for r in registry.rules] == ["calculate", "search"]

    def test_resolve(self, registry: ToolRegistry) -> None:
        """Test getting a tool."""
        calc = registry.resolve("calculator")
        assert calc is not None
        assert calc.name == "calculator"
        assert registry.resolve("missing") is None

    def test_match(self, registry: ToolRegistry) -> None:
        assert registry.match("calculate 2 + 2").name == "calculator"
        assert registry.match("search for pie").name == "search"
        assert registry.match("hello there") is None

    def test_strict_duplicate(self, registry: ToolRegistry) -> None:
        with pytest.raises(DuplicateToolError):
            registry.register(CalculatorTool())
        assert registry.tool_count == 2

    def test_permissive_overwrite(self) -> None:
        registry = ToolRegistry(allow_overwrite=True)
        first = FunctionTool("echo", lambda args: "first", triggers=["say"])
        second = FunctionTool("echo", lambda args: "second", triggers=["speak"])

        registry.register(first)
        registry.register(second)

        assert registry.resolve("echo") is second
        assert registry.tool_count == 1
        assert [r.keyword for r in registry.rules] == ["speak"]

    def test_invalid_registration(self) -> None:
        registry = ToolRegistry()
        with pytest.raises(ValidationError):
            registry.register(FunctionTool("", lambda args: None))
        with pytest.raises(ValidationError):
            registry.register(object(), name="broken")
        with pytest.raises(ValidationError):
            registry.register(CalculatorTool(), triggers=["  "])
        assert registry.tool_count == 0

    def test_register_under_alias(self) -> None:
        registry = ToolRegistry()
        registry.register(CalculatorTool(), name="math", triggers=["compute"])
        assert registry.resolve("math") is not None
        assert registry.match_name("compute 3 * 3") == "math"

    def test_unregister(self, registry: ToolRegistry) -> None:
        assert registry.unregister("search")
        assert not registry.unregister("search")
        assert registry.match("search for pie") is None

    def test_custom_matcher(self) -> None:
        registry = ToolRegistry(matcher=lambda text, rules: "calculator" if text.isdigit() else None)
        registry.register(CalculatorTool())
        assert registry.match("42").name == "calculator"
        assert registry.match("calculate 1 + 1") is None

    def test_tools_description(self, registry: ToolRegistry) -> None:
        description = registry.get_tools_description()
        assert "- calculator:" in description
        assert "expression" in description

    @pytest.mark.asyncio
    async def test_execute(self, registry: ToolRegistry) -> None:
        """Test tool execution through registry."""
        result = await registry.execute("calculator", {"expression": "1 + 1"})
        assert result["result"] == 2
        assert registry.get_stats()["tools"]["calculator"]["call_count"] == 1

    @pytest.mark.asyncio
    async def test_execute_errors(self, registry: ToolRegistry) -> None:
        with pytest.raises(ToolNotFoundError):
            await registry.execute("missing", {})
        with pytest.raises(ValidationError):
            await registry.execute("calculator", {"expression": 42})

    @pytest.mark.asyncio
    async def test_execute_failure_recorded(self) -> None:
        def explode(args: dict[str, Any]) -> None:
            raise RuntimeError("boom")

        registry = ToolRegistry()
        registry.register(FunctionTool("explode", explode))

        with pytest.raises(RuntimeError, match="boom"):
            await registry.execute("explode", {})

        stats = registry.get_stats()["tools"]["explode"]
        assert stats["call_count"] == 1
        assert stats["error_count"] == 1


class TestFunctionTool:
    """Tests for FunctionTool."""

    @pytest.mark.asyncio
    async def test_sync_and_async_callables(self) -> None:
        async def shout(args: dict[str, Any]) -> str:
            return args["input"].upper()

        sync_tool = FunctionTool("echo", lambda args: args["input"])
        async_tool = FunctionTool("shout", shout)

        assert await sync_tool.execute(sync_tool.arguments_from_text("hi")) == "hi"
        assert await async_tool.execute({"input": "hi"}) == "HI"
