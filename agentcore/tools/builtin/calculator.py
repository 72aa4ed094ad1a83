"""Calculator tool for arithmetic expressions.

NOTE: Expressions are parsed with Python's AST module and evaluated by a
small whitelisting interpreter. Only numbers, ``+ - * /``, unary sign and
parentheses are accepted; names, calls, attribute access and every other
node type are rejected. Nothing is ever handed to eval().
"""

from __future__ import annotations

import ast
import math
import operator
import re
from typing import Any

from agentcore.tools.base import BaseTool, ParameterType, ToolParameter

# Longest run of characters that can appear in an arithmetic expression
_EXPRESSION_SPAN = re.compile(r"[\d.+\-*/()\s]+")


class CalculatorTool(BaseTool):
    """A safe calculator tool that evaluates arithmetic expressions.

    Grammar::

        expr   := term (("+" | "-") term)*
        term   := factor (("*" | "/") factor)*
        factor := ("+" | "-") factor | NUMBER | "(" expr ")"
    """

    triggers = ("calculate",)

    # Safe operators - only these AST node types are allowed
    BINARY_OPERATORS = {
        ast.Add: operator.add,
        ast.Sub: operator.sub,
        ast.Mult: operator.mul,
        ast.Div: operator.truediv,
    }

    UNARY_OPERATORS = {
        ast.USub: operator.neg,
        ast.UAdd: operator.pos,
    }

    @property
    def name(self) -> str:
        return "calculator"

    @property
    def description(self) -> str:
        return (
            "Evaluate arithmetic expressions safely. "
            "Supports numbers, +, -, *, / and parentheses."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="expression",
                type=ParameterType.STRING,
                description="The arithmetic expression to evaluate",
                required=True,
            ),
        ]

    def arguments_from_text(self, text: str) -> dict[str, Any]:
        """Pull the arithmetic part out of text such as ``calculate 2 + 2``."""
        return {"expression": extract_expression(text)}

    def format_output(self, output: Any) -> str:
        if isinstance(output, dict):
            if output.get("error"):
                return f"Error: {output['error']}"
            return format_number(output.get("result"))
        return str(output)

    async def execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Evaluate the arithmetic expression."""
        expression = arguments.get("expression", "")

        if not expression or not expression.strip():
            return {"error": "No expression provided", "result": None}

        try:
            result = evaluate_expression(expression)
        except ZeroDivisionError:
            return {"error": "Division by zero", "result": None}
        except ValueError as e:
            return {"error": f"Invalid expression: {e}", "result": None}

        if isinstance(result, float):
            if math.isnan(result):
                return {"error": "Result is NaN", "result": None}
            if math.isinf(result):
                return {
                    "result": "infinity" if result > 0 else "-infinity",
                    "expression": expression,
                }

        return {
            "result": result,
            "expression": expression,
        }


def extract_expression(text: str) -> str:
    """Return the longest arithmetic-looking span of ``text`` containing a digit."""
    candidates = [
        m.group().strip()
        for m in _EXPRESSION_SPAN.finditer(text)
        if any(ch.isdigit() for ch in m.group())
    ]
    if not candidates:
        return ""
    return max(candidates, key=len)


def evaluate_expression(expression: str) -> int | float:
    """Parse and evaluate ``expression`` over the restricted grammar."""
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"syntax error at offset {e.offset}") from e

    return _evaluate_node(tree.body)


def _evaluate_node(node: ast.AST) -> int | float:
    """Recursively evaluate an AST node with strict whitelisting."""
    if isinstance(node, ast.Constant):
        # bool is a subclass of int but is not a number here
        if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
            return node.value
        raise ValueError(f"unsupported constant {node.value!r}")

    if isinstance(node, ast.UnaryOp):
        op = CalculatorTool.UNARY_OPERATORS.get(type(node.op))
        if op is None:
            raise ValueError(f"unsupported unary operator {type(node.op).__name__}")
        return op(_evaluate_node(node.operand))

    if isinstance(node, ast.BinOp):
        op = CalculatorTool.BINARY_OPERATORS.get(type(node.op))
        if op is None:
            raise ValueError(f"unsupported operator {type(node.op).__name__}")
        return op(_evaluate_node(node.left), _evaluate_node(node.right))

    raise ValueError(f"unsupported element {type(node).__name__}")


def format_number(value: Any) -> str:
    """Render integral floats without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
