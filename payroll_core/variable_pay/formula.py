"""
Incentive formula language: a sandboxed arithmetic evaluator.

Formulas are authored by payroll administrators and stored as text, so they
are never handed to eval(). They are tokenized, parsed by recursive descent
into a small expression tree, and evaluated against a fixed set of variables.

Grammar:
    expression := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := ("+" | "-") factor | NUMBER | IDENTIFIER | "(" expression ")"

NUMBER is a decimal literal with an optional exponent (12, 0.1, .5, 1e3,
2.5E-2). Nesting (parentheses and unary signs) is limited to
MAX_NESTING_DEPTH levels and a formula to MAX_TOKENS tokens, so parsing and
evaluation stay well inside the interpreter recursion limit.

Anything else (unknown identifiers, function calls, "**", "%", stray
characters) is a FormulaSyntaxError.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, NamedTuple, Union

from payroll_core.exceptions import FormulaSyntaxError

ALLOWED_VARIABLES = frozenset({"monthlyBasic", "monthlyCTC", "fixedValue"})

MAX_NESTING_DEPTH = 32
MAX_TOKENS        = 256

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)
    | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<op>[-+*/()])
    """,
    re.VERBOSE,
)


class Token(NamedTuple):
    kind: str       # "number" | "name" | "op" | "end"
    value: str
    position: int


def tokenize(expression: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(expression):
        match = _TOKEN_RE.match(expression, pos)
        if match is None:
            raise FormulaSyntaxError(f"Unexpected character {expression[pos]!r}", expression, pos)
        if match.lastgroup != "ws":
            if len(tokens) >= MAX_TOKENS:
                raise FormulaSyntaxError(f"Formula longer than {MAX_TOKENS} tokens", expression, pos)
            tokens.append(Token(match.lastgroup, match.group(), pos))
        pos = match.end()
    tokens.append(Token("end", "", len(expression)))
    return tokens


# ---------------------------------------------------------------------------
# Expression tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Number:
    value: float

    def evaluate(self, variables: Mapping[str, float]) -> float:
        return self.value


@dataclass(frozen=True)
class Variable:
    name: str

    def evaluate(self, variables: Mapping[str, float]) -> float:
        return float(variables[self.name])


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"

    def evaluate(self, variables: Mapping[str, float]) -> float:
        value = self.operand.evaluate(variables)
        return -value if self.op == "-" else value


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"

    def evaluate(self, variables: Mapping[str, float]) -> float:
        left = self.left.evaluate(variables)
        right = self.right.evaluate(variables)
        if self.op == "+":
            return left + right
        if self.op == "-":
            return left - right
        if self.op == "*":
            return left * right
        return left / right


Node = Union[Number, Variable, UnaryOp, BinaryOp]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class _Parser:
    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens = tokenize(expression)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _error(self, message: str) -> FormulaSyntaxError:
        return FormulaSyntaxError(message, self.expression, self.current.position)

    def parse(self) -> Node:
        if self.current.kind == "end":
            raise self._error("Empty formula")
        node = self._expression()
        if self.current.kind != "end":
            raise self._error(f"Unexpected {self.current.value!r}")
        return node

    def _expression(self) -> Node:
        node = self._term()
        while self.current.kind == "op" and self.current.value in "+-":
            op = self._advance().value
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._factor()
        while self.current.kind == "op" and self.current.value in "*/":
            op = self._advance().value
            node = BinaryOp(op, node, self._factor())
        return node

    def _nested(self) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise self._error(f"Formula nested deeper than {MAX_NESTING_DEPTH} levels")

    def _factor(self) -> Node:
        token = self.current
        if token.kind == "op" and token.value in "+-":
            self._advance()
            self._nested()
            operand = self._factor()
            self.depth -= 1
            return UnaryOp(token.value, operand)
        if token.kind == "number":
            self._advance()
            return Number(float(token.value))
        if token.kind == "name":
            if token.value not in ALLOWED_VARIABLES:
                raise self._error(f"Unknown variable {token.value!r}")
            self._advance()
            return Variable(token.value)
        if token.kind == "op" and token.value == "(":
            self._advance()
            self._nested()
            node = self._expression()
            if not (self.current.kind == "op" and self.current.value == ")"):
                raise self._error("Missing closing parenthesis")
            self._advance()
            self.depth -= 1
            return node
        if token.kind == "end":
            raise self._error("Unexpected end of formula")
        raise self._error(f"Unexpected {token.value!r}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Formula:
    """A parsed formula, reusable across evaluations."""
    expression: str
    root: Node

    def evaluate(self, variables: Mapping[str, float]) -> float:
        try:
            return self.root.evaluate(variables)
        except ZeroDivisionError:
            raise FormulaSyntaxError("Division by zero", self.expression) from None
        except KeyError as exc:
            raise FormulaSyntaxError(f"No value supplied for {exc.args[0]!r}", self.expression) from None


def parse_formula(expression: str) -> Formula:
    return Formula(expression=expression, root=_Parser(expression).parse())


def evaluate_formula(expression: str, variables: Mapping[str, float]) -> float:
    return parse_formula(expression).evaluate(variables)


def validate_formula(expression: str) -> None:
    """Raise FormulaSyntaxError if `expression` would be rejected at evaluation time."""
    parse_formula(expression)
