"""
RULEX Language Parser

Builds abstract syntax trees from the token stream produced by `Lexer`.

The parser is recursive descent with operator-precedence climbing for infix
expressions. It pulls tokens lazily and never looks further ahead than the
lexer's single cached token.

Grammar
-------
    program      := expression (";" expression)* [";"]
    expression   := invocation(precedence(discrete, 0))
    discrete     := "(" expression ")" | block | rule_decl | signed
                  | "true" | "false" | NUMBER | STRING | IDENTIFIER
    block        := "{" [expression (";" expression)* [";"]] "}"
    rule_decl    := "rule" [IDENTIFIER] "(" [IDENTIFIER ("," IDENTIFIER)*] ")" block
    signed       := ("-" | "+") discrete
    invocation   := node ["(" [expression ("," expression)*] ")"]

A block holding exactly one expression collapses to that expression. A
leading `-` desugars to `BinaryExpr("*", -1, operand)`.

Binding powers
--------------
    =                       1
    ||                      5
    &&                      10
    < > <= >= == !=         15
    + -                     20
    * / %                   25

Entry Points
------------
- `Parser.parse()`: Parse a full program into a list of top-level nodes.
- `parse_source()`: Lex and parse a source string in one call.

Raises
------
RulexSyntaxError
    On the first malformed construct. No partial tree is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import NoReturn, TypeVar

from rulex.rulex_ast import Assign, BinaryExpr, Block, BoolLiteral, Call, Node, Rule
from rulex.rulex_constants import (
    ASSIGN_OPERATOR,
    IDENTIFIER,
    KEYWORD,
    NEGATE_OPERATOR,
    NUMBER,
    OPERATOR,
    PRECEDENCE,
    PUNCTUATION,
    SIGN_OPERATORS,
    STRING,
)
from rulex.rulex_lexer import CharacterStream, Lexer, Token

logger = logging.getLogger(__name__)

T = TypeVar("T")

LEAF_KINDS = (NUMBER, STRING, IDENTIFIER)


def is_punctuation(token: Token | None, value: str | None = None) -> bool:
    return _check(token, PUNCTUATION, value)


def is_operator(token: Token | None, value: str | None = None) -> bool:
    return _check(token, OPERATOR, value)


def is_identifier(token: Token | None) -> bool:
    return _check(token, IDENTIFIER, None)


def is_keyword(token: Token | None, value: str | None = None) -> bool:
    return _check(token, KEYWORD, value)


def _check(token: Token | None, kind: str, value: str | None) -> bool:
    return (
        token is not None
        and token.kind == kind
        and (value is None or token.value == value)
    )


class Parser:
    """
    RULEX Parser Class

    Consumes a `Lexer` and produces the ordered list of top-level statements.
    All errors are raised through the lexer's `fail`, which positions them at
    the offending token.

    Attributes
    ----------
    tokens : Lexer
        The token stream being parsed.
    """

    def __init__(self, tokens: Lexer) -> None:
        self.tokens = tokens

    def parse(self) -> list[Node]:
        """Parse a full program. An empty document yields an empty list.

        Input nested deeper than the interpreter's recursion limit raises
        `RulexSyntaxError("Nesting too deep")` at the point parsing stopped.
        """
        program: list[Node] = []
        try:
            while not self.tokens.eof():
                program.append(self.parse_expression())
                if not self.tokens.eof():
                    self.expect_punctuation(";")
        except RecursionError:
            pass
        else:
            logger.debug("Parsed %d top-level statement(s)", len(program))
            return program
        # raised outside the handler so the RecursionError is not chained
        self.tokens.fail("Nesting too deep")

    def parse_expression(self) -> Node:
        return self.parse_invocation(self.resolve_bindings(self.parse_discrete(), 0))

    def parse_discrete(self) -> Node:
        """Parse an atomic unit, then any immediately following argument list."""
        current = self.tokens.peek()

        if is_punctuation(current, "("):
            node = self.parse_parenthetical()
        elif is_punctuation(current, "{"):
            node = self.parse_block()
        elif is_keyword(current, "rule"):
            node = self.parse_rule()
        elif is_operator(current) and current.value in SIGN_OPERATORS:  # type: ignore[union-attr]
            node = self.parse_signed()
        elif is_keyword(current, "true") or is_keyword(current, "false"):
            self.tokens.next()
            node = BoolLiteral(current.value == "true")  # type: ignore[union-attr]
        elif current is not None and current.kind in LEAF_KINDS:
            node = self.tokens.next()  # type: ignore[assignment]
        else:
            self.unexpected()

        return self.parse_invocation(node)

    def parse_parenthetical(self) -> Node:
        self.expect_punctuation("(")
        node = self.parse_expression()
        self.expect_punctuation(")")
        return node

    def parse_block(self) -> Node:
        """Parse `{ ... }`. A single statement is returned unwrapped."""
        body = self.parse_delimited("{", "}", ";", self.parse_expression)
        if len(body) == 1:
            return body[0]
        return Block(body)

    def parse_rule(self) -> Rule:
        """Parse a named or anonymous rule declaration."""
        self.tokens.next()  # past "rule"

        name = None
        if is_identifier(self.tokens.peek()):
            name = str(self.expect_identifier().value)

        if not is_punctuation(self.tokens.peek(), "("):
            self.tokens.fail("Missing argument list for rule declaration")

        params: list[str] = []
        for param in self.parse_delimited("(", ")", ",", self.expect_identifier):
            if param.value in params:
                self.tokens.fail(
                    f'Duplicate parameter "{param.value}" in rule declaration', param
                )
            params.append(str(param.value))

        if not is_punctuation(self.tokens.peek(), "{"):
            self.tokens.fail("Missing body for rule declaration")

        return Rule(name, params, self.parse_block())

    def parse_signed(self) -> Node:
        """Parse `-x` or `+x`. Negation becomes a multiplication by -1."""
        sign = self.expect_operator(SIGN_OPERATORS)
        token = self.tokens.peek()

        signable = is_punctuation(token, "(") or (
            token is not None and token.kind in (NUMBER, IDENTIFIER)
        )
        if not signable:
            self.tokens.fail("Expected signed expression")

        if sign.value == NEGATE_OPERATOR:
            minus_one = Token(NUMBER, -1.0, sign.line, sign.col)
            return BinaryExpr("*", minus_one, self.parse_discrete())

        return self.parse_discrete()

    def parse_invocation(self, node: Node) -> Node:
        """Wrap `node` in a Call if an argument list follows immediately."""
        if is_punctuation(self.tokens.peek(), "("):
            args = self.parse_delimited("(", ")", ",", self.parse_expression)
            return Call(node, args)
        return node

    def parse_delimited(
        self, start: str, stop: str, separator: str, parse_item: Callable[[], T]
    ) -> list[T]:
        """Parse `start item (separator item)* [separator] stop`, possibly empty."""
        items: list[T] = []
        first = True

        self.expect_punctuation(start)
        while not self.tokens.eof():
            if is_punctuation(self.tokens.peek(), stop):
                break
            if first:
                first = False
            else:
                self.expect_punctuation(separator)
            # lookahead changed if a separator was consumed
            if is_punctuation(self.tokens.peek(), stop):
                break
            items.append(parse_item())
        self.expect_punctuation(stop)

        return items

    def resolve_bindings(self, left: Node, min_power: int) -> Node:
        """
        Precedence climbing over infix operators.

        While the next operator binds tighter than `min_power`, consume it,
        parse its right operand at the operator's own binding power and fold
        the pair into `left`. `1 + 2 * 3` therefore groups as `1 + (2 * 3)`
        and operators of equal power associate to the left.
        """
        token = self.tokens.peek()
        while is_operator(token):
            assert token is not None  # for mypy
            op = str(token.value)
            power = PRECEDENCE.get(op)
            if power is None:
                self.tokens.fail(f'Unknown operator "{op}"')
            if power <= min_power:
                break
            self.tokens.next()

            right = self.resolve_bindings(self.parse_discrete(), power)
            if op == ASSIGN_OPERATOR:
                left = Assign(left, right)
            else:
                left = BinaryExpr(op, left, right)
            token = self.tokens.peek()

        return left

    def expect_punctuation(self, char: str) -> Token:
        token = self.tokens.peek()
        if not is_punctuation(token, char):
            self.tokens.fail(f'Expected "{char}"')
        return self.tokens.next()  # type: ignore[return-value]

    def expect_identifier(self) -> Token:
        if not is_identifier(self.tokens.peek()):
            self.tokens.fail("Expected an identifier")
        return self.tokens.next()  # type: ignore[return-value]

    def expect_operator(self, operators: tuple[str, ...]) -> Token:
        token = self.tokens.peek()
        if not is_operator(token) or token.value not in operators:  # type: ignore[union-attr]
            self.tokens.fail(f"Expected one of these operators: {list(operators)}")
        return self.tokens.next()  # type: ignore[return-value]

    def unexpected(self) -> NoReturn:
        token = self.tokens.peek()
        if token is None:
            self.tokens.fail("Unexpected end of input")
        self.tokens.fail(f"Unexpected token: {token!r}")


def parse_source(source: str) -> list[Node]:
    """Lex and parse `source`, returning its top-level statements."""
    return Parser(Lexer(CharacterStream(source))).parse()


__all__ = ["Parser", "parse_source"]
