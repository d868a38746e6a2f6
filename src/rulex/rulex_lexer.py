"""
Lexical analyzer for the RULEX rule language.

This module provides the two lowest stages of the RULEX front end:

Classes:
    CharacterStream: Source cursor over raw text with line/column tracking and
        single-character lookahead. Sole constructor of syntax errors.
    Token: A classified lexical unit (kind + value) with its start position.
    SourceStream: Protocol for any character source the Lexer can consume.
    Lexer: Token stream that lazily classifies characters into tokens, with
        exactly one token of lookahead.

Features:
    - Skips whitespace (space, tab, newline) and `#` line comments
    - Recognizes:
        * Strings delimited by `"` with backslash escaping
        * Unsigned numbers (digits with at most one `.`), parsed as floats
        * Identifiers (ASCII letters, digits, `_`, `-`, `?`, `!`) and keywords
        * Single-character punctuation `, : ; ( ) { } [ ]`
        * Operators as maximal runs of `+ - * / % = & | < > ! ~ ^`
    - Nothing is buffered beyond one character and one token of lookahead

Raises:
    RulexSyntaxError: On an illegal character or an unterminated string.

Example:
    >>> lexer = Lexer(CharacterStream("rule max(a, b) { a }"))
    >>> lexer.next()
    Token(keyword, 'rule')
    >>> lexer.peek()
    Token(identifier, 'max')

Exports:
    - CharacterStream
    - Lexer
    - SourceStream
    - Token
    - tokenize
"""

import logging
from collections.abc import Callable
from typing import Any, NoReturn, Protocol

from rulex.rulex_constants import (
    COMMENT_MARKER,
    DECIMAL_POINT,
    DIGITS,
    ESCAPE,
    IDENTIFIER,
    IDENTIFIER_CHARS,
    IDENTIFIER_START,
    KEYWORD,
    KEYWORDS,
    NEWLINE,
    NUMBER,
    OPERATOR,
    OPERATOR_CHARS,
    PUNCTUATION,
    PUNCTUATION_CHARS,
    STRING,
    STRING_BOUNDARY,
    WHITESPACE,
)
from rulex.rulex_errors import RulexSyntaxError

logger = logging.getLogger(__name__)

END_OF_INPUT = ""


class SourceStream(Protocol):
    """Character source consumed by the Lexer.

    `peek`/`next` return the empty string at end of input, and `fail` raises
    a RulexSyntaxError at the given or current position.
    """

    line: int
    column: int

    def peek(self) -> str: ...

    def next(self) -> str: ...

    def end_of_file(self) -> bool: ...

    def fail(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> NoReturn: ...


class CharacterStream:
    """
    A forward-only cursor over a source string with line and column tracking.

    The stream never backtracks. Reading at end of input yields the empty
    string instead of raising, so callers can peek freely.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (0-indexed, reset on newline).
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 0

    def peek(self) -> str:
        """Returns the current character without advancing.

        Returns:
            str: The current character, or an empty string at end of input.
        """
        if self.position >= len(self.source):
            return END_OF_INPUT
        return self.source[self.position]

    def next(self) -> str:
        """Consumes and returns the current character.

        At end of input the position is left unchanged and the empty string
        is returned.

        Returns:
            str: The consumed character.
        """
        char = self.peek()
        if char == END_OF_INPUT:
            return char
        self.position += 1
        if char == NEWLINE:
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        return char

    def end_of_file(self) -> bool:
        """Checks if the stream has consumed all characters.

        Returns:
            bool: True if `peek()` yields the end-of-input marker.
        """
        return self.peek() == END_OF_INPUT

    eof = end_of_file

    def fail(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> NoReturn:
        """Raises a positioned syntax error.

        Args:
            message (str): Description of the problem.
            line (int | None): Line to report instead of the current one.
            column (int | None): Column to report instead of the current one.

        Raises:
            RulexSyntaxError: Always.
        """
        line = self.line if line is None else line
        column = self.column if column is None else column
        logger.debug("Syntax error at (%d:%d): %s", line, column, message)
        raise RulexSyntaxError(line, column, message)


class Token:
    """Represents a single lexical token in the RULEX language.

    Tokens are produced once and never mutated. Literal tokens (numbers,
    strings, identifiers) are carried into the AST unchanged as leaves.

    Attributes:
        kind (str): One of `string`, `number`, `identifier`, `keyword`,
            `operator` or `punctuation`.
        value (str | float): The token's value. Numbers are floats, string
            values exclude their boundary quotes.
        line (int): The 1-based line number where the token starts.
        col (int): The 0-based column number where the token starts.
    """

    __slots__ = ("kind", "value", "line", "col")

    def __init__(self, kind: str, value: str | float, line: int = 0, col: int = 0):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Token is immutable; cannot delete {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.line, self.col))

    def to_dict(self) -> dict[str, Any]:
        """Serializes the token as an AST leaf.

        Returns:
            dict[str, Any]: `{"type": kind, "value": value}`.
        """
        return {"type": self.kind, "value": self.value}


class Lexer:
    """Token stream for the RULEX language.

    Pulls characters lazily from a character source and classifies them into
    Token objects. Exactly one token of lookahead is cached: calling `peek()`
    repeatedly returns the same instance until `next()` consumes it.

    The source need not be a CharacterStream: any object satisfying
    `SourceStream` (`peek`, `next`, `end_of_file`, `fail`, `line`, `column`)
    works, e.g. one reading a file handle a character at a time.

    Attributes:
        stream (SourceStream): The source stream to tokenize.
    """

    def __init__(self, stream: SourceStream) -> None:
        self.stream = stream
        self._current: Token | None = None

    def peek(self) -> Token | None:
        """Returns the next token without consuming it.

        Returns:
            Token | None: The lookahead token, or None at end of input.
        """
        if self._current is None:
            self._current = self.read_next_token()
        return self._current

    def next(self) -> Token | None:
        """Consumes and returns the next token.

        Returns:
            Token | None: The consumed token, or None at end of input.
        """
        token = self._current
        self._current = None
        return token if token is not None else self.read_next_token()

    def eof(self) -> bool:
        """Checks if no tokens remain.

        Returns:
            bool: True if `peek()` yields None.
        """
        return self.peek() is None

    def fail(self, message: str, token: Token | None = None) -> NoReturn:
        """Raises a syntax error through the underlying character stream.

        The error is positioned at `token` if given, otherwise at the cached
        lookahead token, otherwise at the stream's current position.

        Args:
            message (str): Description of the problem.
            token (Token | None): The offending token, if known.

        Raises:
            RulexSyntaxError: Always.
        """
        token = token if token is not None else self._current
        if token is None:
            self.stream.fail(message)
        self.stream.fail(message, token.line, token.col)

    def read_while(self, predicate: Callable[[str], bool]) -> str:
        """Consumes characters while `predicate` holds and returns them."""
        chars: list[str] = []
        while not self.stream.end_of_file() and predicate(self.stream.peek()):
            chars.append(self.stream.next())
        return "".join(chars)

    def skip_whitespace(self) -> None:
        self.read_while(lambda char: char in WHITESPACE)

    def skip_comment(self) -> None:
        """Discards the rest of the line, including the newline itself."""
        self.read_while(lambda char: char != NEWLINE)
        self.stream.next()

    def read_number(self) -> float:
        """Reads an unsigned number. A second decimal point ends the scan."""
        has_dot = False

        def is_numeric(char: str) -> bool:
            nonlocal has_dot
            if char == DECIMAL_POINT:
                if has_dot:
                    return False
                has_dot = True
                return True
            return char in DIGITS

        return float(self.read_while(is_numeric))

    def read_identifier(self) -> str:
        return self.read_while(lambda char: char in IDENTIFIER_CHARS)

    def read_string(self, line: int, col: int) -> str:
        """Reads a string body after its opening boundary has been consumed.

        A backslash makes the following character literal.

        Args:
            line (int): Line of the opening boundary, for error reporting.
            col (int): Column of the opening boundary, for error reporting.

        Returns:
            str: The string value without boundaries.

        Raises:
            RulexSyntaxError: If input ends before the closing boundary.
        """
        chars: list[str] = []
        escaped = False
        while not self.stream.end_of_file():
            char = self.stream.next()
            if escaped:
                chars.append(char)
                escaped = False
            elif char == ESCAPE:
                escaped = True
            elif char == STRING_BOUNDARY:
                return "".join(chars)
            else:
                chars.append(char)
        self.stream.fail("Unterminated string literal", line, col)

    def read_operator(self) -> str:
        return self.read_while(lambda char: char in OPERATOR_CHARS)

    def read_next_token(self) -> Token | None:
        """Classifies the next run of characters into a token.

        Categories are tried in a fixed order: whitespace, comment, string,
        number, identifier/keyword, punctuation, operator.

        Returns:
            Token | None: The next token, or None at end of input.

        Raises:
            RulexSyntaxError: On an illegal character or unterminated string.
        """
        while True:
            self.skip_whitespace()
            if self.stream.end_of_file():
                return None
            if self.stream.peek() != COMMENT_MARKER:
                break
            self.skip_comment()

        char = self.stream.peek()
        line, col = self.stream.line, self.stream.column

        if char == STRING_BOUNDARY:
            self.stream.next()
            return Token(STRING, self.read_string(line, col), line, col)

        if char in DIGITS:
            return Token(NUMBER, self.read_number(), line, col)

        if char in IDENTIFIER_START:
            identifier = self.read_identifier()
            kind = KEYWORD if identifier in KEYWORDS else IDENTIFIER
            return Token(kind, identifier, line, col)

        if char in PUNCTUATION_CHARS:
            return Token(PUNCTUATION, self.stream.next(), line, col)

        if char in OPERATOR_CHARS:
            return Token(OPERATOR, self.read_operator(), line, col)

        self.stream.fail(f"Illegal character at this position: {char}")


def tokenize(source: str) -> list[Token]:
    """Lexes `source` completely.

    Args:
        source (str): RULEX source text.

    Returns:
        list[Token]: Every token in order.

    Raises:
        RulexSyntaxError: On the first lexical error.
    """
    lexer = Lexer(CharacterStream(source))
    tokens: list[Token] = []
    while (token := lexer.next()) is not None:
        tokens.append(token)
    return tokens


__all__ = ["CharacterStream", "Lexer", "SourceStream", "Token", "tokenize"]
