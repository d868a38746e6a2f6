"""
Lexical and grammatical constants shared by the RULEX lexer and parser.

Character classes are frozensets so that the empty end-of-input marker
never matches any of them.
"""

from string import ascii_letters, digits

# Token kinds
STRING = "string"
NUMBER = "number"
IDENTIFIER = "identifier"
KEYWORD = "keyword"
OPERATOR = "operator"
PUNCTUATION = "punctuation"

TOKEN_KINDS: tuple[str, ...] = (
    STRING,
    NUMBER,
    IDENTIFIER,
    KEYWORD,
    OPERATOR,
    PUNCTUATION,
)

KEYWORDS: frozenset[str] = frozenset({"rule", "conform", "true", "false"})

WHITESPACE: frozenset[str] = frozenset(" \t\n")
COMMENT_MARKER = "#"
NEWLINE = "\n"
STRING_BOUNDARY = '"'
ESCAPE = "\\"
DECIMAL_POINT = "."

DIGITS: frozenset[str] = frozenset(digits)
IDENTIFIER_START: frozenset[str] = frozenset(ascii_letters + "_")
IDENTIFIER_CHARS: frozenset[str] = IDENTIFIER_START | DIGITS | frozenset("-?!")
PUNCTUATION_CHARS: frozenset[str] = frozenset(",:;(){}[]")
OPERATOR_CHARS: frozenset[str] = frozenset("+-*/%=&|<>!~^")

# Binding powers, higher binds tighter
PRECEDENCE: dict[str, int] = {
    "=": 1,
    "||": 5,
    "&&": 10,
    "<": 15,
    ">": 15,
    "<=": 15,
    ">=": 15,
    "==": 15,
    "!=": 15,
    "+": 20,
    "-": 20,
    "*": 25,
    "/": 25,
    "%": 25,
}

ASSIGN_OPERATOR = "="
SIGN_OPERATORS: tuple[str, ...] = ("-", "+")
NEGATE_OPERATOR = "-"

__all__ = [
    "ASSIGN_OPERATOR",
    "COMMENT_MARKER",
    "DECIMAL_POINT",
    "DIGITS",
    "ESCAPE",
    "IDENTIFIER",
    "IDENTIFIER_CHARS",
    "IDENTIFIER_START",
    "KEYWORD",
    "KEYWORDS",
    "NEGATE_OPERATOR",
    "NEWLINE",
    "NUMBER",
    "OPERATOR",
    "OPERATOR_CHARS",
    "PRECEDENCE",
    "PUNCTUATION",
    "PUNCTUATION_CHARS",
    "SIGN_OPERATORS",
    "STRING",
    "STRING_BOUNDARY",
    "TOKEN_KINDS",
    "WHITESPACE",
]
