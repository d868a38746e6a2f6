"""
Defines the abstract syntax tree (AST) node variants for the RULEX language.

Classes:
    ASTNode:
        Base of every composite node. Provides structural equality, a readable
        repr, and conversion to a tagged dictionary.
    Block, Call, Rule, BinaryExpr, Assign, BoolLiteral:
        The closed set of composite node variants.

Leaf values (`number`, `string` and `identifier` tokens) are carried through
unchanged as `Token` instances, so `Node` is the union of the composite
variants and `Token`.

Every node serializes to a dictionary whose `type` key names the variant and
whose remaining keys are the variant's fields:

    block   body
    call    callee, args
    rule    name, params, body
    binary  op, left, right
    assign  left, right
    bool    value

Example:
    >>> BinaryExpr("+", Token("number", 1.0), Token("number", 2.0)).to_dict()
    {'type': 'binary', 'op': '+', 'left': {'type': 'number', 'value': 1.0}, 'right': {'type': 'number', 'value': 2.0}}
"""

from collections.abc import Iterable
from typing import Any, Union

from rulex.rulex_lexer import Token


class ASTNode:
    """
    Base class for composite RULEX syntax nodes.

    Subclasses declare `kind` (the serialized type tag) and `fields` (the
    ordered names of their attributes). Nodes own their children and are
    immutable: fields are set once through `_freeze` and child sequences are
    stored as tuples.
    """

    kind: str = ""
    fields: tuple[str, ...] = ()

    def _freeze(self, *values: Any) -> None:
        for name, value in zip(self.fields, values):
            object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(
            f"{type(self).__name__} is immutable; cannot set {name!r}"
        )

    def __delattr__(self, name: str) -> None:
        raise AttributeError(
            f"{type(self).__name__} is immutable; cannot delete {name!r}"
        )

    def __repr__(self) -> str:
        parts = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.fields)
        return f"{type(self).__name__}({parts})"

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return False
        return all(getattr(self, name) == getattr(other, name) for name in self.fields)

    def __hash__(self) -> int:
        return hash((type(self), tuple(getattr(self, name) for name in self.fields)))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind}
        for name in self.fields:
            data[name] = _serialize(getattr(self, name))
        return data


class Block(ASTNode):
    """A braced sequence of two or more (or zero) statements."""

    kind = "block"
    fields = ("body",)
    body: tuple["Node", ...]

    def __init__(self, body: Iterable["Node"]) -> None:
        self._freeze(tuple(body))


class Call(ASTNode):
    """Invocation of `callee` with fully parsed argument expressions."""

    kind = "call"
    fields = ("callee", "args")
    callee: "Node"
    args: tuple["Node", ...]

    def __init__(self, callee: "Node", args: Iterable["Node"]) -> None:
        self._freeze(callee, tuple(args))


class Rule(ASTNode):
    """A rule declaration. `name` is None for anonymous rules."""

    kind = "rule"
    fields = ("name", "params", "body")
    name: str | None
    params: tuple[str, ...]
    body: "Node"

    def __init__(self, name: str | None, params: Iterable[str], body: "Node") -> None:
        self._freeze(name, tuple(params), body)


class BinaryExpr(ASTNode):
    kind = "binary"
    fields = ("op", "left", "right")
    op: str
    left: "Node"
    right: "Node"

    def __init__(self, op: str, left: "Node", right: "Node") -> None:
        self._freeze(op, left, right)


class Assign(ASTNode):
    """Assignment. Shaped like BinaryExpr but kept apart from arithmetic."""

    kind = "assign"
    fields = ("left", "right")
    left: "Node"
    right: "Node"

    def __init__(self, left: "Node", right: "Node") -> None:
        self._freeze(left, right)


class BoolLiteral(ASTNode):
    kind = "bool"
    fields = ("value",)
    value: bool

    def __init__(self, value: bool) -> None:
        self._freeze(value)


Node = Union[Block, Call, Rule, BinaryExpr, Assign, BoolLiteral, Token]
"""Any node that may appear in a RULEX syntax tree."""


def _serialize(value: Any) -> Any:
    if isinstance(value, (ASTNode, Token)):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    return value


def to_dict(program: list[Node]) -> list[dict[str, Any]]:
    """Serializes a parsed program into a JSON-compatible list of dicts."""
    return [node.to_dict() for node in program]


__all__ = [
    "ASTNode",
    "Assign",
    "BinaryExpr",
    "Block",
    "BoolLiteral",
    "Call",
    "Node",
    "Rule",
    "to_dict",
]
