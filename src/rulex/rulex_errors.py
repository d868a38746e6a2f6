"""
Error type raised by every stage of the RULEX front end.

Classes:
    RulexSyntaxError: A positioned syntax error. Subclasses the built-in
        `SyntaxError` so callers catching `SyntaxError` see it too.
"""


class RulexSyntaxError(SyntaxError):
    """Raised on the first malformed input encountered while lexing or parsing.

    The position is captured where the error originates (the character stream)
    and is never reconstructed afterwards.

    Attributes:
        line (int): 1-based line of the offending input.
        column (int): 0-based column of the offending input.
        message (str): Human-readable description without the position prefix.

    Example:
        >>> str(RulexSyntaxError(2, 4, "Expected an identifier"))
        'at (2:4): Expected an identifier'
    """

    def __init__(self, line: int, column: int, message: str) -> None:
        super().__init__(f"at ({line}:{column}): {message}")
        self.line = line
        self.column = column
        self.message = message

    @property
    def position(self) -> tuple[int, int]:
        return self.line, self.column
