"""Errors raised by the Flowgo DSL front end."""

CONTEXT_RADIUS = 20


class DSLSyntaxError(ValueError):
    """Raised on the first unexpected token, character or end of input.

    Attributes:
        message: What the parser expected and what it found.
        position: Absolute character offset into the preprocessed source
            (comments stripped, whitespace collapsed).
        context: Up to ``CONTEXT_RADIUS`` characters on each side of the
            offending position, with the offending character bracketed.
    """

    def __init__(self, message: str, position: int, context: str = ""):
        self.message = message
        self.position = position
        self.context = context
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.context:
            return f'{self.message} at position {self.position} (context: "{self.context}")'
        return f"{self.message} at position {self.position}"

    @classmethod
    def at(cls, message: str, source: str, position: int) -> "DSLSyntaxError":
        """Build an error with a context window cut from ``source``."""
        return cls(message, position, error_context(source, position))


def error_context(source: str, position: int, radius: int = CONTEXT_RADIUS) -> str:
    """Return ``before[char]after`` around ``position``; ``[EOF]`` past the end."""
    start = max(0, position - radius)
    end = min(len(source), position + radius + 1)
    char = source[position] if position < len(source) else "EOF"
    return f"{source[start:position]}[{char}]{source[position + 1:end]}"
