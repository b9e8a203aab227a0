"""
Error types for symcalc parsing and definition handling.
"""

from typing import Optional


class SymcalcError(Exception):
    """Base exception for all symcalc errors."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.message = message
        self.position = position
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with the input position if available."""
        if self.position is not None:
            return f"{self.message} (at position {self.position})"
        return self.message


class ParseError(SymcalcError):
    """
    Raised when expression text cannot be parsed.

    Examples:
    - Unidentified character
    - Missing or extra parenthesis
    - Unparseable term
    - Division of an integer by literal zero
    """

    pass


class UnsupportedOperatorError(SymcalcError):
    """
    Raised when an all upper-case identifier names no registered operator.

    Kept apart from ParseError: the input had the shape of a built-in
    operator, only the name is unknown.
    """

    def __init__(self, name: str, position: Optional[int] = None):
        self.name = name
        super().__init__(f"Unsupported operator: {name}", position)


class DefinitionError(SymcalcError):
    """
    Raised when a variable definition is rejected.

    Examples:
    - Assigning to a number or an expression
    - Assigning to an operator name
    """

    pass
