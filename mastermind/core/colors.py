"""
Color Enumeration

Defines the fixed set of peg colors. Declaration order is the stable order
used for listing colors and for the solver's search.
"""

from enum import Enum
from typing import Tuple

from mastermind.core.errors import ErrorCode, InvalidArgumentError


class Color(Enum):
    """Peg color enumeration."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    CYAN = "cyan"

    @classmethod
    def from_value(cls, value) -> 'Color':
        """
        Parse a color from its name, case-insensitively.

        Args:
            value: A Color, or a string such as "red" or "RED"

        Returns:
            The matching Color

        Raises:
            InvalidArgumentError: If the value names no color
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for color in cls:
                if color.value == normalized:
                    return color
        raise InvalidArgumentError(
            ErrorCode.INVALID_COLOR,
            f"Invalid color: {value!r}",
            {'value': repr(value)}
        )

    def __str__(self) -> str:
        return self.value


# A secret or a guess
Codeword = Tuple[Color, ...]
