"""
Game Logic Service - Core Mastermind rules.

This service handles:
- Secret generation from a cryptographically strong source
- Guess scoring (exact and partial matches)
- Guess shape validation and win detection
"""

import logging
import secrets
from typing import Iterable, List, Optional, Sequence, Tuple

from mastermind.core.colors import Codeword, Color
from mastermind.core.errors import ErrorCode, InvalidArgumentError
from mastermind.core.models import Feedback

logger = logging.getLogger(__name__)

AVAILABLE_COLORS: Tuple[Color, ...] = tuple(Color)


class GameLogicService:
    """Stateless scoring engine; safe to share between threads."""

    def __init__(self):
        self._random = secrets.SystemRandom()

    def generate_secret(self, slot_count: int) -> Codeword:
        """
        Draw a random secret code.

        Args:
            slot_count: Number of slots in the secret code

        Returns:
            Tuple of independently, uniformly chosen colors

        Raises:
            InvalidArgumentError: If slot_count is not positive
        """
        if slot_count <= 0:
            raise InvalidArgumentError(
                ErrorCode.INVALID_SLOT_COUNT,
                "Slot count must be positive",
                {'slot_count': slot_count}
            )
        return tuple(self._random.choice(AVAILABLE_COLORS) for _ in range(slot_count))

    def evaluate_guess(self, secret: Optional[Sequence[Color]], guess: Optional[Sequence[Color]]) -> Feedback:
        """
        Score a guess against a secret.

        Exact matches are counted and consumed first. Each remaining guess peg,
        left to right, then consumes the first unconsumed secret peg of the same
        color, which caps partial matches by color multiplicity.

        Args:
            secret: The code being guessed
            guess: The player's guess

        Returns:
            Feedback with exact and partial counts

        Raises:
            InvalidArgumentError: If either side is missing or the lengths differ
        """
        if secret is None or guess is None:
            raise InvalidArgumentError(ErrorCode.INVALID_GUESS, "Secret and guess cannot be None")

        if len(secret) != len(guess):
            raise InvalidArgumentError(
                ErrorCode.INVALID_GUESS,
                "Secret and guess must have same length",
                {'secret_length': len(secret), 'guess_length': len(guess)}
            )

        # Working copies; None marks a consumed position
        remaining_secret: List[Optional[Color]] = list(secret)
        remaining_guess: List[Optional[Color]] = list(guess)

        exact = 0
        for i, color in enumerate(remaining_guess):
            if color is not None and color == remaining_secret[i]:
                exact += 1
                remaining_secret[i] = None
                remaining_guess[i] = None

        partial = 0
        for color in remaining_guess:
            if color is None:
                continue
            for j, secret_color in enumerate(remaining_secret):
                if secret_color == color:
                    partial += 1
                    remaining_secret[j] = None
                    break

        return Feedback(exact=exact, partial=partial)

    def is_winning_guess(self, feedback: Feedback, slot_count: int) -> bool:
        return feedback.exact == slot_count

    def is_valid_guess(self, guess: Optional[Sequence], expected_length: int) -> bool:
        """
        Check that a guess has the expected length and only known colors.

        Args:
            guess: The guess to validate
            expected_length: Expected number of colors in the guess

        Returns:
            True if the guess is complete and well-formed
        """
        if guess is None or len(guess) != expected_length:
            return False
        return all(isinstance(color, Color) for color in guess)

    def get_available_colors(self) -> List[Color]:
        """All colors in their stable declaration order."""
        return list(AVAILABLE_COLORS)

    def parse_codeword(self, values: Optional[Iterable]) -> Codeword:
        """
        Convert color names (or Colors) into a codeword.

        Raises:
            InvalidArgumentError: If values is missing or names an unknown color
        """
        if values is None:
            raise InvalidArgumentError(ErrorCode.INVALID_GUESS, "Codeword cannot be None")
        return tuple(Color.from_value(value) for value in values)
