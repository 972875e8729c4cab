"""
Solver Service - Suggests a guess consistent with a game's history.

The search is exhaustive: colors ** slot_count candidates, each checked
against every historical attempt. That is cheap for the standard six colors
and up to about six slots, and grows out of reach quickly beyond that.
Callers should treat larger slot counts as infeasible for suggestions even
though play itself has no such limit.
"""

import itertools
import logging
from typing import Optional, Sequence

from mastermind.core.colors import Codeword
from mastermind.core.models import GuessAttempt

logger = logging.getLogger(__name__)


class SolverService:
    """Brute-force compatible-guess search."""

    def __init__(self, game_logic_service, game_settings=None):
        """Initialize the solver.

        Args:
            game_logic_service: Scoring engine used to replay history
            game_settings: Optional settings providing the feasibility bound
        """
        self.game_logic = game_logic_service
        if game_settings is None:
            from mastermind.config.game_settings import get_game_settings
            game_settings = get_game_settings()
        self.game_settings = game_settings

    def is_feasible(self, slot_count: int) -> bool:
        """Whether a suggestion search for this slot count is practical."""
        return 0 < slot_count <= self.game_settings.max_suggestion_slot_count

    def is_compatible(self, candidate: Codeword, history: Sequence[GuessAttempt]) -> bool:
        """
        Check whether candidate, taken as the secret, reproduces every recorded feedback.

        Args:
            candidate: Hypothetical secret
            history: Previous guess attempts

        Returns:
            True if scoring each historical guess against candidate gives the same feedback
        """
        for attempt in history:
            if self.game_logic.evaluate_guess(candidate, attempt.guess) != attempt.feedback:
                return False
        return True

    def suggest_guess(self, history: Sequence[GuessAttempt], slot_count: int) -> Optional[Codeword]:
        """
        Find the first codeword compatible with all previous attempts.

        Candidates are enumerated lexicographically by color order with the
        first slot varying slowest, so the result is deterministic.

        Args:
            history: Previous guess attempts (guess + feedback pairs)
            slot_count: Number of slots in the guess

        Returns:
            A compatible codeword, or None when the history admits no secret
        """
        colors = self.game_logic.get_available_colors()
        for candidate in itertools.product(colors, repeat=slot_count):
            if self.is_compatible(candidate, history):
                return candidate

        logger.debug(f"No compatible codeword for {len(history)} attempts over {slot_count} slots")
        return None
