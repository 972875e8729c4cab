"""
Game Store for the Mastermind lobby

Owns every live single-board game: its secret, its history and its outcome.
All state is process-local and is lost on restart.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence

from mastermind.config.game_settings import get_game_settings
from mastermind.core.colors import Codeword, Color
from mastermind.core.errors import ErrorCode, InvalidArgumentError, InvalidStateError, NotFoundError
from mastermind.core.models import Game, GuessAttempt
from mastermind.services.concurrency_control_service import ConcurrencyControlService

logger = logging.getLogger(__name__)


class GameStore:
    """Manages game creation, guessing and removal with thread-safe operations."""

    def __init__(self, game_logic_service, solver_service, game_settings=None):
        self.game_logic = game_logic_service
        self.solver = solver_service
        self.game_settings = game_settings or get_game_settings()
        self._games: Dict[str, Game] = {}
        self._games_lock = threading.RLock()
        # Per-game locks keep each game's history in submission order
        self.concurrency_control = ConcurrencyControlService()

    def _get_or_raise(self, game_id: str) -> Game:
        game = self._games.get(game_id)
        if game is None:
            raise NotFoundError(ErrorCode.GAME_NOT_FOUND, f"Game not found: {game_id}", {'game_id': game_id})
        return game

    def _register(self, game: Game) -> Game:
        with self._games_lock:
            self._games[game.id] = game
        logger.info(f"Created game {game.id} with {game.slot_count} slots")
        return game.snapshot()

    def create_game(self, slot_count: Optional[int] = None) -> Game:
        """
        Create a new game with a freshly generated secret.

        Args:
            slot_count: Number of slots; the configured default when omitted

        Returns:
            Snapshot of the new game

        Raises:
            InvalidArgumentError: If slot_count is not positive
        """
        if slot_count is None:
            slot_count = self.game_settings.default_slot_count
        secret = self.game_logic.generate_secret(slot_count)
        return self._register(Game(secret=secret, slot_count=slot_count))

    def create_game_with_secret(self, slot_count: int, secret: Sequence[Color]) -> Game:
        """
        Create a game whose secret was chosen by a player.

        Args:
            slot_count: Number of slots
            secret: The code the opponent will have to find

        Returns:
            Snapshot of the new game

        Raises:
            InvalidArgumentError: If slot_count is not positive or the secret is malformed
        """
        if slot_count <= 0:
            raise InvalidArgumentError(
                ErrorCode.INVALID_SLOT_COUNT,
                "Slot count must be positive",
                {'slot_count': slot_count}
            )
        if not self.game_logic.is_valid_guess(secret, slot_count):
            raise InvalidArgumentError(
                ErrorCode.INVALID_GUESS,
                f"Invalid secret: must contain {slot_count} valid colors",
                {'slot_count': slot_count}
            )
        return self._register(Game(secret=tuple(secret), slot_count=slot_count))

    def get_game(self, game_id: str) -> Optional[Game]:
        """
        Get a game by ID.

        Returns:
            Snapshot of the game, or None if not found
        """
        game = self._games.get(game_id)
        return game.snapshot() if game else None

    def submit_guess(self, game_id: str, guess: Sequence[Color]) -> Game:
        """
        Score a guess and append it to the game's history.

        Args:
            game_id: The unique game identifier
            guess: The colors in the guess

        Returns:
            Snapshot of the updated game

        Raises:
            NotFoundError: If the game does not exist
            InvalidStateError: If the game is already over
            InvalidArgumentError: If the guess is incomplete or has unknown colors
        """
        game = self._get_or_raise(game_id)

        with self.concurrency_control.key_operation(game_id):
            if game.game_over:
                raise InvalidStateError(ErrorCode.GAME_OVER, "Game is already over", {'game_id': game_id})

            if not self.game_logic.is_valid_guess(guess, game.slot_count):
                raise InvalidArgumentError(
                    ErrorCode.INVALID_GUESS,
                    f"Invalid guess: must contain {game.slot_count} valid colors",
                    {'game_id': game_id}
                )

            guess = tuple(guess)
            feedback = self.game_logic.evaluate_guess(game.secret, guess)
            game.add_guess_attempt(GuessAttempt(guess=guess, feedback=feedback))

            if game.won:
                logger.info(f"Game {game_id} won after {len(game.history)} guesses")
            return game.snapshot()

    def get_game_solution(self, game_id: str) -> Optional[Codeword]:
        """Reveal the secret (spoiler feature). None if the game does not exist."""
        game = self._games.get(game_id)
        return game.secret if game else None

    def reset_game(self, game_id: str) -> Optional[Game]:
        """
        Restart a game with a new secret, keeping its id and slot count.

        Returns:
            Snapshot of the reset game, or None if not found
        """
        game = self._games.get(game_id)
        if game is None:
            return None

        with self.concurrency_control.key_operation(game_id):
            game.secret = self.game_logic.generate_secret(game.slot_count)
            game.history.clear()
            game.game_over = False
            game.won = False
            logger.info(f"Reset game {game_id}")
            return game.snapshot()

    def delete_game(self, game_id: str) -> bool:
        """
        Remove a game.

        Returns:
            True if the game was removed, False if it did not exist
        """
        with self._games_lock:
            removed = self._games.pop(game_id, None)
        if removed is None:
            return False
        self.concurrency_control.cleanup_lock(game_id)
        logger.info(f"Deleted game {game_id}")
        return True

    def suggest_guess(self, game_id: str) -> Optional[Codeword]:
        """
        Suggest a guess compatible with the game's history.

        The search is exhaustive; see SolverService for its cost. Slot counts
        above the configured bound still run but may take very long.

        Raises:
            NotFoundError: If the game does not exist
        """
        game = self._get_or_raise(game_id)
        with self.concurrency_control.key_operation(game_id):
            history = list(game.history)
            slot_count = game.slot_count

        if not self.solver.is_feasible(slot_count):
            logger.warning(f"Suggestion requested for game {game_id} with {slot_count} slots; search may be very slow")
        return self.solver.suggest_guess(history, slot_count)

    def get_active_game_count(self) -> int:
        return len(self._games)

    def get_all_game_ids(self) -> List[str]:
        with self._games_lock:
            return list(self._games.keys())

    def get_available_colors(self) -> List[Color]:
        return self.game_logic.get_available_colors()
