"""
Lobby Data Factory

Provides factory methods for codewords, guess histories and logged-in
players with consistent, readable values.
"""

import random
import string
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from mastermind.core.colors import Color
from mastermind.core.models import GuessAttempt

R, B, G, Y, P, C = Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW, Color.PURPLE, Color.CYAN


class CodewordFactory:
    """Factory for creating codewords and histories"""

    @staticmethod
    def codeword(*names: str) -> Tuple[Color, ...]:
        """codeword('red', 'blue') -> (Color.RED, Color.BLUE)"""
        return tuple(Color.from_value(name) for name in names)

    @staticmethod
    def random_codeword(slot_count: int = 4, seed=None) -> Tuple[Color, ...]:
        rng = random.Random(seed)
        return tuple(rng.choice(list(Color)) for _ in range(slot_count))

    @staticmethod
    def history_for(secret: Sequence[Color], guesses: Sequence[Sequence[Color]], game_logic) -> List[GuessAttempt]:
        """Score each guess against secret and return the resulting history."""
        return [
            GuessAttempt(guess=tuple(guess), feedback=game_logic.evaluate_guess(secret, guess))
            for guess in guesses
        ]


class PlayerFactory:
    """Factory for logged-in lobby players"""

    @staticmethod
    def generate_nickname(prefix: str = 'Player') -> str:
        suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=6))
        return f"{prefix}_{suffix}"

    @classmethod
    def login_players(cls, session_service, count: int = 2, prefix: str = 'Player') -> list:
        return [session_service.login(f"{prefix}{i + 1}") for i in range(count)]

    @staticmethod
    def age_session(session_service, session_id: str, minutes: int) -> None:
        """Push a session's last activity into the past."""
        session_service._sessions[session_id].last_activity = datetime.now() - timedelta(minutes=minutes)

    @staticmethod
    def age_invitation(invitation_service, invitation_id: str, minutes: int) -> None:
        """Push an invitation's creation time into the past."""
        invitation_service._invitations[invitation_id].created_at = datetime.now() - timedelta(minutes=minutes)
