"""
Lobby State Presenter - Plain-data views of core entities.

This service provides canonical transformations for data handed to the
transport layer, ensuring consistent payload shapes and keeping secrets out
of everything except the explicit solution view.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from mastermind.core.colors import Color
from mastermind.core.models import Game, GameMatch, GuessAttempt, Invitation

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _colors(codeword: Sequence[Color]) -> List[str]:
    return [color.value for color in codeword]


class LobbyStatePresenter:
    """Centralized service for transforming core entities into client payloads."""

    def present_colors(self, colors: Sequence[Color]) -> List[str]:
        return _colors(colors)

    def present_attempt(self, attempt: GuessAttempt) -> Dict[str, Any]:
        return {
            'guess': _colors(attempt.guess),
            'feedback': {
                'exact': attempt.feedback.exact,
                'partial': attempt.feedback.partial
            }
        }

    def present_game(self, game: Game) -> Dict[str, Any]:
        """Create a game view for client consumption.

        Args:
            game: Game snapshot from the game store

        Returns:
            Dict without the secret
        """
        return {
            'id': game.id,
            'slot_count': game.slot_count,
            'history': [self.present_attempt(attempt) for attempt in game.history],
            'game_over': game.game_over,
            'won': game.won,
            'created_at': _iso(game.created_at)
        }

    def present_solution(self, game_id: str, secret: Sequence[Color]) -> Dict[str, Any]:
        """The spoiler view; the only payload that exposes a secret."""
        return {
            'id': game_id,
            'solution': _colors(secret)
        }

    def present_player_list(self, players: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            'players': players,
            'count': len(players)
        }

    def present_invitation(self, invitation: Invitation, message: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            'invitation_id': invitation.invitation_id,
            'from_nickname': invitation.from_nickname,
            'to_nickname': invitation.to_nickname,
            'status': invitation.status.value,
            'created_at': _iso(invitation.created_at),
            'responded_at': _iso(invitation.responded_at)
        }
        if message:
            payload['message'] = message
        return payload

    def present_match(self, match: GameMatch, message: Optional[str] = None) -> Dict[str, Any]:
        """Create a match view for client consumption.

        Args:
            match: Match snapshot from the match service
            message: Optional human-readable status line

        Returns:
            Dict describing both players' readiness and game ids
        """
        payload = {
            'match_id': match.match_id,
            'player1_nickname': match.player1_nickname,
            'player2_nickname': match.player2_nickname,
            'player1_game_id': match.player1_game_id,
            'player2_game_id': match.player2_game_id,
            'player1_ready': match.player1_ready,
            'player2_ready': match.player2_ready,
            'status': match.status.value,
            'created_at': _iso(match.created_at),
            'started_at': _iso(match.started_at),
            'finished_at': _iso(match.finished_at)
        }
        if message:
            payload['message'] = message
        return payload
