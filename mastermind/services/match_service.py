"""
Match Service - Pairs two lobby players into a head-to-head match.

A match is created in SETUP, moves to PLAYING once both players have set a
secret, and to FINISHED when a player cracks the opponent's code. Each
nickname belongs to at most one match at a time.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, Optional

from mastermind.core.errors import (
    ErrorCode,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from mastermind.core.models import GameMatch, MatchStatus, nickname_key

logger = logging.getLogger(__name__)


class MatchService:
    """Manages matches and the nickname -> match index."""

    def __init__(self):
        self._matches: Dict[str, GameMatch] = {}
        # nickname_key(nickname) -> match_id
        self._nickname_index: Dict[str, str] = {}
        self._lock = threading.RLock()

    def _remove(self, match: GameMatch) -> None:
        """Drop a match and both index entries. Caller holds the lock."""
        self._matches.pop(match.match_id, None)
        for nickname in (match.player1_nickname, match.player2_nickname):
            key = nickname_key(nickname)
            if self._nickname_index.get(key) == match.match_id:
                del self._nickname_index[key]

    def create_match(self, player1_nickname: str, player2_nickname: str) -> GameMatch:
        """
        Create a match between two players.

        Raises:
            InvalidArgumentError: If both nicknames are the same player
            InvalidStateError: If either player is already in a match
        """
        key1, key2 = nickname_key(player1_nickname), nickname_key(player2_nickname)
        if key1 == key2:
            raise InvalidArgumentError(ErrorCode.SELF_CHALLENGE, "A player cannot be matched against themselves")

        with self._lock:
            for nickname, key in ((player1_nickname, key1), (player2_nickname, key2)):
                if key in self._nickname_index:
                    raise InvalidStateError(
                        ErrorCode.ALREADY_IN_MATCH,
                        f"{nickname} is already in a match",
                        {'nickname': nickname}
                    )
            match = GameMatch(player1_nickname=player1_nickname.strip(),
                              player2_nickname=player2_nickname.strip())
            self._matches[match.match_id] = match
            self._nickname_index[key1] = match.match_id
            self._nickname_index[key2] = match.match_id

        logger.info(f"Created match {match.match_id}: {match.player1_nickname} vs {match.player2_nickname}")
        return match.snapshot()

    def set_player_game(self, nickname: str, game_id: str) -> GameMatch:
        """
        Record the game holding this player's secret and mark them ready.

        The match starts when the second player becomes ready. Secrets are
        fixed from then on.

        Raises:
            InvalidStateError: If the player has no match, the match is gone,
                the player is not part of it, or the match has left SETUP
        """
        with self._lock:
            match_id = self._nickname_index.get(nickname_key(nickname))
            if match_id is None:
                raise InvalidStateError(ErrorCode.NOT_IN_MATCH, "Player is not in a match",
                                        {'nickname': nickname})

            match = self._matches.get(match_id)
            if match is None:
                raise InvalidStateError(ErrorCode.MATCH_NOT_FOUND, "Match not found",
                                        {'match_id': match_id})

            if match.status is not MatchStatus.SETUP:
                raise InvalidStateError(
                    ErrorCode.ILLEGAL_TRANSITION,
                    f"Cannot set a secret in a match with status {match.status.value}",
                    {'match_id': match_id}
                )

            if match.is_player1(nickname):
                match.player1_game_id = game_id
                match.player1_ready = True
            elif match.is_player2(nickname):
                match.player2_game_id = game_id
                match.player2_ready = True
            else:
                raise InvalidStateError(ErrorCode.NOT_IN_MATCH, "Player not in this match",
                                        {'nickname': nickname, 'match_id': match_id})

            if match.both_ready:
                match.status = MatchStatus.PLAYING
                match.started_at = datetime.now()
                logger.info(f"Match {match_id} started")

            return match.snapshot()

    def finish_match(self, match_id: str) -> GameMatch:
        """
        Mark a playing match as finished. The match stays indexed until ended.

        Raises:
            NotFoundError: If the match does not exist
            InvalidStateError: If the match is not PLAYING
        """
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                raise NotFoundError(ErrorCode.MATCH_NOT_FOUND, "Match not found", {'match_id': match_id})
            if not match.status.can_transition_to(MatchStatus.FINISHED):
                raise InvalidStateError(
                    ErrorCode.ILLEGAL_TRANSITION,
                    f"Cannot finish a match in status {match.status.value}",
                    {'match_id': match_id}
                )
            match.status = MatchStatus.FINISHED
            match.finished_at = datetime.now()
            logger.info(f"Match {match_id} finished")
            return match.snapshot()

    def get_match(self, match_id: str) -> Optional[GameMatch]:
        match = self._matches.get(match_id)
        return match.snapshot() if match else None

    def get_match_by_player(self, nickname: str) -> Optional[GameMatch]:
        with self._lock:
            match_id = self._nickname_index.get(nickname_key(nickname))
            match = self._matches.get(match_id) if match_id else None
            return match.snapshot() if match else None

    def is_player_in_match(self, nickname: str) -> bool:
        return nickname_key(nickname) in self._nickname_index

    def end_match(self, match_id: str) -> Optional[GameMatch]:
        """Remove a match and free both players. No-op if it does not exist."""
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                return None
            self._remove(match)
        logger.info(f"Ended match {match_id}")
        return match.snapshot()

    def cancel_match(self, nickname: str) -> Optional[GameMatch]:
        """Remove the player's match, if any, freeing both players."""
        with self._lock:
            match_id = self._nickname_index.get(nickname_key(nickname))
            match = self._matches.get(match_id) if match_id else None
            if match is None:
                # Drop a dangling index entry
                self._nickname_index.pop(nickname_key(nickname), None)
                return None
            self._remove(match)
        logger.info(f"Cancelled match {match.match_id} for {nickname}")
        return match.snapshot()

    def get_opponent_game_id(self, nickname: str) -> Optional[str]:
        """The game id recorded by the player's opponent, or None."""
        match = self.get_match_by_player(nickname)
        if match is None:
            return None
        if match.is_player1(nickname):
            return match.player2_game_id
        return match.player1_game_id

    def get_active_match_count(self) -> int:
        return len(self._matches)
