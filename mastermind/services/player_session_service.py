"""
Player Session Service - Tracks players connected to the lobby.

This service handles:
- Login/logout with case-insensitive nickname uniqueness
- Player listing and status updates
- Activity tracking and the inactivity sweep
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from mastermind.config.game_settings import get_game_settings
from mastermind.core.errors import (
    AlreadyExistsError,
    ErrorCode,
    InvalidArgumentError,
    InvalidStateError,
)
from mastermind.core.models import PlayerSession, PlayerStatus, nickname_key

logger = logging.getLogger(__name__)


class PlayerSessionService:
    """Manages player sessions keyed by session id and by nickname key."""

    def __init__(self, game_settings=None):
        """Initialize the player session service."""
        self.game_settings = game_settings or get_game_settings()
        # session_id -> session
        self._sessions: Dict[str, PlayerSession] = {}
        # nickname_key(nickname) -> session_id
        self._nickname_index: Dict[str, str] = {}
        # Guards both maps; every mutation touches them together
        self._lock = threading.RLock()
        logger.info("PlayerSessionService initialized")

    def _normalize_nickname(self, nickname: Optional[str]) -> str:
        normalized = (nickname or '').strip()
        if not normalized:
            raise InvalidArgumentError(ErrorCode.INVALID_NICKNAME, "Nickname cannot be blank")
        max_length = self.game_settings.max_nickname_length
        if len(normalized) > max_length:
            raise InvalidArgumentError(
                ErrorCode.INVALID_NICKNAME,
                f"Nickname cannot be longer than {max_length} characters",
                {'max_length': max_length}
            )
        return normalized

    def is_nickname_taken(self, nickname: str) -> bool:
        """Check if a nickname is already in use, ignoring case."""
        return nickname_key(nickname) in self._nickname_index

    def is_nickname_connected(self, nickname: str) -> bool:
        """Check if a player with this nickname is logged in."""
        return self.is_nickname_taken(nickname)

    def login(self, nickname: str) -> PlayerSession:
        """Log a player in under a unique nickname.

        Args:
            nickname: Requested nickname; surrounding whitespace is dropped

        Returns:
            Snapshot of the new session, status AVAILABLE

        Raises:
            InvalidArgumentError: If the nickname is blank or too long
            AlreadyExistsError: If the nickname is in use in any letter case
        """
        normalized = self._normalize_nickname(nickname)
        key = nickname_key(normalized)

        with self._lock:
            if key in self._nickname_index:
                raise AlreadyExistsError(
                    ErrorCode.NICKNAME_TAKEN,
                    f"Nickname '{normalized}' is already in use",
                    {'nickname': normalized}
                )
            session = PlayerSession(session_id=str(uuid.uuid4()), nickname=normalized)
            self._sessions[session.session_id] = session
            self._nickname_index[key] = session.session_id

        logger.info(f"Player {normalized} logged in ({session.session_id})")
        return session.snapshot()

    def logout(self, session_id: str) -> Optional[PlayerSession]:
        """Remove a session. Does nothing if it is already gone.

        Returns:
            The removed session or None if not found
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return None
            if self._nickname_index.get(session.key) == session_id:
                del self._nickname_index[session.key]

        logger.info(f"Player {session.nickname} logged out ({session_id})")
        return session.snapshot()

    def get_session(self, session_id: str) -> Optional[PlayerSession]:
        session = self._sessions.get(session_id)
        return session.snapshot() if session else None

    def get_session_by_nickname(self, nickname: str) -> Optional[PlayerSession]:
        with self._lock:
            session_id = self._nickname_index.get(nickname_key(nickname))
            session = self._sessions.get(session_id) if session_id else None
            return session.snapshot() if session else None

    def get_all_active_players(self) -> List[PlayerSession]:
        with self._lock:
            return [session.snapshot() for session in self._sessions.values()]

    def get_active_player_count(self) -> int:
        return len(self._sessions)

    def get_player_list(self, exclude_session_id: Optional[str] = None) -> List[Dict[str, str]]:
        """Get connected players sorted by nickname.

        Args:
            exclude_session_id: Optional session to leave out (usually the caller)

        Returns:
            List of dicts with session_id, nickname and status
        """
        with self._lock:
            sessions = list(self._sessions.values())

        players = [
            {
                'session_id': session.session_id,
                'nickname': session.nickname,
                'status': session.status.value
            }
            for session in sessions
            if exclude_session_id is None or session.session_id != exclude_session_id
        ]
        return sorted(players, key=lambda player: player['nickname'])

    def update_player_status(self, session_id: str, status: PlayerStatus) -> Optional[PlayerSession]:
        """Move a session to a new status.

        Setting the current status again is a no-op.

        Returns:
            Snapshot of the updated session, or None if not found

        Raises:
            InvalidStateError: If the transition is not allowed
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.status is not status:
                if not session.status.can_transition_to(status):
                    raise InvalidStateError(
                        ErrorCode.ILLEGAL_TRANSITION,
                        f"Cannot change player status from {session.status.value} to {status.value}",
                        {'session_id': session_id}
                    )
                logger.debug(f"Player {session.nickname} status {session.status.value} -> {status.value}")
                session.status = status
            return session.snapshot()

    def update_player_status_by_nickname(self, nickname: str, status: PlayerStatus) -> Optional[PlayerSession]:
        session_id = self._nickname_index.get(nickname_key(nickname))
        if session_id is None:
            return None
        return self.update_player_status(session_id, status)

    def update_player_activity(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.update_activity()

    def update_player_activity_by_nickname(self, nickname: str) -> None:
        session_id = self._nickname_index.get(nickname_key(nickname))
        if session_id is not None:
            self.update_player_activity(session_id)

    def _is_stale(self, session: PlayerSession, cutoff_time: datetime) -> bool:
        # Players in a game or away are never swept
        return session.status is PlayerStatus.AVAILABLE and session.last_activity < cutoff_time

    def sweep_inactive_players(self) -> List[PlayerSession]:
        """Log out idle AVAILABLE players and return who was removed.

        Works from a snapshot and re-checks each session under the lock, so
        foreground operations are never blocked for the whole sweep.
        """
        cutoff_time = datetime.now() - timedelta(minutes=self.game_settings.inactive_player_minutes)

        with self._lock:
            candidates = [session.session_id for session in self._sessions.values()
                          if self._is_stale(session, cutoff_time)]

        removed = []
        for session_id in candidates:
            with self._lock:
                session = self._sessions.get(session_id)
                # Activity or status may have changed since the snapshot
                if session is None or not self._is_stale(session, cutoff_time):
                    continue
                removed_session = self.logout(session_id)
            if removed_session:
                removed.append(removed_session)

        if removed:
            logger.debug(f"Swept {len(removed)} inactive session(s)")
        return removed

    def remove_inactive_players(self) -> int:
        """Sweep idle AVAILABLE players.

        Returns:
            Number of sessions removed
        """
        return len(self.sweep_inactive_players())
