"""
Domain models for the Mastermind lobby

Games, sessions, invitations and matches are plain dataclasses owned by the
service that stores them. Services hand out snapshots, never the stored
instance.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
import uuid

from mastermind.core.colors import Codeword
from mastermind.core.errors import ErrorCode, InvalidArgumentError


def _new_id() -> str:
    return str(uuid.uuid4())


def nickname_key(nickname: Optional[str]) -> str:
    """
    Index key for a nickname: trimmed and lower-cased.

    Every registry keys players by this value, so " Alice" and "alice"
    are the same player everywhere.

    Raises:
        InvalidArgumentError: If the nickname is missing or blank
    """
    key = (nickname or '').strip().lower()
    if not key:
        raise InvalidArgumentError(ErrorCode.INVALID_NICKNAME, "Nickname cannot be blank")
    return key


class PlayerStatus(Enum):
    """Lobby presence of a connected player."""
    AVAILABLE = "AVAILABLE"
    IN_GAME = "IN_GAME"
    AWAY = "AWAY"

    def can_transition_to(self, target: 'PlayerStatus') -> bool:
        return target in _PLAYER_TRANSITIONS[self]


class InvitationStatus(Enum):
    """Invitation lifecycle. Everything except PENDING is terminal."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not InvitationStatus.PENDING

    def can_transition_to(self, target: 'InvitationStatus') -> bool:
        return target in _INVITATION_TRANSITIONS[self]


class MatchStatus(Enum):
    """Match lifecycle."""
    SETUP = "SETUP"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"

    def can_transition_to(self, target: 'MatchStatus') -> bool:
        return target in _MATCH_TRANSITIONS[self]


# Every member must appear as a key; a missing one raises KeyError on lookup
_PLAYER_TRANSITIONS: Dict[PlayerStatus, FrozenSet[PlayerStatus]] = {
    PlayerStatus.AVAILABLE: frozenset({PlayerStatus.IN_GAME, PlayerStatus.AWAY}),
    PlayerStatus.IN_GAME: frozenset({PlayerStatus.AVAILABLE}),
    PlayerStatus.AWAY: frozenset({PlayerStatus.AVAILABLE}),
}

_INVITATION_TRANSITIONS: Dict[InvitationStatus, FrozenSet[InvitationStatus]] = {
    InvitationStatus.PENDING: frozenset({
        InvitationStatus.ACCEPTED,
        InvitationStatus.DECLINED,
        InvitationStatus.EXPIRED,
        InvitationStatus.CANCELLED,
    }),
    InvitationStatus.ACCEPTED: frozenset(),
    InvitationStatus.DECLINED: frozenset(),
    InvitationStatus.EXPIRED: frozenset(),
    InvitationStatus.CANCELLED: frozenset(),
}

_MATCH_TRANSITIONS: Dict[MatchStatus, FrozenSet[MatchStatus]] = {
    MatchStatus.SETUP: frozenset({MatchStatus.PLAYING}),
    MatchStatus.PLAYING: frozenset({MatchStatus.FINISHED}),
    MatchStatus.FINISHED: frozenset(),
}


@dataclass(frozen=True)
class Feedback:
    """Exact and partial match counts for one scored guess."""
    exact: int
    partial: int


@dataclass(frozen=True)
class GuessAttempt:
    """One historical turn: the guess and the feedback it received."""
    guess: Codeword
    feedback: Feedback


@dataclass
class Game:
    """A single board: secret, history and outcome."""
    secret: Codeword
    slot_count: int
    id: str = field(default_factory=_new_id)
    history: List[GuessAttempt] = field(default_factory=list)
    game_over: bool = False
    won: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    def add_guess_attempt(self, attempt: GuessAttempt) -> None:
        """Append an attempt and record a win when every slot matched."""
        self.history.append(attempt)
        if attempt.feedback.exact == self.slot_count:
            self.won = True
            self.game_over = True

    def snapshot(self) -> 'Game':
        return replace(self, history=list(self.history))

    def __repr__(self) -> str:
        # Keep the secret out of logs
        return (f"Game(id={self.id!r}, slot_count={self.slot_count}, "
                f"game_over={self.game_over}, won={self.won}, history_size={len(self.history)})")


@dataclass
class PlayerSession:
    session_id: str
    nickname: str
    status: PlayerStatus = PlayerStatus.AVAILABLE
    connected_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> str:
        return nickname_key(self.nickname)

    def update_activity(self) -> None:
        self.last_activity = datetime.now()

    def snapshot(self) -> 'PlayerSession':
        return replace(self)


@dataclass
class Invitation:
    from_nickname: str
    to_nickname: str
    invitation_id: str = field(default_factory=_new_id)
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    responded_at: Optional[datetime] = None

    def involves(self, nickname: str) -> bool:
        key = nickname_key(nickname)
        return nickname_key(self.from_nickname) == key or nickname_key(self.to_nickname) == key

    def snapshot(self) -> 'Invitation':
        return replace(self)


@dataclass
class GameMatch:
    """Two players paired for a head-to-head game.

    The game ids are back-references into the game store; the match does not
    own those games.
    """
    player1_nickname: str
    player2_nickname: str
    match_id: str = field(default_factory=_new_id)
    player1_game_id: Optional[str] = None
    player2_game_id: Optional[str] = None
    player1_ready: bool = False
    player2_ready: bool = False
    status: MatchStatus = MatchStatus.SETUP
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def both_ready(self) -> bool:
        return self.player1_ready and self.player2_ready

    def is_player1(self, nickname: str) -> bool:
        return nickname_key(self.player1_nickname) == nickname_key(nickname)

    def is_player2(self, nickname: str) -> bool:
        return nickname_key(self.player2_nickname) == nickname_key(nickname)

    def has_player(self, nickname: str) -> bool:
        return self.is_player1(nickname) or self.is_player2(nickname)

    def opponent_of(self, nickname: str) -> Optional[str]:
        if self.is_player1(nickname):
            return self.player2_nickname
        if self.is_player2(nickname):
            return self.player1_nickname
        return None

    def snapshot(self) -> 'GameMatch':
        return replace(self)
