"""
Core error definitions for the Mastermind lobby

Provides error kinds, fine-grained error codes and the exception hierarchy
raised by every service. None of these are fatal; the transport layer maps
each kind to a user-visible status.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Broad categories callers branch on."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    INVALID_STATE = "INVALID_STATE"


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Malformed input
    INVALID_SLOT_COUNT = "INVALID_SLOT_COUNT"
    INVALID_GUESS = "INVALID_GUESS"
    INVALID_COLOR = "INVALID_COLOR"
    INVALID_NICKNAME = "INVALID_NICKNAME"
    SELF_CHALLENGE = "SELF_CHALLENGE"

    # Missing entities
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"

    # Collisions
    NICKNAME_TAKEN = "NICKNAME_TAKEN"

    # Lifecycle violations
    GAME_OVER = "GAME_OVER"
    PLAYER_NOT_CONNECTED = "PLAYER_NOT_CONNECTED"
    DUPLICATE_INVITATION = "DUPLICATE_INVITATION"
    INVITATION_NOT_PENDING = "INVITATION_NOT_PENDING"
    ALREADY_IN_MATCH = "ALREADY_IN_MATCH"
    NOT_IN_MATCH = "NOT_IN_MATCH"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"


class MastermindError(Exception):
    """Base exception for every recoverable precondition failure."""

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation for the transport layer."""
        return {
            'code': self.code.value,
            'kind': self.kind.value,
            'message': self.message,
            'details': dict(self.details)
        }


class InvalidArgumentError(MastermindError):
    """Malformed input: bad slot count, incomplete guess, unknown color."""

    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(MastermindError):
    """Referenced game, invitation, session or match does not exist."""

    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(MastermindError):
    """Nickname collision."""

    kind = ErrorKind.ALREADY_EXISTS


class InvalidStateError(MastermindError):
    """Operation is not legal in the entity's current lifecycle state."""

    kind = ErrorKind.INVALID_STATE
