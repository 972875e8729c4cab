"""
Invitation Service - Challenge requests between two lobby players.

Invitations start PENDING and move once to ACCEPTED, DECLINED, EXPIRED or
CANCELLED. At most one PENDING invitation exists per unordered pair of
nicknames; a pair index keyed by both nickname keys enforces it.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, List, Optional

from mastermind.config.game_settings import get_game_settings
from mastermind.core.errors import (
    ErrorCode,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from mastermind.core.models import Invitation, InvitationStatus, nickname_key

logger = logging.getLogger(__name__)


def _pair_key(first: str, second: str) -> FrozenSet[str]:
    return frozenset((nickname_key(first), nickname_key(second)))


class InvitationService:
    """Manages invitations and their lifecycle."""

    def __init__(self, player_session_service, game_settings=None):
        self.player_sessions = player_session_service
        self.game_settings = game_settings or get_game_settings()
        self._invitations: Dict[str, Invitation] = {}
        # unordered nickname pair -> id of the PENDING invitation between them
        self._pending_pairs: Dict[FrozenSet[str], str] = {}
        self._lock = threading.RLock()

    def _resolve(self, invitation: Invitation, status: InvitationStatus) -> None:
        """Move a pending invitation to a terminal status. Caller holds the lock."""
        if not invitation.status.can_transition_to(status):
            raise InvalidStateError(
                ErrorCode.INVITATION_NOT_PENDING,
                "Invitation is no longer pending",
                {'invitation_id': invitation.invitation_id, 'status': invitation.status.value}
            )
        invitation.status = status
        invitation.responded_at = datetime.now()
        key = _pair_key(invitation.from_nickname, invitation.to_nickname)
        if self._pending_pairs.get(key) == invitation.invitation_id:
            del self._pending_pairs[key]

    def create_invitation(self, from_nickname: str, to_nickname: str) -> Invitation:
        """
        Invite another connected player to a match.

        Both players are stored under the nickname they logged in with, so
        " alice" and "Alice" name the same sender.

        Raises:
            InvalidArgumentError: If a nickname is blank or a player invites themselves
            InvalidStateError: If either player is not in the lobby, or a pending
                invitation already exists between them in either direction
        """
        if nickname_key(from_nickname) == nickname_key(to_nickname):
            raise InvalidArgumentError(ErrorCode.SELF_CHALLENGE, "Players cannot invite themselves")

        sender = self.player_sessions.get_session_by_nickname(from_nickname)
        if sender is None:
            raise InvalidStateError(ErrorCode.PLAYER_NOT_CONNECTED, "Sender not in lobby",
                                    {'nickname': from_nickname})
        recipient = self.player_sessions.get_session_by_nickname(to_nickname)
        if recipient is None:
            raise InvalidStateError(ErrorCode.PLAYER_NOT_CONNECTED, "Recipient not in lobby",
                                    {'nickname': to_nickname})

        key = _pair_key(sender.nickname, recipient.nickname)
        with self._lock:
            if key in self._pending_pairs:
                raise InvalidStateError(
                    ErrorCode.DUPLICATE_INVITATION,
                    "There is already a pending invitation between these players",
                    {'invitation_id': self._pending_pairs[key]}
                )
            invitation = Invitation(from_nickname=sender.nickname, to_nickname=recipient.nickname)
            self._invitations[invitation.invitation_id] = invitation
            self._pending_pairs[key] = invitation.invitation_id

        logger.info(f"Invitation {invitation.invitation_id} from {sender.nickname} to {recipient.nickname}")
        return invitation.snapshot()

    def _respond(self, invitation_id: str, status: InvitationStatus) -> Invitation:
        with self._lock:
            invitation = self._invitations.get(invitation_id)
            if invitation is None:
                raise NotFoundError(ErrorCode.INVITATION_NOT_FOUND, "Invitation not found",
                                    {'invitation_id': invitation_id})
            self._resolve(invitation, status)
            logger.info(f"Invitation {invitation_id} {status.value.lower()}")
            return invitation.snapshot()

    def accept_invitation(self, invitation_id: str) -> Invitation:
        """
        Accept a pending invitation.

        Raises:
            NotFoundError: If the invitation does not exist
            InvalidStateError: If it is no longer pending
        """
        return self._respond(invitation_id, InvitationStatus.ACCEPTED)

    def decline_invitation(self, invitation_id: str) -> Invitation:
        """Decline a pending invitation. Same failures as accept_invitation."""
        return self._respond(invitation_id, InvitationStatus.DECLINED)

    def cancel_invitation(self, invitation_id: str) -> Invitation:
        """Withdraw a single pending invitation. Same failures as accept_invitation."""
        return self._respond(invitation_id, InvitationStatus.CANCELLED)

    def get_invitation(self, invitation_id: str) -> Optional[Invitation]:
        invitation = self._invitations.get(invitation_id)
        return invitation.snapshot() if invitation else None

    def get_pending_invitations_for_player(self, nickname: str) -> List[Invitation]:
        """Pending invitations addressed to this player."""
        key = nickname_key(nickname)
        with self._lock:
            return [inv.snapshot() for inv in self._invitations.values()
                    if inv.status is InvitationStatus.PENDING and nickname_key(inv.to_nickname) == key]

    def _bulk_resolve(self, invitation_ids: List[str], status: InvitationStatus) -> List[Invitation]:
        resolved = []
        for invitation_id in invitation_ids:
            with self._lock:
                invitation = self._invitations.get(invitation_id)
                # Someone may have answered it since the snapshot was taken
                if invitation is None or invitation.status is not InvitationStatus.PENDING:
                    continue
                self._resolve(invitation, status)
                resolved.append(invitation.snapshot())
        return resolved

    def cancel_invitations_for_player(self, nickname: str) -> List[Invitation]:
        """
        Cancel every pending invitation the player sent or received.

        Returns:
            The invitations that were cancelled (possibly none)
        """
        with self._lock:
            ids = [inv.invitation_id for inv in self._invitations.values()
                   if inv.status is InvitationStatus.PENDING and inv.involves(nickname)]

        cancelled = self._bulk_resolve(ids, InvitationStatus.CANCELLED)
        if cancelled:
            logger.info(f"Cancelled {len(cancelled)} invitation(s) for {nickname}")
        return cancelled

    def cleanup_expired_invitations(self) -> List[Invitation]:
        """
        Expire pending invitations older than the expiry window.

        Returns:
            The invitations that expired
        """
        expiry_time = datetime.now() - timedelta(minutes=self.game_settings.invitation_expiry_minutes)
        with self._lock:
            ids = [inv.invitation_id for inv in self._invitations.values()
                   if inv.status is InvitationStatus.PENDING and inv.created_at < expiry_time]

        expired = self._bulk_resolve(ids, InvitationStatus.EXPIRED)
        if expired:
            logger.debug(f"Expired {len(expired)} pending invitation(s)")
        return expired
