"""
Lobby Manager for the Mastermind lobby

Coordinates the session, invitation, match and game services for the
multi-step lobby flows (challenge, set secret, play, return to lobby) and
reports state changes to an optional listener supplied by the transport
layer.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from mastermind.config.game_settings import get_game_settings
from mastermind.core.errors import ErrorCode, InvalidArgumentError, InvalidStateError, NotFoundError
from mastermind.core.models import Game, GameMatch, Invitation, MatchStatus, PlayerSession, PlayerStatus

logger = logging.getLogger(__name__)


class LobbyEventListener:
    """Receives lobby state changes. Every hook defaults to doing nothing."""

    def on_player_list_changed(self, players: List[Dict[str, str]]) -> None:
        pass

    def on_invitation_changed(self, invitation: Invitation) -> None:
        pass

    def on_match_updated(self, match: GameMatch) -> None:
        pass


class LobbyManager:
    """Facade over the lobby services."""

    def __init__(self, player_session_service, invitation_service, match_service, game_store,
                 game_logic_service, game_settings=None, listener: Optional[LobbyEventListener] = None):
        self.sessions = player_session_service
        self.invitations = invitation_service
        self.matches = match_service
        self.game_store = game_store
        self.game_logic = game_logic_service
        self.game_settings = game_settings or get_game_settings()
        self.listener = listener or LobbyEventListener()

    def set_listener(self, listener: Optional[LobbyEventListener]) -> None:
        self.listener = listener or LobbyEventListener()

    def _notify(self, hook: str, payload: Any) -> None:
        try:
            getattr(self.listener, hook)(payload)
        except Exception as e:
            logger.error(f"Lobby listener {hook} failed: {e}")

    def _notify_player_list(self) -> None:
        self._notify('on_player_list_changed', self.sessions.get_player_list())

    def _set_status(self, nickname: str, status: PlayerStatus) -> None:
        session = self.sessions.get_session_by_nickname(nickname)
        if session is None:
            return
        # AWAY players pass through AVAILABLE on their way into a game
        if session.status is PlayerStatus.AWAY and status is PlayerStatus.IN_GAME:
            self.sessions.update_player_status(session.session_id, PlayerStatus.AVAILABLE)
        self.sessions.update_player_status(session.session_id, status)
        self.sessions.update_player_activity(session.session_id)

    # Sessions
    def login(self, nickname: str) -> PlayerSession:
        session = self.sessions.login(nickname)
        self._notify_player_list()
        return session

    def logout(self, session_id: str) -> Optional[PlayerSession]:
        """
        Log a player out and withdraw everything they were part of.

        Pending invitations to or from the player are cancelled and their
        match, if any, is cancelled.

        Returns:
            The removed session or None if it did not exist
        """
        session = self.sessions.logout(session_id)
        if session is None:
            return None
        self._release_player(session.nickname)
        self._notify_player_list()
        return session

    def _release_player(self, nickname: str) -> None:
        for invitation in self.invitations.cancel_invitations_for_player(nickname):
            self._notify('on_invitation_changed', invitation)
        match = self.matches.cancel_match(nickname)
        if match is not None:
            self._notify('on_match_updated', match)

    def get_player_list(self, exclude_session_id: Optional[str] = None) -> List[Dict[str, str]]:
        """List players, counting the request as activity for the caller."""
        if exclude_session_id is not None:
            self.sessions.update_player_activity(exclude_session_id)
        return self.sessions.get_player_list(exclude_session_id)

    def is_nickname_available(self, nickname: str) -> bool:
        return not self.sessions.is_nickname_taken(nickname)

    # Invitations
    def send_invitation(self, from_nickname: str, to_nickname: str) -> Invitation:
        self.sessions.update_player_activity_by_nickname(from_nickname)
        invitation = self.invitations.create_invitation(from_nickname, to_nickname)
        self._notify('on_invitation_changed', invitation)
        return invitation

    def respond_to_invitation(self, invitation_id: str, accept: bool) -> Invitation:
        """
        Accept or decline an invitation.

        Raises:
            NotFoundError: If the invitation does not exist
            InvalidStateError: If it is no longer pending
        """
        if accept:
            invitation = self.invitations.accept_invitation(invitation_id)
        else:
            invitation = self.invitations.decline_invitation(invitation_id)
        self.sessions.update_player_activity_by_nickname(invitation.to_nickname)
        self._notify('on_invitation_changed', invitation)
        return invitation

    def cancel_invitation(self, invitation_id: str) -> Invitation:
        invitation = self.invitations.cancel_invitation(invitation_id)
        self._notify('on_invitation_changed', invitation)
        return invitation

    # Matches
    def _match_for_secret(self, nickname: str, opponent_nickname: str) -> GameMatch:
        match = self.matches.get_match_by_player(nickname)
        if match is None:
            try:
                return self.matches.create_match(nickname, opponent_nickname)
            except InvalidStateError:
                # The opponent may have created the match concurrently
                match = self.matches.get_match_by_player(nickname)
                if match is None:
                    raise
        if not match.has_player(opponent_nickname):
            raise InvalidStateError(
                ErrorCode.ALREADY_IN_MATCH,
                f"{nickname} is already in a match with {match.opponent_of(nickname)}",
                {'match_id': match.match_id}
            )
        return match

    def set_secret(self, nickname: str, opponent_nickname: str, secret: Iterable) -> GameMatch:
        """
        Store the secret this player's opponent must crack.

        Creates the match on the first call for the pair. When both players
        have set a secret the match starts and both are marked IN_GAME.

        Args:
            nickname: Player setting the secret
            opponent_nickname: The other player in the match
            secret: Color names or Colors, one per slot

        Returns:
            Snapshot of the match after the update

        Raises:
            InvalidArgumentError: If the secret is malformed or the players are the same
            InvalidStateError: If either player is matched elsewhere or the match already started
        """
        slot_count = self.game_settings.default_slot_count
        secret_colors = self.game_logic.parse_codeword(secret)
        if not self.game_logic.is_valid_guess(secret_colors, slot_count):
            raise InvalidArgumentError(
                ErrorCode.INVALID_GUESS,
                f"Invalid secret: must contain {slot_count} valid colors",
                {'slot_count': slot_count}
            )
        match = self._match_for_secret(nickname, opponent_nickname)
        if match.status is not MatchStatus.SETUP:
            raise InvalidStateError(
                ErrorCode.ILLEGAL_TRANSITION,
                "Secrets can only be set before the match starts",
                {'match_id': match.match_id, 'status': match.status.value}
            )

        previous_game_id = match.player1_game_id if match.is_player1(nickname) else match.player2_game_id
        game = self.game_store.create_game_with_secret(slot_count, secret_colors)
        try:
            match = self.matches.set_player_game(nickname, game.id)
        except InvalidStateError:
            # The match left SETUP or vanished after the snapshot; the old game stays in play
            self.game_store.delete_game(game.id)
            raise
        if previous_game_id:
            self.game_store.delete_game(previous_game_id)

        if match.status is MatchStatus.PLAYING:
            self._set_status(match.player1_nickname, PlayerStatus.IN_GAME)
            self._set_status(match.player2_nickname, PlayerStatus.IN_GAME)
            self._notify_player_list()
        else:
            self.sessions.update_player_activity_by_nickname(nickname)

        self._notify('on_match_updated', match)
        return match

    def get_match_status(self, nickname: str) -> GameMatch:
        """
        Raises:
            NotFoundError: If the player is not in a match
        """
        match = self.matches.get_match_by_player(nickname)
        if match is None:
            raise NotFoundError(ErrorCode.NOT_IN_MATCH, "Player is not in a match", {'nickname': nickname})
        return match

    def submit_match_guess(self, nickname: str, guess: Iterable) -> Game:
        """
        Guess at the opponent's secret.

        A winning guess finishes the match.

        Returns:
            Snapshot of the game holding the opponent's secret

        Raises:
            NotFoundError: If the player is not in a match
            InvalidStateError: If the match is not being played
            InvalidArgumentError: If the guess is malformed
        """
        match = self.get_match_status(nickname)
        if match.status is not MatchStatus.PLAYING:
            raise InvalidStateError(
                ErrorCode.ILLEGAL_TRANSITION,
                "Match is not in progress",
                {'match_id': match.match_id, 'status': match.status.value}
            )

        opponent_game_id = self.matches.get_opponent_game_id(nickname)
        game = self.game_store.submit_guess(opponent_game_id, self.game_logic.parse_codeword(guess))
        self.sessions.update_player_activity_by_nickname(nickname)

        if game.won:
            try:
                match = self.matches.finish_match(match.match_id)
            except InvalidStateError:
                # Both players won at the same time; the first finish stands
                match = self.matches.get_match(match.match_id) or match
            else:
                logger.info(f"{nickname} won match {match.match_id}")
            self._notify('on_match_updated', match)
        return game

    def return_to_lobby(self, nickname: str) -> Optional[GameMatch]:
        """
        Leave the current match, if any, and become AVAILABLE again.

        Games referenced by the match are kept in the game store.

        Returns:
            The match that was left, or None
        """
        match = self.matches.cancel_match(nickname)
        if match is not None:
            self._notify('on_match_updated', match)
        self._set_status(nickname, PlayerStatus.AVAILABLE)
        self._notify_player_list()
        return match

    # Sweeps
    def remove_inactive_players(self) -> int:
        """
        Log out idle AVAILABLE players and withdraw their invitations and matches.

        Returns:
            Number of players removed
        """
        removed = self.sessions.sweep_inactive_players()
        for session in removed:
            self._release_player(session.nickname)
        if removed:
            self._notify_player_list()
        return len(removed)

    def cleanup_expired_invitations(self) -> List[Invitation]:
        expired = self.invitations.cleanup_expired_invitations()
        for invitation in expired:
            self._notify('on_invitation_changed', invitation)
        return expired
