"""
Services package for the Mastermind lobby.
"""

from .game_logic_service import GameLogicService
from .solver_service import SolverService
from .concurrency_control_service import ConcurrencyControlService
from .player_session_service import PlayerSessionService
from .invitation_service import InvitationService
from .match_service import MatchService
from .lobby_state_presenter import LobbyStatePresenter
from .cleanup_scheduler_service import CleanupSchedulerService

__all__ = [
    'GameLogicService',
    'SolverService',
    'ConcurrencyControlService',
    'PlayerSessionService',
    'InvitationService',
    'MatchService',
    'LobbyStatePresenter',
    'CleanupSchedulerService'
]
