"""
Cleanup Scheduler Service - Runs the lobby sweeps on a fixed cadence.

This service handles:
- Logging out idle AVAILABLE players
- Expiring stale pending invitations

Each sweep works entry by entry, so it runs alongside foreground requests
without holding any registry for its whole duration.
"""

import logging
import threading
import time
from typing import Dict, Optional

from mastermind.config.game_settings import get_game_settings

logger = logging.getLogger(__name__)


class CleanupSchedulerService:
    """Background thread that triggers the periodic lobby sweeps."""

    def __init__(self, lobby_manager, game_settings=None, check_interval: float = 1.0):
        """Initialize the cleanup scheduler.

        Args:
            lobby_manager: Facade exposing the two sweep operations
            game_settings: Optional settings providing the sweep intervals
            check_interval: Seconds between checks for due sweeps
        """
        self.lobby_manager = lobby_manager
        self.game_settings = game_settings or get_game_settings()
        self.check_interval = check_interval
        self._stop_event = threading.Event()
        self._timer_thread: Optional[threading.Thread] = None
        self._last_run: Dict[str, float] = {}

    @property
    def running(self) -> bool:
        return self._timer_thread is not None and self._timer_thread.is_alive()

    def start(self):
        """Start the background thread. Calling it twice is harmless."""
        if self.running:
            return
        self._stop_event.clear()
        now = time.monotonic()
        # First sweeps happen one full interval after start
        self._last_run = {'players': now, 'invitations': now}
        self._timer_thread = threading.Thread(target=self._timer_loop, name='lobby-cleanup', daemon=True)
        self._timer_thread.start()
        logger.info("CleanupSchedulerService started")

    def stop(self):
        """Stop the background thread."""
        self._stop_event.set()
        if self._timer_thread is not None and self._timer_thread.is_alive():
            self._timer_thread.join(timeout=2)
        self._timer_thread = None
        logger.info("CleanupSchedulerService stopped")

    def _timer_loop(self):
        while not self._stop_event.is_set():
            try:
                self.run_due(time.monotonic())
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")
            self._stop_event.wait(self.check_interval)

    def run_due(self, now: float) -> Dict[str, int]:
        """Run whichever sweeps are due at monotonic time ``now``."""
        results = {}
        if now - self._last_run.get('players', 0) >= self.game_settings.player_cleanup_interval:
            self._last_run['players'] = now
            results['players'] = self._cleanup_inactive_players()
        if now - self._last_run.get('invitations', 0) >= self.game_settings.invitation_cleanup_interval:
            self._last_run['invitations'] = now
            results['invitations'] = self._cleanup_expired_invitations()
        return results

    def run_once(self) -> Dict[str, int]:
        """Run both sweeps immediately."""
        return {
            'players': self._cleanup_inactive_players(),
            'invitations': self._cleanup_expired_invitations()
        }

    def _cleanup_inactive_players(self) -> int:
        try:
            removed = self.lobby_manager.remove_inactive_players()
            if removed > 0:
                logger.info(f"Removed {removed} inactive player(s)")
            return removed
        except Exception as e:
            logger.error(f"Error removing inactive players: {e}")
            return 0

    def _cleanup_expired_invitations(self) -> int:
        try:
            expired = len(self.lobby_manager.cleanup_expired_invitations())
            if expired > 0:
                logger.info(f"Expired {expired} invitation(s)")
            return expired
        except Exception as e:
            logger.error(f"Error expiring invitations: {e}")
            return 0
