"""
Game Settings Configuration Module

Provides centralized access to game and lobby configuration values,
replacing hardcoded constants throughout the codebase.
"""

import logging

logger = logging.getLogger(__name__)

# Fallbacks used when no AppConfig has been loaded
DEFAULT_SLOT_COUNT = 4
MAX_SUGGESTION_SLOT_COUNT = 6
MAX_NICKNAME_LENGTH = 20
INACTIVE_PLAYER_MINUTES = 10
INVITATION_EXPIRY_MINUTES = 5
CLEANUP_INTERVAL_SECONDS = 120


class GameSettings:
    """Centralized game settings management."""

    def __init__(self, app_config=None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
        """
        self._config = app_config
        if app_config is None:
            try:
                from config_factory import get_config
                self._config = get_config()
            except Exception as e:
                logger.debug(f"Could not load configuration: {e}, using defaults")
                self._config = None

    @property
    def default_slot_count(self) -> int:
        """Slot count used when a game is created without one."""
        if self._config is None:
            return DEFAULT_SLOT_COUNT
        return self._config.default_slot_count

    @property
    def max_suggestion_slot_count(self) -> int:
        """
        Largest slot count for which a suggestion search is considered feasible.

        Returns:
            Slot count bound for the exhaustive solver
        """
        if self._config is None:
            return MAX_SUGGESTION_SLOT_COUNT
        return self._config.max_suggestion_slot_count

    @property
    def max_nickname_length(self) -> int:
        if self._config is None:
            return MAX_NICKNAME_LENGTH
        return self._config.max_nickname_length

    @property
    def inactive_player_minutes(self) -> int:
        """
        Minutes of inactivity after which an AVAILABLE player is swept.

        Returns:
            Inactivity threshold in minutes
        """
        if self._config is None:
            return INACTIVE_PLAYER_MINUTES
        return self._config.inactive_player_minutes

    @property
    def invitation_expiry_minutes(self) -> int:
        """
        Minutes a pending invitation stays open before it expires.

        Returns:
            Expiry window in minutes
        """
        if self._config is None:
            return INVITATION_EXPIRY_MINUTES
        return self._config.invitation_expiry_minutes

    @property
    def player_cleanup_interval(self) -> int:
        if self._config is None:
            return CLEANUP_INTERVAL_SECONDS
        return self._config.player_cleanup_interval_seconds

    @property
    def invitation_cleanup_interval(self) -> int:
        if self._config is None:
            return CLEANUP_INTERVAL_SECONDS
        return self._config.invitation_cleanup_interval_seconds


# Global instance for easy access
_game_settings_instance = None


def get_game_settings(app_config=None) -> GameSettings:
    """
    Get or create the global game settings instance.

    Args:
        app_config: Optional app config to use

    Returns:
        GameSettings instance
    """
    global _game_settings_instance

    if _game_settings_instance is None or app_config is not None:
        _game_settings_instance = GameSettings(app_config)

    return _game_settings_instance


def reset_game_settings():
    """Reset the global game settings instance (mainly for testing)."""
    global _game_settings_instance
    _game_settings_instance = None
