"""
Game settings package.
"""

from .game_settings import GameSettings, get_game_settings, reset_game_settings

__all__ = [
    'GameSettings',
    'get_game_settings',
    'reset_game_settings'
]
