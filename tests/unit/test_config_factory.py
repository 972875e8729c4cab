"""
Configuration Factory Tests
Tests for the centralized configuration management system and GameSettings.
"""

import pytest
import os
from unittest.mock import patch
from config_factory import (
    ConfigurationFactory, AppConfig, Environment, ConfigError,
    load_config, load_config_from_dict, get_config, reset_config, override_config
)
from mastermind.config.game_settings import GameSettings, get_game_settings, reset_game_settings


class TestAppConfig:
    """Test AppConfig dataclass"""

    def test_config_initialization_with_defaults(self):
        """Test AppConfig initialization with default values"""
        config = AppConfig()

        assert config.default_slot_count == 4
        assert config.max_suggestion_slot_count == 6
        assert config.max_nickname_length == 20
        assert config.inactive_player_minutes == 10
        assert config.invitation_expiry_minutes == 5
        assert config.player_cleanup_interval_seconds == 120
        assert config.invitation_cleanup_interval_seconds == 120
        assert config.log_level == 'info'
        assert config.environment == Environment.DEVELOPMENT

    def test_config_initialization_with_custom_values(self):
        config = AppConfig(default_slot_count=6, inactive_player_minutes=30, environment=Environment.PRODUCTION)

        assert config.default_slot_count == 6
        assert config.inactive_player_minutes == 30
        assert config.is_production

    @pytest.mark.parametrize("overrides", [
        {'default_slot_count': 0},
        {'default_slot_count': 11},
        {'max_suggestion_slot_count': 9},
        {'max_nickname_length': 0},
        {'inactive_player_minutes': 0},
        {'invitation_expiry_minutes': -1},
        {'player_cleanup_interval_seconds': 0},
        {'invitation_cleanup_interval_seconds': 3601},
        {'log_level': 'verbose'},
    ])
    def test_config_validation_rejects_invalid_values(self, overrides):
        with pytest.raises(ConfigError):
            AppConfig(**overrides)

    def test_environment_properties(self):
        assert AppConfig(environment=Environment.DEVELOPMENT).is_development
        assert AppConfig(environment=Environment.TESTING).is_testing
        assert not AppConfig(environment=Environment.TESTING).is_production


class TestConfigurationFactory:
    """Test ConfigurationFactory loading and overrides"""

    def setup_method(self):
        self.factory = ConfigurationFactory()
        self.factory.reset()

    def test_singleton_pattern(self):
        assert ConfigurationFactory() is ConfigurationFactory()

    def test_load_from_environment_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = self.factory.load_from_environment()

        assert config.default_slot_count == 4
        assert config.environment == Environment.DEVELOPMENT

    def test_load_from_environment_values(self):
        env = {
            'APP_ENV': 'production',
            'DEFAULT_SLOT_COUNT': '5',
            'INACTIVE_PLAYER_MINUTES': '15',
            'INVITATION_EXPIRY_MINUTES': '2',
            'LOG_LEVEL': 'debug',
        }
        with patch.dict(os.environ, env, clear=True):
            config = self.factory.load_from_environment()

        assert config.environment == Environment.PRODUCTION
        assert config.default_slot_count == 5
        assert config.inactive_player_minutes == 15
        assert config.invitation_expiry_minutes == 2
        assert config.log_level == 'debug'

    def test_load_from_environment_with_prefix(self):
        with patch.dict(os.environ, {'MASTERMIND_DEFAULT_SLOT_COUNT': '3'}, clear=True):
            config = self.factory.load_from_environment('MASTERMIND_')

        assert config.default_slot_count == 3

    def test_invalid_integer_falls_back_to_default(self):
        with patch.dict(os.environ, {'MAX_NICKNAME_LENGTH': 'lots'}, clear=True):
            config = self.factory.load_from_environment()

        assert config.max_nickname_length == 20

    def test_load_from_dict(self):
        config = self.factory.load_from_dict({'default_slot_count': 5, 'environment': 'testing'})

        assert config.default_slot_count == 5
        assert config.environment == Environment.TESTING

    def test_override_setting(self):
        self.factory.load_from_dict({})
        self.factory.override_setting('invitation_expiry_minutes', 9)

        assert self.factory.get_config().invitation_expiry_minutes == 9

    def test_override_setting_with_validation(self):
        self.factory.load_from_dict({})
        with pytest.raises(ConfigError):
            self.factory.override_setting('default_slot_count', 0)

    def test_overrides_survive_reload(self):
        self.factory.override_setting('max_nickname_length', 12)
        with patch.dict(os.environ, {}, clear=True):
            config = self.factory.load_from_environment()

        assert config.max_nickname_length == 12

    def test_get_config_before_loading(self):
        with pytest.raises(ConfigError):
            self.factory.get_config()

    def test_to_dict(self):
        self.factory.load_from_dict({'environment': 'testing'})

        config_dict = self.factory.to_dict()

        assert config_dict['environment'] == 'testing'
        assert config_dict['default_slot_count'] == 4
        assert set(config_dict) == set(AppConfig.__dataclass_fields__)


class TestModuleFunctions:
    """Test module-level convenience functions"""

    def test_load_config_function(self):
        with patch.dict(os.environ, {'APP_ENV': 'testing'}, clear=True):
            config = load_config()
        assert config.is_testing
        assert get_config() is config

    def test_load_config_from_dict_function(self):
        config = load_config_from_dict({'default_slot_count': 7})
        assert get_config().default_slot_count == 7
        assert config is get_config()

    def test_override_config_function(self):
        load_config_from_dict({})
        override_config('inactive_player_minutes', 3)
        assert get_config().inactive_player_minutes == 3

    def test_reset_config_function(self):
        load_config_from_dict({})
        reset_config()
        with pytest.raises(ConfigError):
            get_config()


class TestGameSettings:
    """Test GameSettings fallbacks and config passthrough"""

    def test_defaults_without_loaded_config(self):
        settings = GameSettings()

        assert settings.default_slot_count == 4
        assert settings.max_suggestion_slot_count == 6
        assert settings.max_nickname_length == 20
        assert settings.inactive_player_minutes == 10
        assert settings.invitation_expiry_minutes == 5
        assert settings.player_cleanup_interval == 120
        assert settings.invitation_cleanup_interval == 120

    def test_values_from_app_config(self):
        settings = GameSettings(AppConfig(default_slot_count=5, invitation_cleanup_interval_seconds=30))

        assert settings.default_slot_count == 5
        assert settings.invitation_cleanup_interval == 30

    def test_picks_up_loaded_config(self):
        load_config_from_dict({'inactive_player_minutes': 42})
        assert GameSettings().inactive_player_minutes == 42

    def test_global_settings_cached_until_reset(self):
        first = get_game_settings()
        assert get_game_settings() is first

        reset_game_settings()
        assert get_game_settings() is not first
