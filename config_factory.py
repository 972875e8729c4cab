"""
Configuration Factory - Centralized configuration management for the Mastermind lobby
Provides type-safe configuration with validation and environment-specific settings.
"""

import os
import logging
from typing import Any, Dict, Optional, Type
from enum import Enum
from dataclasses import dataclass


class Environment(Enum):
    """Environment types for configuration"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigError(Exception):
    """Configuration-related errors"""
    pass


@dataclass
class AppConfig:
    """Application configuration with type safety and validation"""

    # Game settings
    default_slot_count: int = 4
    max_suggestion_slot_count: int = 6  # solver search is colors ** slots
    max_nickname_length: int = 20  # characters

    # Lobby lifecycle settings
    inactive_player_minutes: int = 10  # idle AVAILABLE players are logged out after this
    invitation_expiry_minutes: int = 5  # pending invitations expire after this

    # Cleanup scheduler settings
    player_cleanup_interval_seconds: int = 120
    invitation_cleanup_interval_seconds: int = 120

    log_level: str = 'info'

    # Environment
    environment: Environment = Environment.DEVELOPMENT

    def __post_init__(self):
        """Validate configuration after initialization"""
        self._validate()

    def _validate(self):
        """Validate configuration values"""
        if self.default_slot_count < 1 or self.default_slot_count > 10:
            raise ConfigError(f"Invalid default_slot_count: {self.default_slot_count}")

        if self.max_suggestion_slot_count < 1 or self.max_suggestion_slot_count > 8:
            raise ConfigError(f"Invalid max_suggestion_slot_count: {self.max_suggestion_slot_count}")

        if self.max_nickname_length < 1 or self.max_nickname_length > 100:
            raise ConfigError(f"Invalid max_nickname_length: {self.max_nickname_length}")

        if self.inactive_player_minutes < 1:
            raise ConfigError(f"Invalid inactive_player_minutes: {self.inactive_player_minutes}")

        if self.invitation_expiry_minutes < 1:
            raise ConfigError(f"Invalid invitation_expiry_minutes: {self.invitation_expiry_minutes}")

        if self.player_cleanup_interval_seconds < 1 or self.player_cleanup_interval_seconds > 3600:
            raise ConfigError(f"Invalid player_cleanup_interval_seconds: {self.player_cleanup_interval_seconds}")

        if self.invitation_cleanup_interval_seconds < 1 or self.invitation_cleanup_interval_seconds > 3600:
            raise ConfigError(f"Invalid invitation_cleanup_interval_seconds: {self.invitation_cleanup_interval_seconds}")

        if self.log_level.lower() not in ('debug', 'info', 'warning', 'error', 'critical'):
            raise ConfigError(f"Invalid log_level: {self.log_level}")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode"""
        return self.environment == Environment.TESTING


class ConfigurationFactory:
    """
    Factory for creating and managing application configuration.

    Features:
    - Environment variable loading with type conversion
    - Configuration validation
    - Singleton pattern for global config access
    """

    _instance: Optional['ConfigurationFactory'] = None
    _config: Optional[AppConfig] = None

    def __new__(cls) -> 'ConfigurationFactory':
        """Singleton pattern implementation"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the configuration factory"""
        if not hasattr(self, '_initialized'):
            self._logger = logging.getLogger(__name__)
            self._env_overrides: Dict[str, Any] = {}
            self._initialized = True

    def load_from_environment(self, env_prefix: str = '') -> AppConfig:
        """
        Load configuration from environment variables.

        Args:
            env_prefix: Optional prefix for environment variables (e.g., 'MASTERMIND_')

        Returns:
            Configured AppConfig instance
        """
        def get_env_var(key: str, default: Any = None, var_type: Type = str) -> Any:
            """Get environment variable with type conversion"""
            env_key = f"{env_prefix}{key}" if env_prefix else key
            value = os.environ.get(env_key)

            if value is None:
                return default

            if var_type == int:
                try:
                    return int(value)
                except ValueError:
                    self._logger.warning(f"Invalid integer value for {env_key}: {value}, using default: {default}")
                    return default
            else:
                return value

        app_env = get_env_var('APP_ENV', 'development')
        if app_env == 'testing':
            environment = Environment.TESTING
        elif app_env == 'production':
            environment = Environment.PRODUCTION
        else:
            environment = Environment.DEVELOPMENT

        config = AppConfig(
            # Game settings
            default_slot_count=get_env_var('DEFAULT_SLOT_COUNT', 4, int),
            max_suggestion_slot_count=get_env_var('MAX_SUGGESTION_SLOT_COUNT', 6, int),
            max_nickname_length=get_env_var('MAX_NICKNAME_LENGTH', 20, int),

            # Lobby lifecycle settings
            inactive_player_minutes=get_env_var('INACTIVE_PLAYER_MINUTES', 10, int),
            invitation_expiry_minutes=get_env_var('INVITATION_EXPIRY_MINUTES', 5, int),

            # Cleanup scheduler settings
            player_cleanup_interval_seconds=get_env_var('PLAYER_CLEANUP_INTERVAL_SECONDS', 120, int),
            invitation_cleanup_interval_seconds=get_env_var('INVITATION_CLEANUP_INTERVAL_SECONDS', 120, int),

            log_level=get_env_var('LOG_LEVEL', 'info'),

            environment=environment
        )

        # Apply any manual overrides
        for key, value in self._env_overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)

        self._config = config
        self._logger.info(f"Configuration loaded for environment: {environment.value}")
        return config

    def load_from_dict(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Load configuration from dictionary (useful for testing).

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            Configured AppConfig instance
        """
        config_dict = dict(config_dict)
        if 'environment' in config_dict and isinstance(config_dict['environment'], str):
            config_dict['environment'] = Environment(config_dict['environment'])

        self._config = AppConfig(**config_dict)
        return self._config

    def override_setting(self, key: str, value: Any) -> 'ConfigurationFactory':
        """
        Override a specific configuration setting.

        Args:
            key: Configuration key to override
            value: New value for the setting

        Returns:
            Self for method chaining
        """
        self._env_overrides[key] = value

        if self._config and hasattr(self._config, key):
            setattr(self._config, key, value)
            self._config._validate()  # Re-validate after change

        return self

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Returns:
            Current AppConfig instance

        Raises:
            ConfigError: If no configuration has been loaded
        """
        if self._config is None:
            raise ConfigError("Configuration not loaded. Call load_from_environment() or load_from_dict() first.")
        return self._config

    def reset(self) -> 'ConfigurationFactory':
        """Reset the factory (useful for testing)"""
        self._config = None
        self._env_overrides.clear()
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert current configuration to dictionary"""
        if self._config is None:
            raise ConfigError("Configuration not loaded")

        config_dict = {}
        for field_info in self._config.__dataclass_fields__.values():
            value = getattr(self._config, field_info.name)
            if isinstance(value, Environment):
                config_dict[field_info.name] = value.value
            else:
                config_dict[field_info.name] = value

        return config_dict


# Global factory instance
_config_factory = ConfigurationFactory()


def get_config() -> AppConfig:
    """Get the global application configuration"""
    return _config_factory.get_config()


def load_config(env_prefix: str = '') -> AppConfig:
    """Load configuration from environment variables"""
    return _config_factory.load_from_environment(env_prefix)


def load_config_from_dict(config_dict: Dict[str, Any]) -> AppConfig:
    """Load configuration from dictionary"""
    return _config_factory.load_from_dict(config_dict)


def override_config(key: str, value: Any) -> ConfigurationFactory:
    """Override a configuration setting"""
    return _config_factory.override_setting(key, value)


def reset_config() -> ConfigurationFactory:
    """Reset configuration (for testing)"""
    return _config_factory.reset()
