"""
Global pytest configuration and fixtures.
Provides service fixtures for proper dependency injection in tests.
"""

import pytest
import os

# Ensure testing environment
os.environ['APP_ENV'] = 'testing'


@pytest.fixture(scope="function", autouse=True)
def reset_global_state():
    """Reset configuration, game settings and the global container before each test."""
    from config_factory import reset_config
    from container import reset_container
    from mastermind.config.game_settings import reset_game_settings

    reset_config()
    reset_game_settings()
    reset_container()

    yield

    reset_config()
    reset_game_settings()


@pytest.fixture(scope="function")
def container():
    """Create service container with proper configuration."""
    from container import configure_container, ServiceContainer
    from config_factory import ConfigurationFactory

    config_factory = ConfigurationFactory()
    config_factory.load_from_environment()
    return configure_container(config=config_factory.to_dict(), container=ServiceContainer())


@pytest.fixture(scope="function")
def game_logic(container):
    """Provide GameLogicService through dependency injection."""
    return container.get('GameLogicService')


@pytest.fixture(scope="function")
def game_store(container):
    """Provide GameStore through dependency injection."""
    return container.get('GameStore')


@pytest.fixture(scope="function")
def session_service(container):
    """Provide PlayerSessionService through dependency injection."""
    return container.get('PlayerSessionService')


@pytest.fixture(scope="function")
def invitation_service(container):
    """Provide InvitationService through dependency injection."""
    return container.get('InvitationService')


@pytest.fixture(scope="function")
def match_service(container):
    """Provide MatchService through dependency injection."""
    return container.get('MatchService')


@pytest.fixture(scope="function")
def lobby_manager(container):
    """Provide LobbyManager through dependency injection."""
    return container.get('LobbyManager')


@pytest.fixture(scope="function")
def presenter(container):
    """Provide LobbyStatePresenter through dependency injection."""
    return container.get('LobbyStatePresenter')
