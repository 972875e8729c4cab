"""
Service Container for the Mastermind lobby

Builds each lobby service once, handing it the services named in its
registration. The transport layer can supply ready-made objects, such as its
LobbyEventListener, in place of the registered defaults.
"""

from typing import Dict, Any, List, Optional, Callable
import inspect


class ServiceDefinition:
    """A registered service: its factory and the services passed to it"""

    def __init__(self, name: str, factory: Callable, dependencies: List[str] = None,
                 config: Dict[str, Any] = None):
        self.name = name
        self.factory = factory
        self.dependencies = dependencies or []
        self.config = config or {}


class CircularDependencyError(Exception):
    """Raised when services depend on each other in a loop"""
    pass


class ServiceNotFoundError(Exception):
    """Raised when a service name was never registered or supplied"""
    pass


def _create_game_settings(**config):
    """Build GameSettings from the container config, or from the loaded AppConfig."""
    from mastermind.config.game_settings import GameSettings, get_game_settings
    if config:
        from config_factory import AppConfig, Environment
        known = {key: value for key, value in config.items() if key in AppConfig.__dataclass_fields__}
        if isinstance(known.get('environment'), str):
            known['environment'] = Environment(known['environment'])
        return GameSettings(AppConfig(**known))
    return get_game_settings()


class ServiceContainer:
    """
    Holds one instance of every lobby service.

    Services are built on first request, after the services they depend on.
    Instances supplied through set_external_dependency take precedence over
    registered factories of the same name.
    """

    def __init__(self):
        self._services: Dict[str, ServiceDefinition] = {}
        self._instances: Dict[str, Any] = {}
        # Names currently being built, for loop detection
        self._building: List[str] = []
        self._config: Dict[str, Any] = {}

    def register(self, name: str, factory: Callable, dependencies: List[str] = None,
                 config: Dict[str, Any] = None) -> 'ServiceContainer':
        """
        Register how to build a service.

        Classes are called with the dependency instances in order; plain
        functions also receive the config as keyword arguments.

        Raises:
            ValueError: If the name is taken or the factory is not callable
        """
        if name in self._services:
            raise ValueError(f"Service '{name}' is already registered")
        if not callable(factory):
            raise ValueError(f"Factory for '{name}' must be callable")

        self._services[name] = ServiceDefinition(name, factory, dependencies, config)
        return self

    def configure_services(self) -> 'ServiceContainer':
        """Register the lobby services."""
        from mastermind.game_store import GameStore
        from mastermind.lobby_manager import LobbyEventListener, LobbyManager
        from mastermind.services.game_logic_service import GameLogicService
        from mastermind.services.solver_service import SolverService
        from mastermind.services.player_session_service import PlayerSessionService
        from mastermind.services.invitation_service import InvitationService
        from mastermind.services.match_service import MatchService
        from mastermind.services.lobby_state_presenter import LobbyStatePresenter
        from mastermind.services.cleanup_scheduler_service import CleanupSchedulerService

        self.register('GameSettings', _create_game_settings, config=dict(self._config))

        self.register('GameLogicService', GameLogicService)
        self.register('SolverService', SolverService, dependencies=['GameLogicService', 'GameSettings'])
        self.register('GameStore', GameStore, dependencies=['GameLogicService', 'SolverService', 'GameSettings'])

        self.register('PlayerSessionService', PlayerSessionService, dependencies=['GameSettings'])
        self.register('InvitationService', InvitationService, dependencies=['PlayerSessionService', 'GameSettings'])
        self.register('MatchService', MatchService)
        self.register('LobbyStatePresenter', LobbyStatePresenter)

        # No-op default; the transport layer replaces it with its own listener
        self.register('LobbyEventListener', LobbyEventListener)
        self.register('LobbyManager', LobbyManager, dependencies=[
            'PlayerSessionService', 'InvitationService', 'MatchService',
            'GameStore', 'GameLogicService', 'GameSettings', 'LobbyEventListener'
        ])

        self.register('CleanupSchedulerService', CleanupSchedulerService,
                      dependencies=['LobbyManager', 'GameSettings'])

        return self

    def set_external_dependency(self, name: str, instance: Any) -> 'ServiceContainer':
        """
        Supply an instance built outside the container.

        Must happen before any service depending on it is built.
        """
        self._instances[name] = instance
        return self

    def set_config(self, config: Dict[str, Any]) -> 'ServiceContainer':
        self._config.update(config)
        return self

    def get(self, name: str) -> Any:
        """
        Return the service instance, building it and its dependencies on first use.

        Raises:
            ServiceNotFoundError: If nothing is registered or supplied under the name
            CircularDependencyError: If the dependencies loop back to the service
        """
        if name in self._instances:
            return self._instances[name]
        if name not in self._services:
            raise ServiceNotFoundError(f"Service '{name}' is not registered")
        return self._build(name)

    def _build(self, name: str) -> Any:
        if name in self._building:
            chain = ' -> '.join(self._building + [name])
            raise CircularDependencyError(f"Circular dependency detected: {chain}")

        self._building.append(name)
        try:
            definition = self._services[name]
            dependencies = [self.get(dependency) for dependency in definition.dependencies]

            if inspect.isclass(definition.factory):
                instance = definition.factory(*dependencies)
            else:
                instance = definition.factory(*dependencies, **definition.config)

            self._instances[name] = instance
            return instance
        finally:
            self._building.remove(name)

    def has_service(self, name: str) -> bool:
        return name in self._services or name in self._instances

    def get_service_names(self) -> List[str]:
        return list(self._services.keys())

    def validate_dependencies(self) -> Dict[str, List[str]]:
        """
        Find dependencies that are neither registered nor supplied.

        Returns:
            Service name -> its unresolvable dependencies; empty when all resolve
        """
        missing = {}
        for name, definition in self._services.items():
            unresolved = [dependency for dependency in definition.dependencies
                          if not self.has_service(dependency)]
            if unresolved:
                missing[name] = unresolved
        return missing

    def clear(self) -> 'ServiceContainer':
        """Forget every registration, instance and config value."""
        self._services.clear()
        self._instances.clear()
        self._building.clear()
        self._config.clear()
        return self

    def __repr__(self) -> str:
        return f"ServiceContainer(services={len(self._services)}, instances={len(self._instances)})"


_app_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the process-wide container, creating it on first use"""
    global _app_container
    if _app_container is None:
        _app_container = ServiceContainer()
    return _app_container


def reset_container() -> None:
    """Drop the process-wide container (for testing)"""
    global _app_container
    _app_container = None


def configure_container(config: Optional[Dict[str, Any]] = None, container: Optional[ServiceContainer] = None,
                        listener=None) -> ServiceContainer:
    """
    Reset a container and register the lobby services in it.

    Args:
        config: Application configuration as produced by ConfigurationFactory.to_dict()
        container: Container to configure; the process-wide one when omitted
        listener: Optional LobbyEventListener handed to the LobbyManager

    Returns:
        Configured service container

    Raises:
        ServiceNotFoundError: If a registered service depends on an unknown one
    """
    container = container or get_container()
    container.clear()

    if config is not None:
        container.set_config(config)

    container.configure_services()

    if listener is not None:
        container.set_external_dependency('LobbyEventListener', listener)

    missing = container.validate_dependencies()
    if missing:
        raise ServiceNotFoundError(f"Unresolved service dependencies: {missing}")

    return container
