"""
Mastermind lobby - solo games and head-to-head matches between lobby players.
Composition root: loads configuration, configures logging, wires the services
and runs the periodic cleanup sweeps. A transport layer imports
``create_services`` and drives the returned services.
"""

import atexit
import logging
import signal
import threading
from typing import Any, Dict, Optional

from config_factory import load_config, ConfigurationFactory
from container import configure_container

logger = logging.getLogger(__name__)


def create_services(listener=None, start_scheduler: bool = True) -> Dict[str, Any]:
    """
    Build the lobby services from environment configuration.

    Args:
        listener: Optional LobbyEventListener that receives state changes
        start_scheduler: Start the cleanup sweeps immediately

    Returns:
        Dict of service name -> instance
    """
    app_config = load_config()
    logging.basicConfig(level=getattr(logging, app_config.log_level.upper(), logging.INFO))

    container = configure_container(config=ConfigurationFactory().to_dict(), listener=listener)

    services = {
        'game_store': container.get('GameStore'),
        'lobby_manager': container.get('LobbyManager'),
        'player_session_service': container.get('PlayerSessionService'),
        'invitation_service': container.get('InvitationService'),
        'match_service': container.get('MatchService'),
        'presenter': container.get('LobbyStatePresenter'),
        'cleanup_scheduler': container.get('CleanupSchedulerService')
    }

    if start_scheduler:
        services['cleanup_scheduler'].start()
        atexit.register(services['cleanup_scheduler'].stop)

    logger.info(f"Mastermind lobby services ready ({app_config.environment.value})")
    return services


def main(services: Optional[Dict[str, Any]] = None):
    """Run the lobby core until interrupted."""
    services = services or create_services()
    stopped = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stopped.set())
    try:
        stopped.wait()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
    finally:
        logger.info("Shutting down Mastermind lobby...")
        services['cleanup_scheduler'].stop()


if __name__ == '__main__':
    main()
