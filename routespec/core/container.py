"""Container module - centralized dependency factories.

Application-scoped singletons for infrastructure services. Components never
construct their own logger or HTTP fetcher; they receive one from here (or
from a test).

Usage:
    from routespec.core.container import get_logger

    logger = get_logger()
    logger.info("routes_loaded", count=12)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from routespec.core.config import settings

if TYPE_CHECKING:
    from routespec.domain.protocols.logger_protocol import LoggerProtocol


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from routespec.infrastructure.logging.console_adapter import ConsoleAdapter

    env = (
        settings.environment.value
        if hasattr(settings.environment, "value")
        else str(settings.environment)
    )
    use_json = env in {"testing", "ci", "production"}
    level = "DEBUG" if settings.debug else settings.log_level
    return ConsoleAdapter(use_json=use_json, level=level)
