"""Logging adapters implementing LoggerProtocol."""

from routespec.infrastructure.logging.console_adapter import ConsoleAdapter

__all__ = ["ConsoleAdapter"]
