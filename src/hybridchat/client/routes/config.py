"""Shared configuration for route modules."""

from dataclasses import dataclass
from typing import Any


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    Holds the services built at startup so routes never reach for
    module-level globals and tests can swap in fakes.
    """

    chat_service: Any = None
    store: Any = None
    gateway: Any = None
    voice: Any = None
    llm_service: Any = None
    catalog: Any = None


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(
    chat_service: Any = None,
    store: Any = None,
    gateway: Any = None,
    voice: Any = None,
    llm_service: Any = None,
    catalog: Any = None,
) -> None:
    """Initialize the shared route configuration.

    Only the arguments that are not None replace the current values.

    Args:
        chat_service: ChatService answering chat requests
        store: Loaded DocumentStore
        gateway: RetrievalGateway over the searchable partition
        voice: ElevenLabsVoice client
        llm_service: LLM service instance
        catalog: DocumentCatalog the store was loaded from
    """
    if chat_service is not None:
        _config.chat_service = chat_service
    if store is not None:
        _config.store = store
    if gateway is not None:
        _config.gateway = gateway
    if voice is not None:
        _config.voice = voice
    if llm_service is not None:
        _config.llm_service = llm_service
    if catalog is not None:
        _config.catalog = catalog


def reset_config() -> None:
    """Clear every dependency (used between tests)."""
    global _config
    _config = RouteConfig()
