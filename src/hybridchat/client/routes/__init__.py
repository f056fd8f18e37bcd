"""Flask route blueprints for the hybridchat client application."""

from hybridchat.client.routes.chat import chat_bp
from hybridchat.client.routes.config import get_config, init_config, reset_config
from hybridchat.client.routes.documents import documents_bp
from hybridchat.client.routes.health import health_bp

__all__ = [
    "chat_bp",
    "documents_bp",
    "health_bp",
    "init_config",
    "get_config",
    "reset_config",
]
