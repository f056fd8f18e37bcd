"""Flask web application for the document chat backend.

This module provides the REST API: chat in the four modes, voice status,
health, and read-only access to the searchable documents. Services are
built once at startup and handed to the routes through RouteConfig.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask

from hybridchat.client.routes import chat_bp, documents_bp, health_bp, init_config
from hybridchat.constants import (
    DEFAULT_FLASK_PORT,
    DEFAULT_RESPONSE_CACHE_SIZE,
    DEFAULT_RESPONSE_CACHE_TTL,
    env_int,
)
from hybridchat.llm import get_llm_service
from hybridchat.service.async_helpers import run_async
from hybridchat.service.chat import ChatService
from hybridchat.service.documents import DocumentCatalog, load_catalog
from hybridchat.service.gateway import RetrievalGateway
from hybridchat.service.orchestrator import Orchestrator
from hybridchat.service.state import ResponseCache
from hybridchat.service.voice import ElevenLabsVoice

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")

# Create Flask app
app = Flask(__name__)
logger.debug("Flask app created")

# Register blueprints
app.register_blueprint(chat_bp)
app.register_blueprint(health_bp)
app.register_blueprint(documents_bp)


def initialize_services(catalog: DocumentCatalog | None = None, llm_service=None) -> ChatService:
    """Load the documents and build every service the routes use.

    Args:
        catalog: Document catalog (default: from environment)
        llm_service: LLM service (default: from environment)

    Returns:
        The ChatService registered with the routes

    Raises:
        DocumentStoreError: If no resident document could be loaded
    """
    logger.info("🔧 Initializing services...")

    catalog = catalog or DocumentCatalog.from_env()
    store, report = run_async(load_catalog(catalog))
    logger.info(f"✅ Loaded {report.loaded_count} documents ({report.total_bytes} bytes)")

    if llm_service is None:
        llm_service = get_llm_service()
    logger.info(f"✅ LLM service initialized: {type(llm_service).__name__} ({llm_service.model})")

    gateway = RetrievalGateway(store, catalog.searchable)
    orchestrator = Orchestrator(llm_service, store, gateway, catalog.resident)
    voice = ElevenLabsVoice.from_env()
    if voice.configured:
        logger.info("✅ Voice generation enabled")
    else:
        logger.info("ℹ️ Voice generation disabled: ELEVENLABS_API_KEY or ELEVENLABS_VOICE_ID not set")
    cache = ResponseCache(
        ttl_seconds=env_int("RESPONSE_CACHE_TTL", DEFAULT_RESPONSE_CACHE_TTL),
        max_entries=DEFAULT_RESPONSE_CACHE_SIZE,
    )
    chat_service = ChatService(orchestrator, voice=voice, cache=cache)

    # Initialize route configuration
    init_config(
        chat_service=chat_service,
        store=store,
        gateway=gateway,
        voice=voice,
        llm_service=llm_service,
        catalog=catalog,
    )
    return chat_service


def create_app():
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting HybridChat Flask application...")

    # Initialize services
    print("📦 Loading documents and initializing services...")
    initialize_services()
    print("✅ Services initialized successfully")

    # Run Flask app
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = env_int("FLASK_PORT", DEFAULT_FLASK_PORT)
    debug = os.getenv("FLASK_ENV", "production") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    main()
