"""Health check and status API routes."""

import logging

from flask import Blueprint, jsonify

from hybridchat.client.routes.config import get_config

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
@health_bp.route("/api/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status and document counts
    """
    config = get_config()
    catalog = config.catalog
    store = config.store
    gateway = config.gateway
    llm = config.llm_service
    voice = config.voice

    resident = len(store.partition(catalog.resident)) if store and catalog else 0
    searchable = len(gateway.documents) if gateway else 0
    healthy = config.chat_service is not None and resident > 0

    return jsonify(
        {
            "status": "healthy" if healthy else "degraded",
            "documents": {
                "resident": resident,
                "searchable": searchable,
                "total": len(store) if store else 0,
            },
            "llm_service": type(llm).__name__ if llm else "not initialized",
            "llm_model": getattr(llm, "model", None),
            "voice": {
                "configured": bool(voice and voice.configured),
                "usage": voice.usage.snapshot() if voice else None,
            },
        }
    ), (200 if healthy else 503)


@health_bp.route("/api/voice-status", methods=["GET"])
def voice_status():
    """Monthly voice usage against the budget."""
    voice = get_config().voice
    if voice is None:
        return jsonify({"configured": False, "error": "Voice service not initialized"}), 503

    snapshot = voice.usage.snapshot()
    logger.info(f"🎤 Voice usage: {snapshot['used']}/{snapshot['limit']} chars")
    return jsonify({"configured": voice.configured, **snapshot})
