"""Chat API routes."""

import logging

from flask import Blueprint, jsonify, request

from hybridchat.client.routes.config import get_config
from hybridchat.errors import LLMServiceError, VoiceServiceError
from hybridchat.modes import VOICE_MODE, ModeConfig, resolve_mode
from hybridchat.service.async_helpers import run_async

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


def error_response(message: str, status: int, retryable: bool, **extra):
    body = {"error": message, "retryable": retryable}
    body.update(extra)
    return jsonify(body), status


def answer(payload: dict, mode: ModeConfig):
    """Run one chat turn and map service failures to HTTP responses."""
    config = get_config()
    if config.chat_service is None:
        logger.error("❌ Chat service not initialized")
        return error_response("Chat service not initialized", 500, retryable=False)

    message = payload["message"].strip()
    history = payload.get("conversationHistory", [])
    logger.info(f"🔍 Message: '{message[:100]}' ({mode.name} mode)")
    if isinstance(history, list):
        logger.info(f"💬 Conversation history: {len(history)} messages")

    try:
        reply = run_async(config.chat_service.respond(message, history, mode))
    except LLMServiceError as e:
        logger.error(f"❌ LLM service failed: {e}")
        return error_response(
            "The language model service is unavailable. Please try again shortly.",
            503,
            retryable=True,
        )
    except VoiceServiceError as e:
        logger.error(f"❌ Voice service failed: {e}")
        return error_response(
            "Voice generation failed; the text answer is included.",
            502,
            retryable=True,
            text=e.text,
            audio=None,
            voiceAvailable=False,
        )
    except Exception as e:
        logger.error(f"❌ Error processing chat request: {e}", exc_info=True)
        return error_response(f"Internal server error: {type(e).__name__}", 500, retryable=False)

    logger.info("✅ Chat request completed successfully")
    return jsonify(reply.to_dict())


def parse_request(default_mode: ModeConfig | None = None):
    """Validate the JSON body; returns (payload, mode) or a 400 response."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None, error_response("Request body must be a JSON object", 400, retryable=False)

    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        logger.warning("❌ Missing or empty 'message' field in request")
        return None, error_response("Field 'message' must be a non-empty string", 400, retryable=False)

    try:
        if default_mode is not None and "mode" not in payload:
            mode = default_mode if payload.get("requestVoice", True) else resolve_mode(payload)
        else:
            mode = resolve_mode(payload)
    except ValueError as e:
        logger.warning(f"❌ {e}")
        return None, error_response(str(e), 400, retryable=False)
    return (payload, mode), None


@chat_bp.route("/api/chat", methods=["POST"])
def chat():
    """Handle chat requests.

    Request:
        {
            "message": "What does the memorandum commit to?",
            "conversationHistory": [  # Optional
                {"role": "user", "content": "Previous question"},
                {"role": "assistant", "content": "Previous answer"}
            ],
            "mode": "text"  # Optional: voice, text, fast or deep
        }

    The legacy flags isVoiceMode and deepResearch are honored when no mode
    is given.

    Response:
        {
            "text": "...",
            "audio": "data:audio/mpeg;base64,..." or null,
            "mode": "text",
            "rounds": 1,
            "voiceAvailable": true,
            "quotaExceeded": false,
            "voiceUsage": {"used": 0, "limit": 100000, ...},
            "cached": false,
            "responseTime": "1.23s"
        }
    """
    logger.info("📨 Received chat request")
    parsed, error = parse_request()
    if error:
        return error
    payload, mode = parsed
    return answer(payload, mode)


@chat_bp.route("/api/voice-chat", methods=["POST"])
def voice_chat():
    """Legacy voice endpoint: voice mode unless requestVoice is false or a mode is given."""
    logger.info("📨 Received voice chat request")
    parsed, error = parse_request(default_mode=VOICE_MODE)
    if error:
        return error
    payload, mode = parsed
    return answer(payload, mode)
