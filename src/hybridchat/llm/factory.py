"""Factory function for creating LLM service instances."""

import logging
import os

from dotenv import load_dotenv

from hybridchat.constants import DEFAULT_LLM_SERVICE, DEFAULT_OLLAMA_HOST, get_default_model
from hybridchat.llm.base import LLMService
from hybridchat.llm.claude import ClaudeService
from hybridchat.llm.gemini import GeminiService
from hybridchat.llm.ollama import OllamaService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_llm_service(config: dict | None = None) -> LLMService:
    """Factory function to create an LLM service instance.

    Args:
        config: Optional configuration dictionary. If None, uses environment variables.
                Expected keys:
                - 'service': Service type (default: from LLM_SERVICE env, or "anthropic")
                - 'host': Ollama host URL (default: from OLLAMA_HOST env)
                - 'model': Model name (default: from LLM_MODEL env)

    Returns:
        LLMService: An instance implementing the LLMService protocol.

    Raises:
        ValueError: If the service type is not supported
    """
    if config is None:
        config = {}

    service_type = config.get("service", os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE))
    model = config.get("model") or get_default_model(service_type)

    if service_type == "anthropic":
        return ClaudeService(model=model)

    if service_type == "ollama":
        host = config.get("host", os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST))
        return OllamaService(host=host, model=model)

    if service_type == "gemini":
        return GeminiService(model=model)

    raise ValueError(f"Unsupported service type: {service_type}")
