"""LLM service abstraction layer for hybridchat.

This package provides a unified interface for multiple LLM providers:
- ClaudeService: Anthropic Messages API
- OllamaService: Local LLM via Ollama
- GeminiService: Google Gemini API

Every service performs one model exchange per call and reports requested
tool calls back to the caller, which runs the tool loop.

Usage:
    from hybridchat.llm import get_llm_service, LLMService

    # Create service from environment config
    service = get_llm_service()

    # Or with explicit config
    service = get_llm_service({"service": "gemini", "model": "gemini-2.5-flash"})
"""

from hybridchat.llm.base import LLMResponse, LLMService, ToolCall
from hybridchat.llm.claude import ClaudeService
from hybridchat.llm.factory import get_llm_service
from hybridchat.llm.gemini import GeminiService
from hybridchat.llm.ollama import OllamaService

__all__ = [
    "LLMResponse",
    "LLMService",
    "ToolCall",
    "ClaudeService",
    "OllamaService",
    "GeminiService",
    "get_llm_service",
]
