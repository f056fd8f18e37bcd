"""Ollama LLM service implementation."""

import logging
from typing import Any

import ollama

from hybridchat.errors import LLMServiceError
from hybridchat.llm.base import LLMResponse, ToolCall, log_request, new_call_id

logger = logging.getLogger(__name__)


class OllamaService:
    """Ollama LLM service implementation.

    This service uses the Ollama API to generate responses from local LLM models.
    Ollama does not issue tool-call ids, so ids are generated locally.
    """

    def __init__(self, host: str, model: str) -> None:
        """Initialize the Ollama service.

        Args:
            host: The Ollama server host URL (e.g., "http://localhost:11434")
            model: The model name to use (e.g., "llama3.1")
        """
        self.host = host
        self.model = model
        logger.info(f"🤖 Initializing OllamaService: host={host}, model={model}")
        self.client = ollama.AsyncClient(host=host)

    def _convert_tools_to_ollama_format(
        self, tools: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Convert tool definitions to Ollama format.

        Args:
            tools: List of tools with name, description and input_schema

        Returns:
            List of tools in Ollama format
        """
        return [
            {
                "type": "function",
                "function": {
                    "name": tool["name"],
                    "description": tool["description"],
                    "parameters": tool["input_schema"],
                },
            }
            for tool in tools
        ]

    def _convert_messages(self, system: str, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        converted: list[dict[str, Any]] = [{"role": "system", "content": system}]
        for message in messages:
            role = message["role"]
            if role == "tool":
                converted.append(
                    {"role": "tool", "content": message["content"], "tool_name": message["name"]}
                )
            elif message.get("tool_calls"):
                converted.append(
                    {
                        "role": "assistant",
                        "content": message.get("content", ""),
                        "tool_calls": [
                            {"function": {"name": call["name"], "arguments": call["arguments"]}}
                            for call in message["tool_calls"]
                        ],
                    }
                )
            else:
                converted.append({"role": role, "content": message["content"]})
        return converted

    async def generate(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Generate one model turn with Ollama."""
        log_request(self.model, messages, tools)

        chat_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(system, messages),
            "options": {"num_predict": max_tokens},
        }
        if tools:
            chat_kwargs["tools"] = self._convert_tools_to_ollama_format(tools)

        try:
            response = await self.client.chat(**chat_kwargs)
        except (ollama.ResponseError, ConnectionError, OSError) as e:
            logger.error(f"❌ Ollama API error: {e}", exc_info=True)
            raise LLMServiceError(f"Ollama API error: {e}") from e

        tool_calls = [
            ToolCall(
                id=new_call_id(),
                name=call.function.name,
                arguments=dict(call.function.arguments or {}),
            )
            for call in (response.message.tool_calls or [])
        ]
        content = response.message.content or ""
        logger.info(f"✅ Response generated: {len(content)} characters, {len(tool_calls)} tool calls")
        return LLMResponse(
            text=content,
            tool_calls=tool_calls,
            stop_reason=getattr(response, "done_reason", None),
        )
