"""Anthropic Claude LLM service implementation."""

import logging
from typing import Any

import anthropic

from hybridchat.errors import LLMServiceError
from hybridchat.llm.base import LLMResponse, ToolCall, group_tool_results, log_request

logger = logging.getLogger(__name__)


class ClaudeService:
    """Anthropic Messages API service.

    The API key is read by the SDK from the ANTHROPIC_API_KEY environment
    variable. Tool calls map to tool_use blocks and tool results to
    tool_result blocks in a user message.
    """

    def __init__(self, model: str, client: Any | None = None) -> None:
        """Initialize the Claude service.

        Args:
            model: The model name to use (e.g., "claude-sonnet-4-20250514")
            client: Optional preconfigured AsyncAnthropic client
        """
        self.model = model
        logger.info(f"🤖 Initializing ClaudeService: model={model}")
        self.client = client or anthropic.AsyncAnthropic()

    def _convert_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Convert canonical messages to Anthropic message params."""
        converted: list[dict[str, Any]] = []
        for kind, item in group_tool_results(messages):
            if kind == "tools":
                converted.append(
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "tool_result",
                                "tool_use_id": result["tool_call_id"],
                                "content": result["content"],
                                "is_error": bool(result.get("is_error")),
                            }
                            for result in item
                        ],
                    }
                )
                continue

            if item.get("tool_calls"):
                blocks: list[dict[str, Any]] = []
                if item.get("content"):
                    blocks.append({"type": "text", "text": item["content"]})
                for call in item["tool_calls"]:
                    blocks.append(
                        {
                            "type": "tool_use",
                            "id": call["id"],
                            "name": call["name"],
                            "input": call["arguments"],
                        }
                    )
                converted.append({"role": "assistant", "content": blocks})
            else:
                converted.append({"role": item["role"], "content": item["content"]})
        return converted

    async def generate(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Generate one model turn with Claude."""
        log_request(self.model, messages, tools)

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": self._convert_messages(messages),
        }
        if tools:
            request["tools"] = tools

        try:
            response = await self.client.messages.create(**request)
        except anthropic.APIError as e:
            logger.error(f"❌ Anthropic API error: {e}", exc_info=True)
            raise LLMServiceError(f"Anthropic API error: {e}") from e

        texts = []
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {})))

        content = "\n".join(texts)
        logger.info(f"✅ Response generated: {len(content)} characters, {len(tool_calls)} tool calls")
        return LLMResponse(text=content, tool_calls=tool_calls, stop_reason=response.stop_reason)
