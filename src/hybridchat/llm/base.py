"""Base types and protocol for LLM services.

Providers perform exactly one request/response exchange per call; the tool
loop lives in the orchestrator. Conversation messages use one canonical
format that each provider translates:

    {"role": "user" | "assistant", "content": str}
    {"role": "assistant", "content": str, "tool_calls": [{"id", "name", "arguments"}]}
    {"role": "tool", "tool_call_id": str, "name": str, "content": str, "is_error": bool}
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}


@dataclass
class LLMResponse:
    """One model turn: its text and any requested tool calls."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: str | None = None

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)


class LLMService(Protocol):
    """Protocol defining the interface for LLM services.

    This protocol ensures type safety and allows for multiple LLM provider
    implementations while maintaining a consistent interface.
    """

    model: str

    async def generate(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Send one request to the model.

        Args:
            system: System preamble (instructions plus resident documents)
            messages: Conversation in the canonical message format
            tools: Optional tool definitions with name, description, input_schema
            max_tokens: Output length budget

        Returns:
            LLMResponse: Text and tool calls of the model's turn

        Raises:
            LLMServiceError: If the service cannot be reached or errors
        """
        ...


def new_call_id() -> str:
    """Correlation id for providers that do not issue their own."""
    return f"call_{uuid.uuid4().hex[:12]}"


def group_tool_results(
    messages: list[dict[str, Any]],
) -> list[tuple[str, dict[str, Any] | list[dict[str, Any]]]]:
    """Yield ("message", msg) entries, folding consecutive tool results into ("tools", [...]).

    Providers that carry all results of a round in one message use this to
    keep them together and in request order.
    """
    grouped: list[tuple[str, dict[str, Any] | list[dict[str, Any]]]] = []
    for message in messages:
        if message.get("role") == "tool":
            if grouped and grouped[-1][0] == "tools":
                grouped[-1][1].append(message)  # type: ignore[union-attr]
            else:
                grouped.append(("tools", [message]))
        else:
            grouped.append(("message", message))
    return grouped


def log_request(model: str, messages: list[dict[str, Any]], tools: list[dict[str, Any]] | None) -> None:
    logger.info(f"🗣️  Generating response with {model}")
    logger.debug(f"Messages: {len(messages)} messages, tools: {len(tools or [])}")
    for i, msg in enumerate(messages):
        role = msg.get("role", "unknown")
        content_preview = str(msg.get("content", ""))[:100]
        logger.debug(f"  Message {i + 1} ({role}): {content_preview}...")
