"""Google Gemini LLM service implementation."""

import logging
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from hybridchat.errors import LLMServiceError
from hybridchat.llm.base import LLMResponse, ToolCall, group_tool_results, log_request, new_call_id

logger = logging.getLogger(__name__)

# JSON-schema keys the Gemini function declaration schema rejects
UNSUPPORTED_SCHEMA_KEYS = frozenset({"title", "additionalProperties", "$defs"})


def _sanitize_schema(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {
            key: _sanitize_schema(value)
            for key, value in schema.items()
            if key not in UNSUPPORTED_SCHEMA_KEYS
        }
    if isinstance(schema, list):
        return [_sanitize_schema(item) for item in schema]
    return schema


class GeminiService:
    """Google Gemini LLM service implementation.

    This service uses the Google Gemini API to generate responses from Google's LLM models.
    The API key is automatically retrieved from the GEMINI_API_KEY environment variable.
    """

    def __init__(self, model: str, client: Any | None = None) -> None:
        """Initialize the Gemini service.

        Args:
            model: The model name to use (e.g., "gemini-2.5-flash")
            client: Optional preconfigured genai.Client
        """
        self.model = model
        logger.info(f"🤖 Initializing GeminiService: model={model}")
        # The client gets the API key from the GEMINI_API_KEY environment variable
        self.client = client or genai.Client()

    def _convert_tools_to_gemini_format(self, tools: list[dict[str, Any]]) -> list[types.Tool]:
        """Convert tool definitions to Gemini format.

        Args:
            tools: List of tools with name, description and input_schema

        Returns:
            List of Gemini Tool objects
        """
        function_declarations = [
            types.FunctionDeclaration(
                name=tool["name"],
                description=tool["description"],
                parameters=_sanitize_schema(tool["input_schema"]),
            )
            for tool in tools
        ]
        if function_declarations:
            return [types.Tool(function_declarations=function_declarations)]
        return []

    def _convert_messages(self, messages: list[dict[str, Any]]) -> list[types.Content]:
        contents: list[types.Content] = []
        for kind, item in group_tool_results(messages):
            if kind == "tools":
                parts = [
                    types.Part.from_function_response(
                        name=result["name"],
                        response={"error" if result.get("is_error") else "result": result["content"]},
                    )
                    for result in item
                ]
                contents.append(types.Content(role="user", parts=parts))
                continue

            role = "model" if item["role"] == "assistant" else "user"
            parts = []
            if item.get("content"):
                parts.append(types.Part.from_text(text=item["content"]))
            for call in item.get("tool_calls", []):
                parts.append(
                    types.Part(function_call=types.FunctionCall(name=call["name"], args=call["arguments"]))
                )
            contents.append(types.Content(role=role, parts=parts))
        return contents

    async def generate(
        self,
        system: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Generate one model turn with Gemini."""
        log_request(self.model, messages, tools)

        config_kwargs: dict[str, Any] = {
            "system_instruction": system,
            "max_output_tokens": max_tokens,
        }
        if tools:
            config_kwargs["tools"] = self._convert_tools_to_gemini_format(tools)
            config_kwargs["automatic_function_calling"] = types.AutomaticFunctionCallingConfig(
                disable=True
            )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=self._convert_messages(messages),
                config=types.GenerateContentConfig(**config_kwargs),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            logger.error(f"❌ Gemini API error: {e}", exc_info=True)
            raise LLMServiceError(f"Gemini API error: {e}") from e

        texts: list[str] = []
        tool_calls: list[ToolCall] = []
        stop_reason = None
        if response.candidates:
            candidate = response.candidates[0]
            stop_reason = str(candidate.finish_reason) if candidate.finish_reason else None
            if candidate.content and candidate.content.parts:
                for part in candidate.content.parts:
                    if part.function_call:
                        tool_calls.append(
                            ToolCall(
                                id=part.function_call.id or new_call_id(),
                                name=part.function_call.name,
                                arguments=dict(part.function_call.args or {}),
                            )
                        )
                    elif part.text:
                        texts.append(part.text)

        content = "".join(texts)
        logger.info(f"✅ Response generated: {len(content)} characters, {len(tool_calls)} tool calls")
        return LLMResponse(text=content, tool_calls=tool_calls, stop_reason=stop_reason)
