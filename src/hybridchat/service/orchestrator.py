"""Orchestration loop: one user turn from prompt assembly to final text.

A turn moves through three states:

    DRAFTING      waiting on the LLM
    TOOL_PENDING  the LLM asked for tool calls; they run through the gateway
    COMPLETE      the LLM answered without tool calls, or the round cap was hit

Every round appends the assistant's tool request and one result message per
call (in request order) before the next LLM call, so each call sees the full
conversation so far.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hybridchat.constants import MAX_HISTORY_MESSAGES, MAX_TOOL_ROUNDS, env_int
from hybridchat.llm.base import LLMResponse, LLMService
from hybridchat.modes import ModeConfig, get_mode
from hybridchat.service.documents import Document, DocumentStore
from hybridchat.service.gateway import RetrievalGateway

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "I wasn't able to finish researching that question. Please try asking it again "
    "or narrowing it down."
)


class TurnState(Enum):
    DRAFTING = "drafting"
    TOOL_PENDING = "tool_pending"
    COMPLETE = "complete"


@dataclass
class TurnResult:
    """Final text of a turn plus how it was reached."""

    text: str
    rounds: int = 0
    hit_round_cap: bool = False
    tool_trace: list[dict[str, Any]] = field(default_factory=list)
    mode: str = "text"


def filter_history(
    history: Any, max_messages: int = MAX_HISTORY_MESSAGES
) -> list[dict[str, str]]:
    """Keep the well-formed tail of a client-supplied conversation history.

    Entries that are not dicts, have a role other than user/assistant, or
    carry blank or non-string content are dropped. The result starts with a
    user message.
    """
    if not isinstance(history, list):
        return []

    kept = [
        {"role": entry["role"], "content": entry["content"]}
        for entry in history
        if isinstance(entry, dict)
        and entry.get("role") in ("user", "assistant")
        and isinstance(entry.get("content"), str)
        and entry["content"].strip()
    ]
    kept = kept[-max_messages:] if max_messages > 0 else []
    while kept and kept[0]["role"] == "assistant":
        kept.pop(0)
    return kept


def build_resident_context(documents: list[Document]) -> str:
    """Concatenate resident documents under "=== name ===" headers."""
    return "\n\n".join(f"=== {document.name} ===\n{document.content}" for document in documents)


class Orchestrator:
    """Runs user turns against an LLM service and the retrieval gateway."""

    def __init__(
        self,
        llm_service: LLMService,
        store: DocumentStore,
        gateway: RetrievalGateway,
        resident_names: list[str],
        max_tool_rounds: int | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            llm_service: LLM collaborator
            store: Loaded document store
            gateway: Tool gateway over the searchable partition
            resident_names: Names of the resident partition
            max_tool_rounds: Tool-round cap (default: MAX_TOOL_ROUNDS env or constant)
        """
        if max_tool_rounds is None:
            max_tool_rounds = env_int("MAX_TOOL_ROUNDS", MAX_TOOL_ROUNDS)
        if max_tool_rounds < 0:
            raise ValueError("max_tool_rounds must not be negative")

        self.llm_service = llm_service
        self.store = store
        self.gateway = gateway
        self.resident_names = list(resident_names)
        self.max_tool_rounds = max_tool_rounds
        self.resident_context = build_resident_context(store.partition(self.resident_names))
        logger.info(
            f"🧭 Orchestrator ready: {len(self.resident_context)} chars resident context, "
            f"tool round cap {self.max_tool_rounds}"
        )

    def system_prompt(self, mode: ModeConfig) -> str:
        if mode.use_resident and self.resident_context:
            return f"{mode.system_prompt}\n\nCore documents:\n\n{self.resident_context}"
        return mode.system_prompt

    async def run_turn(
        self,
        message: str,
        history: Any = None,
        mode: ModeConfig | str = "text",
    ) -> TurnResult:
        """Answer one user message.

        When the answer carries the mode's fallback marker the turn is run
        once more under the fallback mode.

        Args:
            message: The new user message
            history: Prior conversation as a list of {"role", "content"} dicts
            mode: Mode configuration or name

        Returns:
            TurnResult with the final (unshaped) text

        Raises:
            ValueError: If message is blank or the mode is unknown
            LLMServiceError: If the LLM collaborator fails
        """
        if isinstance(mode, str):
            mode = get_mode(mode)
        if not isinstance(message, str) or not message.strip():
            raise ValueError("message must be a non-empty string")

        result = await self._run(message, history, mode)
        if mode.wants_fallback(result.text):
            fallback = get_mode(mode.fallback_mode)
            logger.info(f"🔁 {mode.name} answer deferred to research, re-running in {fallback.name} mode")
            result = await self._run(message, history, fallback)
        return result

    async def _run(self, message: str, history: Any, mode: ModeConfig) -> TurnResult:
        messages: list[dict[str, Any]] = filter_history(history)
        messages.append({"role": "user", "content": message})
        system = self.system_prompt(mode)
        tools = self.gateway.definitions() if mode.tools_enabled else None

        state = TurnState.DRAFTING
        rounds = 0
        best_text = ""
        trace: list[dict[str, Any]] = []
        response = LLMResponse()

        while state is not TurnState.COMPLETE:
            if state is TurnState.DRAFTING:
                response = await self.llm_service.generate(
                    system, messages, tools=tools, max_tokens=mode.max_output_tokens
                )
                if response.text.strip():
                    best_text = response.text
                if tools is None or not response.wants_tools or rounds >= self.max_tool_rounds:
                    state = TurnState.COMPLETE
                else:
                    state = TurnState.TOOL_PENDING
            else:
                rounds += 1
                self._run_tools(response, messages, trace, rounds)
                state = TurnState.DRAFTING

        hit_cap = tools is not None and response.wants_tools
        if hit_cap:
            logger.warning(
                f"⚠️ Tool round cap reached ({self.max_tool_rounds}); returning best available text"
            )
        text = best_text.strip() or UNAVAILABLE_MESSAGE
        logger.info(f"✅ Turn complete in {mode.name} mode: {rounds} tool rounds, {len(text)} chars")
        return TurnResult(text=text, rounds=rounds, hit_round_cap=hit_cap, tool_trace=trace, mode=mode.name)

    def _run_tools(
        self,
        response: LLMResponse,
        messages: list[dict[str, Any]],
        trace: list[dict[str, Any]],
        round_number: int,
    ) -> None:
        logger.info(f"🔧 Round {round_number}: processing {len(response.tool_calls)} tool calls")
        messages.append(
            {
                "role": "assistant",
                "content": response.text,
                "tool_calls": [call.to_dict() for call in response.tool_calls],
            }
        )
        for call in response.tool_calls:
            logger.info(f"  📞 Calling tool: {call.name}")
            logger.debug(f"     Arguments: {call.arguments}")
            result = self.gateway.execute(call.name, call.arguments)
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": call.id,
                    "name": call.name,
                    "content": result.content,
                    "is_error": result.is_error,
                }
            )
            trace.append(
                {
                    "round": round_number,
                    "name": call.name,
                    "arguments": call.arguments,
                    "is_error": result.is_error,
                }
            )
