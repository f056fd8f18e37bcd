"""Chat service: turn, shaping and optional speech for one user message."""

import dataclasses
import logging
import time
from dataclasses import dataclass
from typing import Any

from hybridchat.errors import VoiceServiceError
from hybridchat.modes import ModeConfig, get_mode
from hybridchat.service.orchestrator import UNAVAILABLE_MESSAGE, Orchestrator, filter_history
from hybridchat.service.shaping import shape
from hybridchat.service.state import ResponseCache
from hybridchat.service.voice import ElevenLabsVoice, VoiceResult

logger = logging.getLogger(__name__)


@dataclass
class ChatReply:
    """A finished answer as returned to HTTP and CLI callers."""

    text: str
    audio: str | None = None
    mode: str = "text"
    rounds: int = 0
    hit_round_cap: bool = False
    voice: VoiceResult | None = None
    voice_usage: dict[str, Any] | None = None
    voice_configured: bool = False
    cached: bool = False
    response_time: float = 0.0

    @property
    def voice_available(self) -> bool:
        if self.voice is not None:
            return self.voice.available
        return self.voice_configured and bool(self.voice_usage and self.voice_usage["remaining"] > 0)

    @property
    def quota_exceeded(self) -> bool:
        if self.voice is not None:
            return self.voice.quota_exceeded
        return bool(self.voice_usage and self.voice_usage["remaining"] <= 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "audio": self.audio,
            "mode": self.mode,
            "rounds": self.rounds,
            "hitRoundCap": self.hit_round_cap,
            "voiceAvailable": self.voice_available,
            "quotaExceeded": self.quota_exceeded,
            "voiceUsage": self.voice_usage,
            "cached": self.cached,
            "responseTime": f"{self.response_time:.2f}s",
        }


class ChatService:
    """Answers user messages in a given mode."""

    def __init__(
        self,
        orchestrator: Orchestrator,
        voice: ElevenLabsVoice | None = None,
        cache: ResponseCache | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.voice = voice
        self.cache = cache

    def _voice_state(self) -> tuple[dict[str, Any] | None, bool]:
        if self.voice is None:
            return None, False
        return self.voice.usage.snapshot(), self.voice.configured

    async def respond(
        self,
        message: str,
        history: Any = None,
        mode: ModeConfig | str = "text",
    ) -> ChatReply:
        """Answer message in mode.

        Complete replies without conversation history and without audio are
        cached.
        A turn that needs audio but cannot get it (quota, no credentials)
        still returns its text with voice flags set.

        Raises:
            ValueError: If message is blank or the mode is unknown
            LLMServiceError: If the LLM collaborator fails
            VoiceServiceError: If speech synthesis fails; carries the text
        """
        if isinstance(mode, str):
            mode = get_mode(mode)
        started = time.perf_counter()

        cacheable = (
            self.cache is not None and not mode.synthesize_audio and not filter_history(history)
        )
        if cacheable:
            hit = self.cache.get(mode.name, message)
            if hit is not None:
                logger.info(f"⚡ Cache hit for {mode.name} mode")
                usage, configured = self._voice_state()
                return dataclasses.replace(
                    hit,
                    cached=True,
                    voice_usage=usage,
                    voice_configured=configured,
                    response_time=time.perf_counter() - started,
                )

        turn = await self.orchestrator.run_turn(message, history, mode)
        shaped = shape(turn.text, mode.profile)
        text = shaped.text or UNAVAILABLE_MESSAGE

        voice_result = None
        audio = None
        if mode.synthesize_audio:
            if self.voice is None:
                voice_result = VoiceResult(available=False, reason="not_configured")
            else:
                try:
                    voice_result = await self.voice.synthesize(shaped.speech or text)
                except VoiceServiceError as e:
                    e.text = text
                    raise
                audio = voice_result.audio

        usage, configured = self._voice_state()
        reply = ChatReply(
            text=text,
            audio=audio,
            mode=turn.mode,
            rounds=turn.rounds,
            hit_round_cap=turn.hit_round_cap,
            voice=voice_result,
            voice_usage=usage,
            voice_configured=configured,
            response_time=time.perf_counter() - started,
        )
        if cacheable and not turn.hit_round_cap and text != UNAVAILABLE_MESSAGE:
            self.cache.put(mode.name, message, reply)
        logger.info(f"⏱️ Reply ready in {reply.response_time:.2f}s ({reply.mode} mode)")
        return reply
