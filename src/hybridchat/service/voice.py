"""ElevenLabs text-to-speech client with a monthly character budget."""

import asyncio
import base64
import logging
import os
from dataclasses import dataclass

import requests
from dotenv import load_dotenv

from hybridchat.constants import (
    DEFAULT_ELEVENLABS_MODEL,
    DEFAULT_MONTHLY_VOICE_LIMIT,
    DEFAULT_TTS_MAX_CHARS,
    DEFAULT_VOICE_SIMILARITY_BOOST,
    DEFAULT_VOICE_STABILITY,
    ELEVENLABS_API_URL,
    TTS_TIMEOUT_SECONDS,
    env_int,
)
from hybridchat.errors import VoiceServiceError
from hybridchat.service.shaping import truncate_at_sentence
from hybridchat.service.state import VoiceUsage

logger = logging.getLogger(__name__)


@dataclass
class VoiceResult:
    """Outcome of a synthesis request.

    audio is None whenever no audio was produced; quota_exceeded and
    available say why.
    """

    audio: str | None = None
    characters: int = 0
    quota_exceeded: bool = False
    available: bool = True
    reason: str | None = None


class ElevenLabsVoice:
    """Synthesizes speech through the ElevenLabs API."""

    def __init__(
        self,
        api_key: str | None,
        voice_id: str | None,
        usage: VoiceUsage,
        model_id: str = DEFAULT_ELEVENLABS_MODEL,
        max_chars: int = DEFAULT_TTS_MAX_CHARS,
        stability: float = DEFAULT_VOICE_STABILITY,
        similarity_boost: float = DEFAULT_VOICE_SIMILARITY_BOOST,
        timeout: float = TTS_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the voice client.

        Args:
            api_key: ElevenLabs API key (voice is disabled when missing)
            voice_id: ElevenLabs voice identifier (voice is disabled when missing)
            usage: Shared monthly usage counter
            model_id: ElevenLabs model
            max_chars: Per-request character ceiling of the service
            stability: Voice stability setting
            similarity_boost: Voice similarity setting
            timeout: HTTP timeout in seconds
        """
        self.api_key = api_key
        self.voice_id = voice_id
        self.usage = usage
        self.model_id = model_id
        self.max_chars = max_chars
        self.stability = stability
        self.similarity_boost = similarity_boost
        self.timeout = timeout

    @classmethod
    def from_env(cls, usage: VoiceUsage | None = None) -> "ElevenLabsVoice":
        """Create a client from ELEVENLABS_* and MONTHLY_VOICE_LIMIT variables."""
        load_dotenv()
        if usage is None:
            usage = VoiceUsage(env_int("MONTHLY_VOICE_LIMIT", DEFAULT_MONTHLY_VOICE_LIMIT))
        return cls(
            api_key=os.getenv("ELEVENLABS_API_KEY"),
            voice_id=os.getenv("ELEVENLABS_VOICE_ID"),
            usage=usage,
            model_id=os.getenv("ELEVENLABS_MODEL_ID", DEFAULT_ELEVENLABS_MODEL),
            max_chars=env_int("TTS_MAX_CHARS", DEFAULT_TTS_MAX_CHARS),
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.voice_id)

    def prepare(self, text: str) -> str:
        """Fit text under the per-request ceiling, cutting at a sentence boundary."""
        if len(text) <= self.max_chars:
            return text
        prepared = truncate_at_sentence(text, self.max_chars, unit="chars", marker="")
        logger.warning(f"⚠️ Speech text too long ({len(text)} chars), truncated to {len(prepared)}")
        return prepared

    def _post(self, text: str) -> bytes:
        response = requests.post(
            f"{ELEVENLABS_API_URL}/{self.voice_id}",
            headers={
                "Accept": "audio/mpeg",
                "Content-Type": "application/json",
                "xi-api-key": self.api_key,
            },
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": {
                    "stability": self.stability,
                    "similarity_boost": self.similarity_boost,
                },
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.content

    async def synthesize(self, text: str) -> VoiceResult:
        """Convert text to speech.

        The monthly budget is checked before the service is called; a request
        that would exceed it is skipped with quota_exceeded set.

        Args:
            text: Speech text (already shaped for speech)

        Returns:
            VoiceResult with a data URI on success

        Raises:
            VoiceServiceError: If the service is unreachable or returns an error
        """
        if not self.configured:
            logger.info("⚠️ Voice generation skipped: API key or voice ID not configured")
            return VoiceResult(available=False, reason="not_configured")

        prepared = self.prepare(text)
        if not prepared:
            return VoiceResult(reason="empty_text")

        if self.usage.would_exceed(len(prepared)):
            logger.warning(
                f"⚠️ Monthly voice limit reached ({self.usage.get()}/{self.usage.monthly_limit} "
                f"chars used, {len(prepared)} requested)"
            )
            return VoiceResult(
                characters=len(prepared),
                quota_exceeded=True,
                available=False,
                reason="quota_exceeded",
            )

        logger.info(f"🎤 Generating voice ({len(prepared)} chars)...")
        try:
            audio_bytes = await asyncio.to_thread(self._post, prepared)
        except requests.RequestException as e:
            logger.error(f"❌ Voice generation failed: {e}", exc_info=True)
            raise VoiceServiceError(f"Text-to-speech service error: {e}") from e

        self.usage.increment(len(prepared))
        logger.info(
            f"✓ Voice generated ({self.usage.get()}/{self.usage.monthly_limit} chars used)"
        )
        audio = base64.b64encode(audio_bytes).decode("ascii")
        return VoiceResult(audio=f"data:audio/mpeg;base64,{audio}", characters=len(prepared))
