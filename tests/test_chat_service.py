"""Tests for the chat service."""

from unittest.mock import AsyncMock

import pytest

from hybridchat.errors import VoiceServiceError
from hybridchat.llm.base import LLMResponse
from hybridchat.modes import RESEARCH_MARKER
from hybridchat.service.chat import ChatReply, ChatService
from hybridchat.service.orchestrator import UNAVAILABLE_MESSAGE
from hybridchat.service.state import ResponseCache, VoiceUsage
from hybridchat.service.voice import ElevenLabsVoice, VoiceResult

from conftest import tool_request


def make_voice(usage: VoiceUsage, result: VoiceResult | None = None, error: Exception | None = None):
    voice = ElevenLabsVoice(api_key="k", voice_id="v", usage=usage)
    voice.synthesize = AsyncMock(return_value=result, side_effect=error)
    return voice


class TestRespond:
    """Tests for ChatService.respond."""

    @pytest.mark.asyncio
    async def test_text_mode_reply(self, fake_llm, make_orchestrator):
        """Test a text-mode answer with no audio."""
        llm = fake_llm(LLMResponse(text="**Bold** answer."))
        service = ChatService(make_orchestrator(llm))

        reply = await service.respond("q", [], "text")

        assert reply.text == "**Bold** answer."
        assert reply.audio is None
        assert reply.mode == "text"
        assert not reply.cached

    @pytest.mark.asyncio
    async def test_voice_mode_shapes_and_synthesizes(self, fake_llm, make_orchestrator, usage):
        """Test that voice mode strips markup and speaks the expanded text."""
        llm = fake_llm(LLMResponse(text="## Answer\n\nThe **MOU** was signed by NL."))
        voice = make_voice(usage, VoiceResult(audio="data:audio/mpeg;base64,AAA", characters=10))
        service = ChatService(make_orchestrator(llm), voice=voice)

        reply = await service.respond("q", [], "voice")

        assert reply.text == "Answer The MOU was signed by NL."
        assert reply.audio == "data:audio/mpeg;base64,AAA"
        voice.synthesize.assert_awaited_once_with("Answer The M-O-U was signed by Newfoundland and Labrador.")
        assert reply.voice_available

    @pytest.mark.asyncio
    async def test_quota_exceeded_keeps_text(self, fake_llm, make_orchestrator):
        """Test that an exhausted budget returns the text with audio null."""
        llm = fake_llm(LLMResponse(text="x " * 250))
        usage = VoiceUsage(monthly_limit=100_000, used=99_900)
        voice = ElevenLabsVoice(api_key="k", voice_id="v", usage=usage)
        service = ChatService(make_orchestrator(llm), voice=voice)

        reply = await service.respond("q", [], "voice")
        payload = reply.to_dict()

        assert payload["audio"] is None
        assert payload["quotaExceeded"] is True
        assert payload["voiceAvailable"] is False
        assert payload["text"]
        assert payload["voiceUsage"]["remaining"] == 100

    @pytest.mark.asyncio
    async def test_voice_failure_carries_text(self, fake_llm, make_orchestrator, usage):
        """Test that a TTS failure propagates with the shaped text attached."""
        llm = fake_llm(LLMResponse(text="Plain answer."))
        voice = make_voice(usage, error=VoiceServiceError("502 from TTS"))
        service = ChatService(make_orchestrator(llm), voice=voice)

        with pytest.raises(VoiceServiceError) as exc_info:
            await service.respond("q", [], "voice")

        assert exc_info.value.text == "Plain answer."

    @pytest.mark.asyncio
    async def test_voice_mode_without_voice_client(self, fake_llm, make_orchestrator):
        """Test that voice mode without a TTS client still answers in text."""
        llm = fake_llm(LLMResponse(text="Plain answer."))
        reply = await ChatService(make_orchestrator(llm)).respond("q", [], "voice")

        assert reply.text == "Plain answer."
        assert reply.audio is None
        assert not reply.voice_available

    @pytest.mark.asyncio
    async def test_research_fallback_is_still_spoken(self, fake_llm, make_orchestrator, usage):
        """Test that a deferred voice question is answered by deep mode and spoken."""
        llm = fake_llm(
            LLMResponse(text=f"{RESEARCH_MARKER}."),
            LLMResponse(text="The rate is 2.5 cents/kWh."),
        )
        voice = make_voice(usage, VoiceResult(audio="data:audio/mpeg;base64,AAA"))
        service = ChatService(make_orchestrator(llm), voice=voice)

        reply = await service.respond("q", [], "voice")

        assert reply.mode == "deep"
        voice.synthesize.assert_awaited_once_with("The rate is 2.5 cents per kilowatt hours.")

    @pytest.mark.asyncio
    async def test_markup_only_answer_becomes_unavailable(self, fake_llm, make_orchestrator):
        """Test that an answer with nothing left after shaping is never empty."""
        llm = fake_llm(LLMResponse(text="***"))
        reply = await ChatService(make_orchestrator(llm)).respond("q", [], "fast")

        assert reply.text == UNAVAILABLE_MESSAGE


class TestCaching:
    """Tests for response caching in ChatService."""

    @pytest.mark.asyncio
    async def test_repeat_question_served_from_cache(self, fake_llm, make_orchestrator):
        """Test that a history-free text question is answered once."""
        llm = fake_llm(LLMResponse(text="first"), LLMResponse(text="second"))
        service = ChatService(make_orchestrator(llm), cache=ResponseCache())

        first = await service.respond("What is CF?", [], "text")
        second = await service.respond("what is  CF?", [], "text")

        assert first.text == second.text == "first"
        assert second.cached
        assert len(llm.calls) == 1

    @pytest.mark.asyncio
    async def test_history_bypasses_cache(self, fake_llm, make_orchestrator):
        """Test that follow-up questions are never cached."""
        llm = fake_llm(LLMResponse(text="first"), LLMResponse(text="second"))
        service = ChatService(make_orchestrator(llm), cache=ResponseCache())
        history = [{"role": "user", "content": "earlier"}, {"role": "assistant", "content": "reply"}]

        await service.respond("q", history, "text")
        reply = await service.respond("q", history, "text")

        assert reply.text == "second"
        assert not reply.cached

    @pytest.mark.asyncio
    async def test_round_cap_reply_not_cached(self, fake_llm, make_orchestrator):
        """Test that an answer cut off by the round cap is not cached."""
        llm = fake_llm(default=tool_request("list_documents", text="Partial."))
        cache = ResponseCache()
        service = ChatService(make_orchestrator(llm, max_tool_rounds=1), cache=cache)

        reply = await service.respond("q", [], "text")

        assert reply.hit_round_cap
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_unavailable_reply_not_cached(self, fake_llm, make_orchestrator):
        """Test that the unavailable answer is retried on the next request."""
        llm = fake_llm(LLMResponse(text=""), LLMResponse(text="Real answer."))
        service = ChatService(make_orchestrator(llm), cache=ResponseCache())

        first = await service.respond("q", [], "text")
        second = await service.respond("q", [], "text")

        assert first.text == UNAVAILABLE_MESSAGE
        assert second.text == "Real answer."
        assert not second.cached

    @pytest.mark.asyncio
    async def test_voice_replies_not_cached(self, fake_llm, make_orchestrator, usage):
        """Test that replies carrying audio are never cached."""
        llm = fake_llm(LLMResponse(text="one"), LLMResponse(text="two"))
        voice = make_voice(usage, VoiceResult(audio="data:audio/mpeg;base64,AAA"))
        cache = ResponseCache()
        service = ChatService(make_orchestrator(llm), voice=voice, cache=cache)

        await service.respond("q", [], "voice")

        assert len(cache) == 0


class TestChatReply:
    """Tests for ChatReply serialization."""

    def test_to_dict_keys(self):
        """Test the HTTP payload shape."""
        reply = ChatReply(text="hi", mode="fast", rounds=2, response_time=1.234)
        payload = reply.to_dict()

        assert payload["text"] == "hi"
        assert payload["mode"] == "fast"
        assert payload["rounds"] == 2
        assert payload["responseTime"] == "1.23s"
        assert payload["audio"] is None
        assert set(payload) == {
            "text",
            "audio",
            "mode",
            "rounds",
            "hitRoundCap",
            "voiceAvailable",
            "quotaExceeded",
            "voiceUsage",
            "cached",
            "responseTime",
        }

    def test_voice_flags_from_usage_when_no_synthesis(self):
        """Test that text replies still report whether voice is available."""
        reply = ChatReply(
            text="hi",
            voice_usage={"used": 10, "limit": 10, "remaining": 0, "percentUsed": 100.0},
            voice_configured=True,
        )

        assert reply.quota_exceeded
        assert not reply.voice_available
