"""Named configurations of the single chat code path.

A mode decides which documents the model sees, whether retrieval tools are
offered, the output budget, how the answer is shaped, and whether audio is
synthesized. Prompts here are deliberately minimal; persona and business
wording are deployment content.
"""

from dataclasses import dataclass
from typing import Any

from hybridchat.service.shaping import (
    BRIEF_PROFILE,
    TEXT_PROFILE,
    VOICE_PROFILE,
    ShapingProfile,
)

RESEARCH_MARKER = "Please stand by, I'm researching that"

BASE_PROMPT = (
    "You answer questions about a fixed collection of documents. "
    "Base every answer on the documents you are given or can retrieve. "
    "If the documents do not cover a question, say so plainly."
)

TOOLS_PROMPT = (
    "You can call search_documents, get_document and list_documents to read "
    "supplementary documents. Search before saying that something is not covered."
)

VOICE_PROMPT = (
    f"{BASE_PROMPT} Your answer will be spoken aloud: use plain sentences, "
    "no lists, headers or formatting, and keep it under 80 words. "
    "If the core documents below do not contain the answer, reply with exactly "
    f'"{RESEARCH_MARKER}."'
)

FAST_PROMPT = f"{BASE_PROMPT} Answer briefly from the core documents below."


@dataclass(frozen=True)
class ModeConfig:
    """Parameters of one chat mode."""

    name: str
    system_prompt: str
    use_resident: bool
    tools_enabled: bool
    max_output_tokens: int
    profile: ShapingProfile
    synthesize_audio: bool = False
    fallback_mode: str | None = None
    fallback_marker: str | None = None

    def wants_fallback(self, text: str) -> bool:
        """Whether the answer hands the question off to the fallback mode."""
        if not self.fallback_mode or not self.fallback_marker:
            return False
        return self.fallback_marker.lower() in text.lower()


VOICE_MODE = ModeConfig(
    name="voice",
    system_prompt=VOICE_PROMPT,
    use_resident=True,
    tools_enabled=False,
    max_output_tokens=300,
    profile=VOICE_PROFILE,
    synthesize_audio=True,
    fallback_mode="deep",
    fallback_marker=RESEARCH_MARKER,
)

TEXT_MODE = ModeConfig(
    name="text",
    system_prompt=f"{BASE_PROMPT} {TOOLS_PROMPT}",
    use_resident=True,
    tools_enabled=True,
    max_output_tokens=4096,
    profile=TEXT_PROFILE,
)

FAST_MODE = ModeConfig(
    name="fast",
    system_prompt=FAST_PROMPT,
    use_resident=True,
    tools_enabled=False,
    max_output_tokens=1000,
    profile=BRIEF_PROFILE,
)

DEEP_MODE = ModeConfig(
    name="deep",
    system_prompt=f"{BASE_PROMPT} {TOOLS_PROMPT}",
    use_resident=False,
    tools_enabled=True,
    max_output_tokens=4096,
    profile=TEXT_PROFILE,
)

MODES: dict[str, ModeConfig] = {
    mode.name: mode for mode in (VOICE_MODE, TEXT_MODE, FAST_MODE, DEEP_MODE)
}

DEFAULT_MODE = "text"


def get_mode(name: str) -> ModeConfig:
    """Look up a mode by name.

    Raises:
        ValueError: If no mode has that name
    """
    try:
        return MODES[name]
    except KeyError:
        raise ValueError(
            f"Unknown mode '{name}'. Expected one of: {', '.join(sorted(MODES))}"
        ) from None


def resolve_mode(payload: dict[str, Any]) -> ModeConfig:
    """Pick the mode for a chat request.

    An explicit "mode" wins; otherwise the legacy flags are honored with
    deepResearch taking precedence over isVoiceMode/requestVoice.
    """
    name = payload.get("mode")
    if name is not None:
        if not isinstance(name, str):
            raise ValueError("mode must be a string")
        return get_mode(name.strip().lower())
    if payload.get("deepResearch"):
        return DEEP_MODE
    if payload.get("isVoiceMode") or payload.get("requestVoice"):
        return VOICE_MODE
    return MODES[DEFAULT_MODE]
