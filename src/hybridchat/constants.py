"""Application-wide constants and defaults for hybridchat.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os

# =============================================================================
# Document Catalog
# =============================================================================
DEFAULT_CONTENT_DIR = "content"

# Resident documents are injected into every LLM call, so their combined size
# is the per-request context cost.
DEFAULT_RESIDENT_DOCUMENTS = [
    "MOU_Churchill_Falls_Dec_12_2024_clean_text.txt",
    "Doug-video-series-video1.txt",
    "Doug-video-series-video2A.txt",
    "Doug-video-series-video2B.txt",
    "Doug-video-series-video3A.txt",
    "Doug-video-series-video3B.txt",
    "Doug-video-series-video4.txt",
    "LOCKE analysis of MOU CF.txt",
    "Churchill-falls-consolidated-financial-statements-2024.txt",
    "HYDRO-QUEBECS-EXPORTS.txt",
    "Churchill-Falls-2023-financial-statement.txt",
    "Reassessing-the-Churchill-Falls-MOU.txt",
    "Churchill_Falls_Annual_Report_2024.txt",
    "HQ-exports-electricity-price-escalation.txt",
    "Lower-Churchill-Project-Combined-Financial-Statements-2024.txt",
]

# Searchable documents are only reachable through the retrieval tools.
DEFAULT_SEARCHABLE_DOCUMENTS = [
    "MOU_Churchill_Falls_Dec_12_2024_clean_text.txt",
    "LOCKE analysis of MOU CF.txt",
    "Reassessing-the-Churchill-Falls-MOU.txt",
    "Doug-video-series-video1.txt",
    "Doug-video-series-video2A.txt",
    "Doug-video-series-video2B.txt",
    "Doug-video-series-video3A.txt",
    "Doug-video-series-video3B.txt",
    "Doug-video-series-video4.txt",
    "Churchill-falls-consolidated-financial-statements-2024.txt",
    "Lower-Churchill-Project-Combined-Financial-Statements-2024.txt",
    "HYDRO-QUEBECS-EXPORTS.txt",
    "Churchill-Falls-2023-financial-statement.txt",
    "Analyis-James-P-Feehan.txt",
    "Assessment-of-Proposed-Prices.txt",
    "Churchill_Falls_Annual_Report_2024.txt",
    "Churchill-falls-consolidated-financial-statements-2022.txt",
    "Churchill-falls-financial-statements-2021.txt",
    "CHURCHILL-FALLS-POWER-CONTRACT.txt",
    "Feehan, James P., Smallwood, Churchill Falls, and the Power Corridor through Quebec.txt",
    "Gull_Island_Contract_2002.txt",
    "History_Churchill_River_Hydro_Development_1949-2007.txt",
    "history-of-churchill-falls-development.txt",
    "HQ_Action_Plan_2035_clean_text.txt",
    "HQ_Production_July_2025_text.txt",
    "HQ-exports-electricity-price-escalation.txt",
    "hq-quarterly-bulletin.txt",
    "HYDRO_MOU_GNL_Jan_2025.txt",
    "Hydro-quebec-annual-report-2024.txt",
    "HYDRO-QUEBECS-IMPORTS.txt",
    "MOU_s_Societal_Values.txt",
    "lower-churchill-projects.txt",
    "NL-Debt-Fiscal-Sustainability.txt",
    "Proposed-Prices-for-Existing-Power.txt",
    "quebecs-changing-import-picture.txt",
    "quebecs-electricity-supply-problem.txt",
    "The-Assessment-of-the-Proposed-Proj.txt",
    "Understanding-Some-Financial-Concep.txt",
]

# =============================================================================
# Search Settings
# =============================================================================
DEFAULT_MAX_RESULTS = 5  # Default number of documents returned by a search
MAX_RESULTS_CEILING = 50  # Largest max_results the search tool accepts
MIN_TOKEN_LENGTH = 3  # Query tokens shorter than this are ignored
MAX_SNIPPETS = 3  # Snippets extracted per matching document
SNIPPET_CONTEXT_LINES = 2  # Lines of context before and after a hit

# =============================================================================
# LLM Settings
# =============================================================================
MAX_TOOL_ROUNDS = 5  # Maximum tool-call rounds per user turn
MAX_HISTORY_MESSAGES = 20  # Most recent history entries forwarded to the LLM
DEFAULT_LLM_SERVICE = "anthropic"
DEFAULT_OLLAMA_HOST = "http://localhost:11434"

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "ollama": "llama3.1",
    "gemini": "gemini-2.5-flash",
}

# =============================================================================
# Voice (Text-to-Speech) Settings
# =============================================================================
ELEVENLABS_API_URL = "https://api.elevenlabs.io/v1/text-to-speech"
DEFAULT_ELEVENLABS_MODEL = "eleven_monolingual_v1"
DEFAULT_VOICE_STABILITY = 0.5
DEFAULT_VOICE_SIMILARITY_BOOST = 0.75
DEFAULT_MONTHLY_VOICE_LIMIT = 100_000  # Characters per month
DEFAULT_TTS_MAX_CHARS = 10_000  # Per-request character ceiling of the TTS service
TTS_TIMEOUT_SECONDS = 60

# =============================================================================
# Response Cache
# =============================================================================
DEFAULT_RESPONSE_CACHE_TTL = 3600  # Seconds
DEFAULT_RESPONSE_CACHE_SIZE = 256

# =============================================================================
# Default Hosts
# =============================================================================
DEFAULT_FLASK_PORT = 3000
DEFAULT_MCP_PORT = 8001


def get_default_model(service: str | None = None) -> str:
    """Get the default chat model for a given LLM service.

    Checks the LLM_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The LLM service name ("anthropic", "ollama" or "gemini").
                If None, uses LLM_SERVICE env var or DEFAULT_LLM_SERVICE.

    Returns:
        str: The model name to use.
    """
    env_model = os.getenv("LLM_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE)

    return DEFAULT_MODELS.get(service, DEFAULT_MODELS[DEFAULT_LLM_SERVICE])


def env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to a default."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def env_list(name: str, default: list[str]) -> list[str]:
    """Read a comma-separated environment variable as a list of names."""
    value = os.getenv(name, "")
    if not value.strip():
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]
