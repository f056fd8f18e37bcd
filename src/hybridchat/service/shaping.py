"""Response shaping for on-screen text and speech synthesis.

Transforms are expressed as ordered (pattern, replacement) rules applied by
one generic function, so rule sets can be tested and extended on their own.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

Rule = tuple[re.Pattern[str], str | Callable[[re.Match[str]], str]]

CONTINUATION_MARKER = "..."


def apply_rules(text: str, rules: list[Rule]) -> str:
    """Apply each (pattern, replacement) rule to text, in order."""
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


# =============================================================================
# Markup stripping
# =============================================================================
# Every rule only deletes characters, so repeated passes reach a fixpoint.
MARKUP_RULES: list[Rule] = [
    # Code fences (the fenced text itself is kept)
    (re.compile(r"^[ \t]*(?:`{3,}|~{3,})[^\n]*(?:\n|$)", re.M), ""),
    # Horizontal rules
    (re.compile(r"^[ \t]*([-*_])(?:[ \t]*\1){2,}[ \t]*$", re.M), ""),
    # Headers, block quotes, bullet and numbered list markers
    (re.compile(r"^[ \t]*(?:#{1,6}[ \t]+|>[ \t]*|(?:[-*+•]|\d+[.)])[ \t]+)+", re.M), ""),
    # Images and links keep their text
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),
    # Emphasis
    (re.compile(r"(\*\*|__)(?=\S)(.+?)(?<=\S)\1"), r"\2"),
    (re.compile(r"(?<![\w*])\*(?=\S)(.+?)(?<=\S)\*(?![\w*])"), r"\1"),
    (re.compile(r"(?<![\w_])_(?=\S)(.+?)(?<=\S)_(?![\w_])"), r"\1"),
    (re.compile(r"~~(?=\S)(.+?)(?<=\S)~~"), r"\1"),
    # Inline code
    (re.compile(r"`([^`\n]+)`"), r"\1"),
    # Trailing spaces and runs of blank lines
    (re.compile(r"[ \t]+$", re.M), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
]


def strip_markup(text: str) -> str:
    """Remove markdown markup, keeping the readable text.

    Idempotent: strip_markup(strip_markup(x)) == strip_markup(x).
    """
    while True:
        stripped = apply_rules(text, MARKUP_RULES).strip()
        if stripped == text:
            return stripped
        text = stripped


def flatten_whitespace(text: str) -> str:
    """Collapse all whitespace, newlines included, to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


# =============================================================================
# Speech expansion
# =============================================================================
_NUMBER = r"(\d[\d,]*(?:\.\d+)?)"

SPEECH_RULES: list[Rule] = [
    (re.compile(r"Hydro-Québec"), "Hydro-Quebec"),
    # Currency shorthand
    (re.compile(rf"\$\s?{_NUMBER}\s?(?:B|bn|[Bb]illion)\b"), r"\1 billion dollars"),
    (re.compile(rf"\$\s?{_NUMBER}\s?(?:M|[Mm]illion)\b"), r"\1 million dollars"),
    (re.compile(rf"\$\s?{_NUMBER}\s?(?:K|[Tt]housand)\b"), r"\1 thousand dollars"),
    (re.compile(rf"\$\s?{_NUMBER}"), r"\1 dollars"),
    (re.compile(rf"{_NUMBER}\s?%"), r"\1 percent"),
    (re.compile(rf"{_NUMBER}\s?¢"), r"\1 cents"),
    # Rates such as "cents/kWh"
    (re.compile(r"\s?/\s?(?=(?:TWh|GWh|MWh|kWh|GW|MW|kW|year|yr)\b)"), " per "),
    # Energy and power units
    (re.compile(r"\bTWh\b"), "terawatt hours"),
    (re.compile(r"\bGWh\b"), "gigawatt hours"),
    (re.compile(r"\bMWh\b"), "megawatt hours"),
    (re.compile(r"\bkWh\b"), "kilowatt hours"),
    (re.compile(r"\bGW\b"), "gigawatts"),
    (re.compile(r"\bMW\b"), "megawatts"),
    (re.compile(r"\bkW\b"), "kilowatts"),
    # Domain acronyms
    (re.compile(r"\bCF\(L\)Co\b"), "Churchill Falls Labrador Corporation"),
    (re.compile(r"\bMOUs\b"), "M-O-Us"),
    (re.compile(r"\bMOU\b"), "M-O-U"),
    (re.compile(r"\bGNL\b"), "the Government of Newfoundland and Labrador"),
    (re.compile(r"\bNL\b"), "Newfoundland and Labrador"),
    (re.compile(r"\bHQ\b"), "Hydro-Quebec"),
    (re.compile(r"\bCF\b"), "Churchill Falls"),
    (re.compile(r"\bQC\b"), "Quebec"),
    (re.compile(r"\bNPV\b"), "net present value"),
    # Latin and common abbreviations
    (re.compile(r"\be\.g\.", re.I), "for example"),
    (re.compile(r"\bi\.e\.", re.I), "that is"),
    (re.compile(r"\betc\.", re.I), "et cetera"),
    (re.compile(r"\bvs\b\.?", re.I), "versus"),
    (re.compile(r"\bapprox\.", re.I), "approximately"),
]


def expand_for_speech(text: str, rules: list[Rule] | None = None) -> str:
    """Replace acronyms, units and symbols with their spoken forms."""
    return apply_rules(text, SPEECH_RULES if rules is None else rules)


# =============================================================================
# Sentence-safe truncation
# =============================================================================
ABBREVIATIONS = frozenset(
    {
        "mr", "mrs", "ms", "dr", "prof", "sr", "jr", "st", "mt", "hon", "gen",
        "vs", "e.g", "i.e", "cf", "inc", "ltd", "co", "corp", "approx",
        "dept", "fig", "govt", "jan", "feb", "mar", "apr", "jun", "jul",
        "aug", "sep", "sept", "oct", "nov", "dec", "u.s",
    }
)

# Abbreviations only when a number follows, as in "No. 4"
NUMBER_ABBREVIATIONS = frozenset({"no", "nos"})

_SENTENCE_END = re.compile(r"[.!?]+[\"'”’)\]]*")
_CLAUSE_BREAK = re.compile(r"[,;:](?=\s)|\s+[-–—]+(?=\s)|—")
_WORD = re.compile(r"\S+")


def _is_abbreviation(text: str, match: re.Match[str]) -> bool:
    if "." not in match.group() or "!" in match.group() or "?" in match.group():
        return False
    start = match.start()
    word_start = start
    while word_start > 0 and (text[word_start - 1].isalpha() or text[word_start - 1] == "."):
        word_start -= 1
    word = text[word_start:start]
    if len(word) == 1 and word.isupper():
        return True  # an initial, as in "James P. Feehan"
    if word.lower() in NUMBER_ABBREVIATIONS:
        rest = text[match.end() :].lstrip()
        return rest[:1].isdigit()
    return word.lower() in ABBREVIATIONS


def _last_sentence_end(text: str, window_end: int) -> int | None:
    last = None
    for match in _SENTENCE_END.finditer(text):
        end = match.end()
        if end > window_end:
            break
        if end < len(text) and not text[end].isspace():
            continue  # decimal point, "e.g" interior, URL and so on
        if _is_abbreviation(text, match):
            continue
        last = end
    return last


def _last_clause_end(text: str, window_end: int) -> int | None:
    last = None
    for match in _CLAUSE_BREAK.finditer(text):
        if match.start() >= window_end:
            break
        if text[: match.start()].strip():
            last = match.start()
    return last


def _last_word_end(text: str, window_end: int) -> int | None:
    if window_end >= len(text) or text[window_end].isspace():
        return window_end
    for index in range(window_end - 1, 0, -1):
        if text[index].isspace():
            return index
    return None


def _word_window_end(text: str, limit: int) -> int:
    for count, match in enumerate(_WORD.finditer(text), start=1):
        if count == limit:
            return match.end()
    return len(text)


def truncate_at_sentence(
    text: str,
    limit: int,
    unit: str = "words",
    marker: str = CONTINUATION_MARKER,
) -> str:
    """Truncate text at the last complete sentence within limit.

    If no sentence ends within the limit, cut at the last clause boundary
    (comma, semicolon, colon or dash), then at the last word boundary, and
    append marker. Never cuts inside a word.

    Args:
        text: Text to truncate
        limit: Maximum number of words or characters
        unit: "words" or "chars"
        marker: Continuation marker appended in the fallback cases

    Returns:
        str: Text within the limit (plus at most one marker)
    """
    if unit not in ("words", "chars"):
        raise ValueError(f"Unsupported truncation unit: {unit}")

    text = text.strip()
    if limit <= 0 or not text:
        return ""

    size = len(text.split()) if unit == "words" else len(text)
    if size <= limit:
        return text

    window_end = _word_window_end(text, limit) if unit == "words" else limit

    cut = _last_sentence_end(text, window_end)
    if cut is not None:
        return text[:cut]

    cut = _last_clause_end(text, window_end)
    if cut is None:
        cut = _last_word_end(text, window_end)
    if cut is None:
        return ""

    head = text[:cut].rstrip()
    return head + marker if head else ""


# =============================================================================
# Profiles
# =============================================================================
@dataclass(frozen=True)
class ShapingProfile:
    """Which shaping stages run, and the length budget."""

    name: str
    strip: bool = False
    flatten: bool = False
    expand_speech: bool = False
    max_words: int | None = None
    max_chars: int | None = None


TEXT_PROFILE = ShapingProfile(name="text")
BRIEF_PROFILE = ShapingProfile(name="brief", strip=True, max_words=200)
VOICE_PROFILE = ShapingProfile(
    name="voice", strip=True, flatten=True, expand_speech=True, max_words=80
)


@dataclass
class ShapedResponse:
    """Display text, plus the speech rendition for speech profiles."""

    text: str
    speech: str | None = None


def shape(text: str, profile: ShapingProfile) -> ShapedResponse:
    """Run the profile's shaping stages over raw model text."""
    shaped = text.strip()
    if profile.strip:
        shaped = strip_markup(shaped)
    if profile.flatten:
        shaped = flatten_whitespace(shaped)
    if profile.max_words:
        shaped = truncate_at_sentence(shaped, profile.max_words, unit="words")
    if profile.max_chars:
        shaped = truncate_at_sentence(shaped, profile.max_chars, unit="chars")

    speech = expand_for_speech(shaped) if profile.expand_speech else None
    return ShapedResponse(text=shaped, speech=speech)
