"""Keyword search over the searchable partition.

Documents are scored by counting query-token occurrences and returned with
short line-based snippets as evidence.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from hybridchat.constants import (
    DEFAULT_MAX_RESULTS,
    MAX_SNIPPETS,
    MIN_TOKEN_LENGTH,
    SNIPPET_CONTEXT_LINES,
)
from hybridchat.service.documents import Document

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """One ranked search hit."""

    document_name: str
    relevance_score: int
    snippets: list[str] = field(default_factory=list)
    size_bytes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.document_name,
            "score": self.relevance_score,
            "snippets": list(self.snippets),
            "size_bytes": self.size_bytes,
        }


def tokenize(query: str) -> list[str]:
    """Lower-case and split a query, dropping tokens shorter than MIN_TOKEN_LENGTH.

    Two-letter acronyms such as "HQ" or "NL" are dropped too.
    """
    return [token for token in query.lower().split() if len(token) >= MIN_TOKEN_LENGTH]


def score_document(content: str, tokens: list[str]) -> int:
    """Sum of case-insensitive, non-overlapping occurrences of each token."""
    content_lower = content.lower()
    return sum(content_lower.count(token) for token in tokens)


def extract_snippets(
    content: str,
    tokens: list[str],
    max_snippets: int = MAX_SNIPPETS,
    context_lines: int = SNIPPET_CONTEXT_LINES,
) -> list[str]:
    """Extract up to max_snippets hit lines with surrounding context.

    Each snippet is a hit line plus context_lines before and after, clamped to
    the document bounds. A snippet never reuses a line already emitted by an
    earlier snippet, and scanning resumes after the emitted window.

    Args:
        content: Full document text
        tokens: Lower-cased query tokens
        max_snippets: Maximum snippets to return
        context_lines: Lines of context on each side of a hit

    Returns:
        list[str]: Trimmed snippets in document order
    """
    if not tokens or max_snippets <= 0:
        return []

    lines = content.split("\n")
    snippets: list[str] = []
    next_free = 0  # first line not yet covered by an emitted snippet
    i = 0

    while i < len(lines) and len(snippets) < max_snippets:
        line_lower = lines[i].lower()
        if not any(token in line_lower for token in tokens):
            i += 1
            continue

        start = max(next_free, i - context_lines)
        end = min(len(lines), i + context_lines + 1)
        snippets.append("\n".join(lines[start:end]).strip())
        next_free = end
        i = end

    return snippets


class KeywordSearchEngine:
    """Ranks a fixed set of documents against free-text queries."""

    def __init__(self, documents: Sequence[Document]) -> None:
        """Initialize the engine.

        Args:
            documents: The searchable partition, in catalog order. The order
                       breaks score ties.
        """
        self.documents = list(documents)

    def search(self, query: str, max_results: int = DEFAULT_MAX_RESULTS) -> list[SearchResult]:
        """Search the documents for query.

        Args:
            query: Free-text query
            max_results: Maximum number of results

        Returns:
            list[SearchResult]: Highest score first. Empty when nothing matches,
            which callers treat as "no relevant documents".
        """
        tokens = tokenize(query)
        if not tokens:
            logger.debug(f"No searchable tokens in query '{query[:100]}'")
            return []

        results = []
        for document in self.documents:
            score = score_document(document.content, tokens)
            if score == 0:
                continue
            results.append(
                SearchResult(
                    document_name=document.name,
                    relevance_score=score,
                    snippets=extract_snippets(document.content, tokens),
                    size_bytes=document.size_bytes,
                )
            )

        # sorted() is stable, so ties keep catalog order
        results = sorted(results, key=lambda result: result.relevance_score, reverse=True)
        logger.info(
            f"🔍 Search '{query[:100]}': {len(results)} matching documents, "
            f"returning {min(len(results), max(max_results, 0))}"
        )
        return results[: max(max_results, 0)]
