"""Error family for hybridchat.

Tool-local errors are absorbed into the conversation; everything else aborts
the enclosing operation and is reported to the caller.
"""

from typing import Any


class HybridChatError(Exception):
    """Base class for hybridchat errors."""


class DocumentStoreError(HybridChatError):
    """The document store could not be initialized (misconfiguration)."""


class DocumentNotFoundError(HybridChatError, KeyError):
    """A document name is not present in the store."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Document '{self.name}' not found"


class ToolError(HybridChatError):
    """A tool call failed in a way the model can react to.

    Attributes:
        kind: One of "invalid_input", "not_found", "unknown_tool",
              "execution_failed".
        message: Human-readable description, fed back to the model.
        details: Optional structured details (e.g. validation errors).
    """

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    UNKNOWN_TOOL = "unknown_tool"
    EXECUTION_FAILED = "execution_failed"

    def __init__(self, kind: str, message: str, details: list[Any] | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or []

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class LLMServiceError(HybridChatError):
    """The LLM collaborator was unreachable or returned an error."""

    retryable = True


class VoiceServiceError(HybridChatError):
    """The text-to-speech collaborator was unreachable or returned an error."""

    retryable = True

    def __init__(self, message: str, text: str | None = None) -> None:
        super().__init__(message)
        # Shaped answer text of the turn whose audio failed, when known
        self.text = text
