"""Retrieval tool gateway.

Adapts the document store and the keyword search engine into a small set of
declared tools. The declared input schemas are surfaced verbatim to the LLM,
and every call is validated against them before it runs.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hybridchat.constants import DEFAULT_MAX_RESULTS, MAX_RESULTS_CEILING
from hybridchat.errors import ToolError
from hybridchat.service.documents import DocumentStore
from hybridchat.service.search import KeywordSearchEngine

logger = logging.getLogger(__name__)


class SearchDocumentsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    query: str = Field(
        min_length=1,
        description="Search query (keywords to find in the supplementary documents)",
    )
    max_results: int = Field(
        default=DEFAULT_MAX_RESULTS,
        ge=1,
        le=MAX_RESULTS_CEILING,
        description=(
            f"Maximum number of results to return, 1 to {MAX_RESULTS_CEILING} "
            f"(default: {DEFAULT_MAX_RESULTS})"
        ),
    )


class GetDocumentInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    filename: str = Field(
        min_length=1,
        description="Name of the supplementary document file to retrieve",
    )


class ListDocumentsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class ToolSpec:
    """Declarative tool: name, description, input schema and handler."""

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], Any]

    def definition(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.args_schema.model_json_schema(),
        }


@dataclass
class ToolResult:
    """Outcome of one tool call, as fed back to the model."""

    tool_name: str
    content: str
    is_error: bool = False


class RetrievalGateway:
    """Exposes search, fetch and listing over the searchable partition."""

    def __init__(self, store: DocumentStore, searchable_names: list[str]) -> None:
        """Initialize the gateway.

        Args:
            store: Loaded document store
            searchable_names: Names of the searchable partition, in catalog order
        """
        self.store = store
        self.documents = store.partition(searchable_names)
        self._names = {document.name for document in self.documents}
        self.engine = KeywordSearchEngine(self.documents)
        self._tools = {
            spec.name: spec
            for spec in (
                ToolSpec(
                    name="search_documents",
                    description=(
                        "Search the supplementary documents by keyword. Returns the "
                        "best matching documents with short text snippets. Documents "
                        "already in context do not need to be searched."
                    ),
                    args_schema=SearchDocumentsInput,
                    handler=lambda args: self.search_documents(args.query, args.max_results),
                ),
                ToolSpec(
                    name="get_document",
                    description=(
                        "Retrieve the full content of a specific supplementary document "
                        "by filename."
                    ),
                    args_schema=GetDocumentInput,
                    handler=lambda args: self.get_document(args.filename),
                ),
                ToolSpec(
                    name="list_documents",
                    description="List all available supplementary documents with their sizes.",
                    args_schema=ListDocumentsInput,
                    handler=lambda args: self.list_documents(),
                ),
            )
        }
        logger.info(f"🔧 Retrieval gateway ready: {len(self.documents)} searchable documents")

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[dict[str, Any]]:
        """Tool definitions (name, description, input_schema) for the LLM."""
        return [spec.definition() for spec in self._tools.values()]

    def search_documents(
        self, query: str, max_results: int = DEFAULT_MAX_RESULTS
    ) -> list[dict[str, Any]]:
        """Rank the searchable documents for query. Empty list means no match."""
        return [result.to_dict() for result in self.engine.search(query, max_results)]

    def get_document(self, filename: str) -> dict[str, Any]:
        """Return a searchable document's full content.

        Raises:
            ToolError: kind "not_found", naming the requested filename
        """
        if filename not in self._names:
            raise ToolError(
                ToolError.NOT_FOUND,
                f"Document '{filename}' not found in supplementary documents. "
                "Use list_documents to see available filenames.",
            )
        document = self.store.get(filename)
        return {
            "filename": document.name,
            "content": document.content,
            "size_bytes": document.size_bytes,
        }

    def list_documents(self) -> list[dict[str, Any]]:
        """List searchable documents as {"filename", "size_bytes"} in catalog order."""
        return [
            {"filename": document.name, "size_bytes": document.size_bytes}
            for document in self.documents
        ]

    def validate(self, name: str, arguments: Any) -> tuple[ToolSpec, BaseModel]:
        """Resolve a tool and validate its arguments against the declared schema.

        Args:
            name: Tool name requested by the model
            arguments: A dict, a JSON object string, or None

        Raises:
            ToolError: kind "unknown_tool" or "invalid_input"
        """
        spec = self._tools.get(name)
        if spec is None:
            raise ToolError(
                ToolError.UNKNOWN_TOOL,
                f"Unknown tool '{name}'. Available tools: {', '.join(self._tools)}",
            )

        if arguments is None:
            arguments = {}
        elif isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                raise ToolError(
                    ToolError.INVALID_INPUT,
                    f"Arguments for {name} are not valid JSON: {e}",
                ) from e

        if not isinstance(arguments, dict):
            raise ToolError(
                ToolError.INVALID_INPUT,
                f"Arguments for {name} must be an object, got {type(arguments).__name__}",
            )

        try:
            return spec, spec.args_schema.model_validate(arguments)
        except ValidationError as e:
            details = [
                {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                for error in e.errors()
            ]
            summary = "; ".join(f"{d['field'] or '(root)'}: {d['message']}" for d in details)
            raise ToolError(
                ToolError.INVALID_INPUT,
                f"Invalid arguments for {name}: {summary}",
                details,
            ) from e

    def execute(self, name: str, arguments: Any = None) -> ToolResult:
        """Run a tool call. Never raises; failures come back as error results.

        Args:
            name: Tool name
            arguments: Raw arguments from the model

        Returns:
            ToolResult with JSON content
        """
        try:
            spec, args = self.validate(name, arguments)
            output = spec.handler(args)
        except ToolError as e:
            logger.warning(f"⚠️ Tool {name} failed ({e.kind}): {e.message}")
            return ToolResult(tool_name=name, content=json.dumps(e.to_dict()), is_error=True)
        except Exception as e:
            logger.error(f"❌ Tool {name} raised unexpectedly: {e}", exc_info=True)
            error = ToolError(ToolError.EXECUTION_FAILED, f"{type(e).__name__}: {e}")
            return ToolResult(tool_name=name, content=json.dumps(error.to_dict()), is_error=True)

        return ToolResult(tool_name=name, content=json.dumps(output, indent=2))
