"""FastMCP server exposing the searchable documents as retrieval tools."""

import json
import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from hybridchat.constants import DEFAULT_MAX_RESULTS, DEFAULT_MCP_PORT
from hybridchat.service.documents import DocumentCatalog, load_catalog
from hybridchat.service.gateway import RetrievalGateway

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded for MCP server")

# Create FastMCP instance
mcp = FastMCP("HybridChat Document Retrieval")

_gateway: RetrievalGateway | None = None


async def get_gateway() -> RetrievalGateway:
    """Return the shared gateway, loading the catalog on first use."""
    global _gateway
    if _gateway is None:
        catalog = DocumentCatalog.from_env()
        store, _ = await load_catalog(catalog)
        _gateway = RetrievalGateway(store, catalog.searchable)
    return _gateway


def set_gateway(gateway: RetrievalGateway | None) -> None:
    """Replace the shared gateway (None forces a reload on next use)."""
    global _gateway
    _gateway = gateway


async def run_gateway_tool(name: str, arguments: dict[str, Any]) -> Any:
    """Execute a gateway tool, raising ToolError for error results."""
    gateway = await get_gateway()
    result = gateway.execute(name, arguments)
    if result.is_error:
        logger.warning(f"⚠️ MCP Tool {name}: {result.content}")
        raise ToolError(result.content)
    logger.info(f"✅ MCP Tool {name}: returning {len(result.content)} chars")
    return json.loads(result.content)


async def search_documents_impl(query: str, max_results: int = DEFAULT_MAX_RESULTS) -> list[dict[str, Any]]:
    """Keyword search through the gateway."""
    logger.debug(f"MCP Tool: search_documents query='{query[:100]}', max_results={max_results}")
    return await run_gateway_tool("search_documents", {"query": query, "max_results": max_results})


async def get_document_impl(filename: str) -> dict[str, Any]:
    """Full document fetch through the gateway."""
    logger.debug(f"MCP Tool: get_document filename='{filename}'")
    return await run_gateway_tool("get_document", {"filename": filename})


async def list_documents_impl() -> list[dict[str, Any]]:
    """Document listing through the gateway."""
    logger.debug("MCP Tool: list_documents")
    return await run_gateway_tool("list_documents", {})


@mcp.tool()
async def search_documents(query: str, max_results: int = DEFAULT_MAX_RESULTS) -> list[dict[str, Any]]:
    """
    Searches the supplementary documents by keyword and returns the best
    matching documents with short text snippets around each hit.

    Args:
        query: Keywords to search for
        max_results: Maximum number of documents to return (default: 5)
    """
    return await search_documents_impl(query, max_results)


@mcp.tool()
async def get_document(filename: str) -> dict[str, Any]:
    """
    Retrieves the full content of a supplementary document by filename.
    Use list_documents to see the available filenames.

    Args:
        filename: Exact filename of the document
    """
    return await get_document_impl(filename)


@mcp.tool()
async def list_documents() -> list[dict[str, Any]]:
    """
    Lists all supplementary documents with their sizes in bytes.
    """
    return await list_documents_impl()


def main() -> None:
    """Entry point for the MCP server command-line interface."""
    transport = os.getenv("MCP_TRANSPORT", "stdio")
    logger.info(f"🚀 Starting HybridChat MCP Server ({transport})...")
    if transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(
            transport=transport,
            host=os.getenv("MCP_HOST", "127.0.0.1"),
            port=int(os.getenv("MCP_PORT", str(DEFAULT_MCP_PORT))),
        )


if __name__ == "__main__":
    main()
