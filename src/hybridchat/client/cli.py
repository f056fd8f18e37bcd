"""Command-line interface for HybridChat using Click."""

import asyncio

import click
from dotenv import load_dotenv

from hybridchat.client.cli_helpers import (
    format_load_report,
    format_search_result,
    load_store_or_abort,
)
from hybridchat.constants import DEFAULT_MAX_RESULTS, MAX_RESULTS_CEILING
from hybridchat.errors import LLMServiceError
from hybridchat.llm import get_llm_service
from hybridchat.modes import MODES
from hybridchat.service.chat import ChatService
from hybridchat.service.documents import DocumentCatalog
from hybridchat.service.gateway import RetrievalGateway
from hybridchat.service.orchestrator import Orchestrator

# Load environment variables
load_dotenv()


@click.command()
def docs() -> None:
    """Load the document catalog and report what was found.

    Example:
        hybridchat-docs
        CONTENT_DIR=content/ hybridchat-docs
    """
    catalog = DocumentCatalog.from_env()
    click.echo(f"📂 Content directory: {catalog.base_directory}")
    click.echo(
        f"   {len(catalog.resident)} resident, {len(catalog.searchable)} searchable document(s) configured\n"
    )
    _, report = load_store_or_abort(catalog)
    click.echo(format_load_report(report, catalog))


@click.command()
@click.argument("query", type=str)
@click.option(
    "--max-results",
    type=click.IntRange(1, MAX_RESULTS_CEILING),
    default=DEFAULT_MAX_RESULTS,
    help=f"Number of documents to return (default: {DEFAULT_MAX_RESULTS})",
)
def search(query: str, max_results: int) -> None:
    """Keyword search over the searchable documents.

    QUERY is the text to search for.

    Example:
        hybridchat-search "capacity factor"
        hybridchat-search "transmission line" --max-results 3
    """
    catalog = DocumentCatalog.from_env()
    store, _ = load_store_or_abort(catalog)
    gateway = RetrievalGateway(store, catalog.searchable)

    click.echo(f"🔍 Searching for: '{query}'")
    click.echo(f"   Returning up to {max_results} results...\n")

    results = gateway.search_documents(query, max_results=max_results)
    if not results:
        click.echo("No results found.")
        return

    click.echo(f"✅ Found {len(results)} result(s):\n")
    for i, result in enumerate(results, 1):
        click.echo(format_search_result(i, result))


@click.command()
@click.argument("message", type=str)
@click.option(
    "--mode",
    type=click.Choice(sorted(MODES)),
    default="text",
    help="Chat mode (default: text)",
)
def ask(message: str, mode: str) -> None:
    """Ask one question and print the answer.

    MESSAGE is the question. Audio is never synthesized from the CLI.

    Example:
        hybridchat-ask "What does the memorandum commit to?"
        hybridchat-ask "Summarize the pricing terms" --mode deep
    """
    if not message.strip():
        click.echo("✗ Error: message must not be empty", err=True)
        raise click.Abort()

    catalog = DocumentCatalog.from_env()
    store, _ = load_store_or_abort(catalog)
    gateway = RetrievalGateway(store, catalog.searchable)

    try:
        llm_service = get_llm_service()
    except ValueError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    chat_service = ChatService(Orchestrator(llm_service, store, gateway, catalog.resident))

    click.echo(f"🤖 Asking {llm_service.model} ({mode} mode)...\n")
    try:
        reply = asyncio.run(chat_service.respond(message, [], mode))
    except LLMServiceError as e:
        click.echo(f"✗ LLM service error: {e}", err=True)
        click.echo("\nPlease check the LLM_SERVICE configuration and API keys.", err=True)
        raise click.Abort()

    click.echo(reply.text)
    click.echo(f"\n⏱️  {reply.response_time:.2f}s, {reply.rounds} tool round(s)")
    if reply.hit_round_cap:
        click.echo("⚠️  Tool round cap reached; the answer may be incomplete")


if __name__ == "__main__":
    ask()
