"""Tests for the CLI module."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hybridchat.client.cli import ask, docs, search
from hybridchat.client.cli_helpers import format_search_result
from hybridchat.errors import LLMServiceError
from hybridchat.llm.base import LLMResponse

from conftest import RESIDENT, SEARCHABLE, FakeLLM, tool_request


@pytest.fixture
def corpus_env(monkeypatch, content_dir):
    """Point the catalog environment variables at the test corpus."""
    monkeypatch.setenv("CONTENT_DIR", str(content_dir))
    monkeypatch.setenv("RESIDENT_DOCUMENTS", ",".join(RESIDENT))
    monkeypatch.setenv("SEARCHABLE_DOCUMENTS", ",".join(SEARCHABLE + ["absent.txt"]))
    return content_dir


class TestDocsCLI:
    """Tests for the docs CLI command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_docs_reports_each_file(self, corpus_env):
        """Test the per-file load report."""
        result = self.runner.invoke(docs)

        assert result.exit_code == 0
        assert "1 resident, 4 searchable document(s) configured" in result.output
        assert "✓ a.txt (resident" in result.output
        assert "✓ rates.txt (searchable" in result.output
        assert "✗ absent.txt (searchable)" in result.output
        assert "Loaded 4 document(s)" in result.output
        assert "1 document(s) could not be loaded" in result.output

    def test_docs_aborts_without_resident_documents(self, monkeypatch, tmp_path):
        """Test that an empty content directory aborts."""
        monkeypatch.setenv("CONTENT_DIR", str(tmp_path))
        monkeypatch.setenv("RESIDENT_DOCUMENTS", "nothing.txt")
        monkeypatch.setenv("SEARCHABLE_DOCUMENTS", "nothing.txt")

        result = self.runner.invoke(docs)

        assert result.exit_code != 0
        assert "No resident documents could be loaded" in result.output


class TestSearchCLI:
    """Tests for the search CLI command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_search_finds_results(self, corpus_env):
        """Test a query with matches."""
        result = self.runner.invoke(search, ["rates"])

        assert result.exit_code == 0
        assert "🔍 Searching for: 'rates'" in result.output
        assert "✅ Found 1 result(s):" in result.output
        assert "1. [rates.txt] (score:" in result.output

    def test_search_no_results(self, corpus_env):
        """Test a query with no matches."""
        result = self.runner.invoke(search, ["zebra"])

        assert result.exit_code == 0
        assert "No results found." in result.output

    def test_search_resident_only_content_not_found(self, corpus_env):
        """Test that resident-only documents are not searched."""
        result = self.runner.invoke(search, ["quick"])

        assert "No results found." in result.output

    def test_search_max_results_range(self, corpus_env):
        """Test that max-results is bounded."""
        result = self.runner.invoke(search, ["fox", "--max-results", "0"])

        assert result.exit_code != 0


class TestAskCLI:
    """Tests for the ask CLI command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @patch("hybridchat.client.cli.get_llm_service")
    def test_ask_prints_answer(self, mock_get_llm, corpus_env):
        """Test a question answered after one tool round."""
        mock_get_llm.return_value = FakeLLM(
            responses=[
                tool_request("search_documents", {"query": "turtle"}),
                LLMResponse(text="The fox eats the turtle."),
            ]
        )

        result = self.runner.invoke(ask, ["Who eats the turtle?"])

        assert result.exit_code == 0
        assert "Asking fake-model (text mode)" in result.output
        assert "The fox eats the turtle." in result.output
        assert "1 tool round(s)" in result.output

    @patch("hybridchat.client.cli.get_llm_service")
    def test_ask_reports_round_cap(self, mock_get_llm, corpus_env, monkeypatch):
        """Test the warning when the tool round cap is reached."""
        monkeypatch.setenv("MAX_TOOL_ROUNDS", "1")
        mock_get_llm.return_value = FakeLLM(default=tool_request("list_documents", text="Partial."))

        result = self.runner.invoke(ask, ["q", "--mode", "deep"])

        assert result.exit_code == 0
        assert "Partial." in result.output
        assert "Tool round cap reached" in result.output

    def test_ask_rejects_blank_message(self, corpus_env):
        """Test that a blank question aborts."""
        result = self.runner.invoke(ask, ["   "])

        assert result.exit_code != 0
        assert "message must not be empty" in result.output

    @patch("hybridchat.client.cli.get_llm_service")
    def test_ask_unsupported_service(self, mock_get_llm, corpus_env):
        """Test that an unknown LLM_SERVICE aborts."""
        mock_get_llm.side_effect = ValueError("Unsupported service type: nope")

        result = self.runner.invoke(ask, ["q"])

        assert result.exit_code != 0
        assert "Unsupported service type" in result.output

    @patch("hybridchat.client.cli.get_llm_service")
    def test_ask_llm_failure(self, mock_get_llm, corpus_env):
        """Test that an unreachable LLM aborts with a message."""

        class DownLLM:
            model = "down"

            async def generate(self, system, messages, tools=None, max_tokens=4096):
                raise LLMServiceError("connection refused")

        mock_get_llm.return_value = DownLLM()

        result = self.runner.invoke(ask, ["q"])

        assert result.exit_code != 0
        assert "LLM service error" in result.output


class TestFormatSearchResult:
    """Tests for format_search_result."""

    def test_long_snippet_truncated(self):
        """Test that snippets are flattened and shortened."""
        result = {
            "filename": "doc.txt",
            "score": 3,
            "size_bytes": 1200,
            "snippets": ["line one\nline two", "x" * 300],
        }

        output = format_search_result(2, result, max_length=50)

        lines = output.splitlines()
        assert lines[0] == "2. [doc.txt] (score: 3, 1200 bytes)"
        assert lines[1] == "   … line one line two"
        assert lines[2] == "   … " + "x" * 50 + "..."
