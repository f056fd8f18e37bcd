"""Tests for the retrieval tool gateway."""

import json

import pytest

from hybridchat.constants import MAX_RESULTS_CEILING
from hybridchat.errors import ToolError


class TestDefinitions:
    """Tests for the declared tool schemas."""

    def test_three_tools_declared(self, gateway):
        """Test that the gateway exposes exactly the three retrieval tools."""
        assert gateway.tool_names == ["search_documents", "get_document", "list_documents"]

    def test_definitions_carry_json_schema(self, gateway):
        """Test that each definition has a name, description and object schema."""
        definitions = {definition["name"]: definition for definition in gateway.definitions()}

        search_schema = definitions["search_documents"]["input_schema"]
        assert search_schema["type"] == "object"
        assert search_schema["required"] == ["query"]
        assert search_schema["properties"]["max_results"]["default"] == 5
        assert definitions["get_document"]["input_schema"]["required"] == ["filename"]
        assert definitions["list_documents"]["input_schema"]["properties"] == {}
        assert all(definition["description"] for definition in definitions.values())

    def test_max_results_bounds_declared(self, gateway):
        """Test that the result ceiling is visible in the declared schema."""
        search = next(d for d in gateway.definitions() if d["name"] == "search_documents")
        max_results = search["input_schema"]["properties"]["max_results"]

        assert max_results["minimum"] == 1
        assert max_results["maximum"] == MAX_RESULTS_CEILING
        assert str(MAX_RESULTS_CEILING) in max_results["description"]


class TestOperations:
    """Tests for the direct gateway operations."""

    def test_search_documents_returns_dicts(self, gateway):
        """Test that search results are serialized dicts."""
        results = gateway.search_documents("fox", 5)

        assert results == [
            {
                "filename": "b.txt",
                "score": 1,
                "snippets": ["slow turtle\nfox eats turtle\nend"],
                "size_bytes": len("slow turtle\nfox eats turtle\nend"),
            }
        ]

    def test_resident_documents_are_not_searchable(self, gateway):
        """Test that the gateway only covers the searchable partition."""
        assert "a.txt" not in [result["filename"] for result in gateway.search_documents("quick brown")]

    def test_get_document_returns_content(self, gateway):
        """Test fetching a searchable document."""
        document = gateway.get_document("history.txt")

        assert document["filename"] == "history.txt"
        assert "Signed in 1969." in document["content"]

    def test_get_document_unknown_names_the_file(self, gateway):
        """Test that a missing document raises a not-found ToolError naming it."""
        with pytest.raises(ToolError) as exc_info:
            gateway.get_document("missing.txt")

        assert exc_info.value.kind == ToolError.NOT_FOUND
        assert "missing.txt" in exc_info.value.message

    def test_get_document_rejects_resident_only_file(self, gateway):
        """Test that a resident-only document cannot be fetched through the tools."""
        with pytest.raises(ToolError):
            gateway.get_document("a.txt")

    def test_list_documents_in_catalog_order(self, gateway):
        """Test the listing of searchable documents."""
        listing = gateway.list_documents()

        assert [entry["filename"] for entry in listing] == ["b.txt", "rates.txt", "history.txt"]
        assert all(entry["size_bytes"] > 0 for entry in listing)


class TestExecute:
    """Tests for RetrievalGateway.execute, the path the LLM uses."""

    def test_missing_document_is_error_result(self, gateway):
        """Test that a not-found fetch becomes an error result naming the file."""
        result = gateway.execute("get_document", {"filename": "missing.txt"})

        assert result.is_error
        assert "missing.txt" in result.content
        payload = json.loads(result.content)
        assert payload["error"] == "not_found"

    def test_unknown_tool_is_error_result(self, gateway):
        """Test that an unknown tool name is reported, not raised."""
        result = gateway.execute("delete_everything", {})

        assert result.is_error
        assert json.loads(result.content)["error"] == "unknown_tool"

    @pytest.mark.parametrize(
        "arguments",
        [
            {},
            {"query": ""},
            {"query": "fox", "max_results": 0},
            {"query": "fox", "max_results": 500},
            {"query": "fox", "unexpected": True},
            ["fox"],
            "{not json",
        ],
    )
    def test_invalid_search_arguments_are_error_results(self, gateway, arguments):
        """Test that arguments violating the schema never raise."""
        result = gateway.execute("search_documents", arguments)

        assert result.is_error
        assert json.loads(result.content)["error"] == "invalid_input"

    def test_validation_details_name_the_field(self, gateway):
        """Test that schema errors carry per-field details."""
        result = gateway.execute("search_documents", {"query": "fox", "max_results": 0})

        details = json.loads(result.content)["details"]
        assert details[0]["field"] == "max_results"

    def test_json_string_arguments_accepted(self, gateway):
        """Test that arguments given as a JSON string are parsed."""
        result = gateway.execute("search_documents", '{"query": "fox"}')

        assert not result.is_error
        assert json.loads(result.content)[0]["filename"] == "b.txt"

    def test_none_arguments_for_list(self, gateway):
        """Test that list_documents accepts missing arguments."""
        result = gateway.execute("list_documents", None)

        assert not result.is_error
        assert len(json.loads(result.content)) == 3

    def test_no_match_is_empty_list_not_error(self, gateway):
        """Test that a search without hits is a successful empty result."""
        result = gateway.execute("search_documents", {"query": "zebra"})

        assert not result.is_error
        assert json.loads(result.content) == []

    def test_unexpected_handler_failure_becomes_error_result(self, gateway, monkeypatch):
        """Test that an exception inside a tool is reported as execution_failed."""

        def boom(query, max_results=5):
            raise RuntimeError("index corrupted")

        monkeypatch.setattr(gateway, "search_documents", boom)
        result = gateway.execute("search_documents", {"query": "fox"})

        assert result.is_error
        payload = json.loads(result.content)
        assert payload["error"] == "execution_failed"
        assert "index corrupted" in payload["message"]
