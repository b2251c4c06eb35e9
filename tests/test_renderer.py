import io

import pytest
from rich.console import Console

from ai_debugger.client.renderer import RAW_SEPARATOR, ResultRenderer, format_line_range, lexer_for


@pytest.fixture
def render():
    def _render(response, language="javascript"):
        console = Console(file=io.StringIO(), record=True, width=120, color_system=None)
        ResultRenderer(console).render(response, language=language)
        return console.export_text()

    return _render


def test_empty_state(render):
    output = render(None)

    assert "No result yet" in output
    assert "N/A" in output


def test_error_state(render):
    output = render({"error": "Provider API call failed", "provider": "openai", "status": 401})

    assert "Error: Provider API call failed" in output
    assert "status: 401" in output


def test_parsed_result(render, valid_result):
    output = render({"success": True, "result": valid_result, "debug": "parsed_first", "provider": "openai"})

    assert "Guard against division by zero" in output
    assert "logic" in output
    assert "Line 1" in output
    assert "Lines: 1–1" in output
    assert "divide(4,2) => 2" in output
    assert "high" in output
    assert "Raw model output" not in output


def test_mocked_result_is_flagged(render):
    result = {"summary": "Mock analysis for python.", "issues": [], "fixes": [], "tests_to_run": []}

    output = render({"success": True, "result": result, "debug": "mocked", "provider": "mock"})

    assert "Mock response" in output
    assert "No issues found." in output
    assert "No fixes suggested." in output
    assert "No test suggestions." in output


def test_unparseable_shows_raw_attempts(render):
    output = render(
        {
            "success": True,
            "result": None,
            "raw_attempts": ["first try", "second try"],
            "debug": "unparseable",
            "provider": "groq",
        }
    )

    assert "could not be parsed" in output
    assert "Raw model output" in output
    assert "first try" in output
    assert "second try" in output
    assert "---" in output
    assert "retry" in output


def test_malformed_result_fields(render):
    result = {"summary": None, "issues": [{"type": "weird", "line": "x", "explanation": "[bold]odd[/bold]"}]}

    output = render({"success": True, "result": result, "debug": "parsed_second"})

    assert "No summary provided." in output
    assert "other" in output
    assert "Line: N/A" in output
    assert "[bold]odd[/bold]" in output


def test_helpers():
    assert format_line_range(None) == "N/A"
    assert format_line_range((2, 4)) == "2–4"
    assert lexer_for("C++") == "cpp"
    assert lexer_for("python") == "python"
    assert RAW_SEPARATOR == "\n\n---\n\n"
