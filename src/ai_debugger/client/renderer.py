"""
Rich-powered rendering of debug responses.

The renderer mirrors the cards of the browser UI: summary, issues, fixes,
tests to run, confidence and, for unparseable replies, the raw model output.
Responses are untrusted, so the result is re-validated here and every absent
field has a visible placeholder.
"""

from typing import List, Optional

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from ai_debugger.debugging.models import DebugOutcome, DebugResult

RAW_SEPARATOR = "\n\n---\n\n"

_LEXERS = {"c++": "cpp"}


def lexer_for(language: str) -> str:
    """Pygments lexer name for a language as selected in the UI."""
    language = (language or "text").lower()
    return _LEXERS.get(language, language)


def format_line_range(line_range) -> str:
    if not line_range:
        return "N/A"
    return f"{line_range[0]}–{line_range[1]}"


class ResultRenderer:
    """Renders the response of ``/api/debug`` to a console."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def render(self, response: Optional[dict], language: str = "text") -> None:
        """
        Render a response, or the empty state when there is none yet.

        Args:
            response: Response dict from DebugClient, None before the first run
            language: Language of the code, used to highlight fixes
        """
        result = self._result(response)
        for panel in self.panels(response, result, language):
            self._console.print(panel)

    def panels(self, response: Optional[dict], result: Optional[DebugResult], language: str) -> List[Panel]:
        panels = [
            self._card("Summary", "Brief overview", self._summary(response, result)),
            self._card("Issues", "Detected problems", self._issues(result)),
            self._card("Fixes", "Suggested code changes", self._fixes(result, language)),
            self._card("Tests to run", "How to verify fixes", self._tests(result)),
            self._card("Confidence", "Model certainty", self._confidence(result)),
        ]
        if response and response.get("debug") == DebugOutcome.UNPARSEABLE.value:
            panels.append(self._card("Raw model output", "Unparseable, retry available", self._raw(response)))
        return panels

    @staticmethod
    def _result(response: Optional[dict]) -> Optional[DebugResult]:
        if not response or not response.get("success"):
            return None
        return DebugResult.from_untrusted(response.get("result"))

    @staticmethod
    def _card(title: str, subtitle: str, body) -> Panel:
        return Panel(body, title=f"[bold]{title}[/bold]", subtitle=f"[dim]{subtitle}[/dim]", title_align="left")

    @staticmethod
    def _summary(response: Optional[dict], result: Optional[DebugResult]):
        if not response:
            return Text.from_markup("No result yet. Run [bold]ai-debugger debug run[/bold].")

        if response.get("error"):
            lines = [Text(f"Error: {response['error']}", style="bold red")]
            details = [
                f"{key}: {response[key]}"
                for key in ("provider", "status", "message")
                if response.get(key) not in (None, "")
            ]
            if details:
                lines.append(Text(", ".join(details), style="dim"))
            return Group(*lines)

        if result is None:
            if response.get("debug") == DebugOutcome.UNPARSEABLE.value:
                return Text("The model reply could not be parsed as JSON.", style="yellow")
            return Text("No structured result returned.", style="yellow")

        body = [Text(result.summary or "No summary provided.")]
        if response.get("debug") == DebugOutcome.MOCKED.value:
            body.append(Text("Mock response: no provider key configured.", style="dim"))
        elif response.get("provider"):
            body.append(Text(f"Provider: {response['provider']} ({response.get('debug')})", style="dim"))
        return Group(*body)

    @staticmethod
    def _issues(result: Optional[DebugResult]):
        if result is None:
            return Text("N/A", style="dim")
        if not result.issues:
            return Text("No issues found.", style="dim")

        items = []
        for issue in result.issues:
            line = f"Line {issue.line}" if issue.line else "Line: N/A"
            items.append(Text.from_markup(f"[reverse] {escape(str(issue.type))} [/reverse] [cyan]{line}[/cyan]"))
            items.append(Text(f"  {issue.explanation}"))
        return Group(*items)

    @staticmethod
    def _fixes(result: Optional[DebugResult], language: str):
        if result is None:
            return Text("N/A", style="dim")
        if not result.fixes:
            return Text("No fixes suggested.", style="dim")

        items = []
        lexer = lexer_for(language)
        for index, fix in enumerate(result.fixes):
            items.append(Text.from_markup(
                f"[bold]#{index}[/bold]  [bold]Lines:[/bold] {format_line_range(fix.line_range)}"
            ))
            items.append(Syntax(fix.suggested_fix, lexer, word_wrap=True))
            if fix.explanation:
                items.append(Text(fix.explanation, style="dim"))
            if fix.patch:
                items.append(Syntax(fix.patch, "diff", word_wrap=True))
        return Group(*items)

    @staticmethod
    def _tests(result: Optional[DebugResult]):
        if result is None:
            return Text("N/A", style="dim")
        if not result.tests_to_run:
            return Text("No test suggestions.", style="dim")
        return Group(*(Text(f"• {test}") for test in result.tests_to_run))

    @staticmethod
    def _confidence(result: Optional[DebugResult]):
        if result is None or result.confidence is None:
            return Text("N/A", style="dim")
        return Text(str(result.confidence), style="bold")

    @staticmethod
    def _raw(response: dict):
        attempts = [a for a in response.get("raw_attempts") or [] if isinstance(a, str)]
        return Group(
            Text(RAW_SEPARATOR.join(attempts)),
            Text("Run the debug command again to retry.", style="dim"),
        )
