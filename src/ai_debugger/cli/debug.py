from pathlib import Path
from typing import List, Optional, Union

from rich.console import Console
from rich.syntax import Syntax

from ai_debugger.client.client import DebugClient
from ai_debugger.client.renderer import ResultRenderer, lexer_for
from ai_debugger.client.session import DebugSession
from ai_debugger.editor.buffer import buffer_from_file
from ai_debugger.logging.logger import LoggingConfig, get_logger

logger = get_logger(__name__)

LANGUAGES_BY_SUFFIX = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".py": "python",
    ".java": "java",
    ".cpp": "c++",
    ".cc": "c++",
    ".cxx": "c++",
    ".hpp": "c++",
}


def detect_language(path: Union[str, Path]) -> str:
    """Guess the language of a file from its extension, defaulting to javascript."""
    return LANGUAGES_BY_SUFFIX.get(Path(path).suffix.lower(), "javascript")


def _indexes(value) -> List[int]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [int(v) for v in value]
    return [int(value)]


class DebugCommands:
    """Commands for debugging a source file against the API."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    def run(
        self,
        file: str,
        language: Optional[str] = None,
        error_file: Optional[str] = None,
        apply=None,
        show_issue: Optional[int] = None,
        write: bool = False,
        server: Optional[str] = None,
        logging_enabled: bool = False,
    ) -> None:
        """
        Send a file to the debugger and show the suggested fixes.

        Args:
            file: Path of the source file to debug
            language: Language of the code, guessed from the extension if omitted
            error_file: Optional file holding error output or a stack trace
            apply: Index, or list of indexes, of fixes to apply in order
            show_issue: Index of an issue whose line should be shown
            write: Write the patched buffer back to ``file`` instead of printing it
            server: Base URL of the API, defaults to ``AI_DEBUGGER_URL``
            logging_enabled: Whether to log detailed request info
        """
        LoggingConfig().enabled = logging_enabled

        language = language or detect_language(file)
        error_output = Path(error_file).read_text(encoding="utf-8") if error_file else ""

        with DebugClient(server) as client:
            session = DebugSession(
                buffer_from_file(file), client, language=language, error_output=error_output
            )
            response = session.run()

        renderer = ResultRenderer(self._console)
        renderer.render(response, language=language)

        if show_issue is not None:
            self._show_issue(session, int(show_issue))

        fixes = _indexes(apply)
        if not fixes:
            return

        available = len(session.fixes)
        missing = [index for index in fixes if not 0 <= index < available]
        if missing:
            self._console.print(
                f"[yellow]No fix #{missing[0]} to apply, the result has {available} fix(es)[/yellow]"
            )
            return

        for index in fixes:
            applied = session.apply_fix(index)
            logger.info(f"Applied fix #{index} at {applied}")

        if write:
            Path(file).write_text(session.buffer.get_value(), encoding="utf-8")
            self._console.print(f"[green]Applied {len(fixes)} fix(es) to {file}[/green]")
        else:
            self._console.print(Syntax(session.buffer.get_value(), lexer_for(language), line_numbers=True))

    def _show_issue(self, session: DebugSession, index: int) -> None:
        if not 0 <= index < len(session.issues) or not session.reveal_issue(index):
            self._console.print(f"[yellow]Issue #{index} has no line to show[/yellow]")
            return

        first, last = session.buffer.visible_range
        self._console.print(
            Syntax(
                session.buffer.get_value(),
                lexer_for(session.language),
                line_numbers=True,
                line_range=(first, last),
                highlight_lines={session.buffer.selection.start_line},
            )
        )
