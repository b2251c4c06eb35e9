from typing import List, Optional

from ai_debugger.client.client import DebugClient
from ai_debugger.debugging.models import DebugResult, Fix, Issue
from ai_debugger.editor.buffer import EditorBuffer, Range
from ai_debugger.editor.patch import apply_fix, reveal_line
from ai_debugger.logging.logger import get_logger

logger = get_logger(__name__)


class DebugSession:
    """
    One editing session against the debugger API.

    Holds the editor buffer, the selected language, the error output and the
    last response, and exposes the actions of the editor UI. The buffer is
    only changed by ``apply_fix`` and ``clear``.
    """

    def __init__(
        self,
        buffer: EditorBuffer,
        client: DebugClient,
        language: str = "javascript",
        error_output: str = "",
    ):
        self.buffer = buffer
        self.client = client
        self.language = language
        self.error_output = error_output
        self.response: Optional[dict] = None

    def run(self) -> dict:
        """Submit the buffer and keep the response."""
        self.response = None
        logger.info(f"Requesting debug analysis for {self.buffer.line_count} line(s) of {self.language}")
        self.response = self.client.debug(
            self.buffer.get_value(), self.language, self.error_output or None
        )
        return self.response

    def retry(self) -> dict:
        return self.run()

    @property
    def result(self) -> Optional[DebugResult]:
        if not self.response or not self.response.get("success"):
            return None
        return DebugResult.from_untrusted(self.response.get("result"))

    @property
    def fixes(self) -> List[Fix]:
        result = self.result
        return result.fixes if result else []

    @property
    def issues(self) -> List[Issue]:
        result = self.result
        return result.issues if result else []

    def apply_fix(self, index: int) -> Optional[Range]:
        """
        Apply one of the suggested fixes to the buffer.

        Raises:
            IndexError: If the last response has no fix at that index
        """
        fix = self._fix(index)
        return apply_fix(self.buffer, fix.line_range, fix.suggested_fix)

    def reveal_issue(self, index: int) -> bool:
        """Move the view to the line of an issue, if it has one."""
        issues = self.issues
        if not 0 <= index < len(issues):
            raise IndexError(f"No issue #{index}, the last result has {len(issues)} issue(s)")
        return reveal_line(self.buffer, issues[index].line)

    def clear(self) -> None:
        self.buffer.set_value("")

    def copy_code(self) -> str:
        return self.buffer.get_value()

    def copy_fix(self, index: int) -> str:
        return self._fix(index).suggested_fix

    def _fix(self, index: int) -> Fix:
        fixes = self.fixes
        if not 0 <= index < len(fixes):
            raise IndexError(f"No fix #{index}, the last result has {len(fixes)} fix(es)")
        return fixes[index]
