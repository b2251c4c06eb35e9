"""Prompts sent to the provider for a debug request and for the repair pass."""

from dataclasses import dataclass
from typing import Optional

SYSTEM_PROMPT = """
You are an expert software debugger. YOU MUST RESPOND WITH VALID JSON ONLY (no explanations, no markdown).
Return an object with keys:
  - summary: string (1-2 sentences)
  - issues: array of { line: number|null, type: "syntax"|"logic"|"dependency"|"style"|"other", explanation: string }
  - fixes: array of {
       line_range: [startLine,endLine] or null,
       suggested_fix: string (the replacement code snippet - plain text),
       explanation: string,
       patch?: string (OPTIONAL: unified diff/patch text)
    }
  - confidence: "low"|"medium"|"high"
  - tests_to_run: array of strings (short steps)

If line numbers are unknown, use null. Keep strings concise.

EXAMPLE output (JSON only):
{
  "summary":"Fix division by zero in divide function",
  "issues":[{"line":2,"type":"logic","explanation":"No guard for zero denominator"}],
  "fixes":[{"line_range":[1,3],"suggested_fix":"function divide(a,b){ if(b===0) throw new Error('div by zero'); return a/b; }","explanation":"Add guard","patch":"--- a/file.js\\n+++ b/file.js\\n@@ -1,3 +1,4 @@\\n-function divide(a,b){ return a/b }\\n+function divide(a,b){ if(b===0) throw new Error('div by zero'); return a/b }"}],
  "confidence":"high",
  "tests_to_run":["Call divide(4,2) => 2","Call divide(1,0) => throws error"]
}
"""

REPAIR_SYSTEM_PROMPT = (
    "You previously responded but the response was not valid JSON. "
    "NOW RESPOND WITH VALID JSON ONLY. Use the original schema, repeated below.\n"
    + SYSTEM_PROMPT
)


@dataclass(frozen=True)
class Prompts:
    """A system and user prompt pair."""
    system: str
    user: str


def build_prompts(language: str, code: str, error_output: Optional[str] = None) -> Prompts:
    """
    Build the instruction prompt for a debug request.

    Args:
        language: Language of the submitted code
        code: The code to debug
        error_output: Optional error output or stack trace

    Returns:
        The system prompt fixing the result schema and the user prompt
        carrying the request
    """
    user = (
        f"Language: {language}\n"
        f"Error: {error_output or 'None'}\n"
        "Code:\n"
        "```\n"
        f"{code}\n"
        "```\n"
        "Respond ONLY with valid JSON."
    )
    return Prompts(system=SYSTEM_PROMPT, user=user)


def build_repair_prompts(previous_response: str) -> Prompts:
    """Build the prompt asking the provider to reformat a reply as JSON."""
    user = (
        "Previous response:\n"
        "```\n"
        f"{previous_response}\n"
        "```\n"
        "Return only valid JSON matching the schema."
    )
    return Prompts(system=REPAIR_SYSTEM_PROMPT, user=user)
