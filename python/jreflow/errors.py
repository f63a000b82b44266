from typing import List, Optional

from jreflow.models import Diagnostic


class ReflowError(Exception):
    """Base class for everything the reflow pass raises on purpose."""


class ParseError(ReflowError):
    """
    The input (or an intermediate text) could not be parsed as Java.
    No partial output is produced when this is raised.
    """

    def __init__(self, diagnostics: List[Diagnostic], source_name: str = "<input>"):
        self.diagnostics = list(diagnostics)
        self.source_name = source_name
        lines = [f"{source_name}:{d.line}:{d.column}: error: {d.message}" for d in self.diagnostics]
        super().__init__("\n".join(lines) or f"{source_name}: could not be parsed")


class AstMismatchError(ReflowError):
    """
    The reflowed text parses to a different tree than its input.
    This is an internal consistency failure and is never retried.
    """

    def __init__(self, expected: str, actual: str, changes: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.changes = changes
        message = (
            "Something has gone terribly wrong. We planned to make the below formatting change,"
            " but have aborted because it would unexpectedly change the AST."
            f"\n\n=== Actual: ===\n{actual}\n=== Expected: ===\n{expected}\n"
        )
        if changes:
            message += f"=== Changes: ===\n{changes}\n"
        super().__init__(message)


class FormatterCommandError(ReflowError):
    """The external formatter command exited unsuccessfully."""

    def __init__(self, command: List[str], returncode: int, stderr: str):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Formatter {command[0]!r} exited with status {returncode}: {stderr.strip()}")
