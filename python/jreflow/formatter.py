import shlex
import shutil
import subprocess
from typing import List, Protocol, Sequence, Tuple, Union

import structlog

from jreflow.errors import FormatterCommandError

logger = structlog.get_logger(__name__)


class SourceFormatter(Protocol):
    """
    The general-purpose formatter that ran before the reflow pass.
    It is asked to re-format only the given character ranges of text.
    """

    def format_source(self, text: str, ranges: Sequence[Tuple[int, int]]) -> str: ...


class NoopFormatter:
    """Leaves the text alone. Used when no external formatter is configured."""

    def format_source(self, text: str, ranges: Sequence[Tuple[int, int]]) -> str:
        return text


class CommandFormatter:
    """
    Runs an external formatter over stdin, restricted to the affected ranges.

    The command receives one `--offset N --length M` pair per range followed by
    `-`, which is how google-java-format accepts partial formatting. Run it with
    `--skip-reflowing-long-strings` so the two passes don't fight.
    """

    def __init__(self, command: Union[str, Sequence[str]]):
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise ValueError("Formatter command is empty.")

    def build_args(self, ranges: Sequence[Tuple[int, int]]) -> List[str]:
        args = list(self.command)
        for start, end in ranges:
            args.extend(["--offset", str(start), "--length", str(end - start)])
        args.append("-")
        return args

    def format_source(self, text: str, ranges: Sequence[Tuple[int, int]]) -> str:
        if not ranges:
            return text
        executable = shutil.which(self.command[0])
        if not executable:
            raise FileNotFoundError(f"Formatter executable not found: {self.command[0]}")

        args = self.build_args(ranges)
        logger.debug("Running formatter", command=args[0], ranges=len(ranges))
        proc = subprocess.run(
            [executable] + args[1:],
            input=text,
            capture_output=True,
            text=True,
            encoding="utf-8",
        )
        if proc.returncode != 0:
            raise FormatterCommandError(args, proc.returncode, proc.stderr)
        return proc.stdout
