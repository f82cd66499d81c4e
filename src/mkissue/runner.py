"""External command capability.

Everything the tool shells out to (``git show``, ``gh label``, ``gh issue``,
``gh gist``) goes through a :class:`CommandRunner` so parsing and validation
never touch a process and the publisher/resolver can be exercised against a
fake. Commands are always argument vectors; nothing is passed through a shell.
"""

from __future__ import annotations

import shlex
import subprocess  # nosec B404 - subprocess is required for git / GitHub CLI invocation
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, TextIO

from .errors import MalformedInput


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run(self, args: Sequence[str]) -> CommandResult: ...


def decode_text(data: bytes, source: str) -> str:
    """Decode ``data`` as strict UTF-8; invalid bytes are rejected, not replaced."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedInput(
            f"{source} is not valid UTF-8: {exc.reason} at byte {exc.start}"
        ) from exc


class SubprocessRunner:
    """Runs commands synchronously, capturing stdout and stderr.

    stdout is decoded strictly so file content read through ``git show`` or
    ``gh gist view`` is held to the same rule as a local file; stderr is only
    diagnostic and keeps undecodable bytes as replacement characters.
    """

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = tuple(args)
        try:
            proc = subprocess.run(  # nosec B603 - argument vector, no shell
                argv, capture_output=True, check=False
            )
        except FileNotFoundError as exc:
            # Missing executable reads like any other failed command.
            return CommandResult(argv, 127, "", f"{argv[0]}: {exc.strerror or 'not found'}")
        stdout = decode_text(proc.stdout or b"", f"output of '{shlex.join(argv[:3])}'")
        stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
        return CommandResult(argv, proc.returncode, stdout, stderr)


@dataclass
class DryRunRunner:
    """Prints planned commands instead of running them.

    Read-only commands can be delegated to ``passthrough`` so a dry run still
    sees real file content from ``git show`` or a gist.
    """

    passthrough: CommandRunner | None = None
    read_only: frozenset[tuple[str, ...]] = frozenset()
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = tuple(args)
        if self.passthrough is not None and self._is_read_only(argv):
            return self.passthrough.run(argv)
        self.calls.append(argv)
        print("DRY-RUN", shlex.join(argv), file=self.stream)
        return CommandResult(argv, 0)

    def _is_read_only(self, argv: tuple[str, ...]) -> bool:
        return any(argv[1 : 1 + len(prefix)] == prefix for prefix in self.read_only)


READ_ONLY_COMMANDS = frozenset({("show",), ("gist", "view")})


__all__ = [
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "DryRunRunner",
    "READ_ONLY_COMMANDS",
    "decode_text",
]
