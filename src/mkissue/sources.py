"""Where issue file content comes from.

Three origins, chosen by the caller and mutually exclusive:

 - the local filesystem (default)
 - a git branch, read with ``git show <branch>:<path>`` so the working tree
   is left alone
 - a GitHub gist, read with ``gh gist view <id> --filename <name> --raw``

Branch and gist identifiers are validated before anything is executed;
validation failures are :class:`UsageError`, unreadable sources are
:class:`InputNotFound`, and content that is not UTF-8 is :class:`MalformedInput`
whichever origin it came from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .errors import InputNotFound, UsageError
from .runner import CommandRunner, decode_text

_PROHIBITED_CHARS = ("\x00", "\n", "\r")
GIST_ID_PATTERN = re.compile(r"[a-f0-9]{32}")
GIST_FILENAME_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


@dataclass(frozen=True)
class SourceRequest:
    file: str
    branch: str | None = None
    gist: str | None = None

    def validate(self) -> SourceRequest:
        if not self.file:
            raise UsageError("file flag is required")
        if self.branch and self.gist:
            raise UsageError("--branch and --gist cannot be used together")
        if self.branch:
            validate_branch_ref(self.branch, self.file)
        if self.gist:
            validate_gist_ref(self.gist, self.file)
        return self

    @property
    def origin(self) -> str:
        if self.branch:
            return "branch"
        if self.gist:
            return "gist"
        return "file"


def _has_prohibited(value: str) -> bool:
    return any(ch in value for ch in _PROHIBITED_CHARS)


def validate_branch_ref(branch: str, path: str) -> None:
    if _has_prohibited(branch):
        raise UsageError("invalid branch name: contains prohibited characters")
    if _has_prohibited(path):
        raise UsageError("invalid file path: contains prohibited characters")


def validate_gist_ref(gist_id: str, file_name: str) -> None:
    if not GIST_ID_PATTERN.fullmatch(gist_id):
        raise UsageError("invalid gist ID: must be a 32-character hexadecimal string")
    if file_name in {".", ".."} or not GIST_FILENAME_PATTERN.fullmatch(file_name):
        raise UsageError(
            "invalid file name: only alphanumeric characters, dots, hyphens "
            "and underscores are allowed"
        )


def read_local(path: str) -> str:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise InputNotFound(f"file '{path}' not found: {exc.strerror or exc}") from exc
    return decode_text(data, f"file '{path}'")


def read_from_branch(runner: CommandRunner, path: str, branch: str, *, git: str = "git") -> str:
    validate_branch_ref(branch, path)
    result = runner.run([git, "show", f"{branch}:{path}"])
    if not result.ok:
        raise InputNotFound(
            f"failed to read file from branch '{branch}': {result.stderr.strip()}"
        )
    return result.stdout


def read_from_gist(runner: CommandRunner, file_name: str, gist_id: str, *, gh: str = "gh") -> str:
    validate_gist_ref(gist_id, file_name)
    result = runner.run([gh, "gist", "view", gist_id, "--filename", file_name, "--raw"])
    if not result.ok:
        raise InputNotFound(f"failed to read file from gist: {result.stderr.strip()}")
    return result.stdout


def resolve_source(
    request: SourceRequest, runner: CommandRunner, *, git: str = "git", gh: str = "gh"
) -> str:
    request.validate()
    if request.branch:
        return read_from_branch(runner, request.file, request.branch, git=git)
    if request.gist:
        return read_from_gist(runner, request.file, request.gist, gh=gh)
    return read_local(request.file)


__all__ = [
    "SourceRequest",
    "validate_branch_ref",
    "validate_gist_ref",
    "read_local",
    "read_from_branch",
    "read_from_gist",
    "resolve_source",
]
