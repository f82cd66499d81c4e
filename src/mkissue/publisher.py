"""Issue publishing through the GitHub CLI (``gh``).

Turns parsed :class:`IssueMetadata` plus a body into ``gh`` invocations:

 - labels that carry a color or description are looked up with
   ``gh label list`` and created with ``gh label create`` when missing
 - the issue itself is created with ``gh issue create``; the body travels
   through a temporary ``--body-file`` that is removed on every exit path
 - ``-R owner/repo`` is appended to every call when a repository is set

Failures are raised as :class:`RemoteOperationFailed` with the captured
stderr; nothing is retried and labels created before a failure are kept.
"""

from __future__ import annotations

import os
import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import BodyFileError, RemoteOperationFailed
from .logging import StructuredLogger, get_logger
from .models import IssueMetadata, Label, PublishResult
from .runner import CommandResult, CommandRunner

NUMBER_PATTERN = re.compile(r"/issues/(\d+)")
SELF_ASSIGNEE = "me"
SELF_TOKEN = "@me"
LABEL_LIST_LIMIT = "1000"


@contextmanager
def body_file(body: str) -> Iterator[str]:
    """Yield the path of a temp file holding ``body``; always delete it."""
    try:
        fd, path = tempfile.mkstemp(prefix="issue-body-", suffix=".md")
    except OSError as exc:
        raise BodyFileError(f"failed to create temp file: {exc}") from exc
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(body)
        except OSError as exc:
            raise BodyFileError(f"failed to write body: {exc}") from exc
        yield path
    finally:
        Path(path).unlink(missing_ok=True)


def resolve_assignee(assignee: str) -> str:
    return SELF_TOKEN if assignee == SELF_ASSIGNEE else assignee


class IssuePublisher:
    def __init__(
        self,
        runner: CommandRunner,
        *,
        gh: str = "gh",
        repo: str | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.runner = runner
        self.gh = gh
        self.repo = repo
        self.logger = logger or get_logger()

    # --- internal helpers -------------------------------------------------
    def _base_cmd(self, *parts: str) -> list[str]:
        cmd = [self.gh, *parts]
        if self.repo:
            cmd.extend(["-R", self.repo])
        return cmd

    def _run(self, cmd: list[str], action: str) -> CommandResult:
        result = self.runner.run(cmd)
        if not result.ok:
            self.logger.log_error(
                f"gh {action} failed", error=result.stderr, returncode=result.returncode
            )
            raise RemoteOperationFailed(
                f"failed to {action}: gh exited with status {result.returncode}",
                command=cmd,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    # --- labels -------------------------------------------------------------
    def list_labels(self) -> list[str]:
        result = self._run(
            self._base_cmd(
                "label", "list", "--limit", LABEL_LIST_LIMIT, "--json", "name", "--jq", ".[].name"
            ),
            "list labels",
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def ensure_label(self, label: Label) -> bool:
        """Create ``label`` unless a label with the same name exists.

        Returns True when a create request was issued.
        """
        if label.name in self.list_labels():
            self.logger.debug(f"label exists: {label.name}", label=label.name)
            return False
        parts = ["label", "create", label.name]
        if label.color:
            parts.extend(["--color", label.color])
        if label.desc:
            parts.extend(["--description", label.desc])
        self.logger.log_operation("label_create", label=label.name)
        self._run(self._base_cmd(*parts), "create label")
        return True

    # --- issues -------------------------------------------------------------
    def build_issue_command(
        self, metadata: IssueMetadata, body_path: str | None = None
    ) -> list[str]:
        cmd = ["issue", "create", "--title", metadata.title]
        if body_path:
            cmd.extend(["--body-file", body_path])
        for assignee in metadata.assignees:
            cmd.extend(["--assignee", resolve_assignee(assignee)])
        for label in metadata.labels:
            cmd.extend(["--label", label.name])
        if metadata.milestone:
            cmd.extend(["--milestone", metadata.milestone])
        for project in metadata.projects:
            cmd.extend(["--project", project])
        return self._base_cmd(*cmd)

    def create_issue(self, metadata: IssueMetadata, body: str) -> PublishResult:
        self.logger.log_operation("issue_create", title=metadata.title)
        if body:
            with body_file(body) as path:
                result = self._run(self.build_issue_command(metadata, path), "create issue")
        else:
            result = self._run(self.build_issue_command(metadata), "create issue")
        url = _last_line(result.stdout)
        match = NUMBER_PATTERN.search(url or "")
        return PublishResult(url=url, number=int(match.group(1)) if match else None)

    def publish(self, metadata: IssueMetadata, body: str) -> PublishResult:
        created: list[str] = []
        for label in metadata.labels:
            if label.needs_ensure and self.ensure_label(label):
                created.append(label.name)
        with self.logger.timed_operation("publish", title=metadata.title):
            result = self.create_issue(metadata, body)
        result.created_labels = created
        return result


def _last_line(text: str) -> str | None:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return lines[-1] if lines else None


__all__ = ["IssuePublisher", "body_file", "resolve_assignee", "NUMBER_PATTERN"]
