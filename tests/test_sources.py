from __future__ import annotations

from pathlib import Path

import pytest

from mkissue.errors import InputNotFound, MalformedInput, UsageError
from mkissue.runner import CommandResult
from mkissue.sources import (
    SourceRequest,
    read_from_branch,
    read_from_gist,
    read_local,
    resolve_source,
    validate_gist_ref,
)

GIST_ID = "6ef8a9c46f65f5fedb58e81b70dd90ba"
CONTENT = "---\ntitle: From elsewhere\n---\nBody"


def test_read_local(tmp_path: Path) -> None:
    path = tmp_path / "bug.issue.md"
    path.write_text(CONTENT, encoding="utf-8")
    assert read_local(str(path)) == CONTENT


def test_read_local_missing_file() -> None:
    with pytest.raises(InputNotFound, match="not found"):
        read_local("/nonexistent/file/path.md")


def test_read_local_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bad.md"
    path.write_bytes(b"---\ntitle: \xff\xfe\n---\nbody\n")
    with pytest.raises(MalformedInput, match=r"is not valid UTF-8: .* at byte 11"):
        read_local(str(path))


@pytest.mark.parametrize(
    "path, branch",
    [
        ("file.md", "branch\x00name"),
        ("file.md", "branch\nname"),
        ("file.md", "branch\rname"),
        ("file\x00.md", "mybranch"),
        ("file\n.md", "mybranch"),
    ],
)
def test_branch_validation_rejects_control_characters(runner_factory, path, branch) -> None:
    runner = runner_factory()
    with pytest.raises(UsageError, match="prohibited characters"):
        read_from_branch(runner, path, branch)
    assert runner.calls == []


def test_read_from_branch_uses_git_show(runner_factory) -> None:
    runner = runner_factory(lambda argv: CommandResult(argv, 0, CONTENT))
    assert read_from_branch(runner, "docs/bug.issue.md", "feature/x") == CONTENT
    assert runner.calls == [("git", "show", "feature/x:docs/bug.issue.md")]


def test_read_from_branch_failure_surfaces_stderr(runner_factory) -> None:
    runner = runner_factory(
        lambda argv: CommandResult(argv, 128, "", "fatal: invalid object name 'nope'\n")
    )
    with pytest.raises(InputNotFound, match="invalid object name"):
        read_from_branch(runner, "bug.md", "nope")


@pytest.mark.parametrize(
    "gist_id",
    [
        "shortid",
        "6EF8A9C46F65F5FEDB58E81B70DD90BA",
        "6ef8a9c46f65f5fedb58e81b70dd90bg",
        GIST_ID + "0",
        GIST_ID + "\n",
        "\n" + GIST_ID,
    ],
)
def test_gist_id_validation(runner_factory, gist_id: str) -> None:
    runner = runner_factory()
    with pytest.raises(UsageError, match="32-character hexadecimal"):
        read_from_gist(runner, "file.md", gist_id)
    assert runner.calls == []


@pytest.mark.parametrize(
    "file_name",
    [
        "../secret",
        "../file.md",
        "path/file.md",
        "path\\file.md",
        "file$name.md",
        "..",
        "",
        "file.md\n",
    ],
)
def test_gist_file_name_validation(runner_factory, file_name: str) -> None:
    runner = runner_factory()
    with pytest.raises(UsageError, match="alphanumeric"):
        read_from_gist(runner, file_name, GIST_ID)
    assert runner.calls == []


def test_gist_validation_accepts_safe_names() -> None:
    validate_gist_ref(GIST_ID, "my_issue-01.issue.md")


def test_read_from_gist(runner_factory) -> None:
    runner = runner_factory(lambda argv: CommandResult(argv, 0, CONTENT))
    assert read_from_gist(runner, "bug.md", GIST_ID) == CONTENT
    assert runner.calls == [("gh", "gist", "view", GIST_ID, "--filename", "bug.md", "--raw")]


def test_read_from_gist_not_found(runner_factory) -> None:
    runner = runner_factory(lambda argv: CommandResult(argv, 1, "", "HTTP 404: Not Found"))
    with pytest.raises(InputNotFound, match="failed to read file from gist"):
        read_from_gist(runner, "bug.md", "0000000000000000000000000000000a")


def test_request_rejects_branch_and_gist(runner_factory) -> None:
    runner = runner_factory()
    request = SourceRequest(file="bug.md", branch="main", gist=GIST_ID)
    with pytest.raises(UsageError, match="cannot be used together"):
        resolve_source(request, runner)
    assert runner.calls == []


def test_request_requires_file() -> None:
    with pytest.raises(UsageError, match="required"):
        SourceRequest(file="").validate()


def test_request_is_immutable() -> None:
    request = SourceRequest(file="bug.md")
    with pytest.raises(AttributeError):
        request.branch = "main"  # type: ignore[misc]


def test_resolve_source_dispatches_by_origin(tmp_path: Path, runner_factory) -> None:
    local = tmp_path / "bug.md"
    local.write_text("local", encoding="utf-8")
    runner = runner_factory(lambda argv: CommandResult(argv, 0, "remote"))

    assert resolve_source(SourceRequest(file=str(local)), runner) == "local"
    assert resolve_source(SourceRequest(file="bug.md", branch="dev"), runner, git="/usr/bin/git") == "remote"
    assert resolve_source(SourceRequest(file="bug.md", gist=GIST_ID), runner, gh="gh2") == "remote"
    assert [c[0] for c in runner.calls] == ["/usr/bin/git", "gh2"]


def test_request_origin() -> None:
    assert SourceRequest(file="a").origin == "file"
    assert SourceRequest(file="a", branch="b").origin == "branch"
    assert SourceRequest(file="a", gist=GIST_ID).origin == "gist"
