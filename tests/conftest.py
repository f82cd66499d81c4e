"""Pytest configuration for mkissue tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`), and provides a
recording fake for the command runner so no test ever spawns `gh` or `git`.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Subprocess tests (`python -m mkissue`) need the in-repo package too.
py_path = os.environ.get("PYTHONPATH", "")
parts = [p for p in py_path.split(os.pathsep) if p]
if str(SRC) not in parts:
    parts.insert(0, str(SRC))
    os.environ["PYTHONPATH"] = os.pathsep.join(parts)

# Keep a developer's .env out of the test session.
os.environ.setdefault("MKISSUE_SKIP_DOTENV", "1")

from mkissue.runner import CommandResult  # noqa: E402


class FakeRunner:
    """Records argument vectors and answers from a responder callback."""

    def __init__(
        self, responder: Callable[[tuple[str, ...]], CommandResult] | None = None
    ) -> None:
        self.calls: list[tuple[str, ...]] = []
        self._responder = responder

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = tuple(args)
        self.calls.append(argv)
        if self._responder is not None:
            return self._responder(argv)
        return CommandResult(argv, 0)

    def calls_for(self, *prefix: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[1 : 1 + len(prefix)] == prefix]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MKISSUE_REPO",
        "MKISSUE_GH",
        "MKISSUE_GIT",
        "MKISSUE_LOG_JSON",
        "MKISSUE_LOG_LEVEL",
        "MKISSUE_DRY_RUN",
        "MKISSUE_QUIET",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner_factory() -> type[FakeRunner]:
    return FakeRunner
