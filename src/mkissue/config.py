from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_CONFIG_FILE = ".mkissue.yaml"
DEFAULT_DOTENV_FILE = ".env"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class MkIssueConfig:
    github_repo: str | None = None
    gh_path: str = "gh"
    git_path: str = "git"
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    dry_run_default: bool = False
    quiet: bool = False
    source_file: Path | None = None


def _env_flag(env: Mapping[str, str], name: str) -> bool | None:
    value = env.get(name)
    if value is None:
        return None
    return value.strip().lower() in _TRUTHY


def _clean_env(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _load_yaml(p: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid configuration file {p}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Configuration file not readable: {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file {p} must contain a mapping")
    return cast(dict[str, Any], raw)


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Configuration section '{key}' must be a mapping")
    return cast(dict[str, Any], value)


def load_dotenv_file(cwd: Path | None = None, env: Mapping[str, str] | None = None) -> bool:
    """Load ``.env`` from ``cwd`` without overriding variables already set."""
    env = os.environ if env is None else env
    if _env_flag(env, "MKISSUE_SKIP_DOTENV"):
        return False
    candidate = (cwd or Path.cwd()) / DEFAULT_DOTENV_FILE
    if not candidate.exists():
        return False
    return bool(load_dotenv(candidate, override=False))


def load_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> MkIssueConfig:
    """Build the tool configuration.

    Precedence, lowest first: built-in defaults, the YAML file (``path`` or
    ``.mkissue.yaml`` in ``cwd`` when present), then ``MKISSUE_*`` environment
    variables. An explicit ``path`` that does not exist is an error.
    """
    env = os.environ if env is None else env
    base = cwd or Path.cwd()
    raw: dict[str, Any] = {}
    source: Path | None = None
    if path is not None:
        source = Path(path)
        if not source.exists():
            raise ConfigError(f"Configuration file not found: {source}")
        raw = _load_yaml(source)
    elif (base / DEFAULT_CONFIG_FILE).exists():
        source = base / DEFAULT_CONFIG_FILE
        raw = _load_yaml(source)

    gh = _section(raw, "github")
    git = _section(raw, "git")
    logging_config = _section(raw, "logging")
    behavior = _section(raw, "behavior")

    cfg = MkIssueConfig(
        github_repo=gh.get("repo") or None,
        gh_path=str(gh.get("gh_path") or "gh"),
        git_path=str(git.get("path") or "git"),
        logging_json_enabled=bool(logging_config.get("json_enabled", False)),
        logging_level=str(logging_config.get("level", "INFO")),
        dry_run_default=bool(behavior.get("dry_run_default", False)),
        source_file=source,
    )

    cfg.github_repo = _clean_env(env, "MKISSUE_REPO") or cfg.github_repo
    cfg.gh_path = _clean_env(env, "MKISSUE_GH") or cfg.gh_path
    cfg.git_path = _clean_env(env, "MKISSUE_GIT") or cfg.git_path
    cfg.logging_level = _clean_env(env, "MKISSUE_LOG_LEVEL") or cfg.logging_level
    for attr, name in (
        ("logging_json_enabled", "MKISSUE_LOG_JSON"),
        ("dry_run_default", "MKISSUE_DRY_RUN"),
        ("quiet", "MKISSUE_QUIET"),
    ):
        flag = _env_flag(env, name)
        if flag is not None:
            setattr(cfg, attr, flag)
    return cfg


__all__ = ["MkIssueConfig", "load_config", "load_dotenv_file", "DEFAULT_CONFIG_FILE"]
