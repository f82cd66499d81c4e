"""mkissue CLI.

Subcommands:
  mkissue -> create a GitHub issue from a frontmatter markdown file, read
             from disk, from a git branch (--branch) or from a gist (--gist)

Exit codes: 0 success, 1 runtime failure, 2 usage error.
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

from mkissue import __version__
from mkissue.config import MkIssueConfig, load_config, load_dotenv_file
from mkissue.errors import MkIssueError
from mkissue.logging import StructuredLogger, configure_logging
from mkissue.parser import parse_issue_file, validate_metadata
from mkissue.publisher import IssuePublisher
from mkissue.runner import READ_ONLY_COMMANDS, CommandRunner, DryRunRunner, SubprocessRunner
from mkissue.sources import SourceRequest, resolve_source

PROG = "gh-mkissue"
REPO_HELP = "Target repository (owner/repo); defaults to the current directory's remote"

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog=PROG, description="Create GitHub issues from markdown files with frontmatter"
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Only log errors (env: MKISSUE_QUIET=1)",
    )
    p.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")
    p.add_argument("--log-level", help="Logging level (default INFO)")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    mk = sub.add_parser("mkissue", help="Create a GitHub issue from a markdown file")
    mk.add_argument(
        "-f",
        "--file",
        required=True,
        help="Path to the markdown file containing issue content",
    )
    origin = mk.add_mutually_exclusive_group()
    origin.add_argument(
        "-b", "--branch", help="Read the file from this git branch instead of the working tree"
    )
    origin.add_argument(
        "-g", "--gist", help="Read the file from this gist (32-character hex ID)"
    )
    mk.add_argument("-R", "--repo", help=REPO_HELP)
    mk.add_argument(
        "--dry-run", action="store_true", help="Print the gh commands instead of running them"
    )
    mk.add_argument("--config", help="Path to a YAML config file (default: .mkissue.yaml)")
    return p


def prepare_config(args: argparse.Namespace) -> MkIssueConfig:
    """Load MkIssueConfig and apply command-line overrides."""
    cfg = load_config(getattr(args, "config", None))
    if getattr(args, "repo", None):
        cfg.github_repo = args.repo
    if getattr(args, "log_json", False):
        cfg.logging_json_enabled = True
    if getattr(args, "log_level", None):
        cfg.logging_level = args.log_level
    if getattr(args, "quiet", False):
        cfg.quiet = True
    return cfg


def _build_runner(dry_run: bool) -> CommandRunner:
    runner = SubprocessRunner()
    if dry_run:
        return DryRunRunner(passthrough=runner, read_only=READ_ONLY_COMMANDS)
    return runner


def _source_request(args: argparse.Namespace) -> SourceRequest:
    return SourceRequest(file=args.file, branch=args.branch, gist=args.gist).validate()


def _cmd_mkissue(
    cfg: MkIssueConfig,
    request: SourceRequest,
    args: argparse.Namespace,
    logger: StructuredLogger,
) -> int:
    dry_run = bool(args.dry_run or cfg.dry_run_default)
    runner = _build_runner(dry_run)

    logger.log_operation("read_source", origin=request.origin, path=request.file)
    content = resolve_source(request, runner, git=cfg.git_path, gh=cfg.gh_path)
    metadata, body = parse_issue_file(content)
    validate_metadata(metadata)

    publisher = IssuePublisher(runner, gh=cfg.gh_path, repo=cfg.github_repo, logger=logger)
    result = publisher.publish(metadata, body)

    for name in result.created_labels:
        print(f"Created label: {name}")
    if dry_run:
        print("[dry-run] no issue created")
        return 0
    if result.url:
        print(result.url)
    print("Issue created successfully!")
    return 0


def _build_handlers(
    args: argparse.Namespace,
    cfg: MkIssueConfig,
    request: SourceRequest,
    logger: StructuredLogger,
) -> dict[str, Any]:
    return {
        "mkissue": lambda: _cmd_mkissue(cfg, request, args, logger),
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        # Flags are checked before .env or the YAML config is read.
        request = _source_request(args)
        load_dotenv_file()
        cfg = prepare_config(args)
    except MkIssueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    logger = configure_logging(
        json_logging=cfg.logging_json_enabled,
        level="ERROR" if cfg.quiet else cfg.logging_level,
    )
    if cfg.source_file is not None:
        logger.debug(f"config loaded from {cfg.source_file}", path=str(cfg.source_file))
    handler = _build_handlers(args, cfg, request, logger).get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    try:
        return int(handler())
    except MkIssueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
