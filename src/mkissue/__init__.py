"""mkissue - create GitHub issues from markdown files with frontmatter.

Library use:

from mkissue import parse_issue_file, validate_metadata, IssuePublisher
from mkissue.runner import SubprocessRunner

metadata, body = parse_issue_file(open('bug.issue.md').read())
validate_metadata(metadata)
IssuePublisher(SubprocessRunner()).publish(metadata, body)

The CLI (``gh-mkissue mkissue --file bug.issue.md``) wraps the same calls.
"""

from __future__ import annotations

from .config import MkIssueConfig, load_config
from .models import IssueMetadata, Label, PublishResult
from .parser import parse_issue_file, validate_metadata
from .publisher import IssuePublisher
from .sources import SourceRequest, resolve_source

__version__ = "0.3.0"

__all__ = [
    "IssueMetadata",
    "Label",
    "PublishResult",
    "MkIssueConfig",
    "load_config",
    "parse_issue_file",
    "validate_metadata",
    "IssuePublisher",
    "SourceRequest",
    "resolve_source",
    "__version__",
]
