"""Frontmatter scanner for ``*.issue.md`` files.

The format is a small, line-oriented subset of YAML:

    ---
    title: Fix the flaky upload test
    assign: [me, @octocat]
    labels:
      - name: bug
        color: d73a4a
        desc: Something isn't working
    milestone: v1.2
    projects:
      - Roadmap
    ---
    Free-form markdown body.

No YAML library is involved: the frontmatter block is walked with a single
line cursor and each recognised key hands the cursor to an extractor, which
returns the index of the last line it consumed.
"""

from __future__ import annotations

from enum import Enum

from .errors import MalformedInput
from .models import IssueMetadata, Label

DELIMITER = "---"

_QUOTES = "\"'"
_LIST_ITEM_STRIP = "\"'@"
_LABEL_PREFIX = "- name:"


class FieldKind(Enum):
    # Declaration order is the dispatch order.
    TITLE = "title:"
    ASSIGN = "assign:"
    LABELS = "labels:"
    MILESTONE = "milestone:"
    PROJECTS = "projects:"

    @property
    def prefix(self) -> str:
        return str(self.value)

    @classmethod
    def match(cls, trimmed: str) -> FieldKind | None:
        for kind in cls:
            if trimmed.startswith(kind.prefix):
                return kind
        return None


def _is_top_level(line: str) -> bool:
    return not line.startswith((" ", "\t"))


def _strip_prefix(text: str, prefix: str) -> str:
    return text[len(prefix):] if text.startswith(prefix) else text


def extract_value(line: str, prefix: str) -> str:
    """Return the scalar after ``prefix`` with whitespace and quotes removed.

    Quote characters are trimmed from both ends independently, so
    ``"mismatched'`` becomes ``mismatched``. Existing issue files rely on this.
    """
    value = _strip_prefix(line.strip(), prefix).strip()
    return value.strip(_QUOTES)


def _clean_item(raw: str) -> str:
    return raw.strip().strip(_LIST_ITEM_STRIP)


def parse_list_field(lines: list[str], start: int, prefix: str) -> tuple[list[str], int]:
    """Parse an ``assign:`` / ``projects:`` style list.

    Accepts the inline form (``key: [a, "b", @c]``) or an indented block of
    ``- item`` lines. Returns the items and the index of the last line read.
    """
    trimmed = lines[start].strip()
    if "[" in trimmed:
        content = _strip_prefix(trimmed, prefix).strip().strip("[]")
        items = [item for item in (_clean_item(part) for part in content.split(",")) if item]
        return items, start

    items = []
    seen_item = False
    i = start + 1
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        if not stripped.startswith("-"):
            if ":" in line and _is_top_level(line):
                break
            i += 1
            continue
        seen_item = True
        item = _clean_item(stripped[1:])
        if item:
            items.append(item)
        i += 1
    if not seen_item:
        return items, start
    return items, i - 1


def parse_labels(lines: list[str], start: int) -> tuple[list[Label], int]:
    """Parse the ``labels:`` block into :class:`Label` records.

    Each record opens with ``- name:``; indented ``color:`` and ``desc:``
    lines that follow belong to it until the next ``- name:`` or an
    unindented line.
    """
    labels: list[Label] = []
    last = start
    i = start + 1
    while i < len(lines):
        line = lines[i]
        if _is_top_level(line) and ":" in line:
            break
        stripped = line.strip()
        if not stripped.startswith(_LABEL_PREFIX):
            last = i
            i += 1
            continue

        label = Label(name=extract_value(stripped, _LABEL_PREFIX))
        last = i
        j = i + 1
        while j < len(lines):
            sub_line = lines[j]
            sub = sub_line.strip()
            if sub.startswith(_LABEL_PREFIX) or _is_top_level(sub_line):
                break
            if sub.startswith("color:"):
                label.color = extract_value(sub, "color:")
            elif sub.startswith("desc:"):
                label.desc = extract_value(sub, "desc:")
            last = j
            j += 1
        if label.name:
            labels.append(label)
        i = j
    return labels, last


def split_frontmatter(content: str) -> tuple[str, str]:
    """Split raw file content into ``(frontmatter, body)``.

    Anything before the first delimiter is ignored; delimiters after the
    second one are part of the body.
    """
    parts = content.split(DELIMITER)
    if len(parts) < 3:
        raise MalformedInput("invalid format: frontmatter not found")
    frontmatter = parts[1].strip()
    body = DELIMITER.join(parts[2:]).strip()
    return frontmatter, body


def parse_issue_file(content: str) -> tuple[IssueMetadata, str]:
    frontmatter, body = split_frontmatter(content)
    metadata = IssueMetadata()
    lines = frontmatter.split("\n")
    i = 0
    while i < len(lines):
        trimmed = lines[i].strip()
        kind = FieldKind.match(trimmed)
        if kind is FieldKind.TITLE:
            metadata.title = extract_value(trimmed, kind.prefix)
        elif kind is FieldKind.ASSIGN:
            metadata.assignees, i = parse_list_field(lines, i, kind.prefix)
        elif kind is FieldKind.LABELS:
            metadata.labels, i = parse_labels(lines, i)
        elif kind is FieldKind.MILESTONE:
            metadata.milestone = extract_value(trimmed, kind.prefix)
        elif kind is FieldKind.PROJECTS:
            metadata.projects, i = parse_list_field(lines, i, kind.prefix)
        i += 1
    return metadata, body


def validate_metadata(metadata: IssueMetadata) -> IssueMetadata:
    if not metadata.title:
        raise MalformedInput("'title' is required in frontmatter")
    return metadata


__all__ = [
    "DELIMITER",
    "FieldKind",
    "extract_value",
    "parse_list_field",
    "parse_labels",
    "split_frontmatter",
    "parse_issue_file",
    "validate_metadata",
]
