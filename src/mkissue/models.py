from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Label:
    """One label reference from the ``labels:`` block.

    Only ``name`` takes part in equality; ``color`` and ``desc`` describe how
    the label should look if it has to be created.
    """

    name: str
    color: str = field(default="", compare=False)
    desc: str = field(default="", compare=False)

    @property
    def needs_ensure(self) -> bool:
        # Labels without metadata refer to labels that already exist remotely.
        return bool(self.color or self.desc)


@dataclass
class IssueMetadata:
    """Parsed frontmatter of one issue file."""

    title: str = ""
    assignees: list[str] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    milestone: str = ""
    projects: list[str] = field(default_factory=list)


@dataclass
class PublishResult:
    url: str | None = None
    number: int | None = None
    created_labels: list[str] = field(default_factory=list)


__all__ = ["Label", "IssueMetadata", "PublishResult"]
