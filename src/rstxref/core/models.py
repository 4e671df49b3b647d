"""
rstxref.core.models - Core data models for documents, anchors and references.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, NamedTuple

if TYPE_CHECKING:
    from rstxref.parsers import ParsedContent


@dataclass(frozen=True)
class Location:
    """A position in the corpus.

    Attributes:
        doc_id: Document id (relative path without suffix)
        line: 1-indexed line number
        path: Source file path relative to the corpus root
    """

    doc_id: str
    line: int = 0
    path: str = ""

    def __str__(self) -> str:
        name = self.path or self.doc_id
        if self.line:
            return f"{name}:{self.line}"
        return name


class AnchorKind(Enum):
    EXPLICIT = "explicit"
    SECTION = "section"
    OBJECT = "object"
    DOCUMENT = "document"


@dataclass(frozen=True)
class Anchor:
    """
    An addressable label bound to one location.

    Attributes:
        label: Normalized label
        kind: How the anchor was declared
        location: Where the anchor is declared
        target_line: Line the anchor points at (an explicit label placed
            right before a section title points at the title)
        title: Section title or object name, if any
    """

    label: str
    kind: AnchorKind
    location: Location
    target_line: int = 0
    title: str = ""

    @property
    def doc_id(self) -> str:
        return self.location.doc_id

    def same_target(self, other: Anchor) -> bool:
        """True when both anchors point at the same spot."""
        return self.doc_id == other.doc_id and self.target_line == other.target_line


@dataclass(frozen=True)
class IncludeDirective:
    """An include directive as written in a document."""

    target: str
    doc_id: str
    location: Location
    end_line: int
    indent: str = ""
    options: tuple[tuple[str, str], ...] = ()

    def option(self, name: str) -> str | None:
        for key, value in self.options:
            if key == name:
                return value
        return None


@dataclass(frozen=True)
class Document:
    """
    A loaded source document. Immutable after load.

    Attributes:
        doc_id: Stable id, the relative path without the source suffix
        path: Source path relative to the corpus root
        text: Raw UTF-8 text
        blocks: Parsed blocks ordered by start line
        anchors: Anchors this document declares
        includes: Include directives in source order
    """

    doc_id: str
    path: str
    text: str
    blocks: tuple[ParsedContent, ...] = ()
    anchors: tuple[Anchor, ...] = ()
    includes: tuple[IncludeDirective, ...] = ()

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    def location(self, line: int = 0) -> Location:
        return Location(self.doc_id, line, self.path)

    def __repr__(self) -> str:
        return f"Document(doc_id={self.doc_id!r}, path={self.path!r})"


class SourceLine(NamedTuple):
    """One line of expanded text with the place it came from."""

    text: str
    doc_id: str
    line: int
    path: str = ""


@dataclass(frozen=True)
class ExpandedDocument:
    """A top-level document with every include substituted in place."""

    doc_id: str
    lines: tuple[SourceLine, ...]
    included: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


class RoleKind(Enum):
    """Resolution strategy of a role. One strategy per tag."""

    LABEL = "label"
    DOCUMENT = "document"
    OBJECT = "object"
    EXTERNAL = "external"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Reference:
    """
    An inline role occurrence.

    Attributes:
        role: Role name as written (e.g., "ref", "dbcommand")
        kind: Resolution strategy for the role
        target: Target as written (tilde prefix removed)
        label: Normalized lookup key
        display: Display text, if an explicit "text <label>" pair was used
        explicit: True when the target came from an explicit <label>
        location: Origin of the reference (after include expansion)
        column: 1-indexed column of the role on its line
        glob: True for a toctree pattern that names documents by wildcard
    """

    role: str
    kind: RoleKind
    target: str
    label: str
    location: Location
    display: str = ""
    explicit: bool = False
    column: int = 0
    glob: bool = False

    def key(self) -> tuple:
        return (self.location.doc_id, self.location.line, self.column, self.role, self.target)


class ResolutionStatus(Enum):
    RESOLVED = "resolved"
    EXTERNAL = "external"
    UNRESOLVED = "unresolved"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Resolution:
    """The outcome of resolving one Reference."""

    reference: Reference
    status: ResolutionStatus
    anchor: Anchor | None = None
    suggestions: tuple[str, ...] = ()


@dataclass
class ResolvedCorpus:
    """
    Output of one validation run.

    Attributes:
        anchors: Read-only anchor table (label -> Anchor)
        resolutions: One Resolution per Reference, in report order
        expanded: Include-flattened text of each top-level document
        top_level: Top-level document ids in processing order
    """

    anchors: Mapping[str, Anchor] = field(default_factory=lambda: MappingProxyType({}))
    resolutions: list[Resolution] = field(default_factory=list)
    expanded: dict[str, str] = field(default_factory=dict)
    top_level: list[str] = field(default_factory=list)

    def by_reference(self) -> dict[Reference, Resolution]:
        return {r.reference: r for r in self.resolutions}

    def unresolved(self) -> list[Resolution]:
        return [r for r in self.resolutions if r.status == ResolutionStatus.UNRESOLVED]
