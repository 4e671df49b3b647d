"""
rstxref.resolve.roles - Role reference resolver.

Finds inline role markup such as ``:ref:`label``` or
``:doc:`display text </path>``` in the scannable blocks of a document and
resolves each reference against the shared, read-only anchor table.

Every role name maps to one RoleKind, and every RoleKind has exactly one
resolution strategy.
"""

from __future__ import annotations

import difflib
import fnmatch
import logging
import re
from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping, Sequence

from rstxref.config.defaults import DEFAULT_CONFIG
from rstxref.core.document import create_registry, parse_blocks
from rstxref.core.errors import Issue, UnknownRoleNotice, UnresolvedReferenceWarning
from rstxref.core.labels import normalize_label, object_label, resolve_doc_path, strip_suffix
from rstxref.core.models import (
    Anchor,
    AnchorKind,
    Document,
    ExpandedDocument,
    Location,
    Reference,
    Resolution,
    ResolutionStatus,
    RoleKind,
    SourceLine,
)
from rstxref.parsers import ParserRegistry

logger = logging.getLogger(__name__)

ROLE_PATTERN = re.compile(
    r"(?<![\w`\\]):(?P<role>[A-Za-z][\w+.-]*(?::[A-Za-z][\w+.-]*)*):`(?P<content>[^`]+)`"
)

# "display text <label>"
EXPLICIT_TARGET = re.compile(r"^(?P<display>.*?)\s*<(?P<target>[^<>]+)>$", re.DOTALL)

# ``inline literal`` spans are never scanned for roles
INLINE_LITERAL = re.compile(r"``.+?``", re.DOTALL)

SCANNED_BLOCKS = ("text", "section")

BUILTIN_ROLES = {"ref": RoleKind.LABEL, "doc": RoleKind.DOCUMENT}


class RoleVocabulary:
    """The declared set of role names and the kind each one resolves as."""

    def __init__(
        self,
        objects: Iterable[str] = (),
        external: Iterable[str] = (),
        text: Iterable[str] = (),
    ):
        self.kinds: dict[str, RoleKind] = {}
        for name in objects:
            self.kinds[name] = RoleKind.OBJECT
        for name in external:
            self.kinds[name] = RoleKind.EXTERNAL
        self.kinds.update(BUILTIN_ROLES)
        self.text_roles = set(text)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "RoleVocabulary":
        roles = config.get("roles", {})
        return cls(
            objects=roles.get("objects", []),
            external=roles.get("external", []),
            text=roles.get("text", []),
        )

    def kind_of(self, role: str) -> RoleKind | None:
        """Kind of ``role``; None for formatting roles that reference nothing.

        Domain-qualified names (``py:func``) fall back to their last part.
        """
        for name in (role, role.rsplit(":", 1)[-1]):
            if name in self.text_roles:
                return None
            if name in self.kinds:
                return self.kinds[name]
        return RoleKind.UNKNOWN


def scan_references(
    lines: Sequence[SourceLine],
    vocabulary: RoleVocabulary,
    suffixes: Sequence[str] = (),
    config: dict[str, Any] | None = None,
    registry: ParserRegistry | None = None,
) -> list[Reference]:
    """
    Find role references (and toctree entries) in a run of source lines.

    Opaque blocks (literal, comment, admonition) are skipped. Locations
    point at the line each reference was written on, which may be inside
    an included document.
    """
    config = config or DEFAULT_CONFIG
    text = "\n".join(line.text for line in lines)
    doc_id = lines[0].doc_id if lines else ""
    blocks = parse_blocks(text, doc_id, config=config, registry=registry)
    references: list[Reference] = []

    for block in blocks:
        if block.content_type == "toctree":
            for entry in block.parsed_data["entries"]:
                source = lines[entry["line"] - 1]
                target = entry["target"]
                references.append(
                    Reference(
                        role="toctree",
                        kind=RoleKind.DOCUMENT,
                        target=target,
                        label=strip_suffix(resolve_doc_path(target, source.doc_id), suffixes),
                        location=Location(source.doc_id, source.line, source.path),
                        display=entry["title"],
                        explicit=bool(entry["title"]),
                        column=len(source.text) - len(source.text.lstrip()) + 1,
                        glob=entry["glob"],
                    )
                )
        elif block.content_type in SCANNED_BLOCKS:
            block_lines = lines[block.start_line - 1 : block.end_line]
            references.extend(_scan_block(block_lines, vocabulary, suffixes))

    return references


def _scan_block(
    block_lines: Sequence[SourceLine],
    vocabulary: RoleVocabulary,
    suffixes: Sequence[str],
) -> list[Reference]:
    text = "\n".join(line.text for line in block_lines)
    # Blank out literals without shifting offsets
    text = INLINE_LITERAL.sub(lambda m: re.sub(r"[^\n]", " ", m.group(0)), text)
    line_starts = [0]
    for line in block_lines[:-1]:
        line_starts.append(line_starts[-1] + len(line.text) + 1)

    found = []
    for match in ROLE_PATTERN.finditer(text):
        role = match.group("role")
        kind = vocabulary.kind_of(role)
        if kind is None:
            continue

        content = " ".join(match.group("content").split())
        if content.startswith("!"):
            continue

        display = ""
        explicit = False
        target = content
        pair = EXPLICIT_TARGET.match(content)
        if pair:
            display = pair.group("display")
            target = pair.group("target").strip()
            explicit = True
        target = target.lstrip("~")

        index = max(i for i, start in enumerate(line_starts) if start <= match.start())
        source = block_lines[index]
        found.append(
            Reference(
                role=role,
                kind=kind,
                target=target,
                label=_lookup_label(role, kind, target, source.doc_id, suffixes),
                location=Location(source.doc_id, source.line, source.path),
                display=display,
                explicit=explicit,
                column=match.start() - line_starts[index] + 1,
            )
        )
    return found


def _lookup_label(
    role: str, kind: RoleKind, target: str, doc_id: str, suffixes: Sequence[str]
) -> str:
    if kind == RoleKind.DOCUMENT:
        return strip_suffix(resolve_doc_path(target, doc_id), suffixes)
    if kind == RoleKind.OBJECT:
        return object_label(role.rsplit(":", 1)[-1], target)
    return normalize_label(target)


class RoleReferenceResolver:
    """
    Resolves references against the anchor table and the set of documents.

    The anchor table must be complete before the resolver is created; it
    is only ever read.
    """

    def __init__(
        self,
        anchors: Mapping[str, Anchor],
        documents: Mapping[str, Document],
        config: dict[str, Any] | None = None,
        vocabulary: RoleVocabulary | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.anchors = anchors
        self.documents = documents
        self.vocabulary = vocabulary or RoleVocabulary.from_config(self.config)
        self.suffixes = self.config.get("corpus", {}).get("suffixes", [])
        self.max_suggestions = self.config.get("rules", {}).get("suggestions", 3)
        self._strategies: dict[RoleKind, Callable[[Reference], Resolution]] = {
            RoleKind.LABEL: self._resolve_anchor,
            RoleKind.OBJECT: self._resolve_anchor,
            RoleKind.DOCUMENT: self._resolve_document,
            RoleKind.EXTERNAL: self._resolve_external,
            RoleKind.UNKNOWN: self._resolve_unknown,
        }

    def resolve(self, reference: Reference) -> Resolution:
        """Resolve one reference using the strategy of its kind."""
        return self._strategies[reference.kind](reference)

    def resolve_lines(
        self,
        lines: Sequence[SourceLine],
        registry: ParserRegistry | None = None,
    ) -> tuple[list[Resolution], list[Issue]]:
        """Scan and resolve every reference in ``lines``.

        Returns:
            Tuple of (resolutions in document order, issues)
        """
        registry = registry or create_registry()
        references = scan_references(
            lines, self.vocabulary, self.suffixes, self.config, registry
        )
        references = [match for reference in references for match in self.expand_glob(reference)]
        resolutions = []
        issues = []
        for reference in references:
            resolution = self.resolve(reference)
            resolutions.append(resolution)
            issue = self.issue_for(resolution)
            if issue is not None:
                issues.append(issue)
        if lines:
            logger.debug("Resolved %d references in %s", len(resolutions), lines[0].doc_id)
        return resolutions, issues

    def resolve_document(self, document: Document) -> tuple[list[Resolution], list[Issue]]:
        """Resolve the references in a document's raw text."""
        lines = [
            SourceLine(text, document.doc_id, i + 1, document.path)
            for i, text in enumerate(document.lines)
        ]
        return self.resolve_lines(lines)

    def resolve_expanded(
        self,
        expanded: ExpandedDocument,
        registry: ParserRegistry | None = None,
    ) -> tuple[list[Resolution], list[Issue]]:
        """Resolve the references in an include-expanded document."""
        return self.resolve_lines(expanded.lines, registry)

    def expand_glob(self, reference: Reference) -> list[Reference]:
        """One document reference per document a toctree pattern matches.

        The document holding the toctree never matches itself. A pattern
        matching nothing is kept as is and resolves as unresolved.
        """
        if not reference.glob:
            return [reference]
        matches = [
            doc_id
            for doc_id in sorted(self.documents)
            if doc_id != reference.location.doc_id and fnmatch.fnmatchcase(doc_id, reference.label)
        ]
        if not matches:
            return [reference]
        return [replace(reference, target=doc_id, label=doc_id, glob=False) for doc_id in matches]

    def issue_for(self, resolution: Resolution) -> Issue | None:
        if resolution.status == ResolutionStatus.UNRESOLVED:
            return UnresolvedReferenceWarning(resolution.reference, resolution.suggestions)
        if resolution.reference.kind == RoleKind.UNKNOWN:
            return UnknownRoleNotice(resolution.reference)
        return None

    def _resolve_anchor(self, reference: Reference) -> Resolution:
        anchor = self.anchors.get(reference.label)
        if anchor is not None:
            return Resolution(reference, ResolutionStatus.RESOLVED, anchor)
        candidates: Iterable[str] = self.anchors
        if reference.kind == RoleKind.OBJECT:
            prefix = normalize_label(reference.role.rsplit(":", 1)[-1]) + "-"
            candidates = [label for label in self.anchors if label.startswith(prefix)]
        return Resolution(
            reference,
            ResolutionStatus.UNRESOLVED,
            suggestions=self._suggest(reference.label, candidates),
        )

    def _resolve_document(self, reference: Reference) -> Resolution:
        document = self.documents.get(reference.label)
        if document is None:
            return Resolution(
                reference,
                ResolutionStatus.UNRESOLVED,
                suggestions=self._suggest(reference.label, self.documents),
            )
        anchor = Anchor(
            label=document.doc_id,
            kind=AnchorKind.DOCUMENT,
            location=document.location(),
        )
        return Resolution(reference, ResolutionStatus.RESOLVED, anchor)

    def _resolve_external(self, reference: Reference) -> Resolution:
        return Resolution(reference, ResolutionStatus.EXTERNAL)

    def _resolve_unknown(self, reference: Reference) -> Resolution:
        return Resolution(reference, ResolutionStatus.IGNORED)

    def _suggest(self, label: str, candidates: Iterable[str]) -> tuple[str, ...]:
        if not self.max_suggestions:
            return ()
        return tuple(
            difflib.get_close_matches(label, list(candidates), n=self.max_suggestions, cutoff=0.8)
        )


def resolve_references(
    document: Document,
    anchors: Mapping[str, Anchor],
    documents: Mapping[str, Document],
    config: dict[str, Any] | None = None,
) -> tuple[Resolution, ...]:
    """Resolve every reference in ``document`` against ``anchors``."""
    resolutions, _ = RoleReferenceResolver(anchors, documents, config).resolve_document(document)
    return tuple(resolutions)
