"""
rstxref.resolve.validator - Corpus validator.

Runs the two-phase pipeline over a whole corpus:

1. Build the anchor table over the raw documents. Duplicate anchors are
   fatal and stop the run, since resolution needs the final table.
2. For each top-level document, in a worker pool: expand includes, then
   resolve references against the shared read-only table. A fatal error
   stops only the document it occurs in.

Results from all documents are merged into one ResolvedCorpus and one
ValidationReport.
"""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from rstxref.config.defaults import DEFAULT_CONFIG
from rstxref.core.document import create_registry
from rstxref.core.errors import (
    CircularIncludeError,
    CorpusError,
    Issue,
    UnreachableAnchorWarning,
    UnreachableTargetWarning,
)
from rstxref.core.loader import Corpus, worker_count
from rstxref.core.models import (
    AnchorKind,
    Document,
    ExpandedDocument,
    Resolution,
    ResolutionStatus,
    ResolvedCorpus,
    RoleKind,
)
from rstxref.report import ValidationReport
from rstxref.resolve.anchors import AnchorTableBuilder
from rstxref.resolve.includes import IncludeExpander
from rstxref.resolve.roles import RoleReferenceResolver

logger = logging.getLogger(__name__)


@dataclass
class UnitResult:
    """Outcome of processing one top-level document."""

    doc_id: str
    expanded: ExpandedDocument | None = None
    resolutions: list[Resolution] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    error: CorpusError | None = None


@dataclass
class ValidationResult:
    corpus: ResolvedCorpus
    report: ValidationReport

    @property
    def exit_code(self) -> int:
        return self.report.exit_code


def include_graph(documents: Mapping[str, Document]) -> dict[str, list[str]]:
    """Adjacency list of include edges between documents in the corpus."""
    return {
        doc_id: [inc.doc_id for inc in document.includes if inc.doc_id in documents]
        for doc_id, document in documents.items()
    }


def _closure(graph: Mapping[str, Iterable[str]], starts: Iterable[str]) -> set[str]:
    seen: set[str] = set()
    queue = deque(starts)
    while queue:
        node = queue.popleft()
        if node in seen:
            continue
        seen.add(node)
        queue.extend(graph.get(node, ()))
    return seen


def plan_top_level(documents: Mapping[str, Document]) -> list[str]:
    """
    Choose the top-level documents to expand.

    Documents no other document includes come first, in id order. Any
    document still unreached (only included from inside an include cycle)
    is added next, smallest id first, so every document is covered and
    each cycle is entered exactly once.
    """
    graph = include_graph(documents)
    included = {target for targets in graph.values() for target in targets}
    roots = [doc_id for doc_id in sorted(documents) if doc_id not in included]
    reached = _closure(graph, roots)
    for doc_id in sorted(documents):
        if doc_id not in reached:
            roots.append(doc_id)
            reached |= _closure(graph, [doc_id])
    return roots


class CorpusValidator:
    """
    Validates a whole corpus and produces a ResolvedCorpus plus a report.
    """

    def __init__(self, config: dict[str, Any] | None = None, max_workers: int | None = None):
        self.config = config or DEFAULT_CONFIG
        self.max_workers = worker_count(self.config, max_workers)
        self.entry_points = list(self.config.get("corpus", {}).get("entry_points", []))
        rules = self.config.get("rules", {})
        report_sections = rules.get("report_unreferenced_sections", False)
        self.report_unreferenced = rules.get("report_unreferenced_anchors", False) or report_sections
        self.unreferenced_kinds = {AnchorKind.EXPLICIT, AnchorKind.OBJECT}
        if report_sections:
            self.unreferenced_kinds.add(AnchorKind.SECTION)

    def validate(self, corpus: Corpus) -> ValidationResult:
        """
        Validate every document in ``corpus``.

        Args:
            corpus: Loaded corpus

        Returns:
            ValidationResult with the resolved corpus and the report
        """
        documents = corpus.documents
        unreadable = [error.to_issue() for error in corpus.errors]

        # Phase 1: the anchor table must be final before any resolution
        anchors, duplicates = AnchorTableBuilder(documents).collect()
        if duplicates:
            logger.debug("Aborting run: %d duplicate anchors", len(duplicates))
            report = ValidationReport(
                issues=unreadable + [error.to_issue() for error in duplicates],
                documents=len(documents),
                anchors=len(anchors),
            )
            return ValidationResult(ResolvedCorpus(anchors=anchors), report)

        # Phase 2: per top-level document, independent of each other
        roots = plan_top_level(documents)
        resolver = RoleReferenceResolver(anchors, documents, self.config)
        logger.debug("Processing %d top-level documents with %d workers", len(roots), self.max_workers)

        def process(doc_id: str) -> UnitResult:
            return self._process_unit(doc_id, documents, resolver)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            units = list(pool.map(process, roots))

        resolved = ResolvedCorpus(anchors=anchors, top_level=roots)
        issues = unreadable + self._merge(units, resolved)

        if self.entry_points:
            issues.extend(self._check_reachability(documents, resolved.resolutions))
        if self.report_unreferenced:
            issues.extend(self._check_unreferenced(anchors, resolved.resolutions))

        report = ValidationReport(
            issues=_unique(issues),
            documents=len(documents),
            references=len(resolved.resolutions),
            anchors=len(anchors),
        )
        return ValidationResult(resolved, report)

    def _process_unit(
        self,
        doc_id: str,
        documents: Mapping[str, Document],
        resolver: RoleReferenceResolver,
    ) -> UnitResult:
        try:
            expanded = IncludeExpander(documents).expand(doc_id)
        except CorpusError as e:
            logger.debug("Skipping %s: %s", doc_id, e)
            return UnitResult(doc_id, error=e)
        resolutions, issues = resolver.resolve_expanded(expanded, create_registry())
        return UnitResult(doc_id, expanded, resolutions, issues)

    def _merge(self, units: list[UnitResult], resolved: ResolvedCorpus) -> list[Issue]:
        """Combine unit results; included content seen by several roots counts once."""
        issues: list[Issue] = []
        seen_references: set[tuple] = set()
        seen_cycles: set[tuple[str, ...]] = set()

        for unit in units:
            if unit.error is not None:
                if isinstance(unit.error, CircularIncludeError):
                    cycle = unit.error.cycle_key()
                    if cycle in seen_cycles:
                        continue
                    seen_cycles.add(cycle)
                issues.append(unit.error.to_issue())
                continue

            resolved.expanded[unit.doc_id] = unit.expanded.text
            for resolution in unit.resolutions:
                key = resolution.reference.key()
                if key in seen_references:
                    continue
                seen_references.add(key)
                resolved.resolutions.append(resolution)
            issues.extend(unit.issues)

        return issues

    def _check_reachability(
        self,
        documents: Mapping[str, Document],
        resolutions: list[Resolution],
    ) -> list[Issue]:
        """Warn about references into documents no entry point reaches.

        Reachability follows include edges, resolved document references
        and toctree entries.
        """
        graph = {doc_id: list(targets) for doc_id, targets in include_graph(documents).items()}
        for resolution in resolutions:
            reference = resolution.reference
            if reference.kind == RoleKind.DOCUMENT and resolution.anchor is not None:
                graph.setdefault(reference.location.doc_id, []).append(resolution.anchor.doc_id)

        entries = [doc_id for doc_id in self.entry_points if doc_id in documents]
        for missing in sorted(set(self.entry_points) - set(entries)):
            logger.warning("Entry point %s is not in the corpus", missing)
        reachable = _closure(graph, entries)

        issues: list[Issue] = []
        for resolution in resolutions:
            anchor = resolution.anchor
            if resolution.status != ResolutionStatus.RESOLVED or anchor is None:
                continue
            if anchor.doc_id not in reachable:
                issues.append(UnreachableTargetWarning(resolution.reference, anchor.doc_id))
        return issues

    def _check_unreferenced(self, anchors, resolutions: list[Resolution]) -> list[Issue]:
        """Notices for anchors nothing references.

        Section anchors are only included with ``rules.report_unreferenced_sections``.
        """
        referenced = {
            r.anchor.label
            for r in resolutions
            if r.anchor is not None and r.anchor.kind != AnchorKind.DOCUMENT
        }
        return [
            UnreachableAnchorWarning(anchor)
            for label, anchor in anchors.items()
            if anchor.kind in self.unreferenced_kinds and label not in referenced
        ]


def _unique(issues: list[Issue]) -> list[Issue]:
    seen: set[tuple] = set()
    unique = []
    for issue in issues:
        key = issue.key()
        if key not in seen:
            seen.add(key)
            unique.append(issue)
    return unique


def validate_corpus(
    corpus: Corpus,
    config: dict[str, Any] | None = None,
    max_workers: int | None = None,
) -> ValidationResult:
    """Validate ``corpus`` with a fresh CorpusValidator."""
    return CorpusValidator(config, max_workers).validate(corpus)
