"""
rstxref.core.errors - Error and warning taxonomy.

Fatal problems are exceptions derived from CorpusError. They abort the
unit of work they occur in and are converted to Issue records for the
report. Warnings are Issue records that are collected, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Sequence

from rstxref.core.models import Location

if TYPE_CHECKING:
    from rstxref.core.models import Anchor, Reference


class Severity(Enum):
    """Severity level for report issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {"error": 0, "warning": 1, "info": 2}[self.value]


@dataclass
class Issue:
    """
    A single finding in the validation report.

    Attributes:
        kind: Issue kind (e.g., "UnresolvedReferenceWarning")
        severity: Severity level
        message: Human-readable description
        location: Where the issue was found, if known
        details: Extra machine-readable context
        column: Column of the reference on its line, 0 when not tied to one
    """

    kind: str
    severity: Severity
    message: str
    location: Location | None = None
    details: dict[str, Any] = field(default_factory=dict)
    column: int = 0

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.ERROR

    def key(self) -> tuple:
        """Identity used to report an issue only once."""
        return (self.kind, str(self.location), self.column, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "kind": self.kind,
            "location": str(self.location) if self.location else None,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        prefix = {
            Severity.ERROR: "ERROR",
            Severity.WARNING: "WARNING",
            Severity.INFO: "INFO",
        }[self.severity]
        where = str(self.location) if self.location else "unknown"
        return f"{prefix} [{self.kind}] {where}\n   {self.message}"


class UnresolvedReferenceWarning(Issue):
    """A role reference whose label matches no anchor."""

    def __init__(self, reference: Reference, suggestions: Sequence[str] = ()):
        message = f"Unresolved :{reference.role}: reference to '{reference.target}'"
        if suggestions:
            message += f" (did you mean: {', '.join(suggestions)}?)"
        super().__init__(
            kind="UnresolvedReferenceWarning",
            severity=Severity.WARNING,
            message=message,
            location=reference.location,
            details={
                "role": reference.role,
                "target": reference.target,
                "label": reference.label,
                "suggestions": list(suggestions),
            },
            column=reference.column,
        )


class UnreachableTargetWarning(Issue):
    """A reference resolving into a document no entry point reaches."""

    def __init__(self, reference: Reference, target_doc: str):
        super().__init__(
            kind="UnreachableTargetWarning",
            severity=Severity.WARNING,
            message=(
                f"Reference to '{reference.target}' points into '{target_doc}', "
                "which is not reachable from any entry point"
            ),
            location=reference.location,
            details={"target": reference.target, "document": target_doc},
            column=reference.column,
        )


class UnreachableAnchorWarning(Issue):
    """An anchor nothing references."""

    def __init__(self, anchor: Anchor):
        super().__init__(
            kind="UnreachableAnchorWarning",
            severity=Severity.INFO,
            message=f"Anchor '{anchor.label}' is never referenced",
            location=anchor.location,
            details={"label": anchor.label, "anchor_kind": anchor.kind.value},
        )


class UnknownRoleNotice(Issue):
    """A role name outside the configured vocabulary."""

    def __init__(self, reference: Reference):
        super().__init__(
            kind="UnknownRoleNotice",
            severity=Severity.INFO,
            message=f"Unknown role :{reference.role}: (target '{reference.target}')",
            location=reference.location,
            details={"role": reference.role},
            column=reference.column,
        )


class CorpusError(Exception):
    """Base class for fatal corpus errors."""

    def __init__(self, message: str, location: Location | None = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def details(self) -> dict[str, Any]:
        return {}

    def to_issue(self) -> Issue:
        return Issue(
            kind=type(self).__name__,
            severity=Severity.ERROR,
            message=self.message,
            location=self.location,
            details=self.details(),
        )


class DuplicateAnchorError(CorpusError):
    """Two or more distinct anchors normalize to the same label."""

    def __init__(self, label: str, anchors: Sequence[Anchor]):
        self.label = label
        self.anchors = tuple(anchors)
        where = ", ".join(str(a.location) for a in self.anchors)
        super().__init__(
            f"Duplicate anchor '{label}' defined at {where}",
            location=self.anchors[-1].location,
        )

    def details(self) -> dict[str, Any]:
        return {"label": self.label, "locations": [str(a.location) for a in self.anchors]}


class CircularIncludeError(CorpusError):
    """The include graph contains a cycle.

    ``chain`` is the cycle itself, starting and ending with the same
    document. ``trail`` is the full inclusion path from the top-level
    document that was being expanded.
    """

    def __init__(
        self,
        chain: Sequence[str],
        trail: Sequence[str] = (),
        location: Location | None = None,
    ):
        self.chain = tuple(chain)
        self.trail = tuple(trail) or self.chain
        super().__init__(
            f"Circular include: {' -> '.join(self.chain)}",
            location=location,
        )

    def cycle_key(self) -> tuple[str, ...]:
        """Rotation-independent identity of the cycle."""
        members = self.chain[:-1]
        start = members.index(min(members))
        return members[start:] + members[:start]

    def details(self) -> dict[str, Any]:
        return {"chain": list(self.chain), "trail": list(self.trail)}


class MissingIncludeTargetError(CorpusError):
    """An include names a document that is not in the corpus."""

    def __init__(self, target: str, location: Location | None = None):
        self.target = target
        super().__init__(f"Included document not found: {target}", location=location)

    def details(self) -> dict[str, Any]:
        return {"target": self.target}


class UnreadableDocumentError(CorpusError):
    """A source file that is not valid UTF-8."""

    def __init__(self, doc_id: str, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Cannot decode {path} as UTF-8: {reason}",
            location=Location(doc_id, 0, path),
        )

    def details(self) -> dict[str, Any]:
        return {"path": self.path}


class MissingIncludeRangeError(CorpusError):
    """A partial include names a range the target does not have."""

    def __init__(self, target: str, range_spec: str, location: Location | None = None):
        self.target = target
        self.range_spec = range_spec
        super().__init__(
            f"Include range {range_spec} not found in {target}",
            location=location,
        )

    def details(self) -> dict[str, Any]:
        return {"target": self.target, "range": self.range_spec}


__all__ = [
    "CircularIncludeError",
    "CorpusError",
    "DuplicateAnchorError",
    "Issue",
    "MissingIncludeRangeError",
    "MissingIncludeTargetError",
    "Severity",
    "UnknownRoleNotice",
    "UnreachableAnchorWarning",
    "UnreachableTargetWarning",
    "UnreadableDocumentError",
    "UnresolvedReferenceWarning",
]
