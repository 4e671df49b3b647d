"""
rstxref.core - Core data models, error taxonomy and corpus loading
"""

from rstxref.core.errors import (
    CircularIncludeError,
    CorpusError,
    DuplicateAnchorError,
    Issue,
    MissingIncludeRangeError,
    MissingIncludeTargetError,
    Severity,
    UnreadableDocumentError,
)
from rstxref.core.labels import normalize_label
from rstxref.core.models import Anchor, Document, Location, Reference, ResolvedCorpus, RoleKind

__all__ = [
    "Anchor",
    "CircularIncludeError",
    "CorpusError",
    "Document",
    "DuplicateAnchorError",
    "Issue",
    "Location",
    "MissingIncludeRangeError",
    "MissingIncludeTargetError",
    "Reference",
    "ResolvedCorpus",
    "RoleKind",
    "Severity",
    "UnreadableDocumentError",
    "normalize_label",
]
