"""
rstxref.core.labels - Label normalization shared by anchors and references.
"""

from __future__ import annotations

import posixpath
import re

# Runs of anything that is not a letter or digit collapse to one hyphen
_SEPARATOR_RUN = re.compile(r"[\W_]+", re.UNICODE)

# Call arguments in object signatures: "find(query, projection)" -> "find()"
_CALL_ARGS = re.compile(r"\(.*\)")


def normalize_label(text: str) -> str:
    """Normalize a label, title or reference target.

    Lowercases the text and collapses whitespace and punctuation runs to a
    single hyphen, stripping leading and trailing hyphens.

    >>> normalize_label("Geospatial Queries")
    'geospatial-queries'
    >>> normalize_label("  $nearSphere ")
    'nearsphere'
    """
    return _SEPARATOR_RUN.sub("-", text.lower()).strip("-")


def object_name(signature: str) -> str:
    """Reduce an object signature to the name used for lookups."""
    return _CALL_ARGS.sub("()", signature.strip())


def object_label(kind: str, name: str) -> str:
    """Anchor label for an object description of ``kind``."""
    return normalize_label(f"{kind} {object_name(name)}")


def section_label(title: str, doc_id: str | None = None) -> str:
    """Implicit anchor label for a section title.

    With ``doc_id`` the label is scoped to the document.
    """
    if doc_id is not None:
        return normalize_label(f"{doc_id} {title}")
    return normalize_label(title)


def resolve_doc_path(target: str, from_doc: str) -> str:
    """Resolve a document path as written in markup to a document id.

    Absolute paths (leading ``/``) are relative to the corpus root; others
    are relative to the directory of ``from_doc``.
    """
    target = target.strip()
    if target.startswith("/"):
        joined = target.lstrip("/")
    else:
        joined = posixpath.join(posixpath.dirname(from_doc), target)
    return posixpath.normpath(joined).lstrip("/")


def strip_suffix(path: str, suffixes: list[str] | tuple[str, ...]) -> str:
    """Drop a known source suffix from a path."""
    for suffix in suffixes:
        if path.endswith(suffix):
            return path[: -len(suffix)]
    return path
