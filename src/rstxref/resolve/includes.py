"""
rstxref.resolve.includes - Include expander.

Substitutes include directives with the (recursively expanded) text of
the included document, depth-first and left to right. Every output line
remembers the document and line it came from.
"""

from __future__ import annotations

import logging
from typing import Mapping

from rstxref.core.errors import (
    CircularIncludeError,
    MissingIncludeRangeError,
    MissingIncludeTargetError,
)
from rstxref.core.models import Document, ExpandedDocument, IncludeDirective, SourceLine

logger = logging.getLogger(__name__)


class IncludeExpander:
    """
    Expands include directives against a fixed set of documents.

    Expansion results are cached per (document, range); an instance is
    meant for one worker and is not shared between threads.
    """

    def __init__(self, documents: Mapping[str, Document]):
        self.documents = documents
        self._cache: dict[tuple[str, int, int], tuple[list[SourceLine], list[str]]] = {}

    def expand(self, doc_id: str) -> ExpandedDocument:
        """
        Expand a top-level document.

        Args:
            doc_id: Id of the document to expand

        Returns:
            ExpandedDocument whose text equals the source when the document
            has no include directives

        Raises:
            KeyError: If ``doc_id`` is not in the corpus
            CircularIncludeError: If expansion would include a document
                that is already being expanded
            MissingIncludeTargetError: If an include names an unknown document
            MissingIncludeRangeError: If a partial include range is not found
        """
        document = self.documents[doc_id]
        included: list[str] = []
        lines = self._expand_range(document, 1, len(document.lines), (doc_id,), included)
        logger.debug("Expanded %s (%d includes)", doc_id, len(included))
        return ExpandedDocument(
            doc_id=doc_id,
            lines=tuple(lines),
            included=tuple(dict.fromkeys(included)),
        )

    def _expand_range(
        self,
        document: Document,
        first: int,
        last: int,
        trail: tuple[str, ...],
        included: list[str],
    ) -> list[SourceLine]:
        raw = document.lines
        directives = {inc.location.line: inc for inc in document.includes}
        out: list[SourceLine] = []
        ln = first
        while ln <= last:
            directive = directives.get(ln)
            if directive is not None and directive.end_line <= last:
                out.extend(self._include(directive, trail, included))
                ln = directive.end_line + 1
                continue
            out.append(SourceLine(raw[ln - 1], document.doc_id, ln, document.path))
            ln += 1
        return out

    def _include(
        self,
        directive: IncludeDirective,
        trail: tuple[str, ...],
        included: list[str],
    ) -> list[SourceLine]:
        target_id = directive.doc_id
        if target_id in trail:
            start = trail.index(target_id)
            raise CircularIncludeError(
                chain=trail[start:] + (target_id,),
                trail=trail + (target_id,),
                location=directive.location,
            )

        target = self.documents.get(target_id)
        if target is None:
            raise MissingIncludeTargetError(directive.target, directive.location)

        first, last = select_range(target, directive)
        key = (target_id, first, last)
        if key not in self._cache:
            nested: list[str] = []
            body = self._expand_range(target, first, last, trail + (target_id,), nested)
            self._cache[key] = (body, nested)
        body, nested = self._cache[key]
        included.append(target_id)
        included.extend(nested)

        if not directive.indent:
            return list(body)
        return [
            line._replace(text=directive.indent + line.text) if line.text.strip() else line
            for line in body
        ]


def content_line_count(document: Document) -> int:
    """Number of lines an include of ``document`` contributes.

    The empty string after a final newline is not a line of content.
    """
    lines = document.lines
    if len(lines) > 1 and lines[-1] == "":
        return len(lines) - 1
    return len(lines)


def select_range(document: Document, directive: IncludeDirective) -> tuple[int, int]:
    """
    Resolve the 1-indexed inclusive line range an include directive selects.

    ``:start-line:`` / ``:end-line:`` slice the lines (0-based, end
    exclusive, negative values count from the end). An empty slice gives
    ``first > last``. ``:start-after:`` starts on the line after the first
    line containing the marker; ``:end-before:`` ends on the line before
    the next line containing its marker.

    Raises:
        MissingIncludeRangeError: If a bound is out of range or a marker is
            not found
    """
    count = content_line_count(document)
    first, last = 1, count
    lines = document.lines

    def missing(bounds: str) -> MissingIncludeRangeError:
        return MissingIncludeRangeError(directive.target, bounds, directive.location)

    start_line = directive.option("start-line")
    end_line = directive.option("end-line")
    if start_line is not None or end_line is not None:
        bounds = f"lines {start_line or 0}:{end_line if end_line is not None else ''}"
        try:
            start = int(start_line) if start_line is not None else 0
            end = int(end_line) if end_line is not None else count
        except ValueError:
            raise missing(bounds) from None
        if start < 0:
            start += count
        if end < 0:
            end += count
        if not (0 <= start <= count and 0 <= end <= count):
            raise missing(bounds)
        # start >= end selects nothing
        first, last = start + 1, end

    start_after = directive.option("start-after")
    if start_after:
        found = _find_marker(lines, start_after, first, last)
        if found is None:
            raise missing(f"start-after {start_after!r}")
        first = found + 1

    end_before = directive.option("end-before")
    if end_before:
        found = _find_marker(lines, end_before, first, last)
        if found is None:
            raise missing(f"end-before {end_before!r}")
        last = found - 1

    return first, last


def _find_marker(lines: list[str], marker: str, first: int, last: int) -> int | None:
    for ln in range(first, last + 1):
        if marker in lines[ln - 1]:
            return ln
    return None
