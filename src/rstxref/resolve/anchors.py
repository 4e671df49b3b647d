"""
rstxref.resolve.anchors - Anchor table builder.

Collects every explicit, section and object anchor across the corpus into
one read-only table. Colliding labels are reported, never overwritten.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from rstxref.core.errors import DuplicateAnchorError
from rstxref.core.models import Anchor, AnchorKind, Document

logger = logging.getLogger(__name__)


class AnchorTableBuilder:
    """
    Builds the corpus-wide label -> Anchor table.

    Documents are walked in sorted id order so the table, and the order of
    any duplicate errors, do not depend on load order.
    """

    def __init__(self, documents: Mapping[str, Document]):
        self.documents = documents

    def collect(self) -> tuple[Mapping[str, Anchor], list[DuplicateAnchorError]]:
        """Build the table and return it with every duplicate found.

        When labels collide the first anchor (in document order) stays in
        the table so callers can still inspect it.
        """
        table: dict[str, Anchor] = {}
        clashes: dict[str, list[Anchor]] = {}

        for doc_id in sorted(self.documents):
            for anchor in self.documents[doc_id].anchors:
                existing = table.get(anchor.label)
                if existing is None:
                    table[anchor.label] = anchor
                elif _names_same_target(existing, anchor):
                    # ".. _label:" right above the section or object it names
                    if anchor.kind == AnchorKind.EXPLICIT:
                        table[anchor.label] = anchor
                else:
                    clashes.setdefault(anchor.label, [existing]).append(anchor)

        errors = [DuplicateAnchorError(label, anchors) for label, anchors in clashes.items()]
        logger.debug("Anchor table: %d labels, %d duplicates", len(table), len(errors))
        return MappingProxyType(table), errors

    def build(self) -> Mapping[str, Anchor]:
        """Build the table.

        Raises:
            DuplicateAnchorError: For the first colliding label
        """
        table, errors = self.collect()
        if errors:
            raise errors[0]
        return table


def _names_same_target(first: Anchor, second: Anchor) -> bool:
    """True for one explicit label and the section or object it sits on."""
    kinds = {first.kind, second.kind}
    return (
        first.same_target(second)
        and len(kinds) == 2
        and AnchorKind.EXPLICIT in kinds
        and kinds <= {AnchorKind.EXPLICIT, AnchorKind.SECTION, AnchorKind.OBJECT}
    )


def build_anchor_table(documents: Mapping[str, Document]) -> Mapping[str, Anchor]:
    """Build the read-only anchor table for ``documents``."""
    return AnchorTableBuilder(documents).build()
