"""
rstxref.resolve - Anchor table, include expansion, role resolution and validation
"""

from rstxref.resolve.anchors import AnchorTableBuilder, build_anchor_table
from rstxref.resolve.includes import IncludeExpander
from rstxref.resolve.roles import RoleReferenceResolver, RoleVocabulary, resolve_references
from rstxref.resolve.validator import CorpusValidator, ValidationResult, validate_corpus

__all__ = [
    "AnchorTableBuilder",
    "CorpusValidator",
    "IncludeExpander",
    "RoleReferenceResolver",
    "RoleVocabulary",
    "ValidationResult",
    "build_anchor_table",
    "resolve_references",
    "validate_corpus",
]
