"""
rstxref - Cross-reference and include checking for reStructuredText corpora

rstxref loads a tree of reStructuredText sources, builds a table of every
anchor, expands include directives and resolves role references such as
:ref:, :doc: and object roles, reporting broken, duplicate and circular
targets.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rstxref")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from rstxref.core.errors import CorpusError, Issue, Severity
from rstxref.core.loader import Corpus, load_corpus
from rstxref.resolve.validator import CorpusValidator, validate_corpus

__all__ = [
    "__version__",
    "Corpus",
    "CorpusError",
    "CorpusValidator",
    "Issue",
    "Severity",
    "load_corpus",
    "validate_corpus",
]
