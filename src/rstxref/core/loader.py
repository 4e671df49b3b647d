"""
Corpus loading utilities.

Reads a directory tree of UTF-8 source files into immutable Documents.
Each file is parsed independently, so parsing runs in a worker pool.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

from rstxref.config.defaults import DEFAULT_CONFIG
from rstxref.core.document import create_registry, parse_document
from rstxref.core.errors import UnreadableDocumentError
from rstxref.core.labels import strip_suffix
from rstxref.core.models import Document

logger = logging.getLogger(__name__)


def worker_count(config: dict[str, Any], override: int | None = None) -> int:
    """Number of worker threads: explicit override, ``run.jobs``, or CPU count."""
    jobs = override if override else config.get("run", {}).get("jobs", 0)
    if jobs and jobs > 0:
        return int(jobs)
    return os.cpu_count() or 1


class Corpus:
    """The full set of documents processed together, keyed by document id."""

    def __init__(
        self,
        documents: Mapping[str, Document],
        root: Path | None = None,
        errors: Sequence[UnreadableDocumentError] = (),
    ):
        self.documents: Mapping[str, Document] = MappingProxyType(
            {doc_id: documents[doc_id] for doc_id in sorted(documents)}
        )
        self.root = root
        # Files that could not be read; they are absent from ``documents``
        self.errors = tuple(errors)

    @classmethod
    def from_texts(
        cls,
        texts: Mapping[str, str],
        config: dict[str, Any] | None = None,
    ) -> "Corpus":
        """Build a corpus from ``{relative path: text}``.

        Paths keep their suffix; the document id drops a configured suffix.
        """
        config = config or DEFAULT_CONFIG
        suffixes = config.get("corpus", {}).get("suffixes", [])
        registry = create_registry()
        documents = {}
        for path, text in texts.items():
            doc_id = strip_suffix(path, suffixes)
            documents[doc_id] = parse_document(doc_id, text, path, config, registry)
        return cls(documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.documents

    def __getitem__(self, doc_id: str) -> Document:
        return self.documents[doc_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)


def discover_files(root: Path, suffixes: list[str], skip_dirs: list[str]) -> list[Path]:
    """Find source files under ``root``, sorted, skipping ``skip_dirs``.

    Args:
        root: Corpus root directory
        suffixes: File suffixes to include (e.g., [".txt", ".rst"])
        skip_dirs: Directory names or root-relative paths to skip

    Returns:
        Sorted list of file paths
    """
    skip = set(skip_dirs)
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        dirnames[:] = sorted(
            d
            for d in dirnames
            if d not in skip and (f"{rel_dir}/{d}" if rel_dir != "." else d) not in skip
        )
        for name in filenames:
            if any(name.endswith(suffix) for suffix in suffixes):
                found.append(Path(dirpath) / name)
    return sorted(found)


def _load_one(
    root: Path, file_path: Path, suffixes: list[str], config: dict[str, Any]
) -> Document | UnreadableDocumentError:
    rel_path = file_path.relative_to(root).as_posix()
    doc_id = strip_suffix(rel_path, suffixes)
    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        logger.warning("Skipping %s: not valid UTF-8 (%s)", rel_path, e.reason)
        return UnreadableDocumentError(doc_id, rel_path, str(e))
    logger.debug("Parsing %s", rel_path)
    return parse_document(doc_id, text, rel_path, config, create_registry())


def load_corpus(
    root: Path,
    config: dict[str, Any] | None = None,
    max_workers: int | None = None,
) -> Corpus:
    """
    Load and parse every source document under ``root``.

    Args:
        root: Corpus root directory
        config: Configuration dict (defaults if omitted)
        max_workers: Worker pool size (defaults to ``run.jobs`` or CPU count)

    Returns:
        Corpus of parsed documents. Files that are not valid UTF-8 are
        left out and recorded in ``Corpus.errors``.

    Raises:
        FileNotFoundError: If ``root`` is not a directory
    """
    config = config or DEFAULT_CONFIG
    if not root.is_dir():
        raise FileNotFoundError(f"Corpus root not found: {root}")

    corpus_config = config.get("corpus", {})
    suffixes = corpus_config.get("suffixes", [".txt", ".rst"])
    files = discover_files(root, suffixes, corpus_config.get("skip_dirs", []))
    logger.debug("Found %d source files under %s", len(files), root)

    with ThreadPoolExecutor(max_workers=worker_count(config, max_workers)) as pool:
        loaded = list(pool.map(lambda f: _load_one(root, f, suffixes, config), files))

    documents: dict[str, Document] = {}
    errors: list[UnreadableDocumentError] = []
    for document in loaded:
        if isinstance(document, UnreadableDocumentError):
            errors.append(document)
            continue
        if document.doc_id in documents:
            logger.warning(
                "Ignoring %s: document id %s already loaded from %s",
                document.path,
                document.doc_id,
                documents[document.doc_id].path,
            )
            continue
        documents[document.doc_id] = document

    return Corpus(documents, root=root, errors=errors)
