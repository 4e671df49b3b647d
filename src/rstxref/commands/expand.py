"""
rstxref.commands.expand - Print a document with its includes expanded.
"""

from __future__ import annotations

import argparse
import sys

from rstxref.config import get_config, get_corpus_root
from rstxref.core.errors import CorpusError
from rstxref.core.labels import strip_suffix
from rstxref.core.loader import load_corpus
from rstxref.resolve.includes import IncludeExpander


def run(args: argparse.Namespace) -> int:
    """Expand one document and print the result."""
    config = get_config(args.config)
    root = get_corpus_root(config, args.root)

    try:
        corpus = load_corpus(root, config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    doc_id = strip_suffix(args.document.lstrip("/"), config["corpus"]["suffixes"])
    if doc_id not in corpus:
        print(f"Error: document not found: {args.document}", file=sys.stderr)
        return 1

    try:
        expanded = IncludeExpander(corpus.documents).expand(doc_id)
    except CorpusError as e:
        print(e.to_issue(), file=sys.stderr)
        return 1

    if args.origins:
        for line in expanded.lines:
            print(f"{line.path}:{line.line}\t{line.text}")
    else:
        print(expanded.text, end="" if expanded.text.endswith("\n") else "\n")
    return 0
