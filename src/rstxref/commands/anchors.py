"""
rstxref.commands.anchors - List the anchor table.
"""

from __future__ import annotations

import argparse
import json
import sys

from rstxref.config import get_config, get_corpus_root
from rstxref.core.loader import load_corpus
from rstxref.resolve.anchors import AnchorTableBuilder


def run(args: argparse.Namespace) -> int:
    """Print every anchor label with its location."""
    config = get_config(args.config)
    root = get_corpus_root(config, args.root)

    try:
        corpus = load_corpus(root, config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    table, duplicates = AnchorTableBuilder(corpus.documents).collect()

    if args.json:
        data = {
            label: {
                "kind": anchor.kind.value,
                "location": str(anchor.location),
                "title": anchor.title,
            }
            for label, anchor in sorted(table.items())
        }
        print(json.dumps(data, indent=2))
    else:
        width = max((len(label) for label in table), default=0)
        for label, anchor in sorted(table.items()):
            print(f"{label:<{width}}  {anchor.kind.value:<8}  {anchor.location}")

    for error in duplicates:
        print(error.to_issue(), file=sys.stderr)

    return 1 if duplicates else 0
