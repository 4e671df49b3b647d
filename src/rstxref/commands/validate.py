"""
rstxref.commands.validate - Validate a documentation corpus.

Checks anchors, includes and role references and reports fatal errors
and warnings.
"""

from __future__ import annotations

import argparse
import sys

from rstxref.config import get_config, get_corpus_root
from rstxref.core.loader import load_corpus
from rstxref.resolve.validator import CorpusValidator


def run(args: argparse.Namespace) -> int:
    """
    Run the validate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 unless a fatal error was found)
    """
    config = get_config(args.config)
    if args.entry_point:
        config["corpus"]["entry_points"] = list(args.entry_point)

    root = get_corpus_root(config, args.root)
    jobs = getattr(args, "jobs", None)
    quiet = getattr(args, "quiet", False)
    text_output = args.format == "text"

    if text_output and not quiet:
        print(f"Validating documentation in: {root}")

    try:
        corpus = load_corpus(root, config, max_workers=jobs)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not len(corpus) and not corpus.errors:
        print("No source documents found.", file=sys.stderr)
        return 1

    result = CorpusValidator(config, max_workers=jobs).validate(corpus)
    report = result.report
    if args.skip_rule:
        report = report.without(args.skip_rule)

    if not text_output:
        print(report.to_jsonl())
    elif quiet:
        for issue in report.errors:
            print(issue, file=sys.stderr)
    else:
        print()
        print(report.render_text(show_info=getattr(args, "verbose", False)))

    return report.exit_code
