"""
rstxref.cli - Command-line interface.

Main entry point for the rstxref CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rstxref import __version__
from rstxref.commands import anchors, expand, init, validate


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rstxref",
        description="Cross-reference and include checking for reStructuredText docs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rstxref validate                    # Validate the configured corpus
  rstxref validate source/            # Validate a specific directory
  rstxref validate --format jsonl     # One JSON record per issue
  rstxref anchors --json              # Dump the anchor table
  rstxref expand reference/geo        # Show a document with includes expanded

Configuration:
  rstxref init                        # Create .rstxref.toml in current directory

For detailed command help: rstxref <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"rstxref {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging, show notices)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate anchors, includes and role references",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rstxref validate                                  # Validate the configured corpus
  rstxref validate --skip-rule UnknownRoleNotice    # Hide unknown-role notices
  rstxref validate --entry-point index              # Warn about unreachable targets

Fatal errors (exit status 1):
  DuplicateAnchorError        Two anchors share a label
  CircularIncludeError        Include chain loops back on itself
  MissingIncludeTargetError   Included document does not exist
  MissingIncludeRangeError    Partial include range not found

Warnings (exit status 0):
  UnresolvedReferenceWarning  Reference matches no anchor
  UnreachableTargetWarning    Target not reachable from an entry point
""",
    )
    validate_parser.add_argument(
        "root",
        nargs="?",
        type=Path,
        help="Corpus root directory (overrides corpus.root)",
    )
    validate_parser.add_argument(
        "--format",
        choices=["text", "jsonl"],
        default="text",
        help="Report format: text summary or JSON lines",
    )
    validate_parser.add_argument(
        "--skip-rule",
        action="append",
        help="Skip warnings by kind (can be repeated, fnmatch patterns allowed)",
        metavar="KIND",
    )
    validate_parser.add_argument(
        "--entry-point",
        action="append",
        help="Entry point document id (can be repeated, overrides corpus.entry_points)",
        metavar="DOC",
    )
    validate_parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        help="Worker threads (default: run.jobs or CPU count)",
        metavar="N",
    )

    # anchors command
    anchors_parser = subparsers.add_parser(
        "anchors",
        help="List every anchor label and where it is declared",
    )
    anchors_parser.add_argument(
        "root",
        nargs="?",
        type=Path,
        help="Corpus root directory (overrides corpus.root)",
    )
    anchors_parser.add_argument(
        "--json",
        action="store_true",
        help="Output the anchor table as JSON",
    )

    # expand command
    expand_parser = subparsers.add_parser(
        "expand",
        help="Print a document with its includes expanded",
    )
    expand_parser.add_argument(
        "document",
        help="Document id or path (e.g., reference/geospatial-queries)",
    )
    expand_parser.add_argument(
        "root",
        nargs="?",
        type=Path,
        help="Corpus root directory (overrides corpus.root)",
    )
    expand_parser.add_argument(
        "--origins",
        action="store_true",
        help="Prefix each line with the file and line it came from",
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Create .rstxref.toml configuration",
    )
    init_parser.add_argument(
        "--root",
        help="Corpus root to write into the config",
        metavar="DIR",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing configuration",
    )

    # completion command
    completion_parser = subparsers.add_parser(
        "completion",
        help="Generate shell completion scripts",
    )
    completion_parser.add_argument(
        "--shell",
        choices=["bash", "zsh", "fish", "tcsh"],
        help="Shell to generate the script for (default: show setup instructions)",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    """Log to stderr; debug detail only with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Shell tab-completion when argcomplete is installed (rstxref[completion])
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "validate":
            return validate.run(args)
        elif args.command == "anchors":
            return anchors.run(args)
        elif args.command == "expand":
            return expand.run(args)
        elif args.command == "init":
            return init.run(args)
        elif args.command == "completion":
            return completion_command(args)
        elif args.command == "version":
            return version_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def completion_command(args: argparse.Namespace) -> int:
    """Print a completion script for --shell, or setup instructions."""
    try:
        import argcomplete  # noqa: F401
    except ImportError:
        print("Error: argcomplete not installed.", file=sys.stderr)
        print("Install with: pip install rstxref[completion]", file=sys.stderr)
        return 1

    shell = args.shell

    if shell:
        import subprocess

        cmd = ["register-python-argcomplete"]
        if shell in ("fish", "tcsh"):
            cmd.append(f"--shell={shell}")
        cmd.append("rstxref")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            print("Error: register-python-argcomplete not found.", file=sys.stderr)
            print("Reinstall with: pip install rstxref[completion]", file=sys.stderr)
            return 1
        if result.returncode != 0:
            print(f"Error generating completion script: {result.stderr}", file=sys.stderr)
            return 1
        print(result.stdout)
    else:
        print("""
Shell Completion Setup for rstxref
==================================

Bash, in ~/.bashrc:
  eval "$(register-python-argcomplete rstxref)"

Zsh, in ~/.zshrc:
  autoload -U bashcompinit
  bashcompinit
  eval "$(register-python-argcomplete rstxref)"

Fish, in ~/.config/fish/config.fish:
  register-python-argcomplete --shell fish rstxref | source

Open a new shell (or re-source the file) to pick it up.
""")

    return 0


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"rstxref {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
