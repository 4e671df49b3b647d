"""Line-claiming parser system for reStructuredText sources.

Parsers are registered with priorities and claim lines in priority order.
Each parser only sees the lines earlier parsers left unclaimed, so opaque
blocks (code, literal blocks, comments, admonitions) are taken out of play
before anchors, sections and inline text are looked at.

Public names:
- LineClaimingParser: what every block parser provides
- ParseContext: document id, path and config for one parse
- ParsedContent: one claimed block of lines
- ParserRegistry: runs the parsers over a document
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

# ".. name:: argument" - the name may carry a domain ("py:function")
DIRECTIVE_PATTERN = re.compile(
    r"^(?P<indent>\s*)\.\.\s+(?P<name>[\w.+-]+(?::[\w.+-]+)*)::(?:\s+(?P<arg>.*?))?\s*$"
)

# Indented ":option: value" line following a directive
OPTION_PATTERN = re.compile(r"^\s+:(?P<name>[^:\s][^:]*):(?:\s+(?P<value>.*?))?\s*$")


@dataclass
class ParseContext:
    """Per-document information shared by every parser.

    Attributes:
        file_path: Source path of the document (relative to the corpus root).
        doc_id: Document id the lines belong to.
        config: Configuration dictionary.
    """

    file_path: str
    doc_id: str = ""
    config: dict[str, Any] = field(default_factory=dict)

    def directive_names(self, key: str) -> set[str]:
        return set(self.config.get("directives", {}).get(key, []))


@dataclass
class ParsedContent:
    """A block of consecutive source lines claimed by one parser.

    Attributes:
        content_type: Block kind ("literal", "include", "anchor", "section", "text", ...).
        start_line: First line number (1-indexed).
        end_line: Last line number (1-indexed, inclusive).
        raw_text: The claimed lines joined with newlines.
        parsed_data: Parser-specific fields (label, title, target, options, ...).
    """

    content_type: str
    start_line: int
    end_line: int
    raw_text: str
    parsed_data: dict[str, Any] = field(default_factory=dict)

    @property
    def line_count(self) -> int:
        """Lines spanned by the block."""
        return self.end_line - self.start_line + 1

    @property
    def is_blank(self) -> bool:
        return not self.raw_text.strip()


@runtime_checkable
class LineClaimingParser(Protocol):
    """A block parser.

    Lower priorities run first. A parser is handed the lines no earlier
    parser claimed and yields one ParsedContent per block it takes.
    """

    @property
    def priority(self) -> int:
        """Run order; lower runs earlier."""
        ...

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        """Take the blocks this parser recognizes.

        Args:
            lines: (line number, text) pairs still unclaimed, in order.
            context: The document being parsed.

        Yields:
            One ParsedContent per claimed block.
        """
        ...


class ParserRegistry:
    """The ordered set of block parsers used for a document.

    Parsers run by ascending priority; a line belongs to the first parser
    that claims it.
    """

    def __init__(self) -> None:
        self.parsers: list[LineClaimingParser] = []

    def register(self, parser: LineClaimingParser) -> None:
        self.parsers.append(parser)

    def get_ordered(self) -> list[LineClaimingParser]:
        """Get parsers sorted by priority (ascending)."""
        return sorted(self.parsers, key=lambda p: p.priority)

    def parse_all(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        """Split ``lines`` into blocks.

        Args:
            lines: (line number, text) pairs for the whole document.
            context: The document being parsed.

        Yields:
            Blocks in the order the parsers produced them.
        """
        claimed_lines: set[int] = set()

        for parser in self.get_ordered():
            unclaimed = [(ln, text) for ln, text in lines if ln not in claimed_lines]

            if not unclaimed:
                break

            for content in parser.claim_and_parse(unclaimed, context):
                for ln in range(content.start_line, content.end_line + 1):
                    claimed_lines.add(ln)
                yield content


def indent_of(text: str) -> int:
    """Width of the leading whitespace of a line."""
    return len(text) - len(text.lstrip())


def block_end(lines: list[tuple[int, str]], index: int, indent: int) -> int:
    """Index of the last line of the indented body starting after ``index``.

    The body is every following line that is blank or indented deeper than
    ``indent``. Trailing blank lines are not part of the body. Gaps in the
    line numbers (lines claimed by earlier parsers) do not end the body.
    """
    last = index
    for j in range(index + 1, len(lines)):
        text = lines[j][1]
        if not text.strip():
            continue
        if indent_of(text) <= indent:
            break
        last = j
    return last


def options_end(lines: list[tuple[int, str]], index: int) -> int:
    """Index of the last ``:option:`` line directly after ``index``."""
    last = index
    for j in range(index + 1, len(lines)):
        if lines[j][0] != lines[j - 1][0] + 1:
            break
        if not OPTION_PATTERN.match(lines[j][1]):
            break
        last = j
    return last


def claimed_text(lines: list[tuple[int, str]], start: int, end: int) -> str:
    return "\n".join(text for _, text in lines[start : end + 1])


__all__ = [
    "DIRECTIVE_PATTERN",
    "LineClaimingParser",
    "OPTION_PATTERN",
    "ParseContext",
    "ParsedContent",
    "ParserRegistry",
    "block_end",
    "claimed_text",
    "indent_of",
    "options_end",
]
