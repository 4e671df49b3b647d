"""LiteralBlockParser - Priority 0 parser for opaque literal content.

Claims code directives, ``::`` literal blocks and comments before any
other parser can look at them, so their contents are never read as
includes, anchors, sections or role references.
"""

from __future__ import annotations

import re
from typing import Iterator

from rstxref.parsers import (
    DIRECTIVE_PATTERN,
    ParseContext,
    ParsedContent,
    block_end,
    claimed_text,
    indent_of,
)


class LiteralBlockParser:
    """Parser for literal blocks.

    Priority: 0 (highest priority, runs first)

    Handles:
    - Code directives: ``.. code-block:: javascript`` and friends
    - Literal blocks: a paragraph ending in ``::`` followed by an indented block
    - Comments: explicit markup that is not a directive, target, substitution
      or footnote
    """

    priority = 0

    EXPLICIT_MARKUP = re.compile(r"^(?P<indent>\s*)\.\.(?:\s+(?P<rest>.*))?$")

    # Explicit markup constructs that are not comments
    NOT_COMMENT = re.compile(r"^(?:_|\||\[|[\w.+:-]+::)")

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        literal_directives = context.directive_names("literal")
        i = 0
        while i < len(lines):
            ln, text = lines[i]

            directive = DIRECTIVE_PATTERN.match(text)
            if directive and directive.group("name") in literal_directives:
                end = block_end(lines, i, len(directive.group("indent")))
                yield ParsedContent(
                    content_type="literal",
                    start_line=ln,
                    end_line=lines[end][0],
                    raw_text=claimed_text(lines, i, end),
                    parsed_data={
                        "literal_type": "directive",
                        "directive": directive.group("name"),
                    },
                )
                i = end + 1
                continue

            markup = self.EXPLICIT_MARKUP.match(text)
            if markup:
                rest = markup.group("rest") or ""
                if not self.NOT_COMMENT.match(rest):
                    end = block_end(lines, i, len(markup.group("indent")))
                    yield ParsedContent(
                        content_type="literal",
                        start_line=ln,
                        end_line=lines[end][0],
                        raw_text=claimed_text(lines, i, end),
                        parsed_data={"literal_type": "comment"},
                    )
                    i = end + 1
                    continue
                i += 1
                continue

            if text.rstrip().endswith("::") and not self._is_colon_rule(text):
                body = self._literal_body(lines, i, indent_of(text))
                if body is not None:
                    start, end = body
                    yield ParsedContent(
                        content_type="literal",
                        start_line=lines[start][0],
                        end_line=lines[end][0],
                        raw_text=claimed_text(lines, start, end),
                        parsed_data={"literal_type": "block"},
                    )
                    i = end + 1
                    continue

            i += 1

    @staticmethod
    def _is_colon_rule(text: str) -> bool:
        # "::::::" underlines a title; a bare "::" still opens a literal block
        stripped = text.strip()
        return len(stripped) > 2 and set(stripped) == {":"}

    def _literal_body(
        self, lines: list[tuple[int, str]], index: int, indent: int
    ) -> tuple[int, int] | None:
        """Locate the indented literal block after a ``::`` paragraph."""
        start = index + 1
        while start < len(lines) and not lines[start][1].strip():
            start += 1
        if start == index + 1 or start >= len(lines):
            # A literal block must be separated by a blank line
            return None
        if indent_of(lines[start][1]) <= indent:
            return None
        return start, block_end(lines, start - 1, indent)
