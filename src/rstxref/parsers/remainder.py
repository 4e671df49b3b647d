"""RemainderParser - Priority 999 catch-all parser.

Claims every line no other parser wanted and groups contiguous lines into
``text`` blocks. Text blocks are where inline role references live.
"""

from __future__ import annotations

from typing import Iterator

from rstxref.parsers import ParseContext, ParsedContent


class RemainderParser:
    """Parser for unclaimed prose.

    Priority: 999 (lowest priority, runs last)
    """

    priority = 999

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        group: list[tuple[int, str]] = []
        for ln, text in sorted(lines, key=lambda x: x[0]):
            if group and ln != group[-1][0] + 1:
                yield self._block(group)
                group = []
            group.append((ln, text))
        if group:
            yield self._block(group)

    @staticmethod
    def _block(group: list[tuple[int, str]]) -> ParsedContent:
        return ParsedContent(
            content_type="text",
            start_line=group[0][0],
            end_line=group[-1][0],
            raw_text="\n".join(text for _, text in group),
        )
