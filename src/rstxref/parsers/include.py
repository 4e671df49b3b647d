"""IncludeParser - Priority 10 parser for include directives.

Claims ``.. include:: path`` lines and their ``:option:`` lines. The
``.. includes::`` spelling is accepted as a synonym.
"""

from __future__ import annotations

import re
from typing import Iterator

from rstxref.parsers import (
    OPTION_PATTERN,
    ParseContext,
    ParsedContent,
    claimed_text,
    options_end,
)

INCLUDE_DIRECTIVES = ("include", "includes")


class IncludeParser:
    """Parser for include directives.

    Priority: 10 (after literal blocks, before admonitions so includes
    nested in an admonition are still expanded)
    """

    priority = 10

    INCLUDE_PATTERN = re.compile(
        r"^(?P<indent>\s*)\.\.\s+(?P<name>includes?)::(?:\s+(?P<target>\S.*?))?\s*$"
    )

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        i = 0
        while i < len(lines):
            ln, text = lines[i]
            match = self.INCLUDE_PATTERN.match(text)
            if not match:
                i += 1
                continue

            end = options_end(lines, i)
            options = []
            for _, option_line in lines[i + 1 : end + 1]:
                option = OPTION_PATTERN.match(option_line)
                options.append((option.group("name"), option.group("value") or ""))

            yield ParsedContent(
                content_type="include",
                start_line=ln,
                end_line=lines[end][0],
                raw_text=claimed_text(lines, i, end),
                parsed_data={
                    "directive": match.group("name"),
                    "target": match.group("target") or "",
                    "indent": match.group("indent"),
                    "options": options,
                },
            )
            i = end + 1
