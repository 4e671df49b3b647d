"""SectionParser - Priority 40 parser for section titles.

Recognizes underlined titles::

    Geospatial Queries
    ==================

and overlined titles::

    =============
     Release Notes
    =============

Each title later yields one implicit anchor.
"""

from __future__ import annotations

import re
from typing import Iterator

from rstxref.parsers import ParseContext, ParsedContent

ADORNMENT_CHARS = "=-`:.'\"~^_*+#<>!$%&(),/;?@[]\\{|}"

ADORNMENT_PATTERN = re.compile(r"^([" + re.escape(ADORNMENT_CHARS) + r"])\1+\s*$")


def is_adornment(text: str) -> bool:
    return bool(ADORNMENT_PATTERN.match(text))


class SectionParser:
    """Parser for section titles.

    Priority: 40
    """

    priority = 40

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        i = 0
        while i < len(lines):
            section = self._overlined(lines, i) or self._underlined(lines, i)
            if section is None:
                i += 1
                continue
            end, title_index, char, overline = section
            yield ParsedContent(
                content_type="section",
                start_line=lines[i][0],
                end_line=lines[end][0],
                raw_text="\n".join(text for _, text in lines[i : end + 1]),
                parsed_data={
                    "title": lines[title_index][1].strip(),
                    "title_line": lines[title_index][0],
                    "char": char,
                    "overline": overline,
                },
            )
            i = end + 1

    def _contiguous(self, lines: list[tuple[int, str]], i: int, count: int) -> bool:
        if i + count > len(lines):
            return False
        first = lines[i][0]
        return all(lines[i + k][0] == first + k for k in range(count))

    def _starts_block(self, lines: list[tuple[int, str]], i: int) -> bool:
        """A title must not continue a preceding paragraph."""
        if i == 0:
            return True
        prev_ln, prev_text = lines[i - 1]
        return prev_ln != lines[i][0] - 1 or not prev_text.strip()

    def _is_title_text(self, text: str) -> bool:
        stripped = text.strip()
        return bool(stripped) and not is_adornment(text) and not stripped.startswith("..")

    def _overlined(self, lines: list[tuple[int, str]], i: int):
        if not self._contiguous(lines, i, 3) or not self._starts_block(lines, i):
            return None
        over, title, under = (lines[i + k][1] for k in range(3))
        if not (is_adornment(over) and is_adornment(under) and self._is_title_text(title)):
            return None
        if over.strip()[0] != under.strip()[0]:
            return None
        if len(over.rstrip()) < len(title.rstrip()):
            return None
        return i + 2, i + 1, under.strip()[0], True

    def _underlined(self, lines: list[tuple[int, str]], i: int):
        if not self._contiguous(lines, i, 2) or not self._starts_block(lines, i):
            return None
        title, under = lines[i][1], lines[i + 1][1]
        if title[:1].isspace() or not self._is_title_text(title) or not is_adornment(under):
            return None
        if len(under.rstrip()) < len(title.rstrip()):
            return None
        return i + 1, i, under.strip()[0], False
