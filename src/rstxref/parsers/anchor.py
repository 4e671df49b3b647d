"""AnchorParser - Priority 30 parser for explicit anchor declarations.

Claims ``.. _label:`` lines. Targets with a URL after the colon are
external hyperlinks, not anchors, and are left alone.
"""

from __future__ import annotations

import re
from typing import Iterator

from rstxref.parsers import ParseContext, ParsedContent


class AnchorParser:
    """Parser for ``.. _label:`` anchor lines.

    Priority: 30 (after admonitions, whose content is opaque)
    """

    priority = 30

    ANCHOR_PATTERN = re.compile(r"^\s*\.\.\s+_(?:`(?P<quoted>[^`]+)`|(?P<label>[^:`][^:]*)):\s*$")

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        for ln, text in lines:
            match = self.ANCHOR_PATTERN.match(text)
            if match:
                label = match.group("quoted") or match.group("label")
                yield ParsedContent(
                    content_type="anchor",
                    start_line=ln,
                    end_line=ln,
                    raw_text=text,
                    parsed_data={"label": label.strip()},
                )
