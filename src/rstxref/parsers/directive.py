"""DirectiveParser - Priority 20 parser for non-literal directives.

Admonitions are claimed whole and stay opaque. A ``toctree`` is claimed
whole and its entries are extracted as document links. Object
descriptions (``.. dbcommand:: geoNear``) and every other directive only
claim their header and option lines; their body is ordinary content.
"""

from __future__ import annotations

import re
from typing import Iterator

from rstxref.parsers import (
    DIRECTIVE_PATTERN,
    OPTION_PATTERN,
    ParseContext,
    ParsedContent,
    block_end,
    claimed_text,
    options_end,
)


class DirectiveParser:
    """Parser for admonitions, toctrees, object descriptions and other directives.

    Priority: 20
    """

    priority = 20

    # "Title <path>" toctree entry
    TOCTREE_ENTRY = re.compile(r"^(?P<title>.*?)\s*<(?P<target>[^<>]+)>$")

    def claim_and_parse(
        self,
        lines: list[tuple[int, str]],
        context: ParseContext,
    ) -> Iterator[ParsedContent]:
        admonitions = context.directive_names("admonitions")
        objects = set(context.config.get("roles", {}).get("objects", []))

        i = 0
        while i < len(lines):
            ln, text = lines[i]
            match = DIRECTIVE_PATTERN.match(text)
            if not match:
                i += 1
                continue

            name = match.group("name")
            argument = match.group("arg") or ""
            indent = len(match.group("indent"))

            if name in admonitions or name == "toctree":
                end = block_end(lines, i, indent)
                data = {"directive": name, "argument": argument}
                content_type = "admonition"
                if name == "toctree":
                    content_type = "toctree"
                    data["entries"] = self._toctree_entries(lines[i + 1 : end + 1])
            else:
                end = options_end(lines, i)
                content_type = "object" if name in objects else "directive"
                data = {"directive": name, "argument": argument}

            yield ParsedContent(
                content_type=content_type,
                start_line=ln,
                end_line=lines[end][0],
                raw_text=claimed_text(lines, i, end),
                parsed_data=data,
            )
            i = end + 1

    def _toctree_entries(self, body: list[tuple[int, str]]) -> list[dict]:
        """Extract (line, title, target) entries from a toctree body.

        Under ``:glob:`` an entry with wildcards is flagged as a pattern.
        """
        options = set()
        for _, text in body:
            option = OPTION_PATTERN.match(text)
            if option:
                options.add(option.group("name"))
        entries = []
        for ln, text in body:
            entry = text.strip()
            if not entry or OPTION_PATTERN.match(text):
                continue
            title = ""
            target = entry
            explicit = self.TOCTREE_ENTRY.match(entry)
            if explicit:
                title = explicit.group("title")
                target = explicit.group("target").strip()
            if target == "self" or "://" in target:
                continue
            entries.append(
                {
                    "line": ln,
                    "title": title,
                    "target": target,
                    "glob": "glob" in options and any(c in target for c in "*?["),
                }
            )
        return entries
