"""Tests for the line-claiming block parsers."""

import pytest

from rstxref.config import DEFAULT_CONFIG
from rstxref.parsers import ParseContext, ParserRegistry, block_end
from rstxref.parsers.anchor import AnchorParser
from rstxref.parsers.directive import DirectiveParser
from rstxref.parsers.include import IncludeParser
from rstxref.parsers.literal import LiteralBlockParser
from rstxref.parsers.remainder import RemainderParser
from rstxref.parsers.section import SectionParser, is_adornment


def as_lines(content: str) -> list[tuple[int, str]]:
    return [(i + 1, line) for i, line in enumerate(content.split("\n"))]


@pytest.fixture
def ctx():
    return ParseContext(file_path="test.txt", doc_id="test", config=DEFAULT_CONFIG)


class TestParserPriorities:
    def test_priorities_are_ordered(self):
        parsers = [
            LiteralBlockParser(),
            IncludeParser(),
            DirectiveParser(),
            AnchorParser(),
            SectionParser(),
            RemainderParser(),
        ]
        priorities = [p.priority for p in parsers]
        assert priorities == sorted(priorities)
        assert priorities[0] == 0
        assert priorities[-1] == 999

    def test_registry_orders_by_priority(self):
        registry = ParserRegistry()
        registry.register(RemainderParser())
        registry.register(LiteralBlockParser())
        assert [p.priority for p in registry.get_ordered()] == [0, 999]


class TestBlockEnd:
    def test_stops_at_dedent_and_drops_trailing_blanks(self):
        lines = as_lines(".. note::\n\n   body\n   more\n\nafter")
        end = block_end(lines, 0, 0)
        assert lines[end][1] == "   more"

    def test_no_body(self):
        lines = as_lines(".. note::\nafter")
        assert block_end(lines, 0, 0) == 0


class TestLiteralBlockParser:
    def test_claims_code_block(self, ctx):
        content = "Intro\n\n.. code-block:: javascript\n\n   db.find()\n\nAfter"
        results = list(LiteralBlockParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        assert results[0].content_type == "literal"
        assert results[0].start_line == 3
        assert results[0].end_line == 5
        assert results[0].parsed_data["directive"] == "code-block"

    def test_claims_literal_block_after_double_colon(self, ctx):
        content = "Example::\n\n   :ref:`inside`\n\nAfter"
        results = list(LiteralBlockParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        assert results[0].parsed_data["literal_type"] == "block"
        assert results[0].start_line == 3
        assert results[0].end_line == 3

    def test_claims_comment(self, ctx):
        content = ".. this is a comment\n   continued\n\nText"
        results = list(LiteralBlockParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        assert results[0].parsed_data["literal_type"] == "comment"
        assert results[0].end_line == 2

    def test_ignores_anchor_and_directives(self, ctx):
        content = ".. _label:\n\n.. note::\n\n   body\n\n.. |sub| replace:: x"
        results = list(LiteralBlockParser().claim_and_parse(as_lines(content), ctx))
        assert results == []

    def test_colon_underline_is_not_literal(self, ctx):
        content = "Title\n:::::\n\n   indented"
        results = list(LiteralBlockParser().claim_and_parse(as_lines(content), ctx))
        assert results == []


class TestIncludeParser:
    def test_include_with_options(self, ctx):
        content = ".. include:: /includes/fact.rst\n   :start-after: begin\n   :end-before: end\n\nText"
        results = list(IncludeParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        data = results[0].parsed_data
        assert data["target"] == "/includes/fact.rst"
        assert data["options"] == [("start-after", "begin"), ("end-before", "end")]
        assert results[0].end_line == 3

    def test_includes_spelling_is_synonym(self, ctx):
        results = list(IncludeParser().claim_and_parse(as_lines(".. includes:: /a.rst"), ctx))
        assert len(results) == 1
        assert results[0].parsed_data["directive"] == "includes"
        assert results[0].parsed_data["target"] == "/a.rst"

    def test_keeps_indent(self, ctx):
        results = list(IncludeParser().claim_and_parse(as_lines("   .. include:: a.rst"), ctx))
        assert results[0].parsed_data["indent"] == "   "


class TestDirectiveParser:
    def test_admonition_claims_body(self, ctx):
        content = ".. note::\n\n   See :ref:`x`.\n\nAfter"
        results = list(DirectiveParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        assert results[0].content_type == "admonition"
        assert results[0].end_line == 3

    def test_object_claims_header_only(self, ctx):
        content = ".. dbcommand:: geoNear\n   :noindex:\n\n   Body text."
        results = list(DirectiveParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        assert results[0].content_type == "object"
        assert results[0].parsed_data == {"directive": "dbcommand", "argument": "geoNear"}
        assert results[0].end_line == 2

    def test_other_directive(self, ctx):
        results = list(DirectiveParser().claim_and_parse(as_lines(".. only:: html\n\n   x"), ctx))
        assert results[0].content_type == "directive"
        assert results[0].end_line == 1

    def test_toctree_entries(self, ctx):
        content = (
            ".. toctree::\n"
            "   :maxdepth: 1\n"
            "\n"
            "   Geo </geo>\n"
            "   release-notes\n"
            "   self\n"
            "   Site <https://example.com>\n"
        )
        results = list(DirectiveParser().claim_and_parse(as_lines(content), ctx))
        entries = results[0].parsed_data["entries"]
        assert [(e["line"], e["title"], e["target"]) for e in entries] == [
            (4, "Geo", "/geo"),
            (5, "", "release-notes"),
        ]


class TestAnchorParser:
    def test_plain_label(self, ctx):
        results = list(AnchorParser().claim_and_parse(as_lines(".. _geo-index:"), ctx))
        assert results[0].parsed_data["label"] == "geo-index"

    def test_quoted_label(self, ctx):
        results = list(AnchorParser().claim_and_parse(as_lines(".. _`geo: index`:"), ctx))
        assert results[0].parsed_data["label"] == "geo: index"

    def test_hyperlink_target_is_not_anchor(self, ctx):
        lines = as_lines(".. _MongoDB: https://www.mongodb.com")
        assert list(AnchorParser().claim_and_parse(lines, ctx)) == []


class TestSectionParser:
    def test_adornment_detection(self):
        assert is_adornment("=====")
        assert is_adornment("~~~  ")
        assert not is_adornment("=-=-")
        assert not is_adornment("=")
        assert not is_adornment("Text")

    def test_underlined_title(self, ctx):
        results = list(SectionParser().claim_and_parse(as_lines("Geo Queries\n===========\n"), ctx))
        assert len(results) == 1
        assert results[0].parsed_data["title"] == "Geo Queries"
        assert results[0].parsed_data["title_line"] == 1
        assert results[0].parsed_data["overline"] is False

    def test_overlined_title(self, ctx):
        content = "=============\nRelease Notes\n=============\n"
        results = list(SectionParser().claim_and_parse(as_lines(content), ctx))
        assert len(results) == 1
        assert results[0].parsed_data["title_line"] == 2
        assert results[0].parsed_data["overline"] is True
        assert results[0].end_line == 3

    def test_short_underline_is_not_title(self, ctx):
        results = list(SectionParser().claim_and_parse(as_lines("Long Title\n===\n"), ctx))
        assert results == []

    def test_paragraph_continuation_is_not_title(self, ctx):
        content = "First line of a paragraph\nSecond line\n-----------\n"
        results = list(SectionParser().claim_and_parse(as_lines(content), ctx))
        assert results == []


class TestRemainderParser:
    def test_groups_contiguous_lines(self, ctx):
        lines = [(1, "one"), (2, "two"), (4, "four")]
        results = list(RemainderParser().claim_and_parse(lines, ctx))
        assert [(r.start_line, r.end_line) for r in results] == [(1, 2), (4, 4)]
        assert all(r.content_type == "text" for r in results)

    def test_empty(self, ctx):
        assert list(RemainderParser().claim_and_parse([], ctx)) == []
