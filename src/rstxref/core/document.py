"""
rstxref.core.document - Build immutable Documents from source text.

Runs the parser registry over a document once and derives the anchors
and include directives it declares.
"""

from __future__ import annotations

from typing import Any

from rstxref.config.defaults import DEFAULT_CONFIG
from rstxref.core.labels import (
    normalize_label,
    object_label,
    object_name,
    resolve_doc_path,
    section_label,
    strip_suffix,
)
from rstxref.core.models import Anchor, AnchorKind, Document, IncludeDirective, Location
from rstxref.parsers import ParseContext, ParsedContent, ParserRegistry
from rstxref.parsers.anchor import AnchorParser
from rstxref.parsers.directive import DirectiveParser
from rstxref.parsers.include import IncludeParser
from rstxref.parsers.literal import LiteralBlockParser
from rstxref.parsers.remainder import RemainderParser
from rstxref.parsers.section import SectionParser

# Blocks an explicit label may sit in front of to target them
_TARGETABLE = ("section", "object")


def create_registry() -> ParserRegistry:
    """Create a registry with every reStructuredText block parser."""
    registry = ParserRegistry()
    registry.register(LiteralBlockParser())
    registry.register(IncludeParser())
    registry.register(DirectiveParser())
    registry.register(AnchorParser())
    registry.register(SectionParser())
    registry.register(RemainderParser())
    return registry


def parse_blocks(
    text: str,
    doc_id: str,
    path: str = "",
    config: dict[str, Any] | None = None,
    registry: ParserRegistry | None = None,
) -> list[ParsedContent]:
    """Split text into parsed blocks ordered by start line."""
    registry = registry or create_registry()
    context = ParseContext(file_path=path or doc_id, doc_id=doc_id, config=config or DEFAULT_CONFIG)
    lines = [(i + 1, line) for i, line in enumerate(text.split("\n"))]
    return sorted(registry.parse_all(lines, context), key=lambda b: b.start_line)


def parse_document(
    doc_id: str,
    text: str,
    path: str = "",
    config: dict[str, Any] | None = None,
    registry: ParserRegistry | None = None,
) -> Document:
    """
    Parse source text into a Document.

    Args:
        doc_id: Document id (relative path without suffix)
        text: UTF-8 source text
        path: Source path relative to the corpus root
        config: Configuration dict (defaults if omitted)
        registry: Parser registry to reuse

    Returns:
        Immutable Document with blocks, anchors and include directives
    """
    config = config or DEFAULT_CONFIG
    path = path or doc_id
    blocks = parse_blocks(text, doc_id, path, config, registry)
    suffixes = config.get("corpus", {}).get("suffixes", [])
    prefix_document = config.get("anchors", {}).get("prefix_document", False)

    def location(line: int):
        return Location(doc_id, line, path)

    anchors: list[Anchor] = []
    includes: list[IncludeDirective] = []

    for index, block in enumerate(blocks):
        data = block.parsed_data
        if block.content_type == "anchor":
            anchors.append(
                Anchor(
                    label=normalize_label(data["label"]),
                    kind=AnchorKind.EXPLICIT,
                    location=location(block.start_line),
                    target_line=_explicit_target(blocks, index),
                )
            )
        elif block.content_type == "section":
            scope = doc_id if prefix_document else None
            anchors.append(
                Anchor(
                    label=section_label(data["title"], scope),
                    kind=AnchorKind.SECTION,
                    location=location(data["title_line"]),
                    target_line=data["title_line"],
                    title=data["title"],
                )
            )
        elif block.content_type == "object" and data["argument"]:
            anchors.append(
                Anchor(
                    label=object_label(data["directive"], data["argument"]),
                    kind=AnchorKind.OBJECT,
                    location=location(block.start_line),
                    target_line=block.start_line,
                    title=object_name(data["argument"]),
                )
            )
        elif block.content_type == "include":
            target = data["target"]
            includes.append(
                IncludeDirective(
                    target=target,
                    doc_id=strip_suffix(resolve_doc_path(target, doc_id), suffixes) if target else "",
                    location=location(block.start_line),
                    end_line=block.end_line,
                    indent=data["indent"],
                    options=tuple((k, v) for k, v in data["options"]),
                )
            )

    return Document(
        doc_id=doc_id,
        path=path,
        text=text,
        blocks=tuple(blocks),
        anchors=tuple(anchors),
        includes=tuple(includes),
    )


def _explicit_target(blocks: list[ParsedContent], index: int) -> int:
    """Line an explicit label at ``blocks[index]`` points at.

    A label followed only by blank lines and other labels before a section
    title or object description points at that title or description.
    """
    for block in blocks[index + 1 :]:
        if block.content_type == "anchor" or (block.content_type == "text" and block.is_blank):
            continue
        if block.content_type in _TARGETABLE:
            return block.parsed_data.get("title_line", block.start_line)
        break
    return blocks[index].start_line
