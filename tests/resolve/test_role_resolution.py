"""Tests for role scanning and reference resolution."""

import pytest

from rstxref.config import DEFAULT_CONFIG
from rstxref.core.errors import UnknownRoleNotice, UnresolvedReferenceWarning
from rstxref.core.models import AnchorKind, ResolutionStatus, RoleKind, SourceLine
from rstxref.resolve.anchors import build_anchor_table
from rstxref.resolve.roles import (
    RoleReferenceResolver,
    RoleVocabulary,
    resolve_references,
    scan_references,
)


def source_lines(text, doc_id="doc", path="doc.txt"):
    return [SourceLine(line, doc_id, i + 1, path) for i, line in enumerate(text.split("\n"))]


def scan(text, doc_id="doc"):
    vocabulary = RoleVocabulary.from_config(DEFAULT_CONFIG)
    return scan_references(source_lines(text, doc_id), vocabulary, [".txt", ".rst"])


class TestRoleVocabulary:
    @pytest.fixture
    def vocabulary(self):
        return RoleVocabulary.from_config(DEFAULT_CONFIG)

    def test_builtin_roles(self, vocabulary):
        assert vocabulary.kind_of("ref") == RoleKind.LABEL
        assert vocabulary.kind_of("doc") == RoleKind.DOCUMENT

    def test_configured_roles(self, vocabulary):
        assert vocabulary.kind_of("dbcommand") == RoleKind.OBJECT
        assert vocabulary.kind_of("issue") == RoleKind.EXTERNAL

    def test_domain_roles_fall_back_to_last_part(self, vocabulary):
        assert vocabulary.kind_of("js:method") == RoleKind.OBJECT
        assert vocabulary.kind_of("std:ref") == RoleKind.LABEL

    def test_formatting_roles_are_not_references(self, vocabulary):
        assert vocabulary.kind_of("abbr") is None
        assert vocabulary.kind_of("guilabel") is None

    def test_unknown(self, vocabulary):
        assert vocabulary.kind_of("py:func") == RoleKind.UNKNOWN


class TestScanReferences:
    def test_plain_label(self):
        refs = scan("See :ref:`Geo Index` for details.")
        assert len(refs) == 1
        ref = refs[0]
        assert (ref.role, ref.kind, ref.target, ref.label) == (
            "ref",
            RoleKind.LABEL,
            "Geo Index",
            "geo-index",
        )
        assert not ref.explicit
        assert ref.column == 5
        assert str(ref.location) == "doc.txt:1"

    def test_explicit_target_with_display_text(self):
        ref = scan("Build a :ref:`2dsphere index <2dsphere-index>`.")[0]
        assert ref.display == "2dsphere index"
        assert ref.target == "2dsphere-index"
        assert ref.label == "2dsphere-index"
        assert ref.explicit

    def test_role_spanning_lines(self):
        refs = scan("Intro\nSee :ref:`long display\n   text <target-label>` here.")
        assert len(refs) == 1
        assert refs[0].display == "long display text"
        assert refs[0].target == "target-label"
        assert refs[0].location.line == 2

    def test_tilde_prefix_removed(self):
        ref = scan("Call :method:`~db.collection.find()`.")[0]
        assert ref.target == "db.collection.find()"
        assert ref.label == "method-db-collection-find"

    def test_exclamation_suppresses_reference(self):
        assert scan("Not linked: :dbcommand:`!geoNear`.") == []

    def test_formatting_roles_skipped(self):
        assert scan("Press :kbd:`Ctrl-C` or read :abbr:`BSON (Binary JSON)`.") == []

    def test_inline_literal_not_scanned(self):
        refs = scan("Write ``:ref:`label` `` in prose, then :ref:`real`.")
        assert [r.target for r in refs] == ["real"]

    def test_opaque_blocks_not_scanned(self):
        text = (
            ".. code-block:: rst\n"
            "\n"
            "   :ref:`in-code`\n"
            "\n"
            ".. note::\n"
            "\n"
            "   :ref:`in-note`\n"
            "\n"
            ".. a comment with :ref:`in-comment`\n"
            "\n"
            "Literal::\n"
            "\n"
            "   :ref:`in-literal`\n"
            "\n"
            "Body :ref:`visible`.\n"
        )
        assert [r.target for r in scan(text)] == ["visible"]

    def test_section_titles_scanned(self):
        title = "The :dbcommand:`geoNear` Command"
        refs = scan(f"{title}\n{'=' * len(title)}\n")
        assert [r.label for r in refs] == ["dbcommand-geonear"]

    def test_object_body_scanned(self):
        refs = scan(".. dbcommand:: geoNear\n\n   See :ref:`geo-index`.\n")
        assert [r.target for r in refs] == ["geo-index"]

    def test_doc_role_relative_to_document(self):
        ref = scan("See :doc:`geoNear` and :doc:`/index`.", doc_id="reference/command/index")
        assert [r.label for r in ref] == ["reference/command/geoNear", "index"]
        assert all(r.kind == RoleKind.DOCUMENT for r in ref)

    def test_toctree_entries(self):
        text = ".. toctree::\n\n   Geo </geospatial-queries>\n   release-notes.txt\n"
        refs = scan(text, doc_id="index")
        assert [(r.role, r.label, r.display) for r in refs] == [
            ("toctree", "geospatial-queries", "Geo"),
            ("toctree", "release-notes", ""),
        ]
        assert refs[0].location.line == 3
        assert refs[0].column == 4

    def test_included_origin(self):
        lines = [
            SourceLine("Intro", "top", 1, "top.txt"),
            SourceLine("Use :ref:`x`.", "includes/fact", 4, "includes/fact.rst"),
        ]
        vocabulary = RoleVocabulary.from_config(DEFAULT_CONFIG)
        ref = scan_references(lines, vocabulary)[0]
        assert str(ref.location) == "includes/fact.rst:4"
        assert ref.location.doc_id == "includes/fact"


class TestResolver:
    @pytest.fixture
    def corpus(self, make_corpus, geo_texts):
        return make_corpus(geo_texts)

    @pytest.fixture
    def resolver(self, corpus):
        return RoleReferenceResolver(build_anchor_table(corpus.documents), corpus.documents)

    def resolve_text(self, resolver, text, doc_id="doc"):
        return resolver.resolve_lines(source_lines(text, doc_id))

    def test_label_resolves(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "See :ref:`Geospatial Queries`.")
        assert issues == []
        assert resolutions[0].status == ResolutionStatus.RESOLVED
        assert resolutions[0].anchor.label == "geospatial-queries"
        assert resolutions[0].anchor.kind == AnchorKind.EXPLICIT

    def test_object_resolves(self, resolver):
        resolutions, _ = self.resolve_text(resolver, "Run :dbcommand:`geoNear`.")
        assert resolutions[0].status == ResolutionStatus.RESOLVED
        assert resolutions[0].anchor.doc_id == "reference/command/geoNear"

    def test_object_role_does_not_match_other_kind(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "Run :method:`geoNear`.")
        assert resolutions[0].status == ResolutionStatus.UNRESOLVED
        assert isinstance(issues[0], UnresolvedReferenceWarning)

    def test_document_resolves(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "See :doc:`/release-notes`.")
        assert issues == []
        anchor = resolutions[0].anchor
        assert anchor.kind == AnchorKind.DOCUMENT
        assert anchor.doc_id == "release-notes"

    def test_external_roles_never_warn(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "Fixed in :issue:`SERVER-1`.")
        assert resolutions[0].status == ResolutionStatus.EXTERNAL
        assert issues == []

    def test_unknown_role_notice(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "Call :py:func:`find`.")
        assert resolutions[0].status == ResolutionStatus.IGNORED
        assert len(issues) == 1
        assert isinstance(issues[0], UnknownRoleNotice)
        assert issues[0].severity.value == "info"

    def test_unresolved_with_suggestion(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "See :ref:`geospatial-querys`.")
        assert resolutions[0].suggestions == ("geospatial-queries",)
        warning = issues[0]
        assert warning.kind == "UnresolvedReferenceWarning"
        assert warning.details["target"] == "geospatial-querys"
        assert "did you mean: geospatial-queries?" in warning.message

    def test_object_suggestions_stay_in_kind(self, resolver):
        resolutions, _ = self.resolve_text(resolver, "Run :dbcommand:`geoNea`.")
        assert resolutions[0].suggestions == ("dbcommand-geonear",)

    def test_unresolved_document_suggestion(self, resolver):
        resolutions, issues = self.resolve_text(resolver, "See :doc:`/release-note`.")
        assert resolutions[0].status == ResolutionStatus.UNRESOLVED
        assert resolutions[0].suggestions == ("release-notes",)

    def test_suggestions_disabled(self, corpus, config_with):
        config = config_with({"rules": {"suggestions": 0}})
        resolver = RoleReferenceResolver(
            build_anchor_table(corpus.documents), corpus.documents, config
        )
        resolutions, issues = resolver.resolve_lines(source_lines("See :ref:`geospatial-querys`."))
        assert resolutions[0].suggestions == ()
        assert "did you mean" not in issues[0].message

    def test_anchor_table_not_modified(self, resolver):
        before = dict(resolver.anchors)
        self.resolve_text(resolver, "See :ref:`missing` and :doc:`/nowhere`.")
        assert dict(resolver.anchors) == before

    def test_resolve_references_helper(self, corpus):
        anchors = build_anchor_table(corpus.documents)
        resolutions = resolve_references(corpus["index"], anchors, corpus.documents)
        assert [r.reference.label for r in resolutions] == [
            "geospatial-queries",
            "release-notes",
            "geospatial-queries",
            "release-notes",
        ]
        assert all(r.status == ResolutionStatus.RESOLVED for r in resolutions)


class TestToctreeGlob:
    INDEX = ".. toctree::\n   :glob:\n\n   reference/*\n   intro\n"

    def test_pattern_entries_flagged(self):
        refs = scan(self.INDEX, doc_id="index")
        assert [(r.label, r.glob) for r in refs] == [("reference/*", True), ("intro", False)]

    def test_wildcards_without_glob_option_are_literal(self):
        refs = scan(".. toctree::\n\n   reference/*\n", doc_id="index")
        assert [r.glob for r in refs] == [False]

    def test_pattern_expands_to_matching_documents(self, make_corpus):
        corpus = make_corpus(
            {
                "index.txt": self.INDEX,
                "intro.txt": "Intro\n",
                "reference/a.txt": "A\n",
                "reference/b.txt": "B\n",
            }
        )
        resolutions, issues = RoleReferenceResolver({}, corpus.documents).resolve_document(
            corpus["index"]
        )
        assert issues == []
        assert [r.reference.label for r in resolutions] == ["reference/a", "reference/b", "intro"]
        assert all(r.status == ResolutionStatus.RESOLVED for r in resolutions)

    def test_pattern_matching_nothing_is_unresolved(self, make_corpus):
        corpus = make_corpus({"index.txt": self.INDEX, "intro.txt": "Intro\n"})
        _, issues = RoleReferenceResolver({}, corpus.documents).resolve_document(corpus["index"])
        assert [i.details["target"] for i in issues] == ["reference/*"]
