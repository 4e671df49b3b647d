"""Tests for the validation report and issue taxonomy."""

import json

from rstxref.core.errors import (
    CircularIncludeError,
    Issue,
    MissingIncludeTargetError,
    Severity,
    UnknownRoleNotice,
    UnresolvedReferenceWarning,
)
from rstxref.core.models import Location, Reference, RoleKind
from rstxref.report import ValidationReport


def make_reference(target="missing", role="ref", line=3):
    return Reference(
        role=role,
        kind=RoleKind.LABEL,
        target=target,
        label=target,
        location=Location("geo", line, "geo.txt"),
    )


def sample_report():
    return ValidationReport(
        issues=[
            UnresolvedReferenceWarning(make_reference(), ["missing-label"]),
            MissingIncludeTargetError("/nope.rst", Location("index", 7, "index.txt")).to_issue(),
            UnknownRoleNotice(make_reference("find", role="py:func", line=1)),
        ],
        documents=2,
        references=5,
        anchors=4,
    )


class TestIssues:
    def test_corpus_error_to_issue(self):
        issue = CircularIncludeError(("a", "b", "a"), location=Location("b", 1, "b.txt")).to_issue()
        assert issue.kind == "CircularIncludeError"
        assert issue.severity == Severity.ERROR
        assert issue.is_fatal
        assert issue.message == "Circular include: a -> b -> a"
        assert issue.details == {"chain": ["a", "b", "a"], "trail": ["a", "b", "a"]}

    def test_cycle_key_is_rotation_independent(self):
        first = CircularIncludeError(("b", "c", "a", "b"))
        second = CircularIncludeError(("a", "b", "c", "a"))
        assert first.cycle_key() == second.cycle_key() == ("a", "b", "c")

    def test_str(self):
        issue = Issue("UnresolvedReferenceWarning", Severity.WARNING, "msg", Location("a", 2, "a.txt"))
        assert str(issue) == "WARNING [UnresolvedReferenceWarning] a.txt:2\n   msg"

    def test_severity_rank(self):
        assert Severity.ERROR.rank < Severity.WARNING.rank < Severity.INFO.rank


class TestValidationReport:
    def test_buckets(self):
        report = sample_report()
        assert len(report.errors) == 1
        assert len(report.warnings) == 1
        assert len(report.infos) == 1

    def test_exit_code(self):
        assert sample_report().exit_code == 1
        warnings_only = ValidationReport([UnresolvedReferenceWarning(make_reference())])
        assert warnings_only.exit_code == 0
        assert ValidationReport().exit_code == 0

    def test_sorted_issues_errors_first(self):
        kinds = [i.kind for i in sample_report().sorted_issues()]
        assert kinds == [
            "MissingIncludeTargetError",
            "UnresolvedReferenceWarning",
            "UnknownRoleNotice",
        ]

    def test_without_keeps_fatal_errors(self):
        report = sample_report().without(["Unknown*", "MissingIncludeTargetError"])
        assert [i.kind for i in report.issues] == [
            "UnresolvedReferenceWarning",
            "MissingIncludeTargetError",
        ]
        assert report.references == 5

    def test_to_jsonl(self):
        lines = sample_report().to_jsonl().split("\n")
        assert len(lines) == 4
        records = [json.loads(line) for line in lines]
        assert records[0]["kind"] == "MissingIncludeTargetError"
        assert records[0]["location"] == "index.txt:7"
        assert records[1]["details"]["suggestions"] == ["missing-label"]
        assert records[-1] == {
            "summary": {
                "documents": 2,
                "anchors": 4,
                "references": 5,
                "errors": 1,
                "warnings": 1,
                "infos": 1,
            },
            "exit_code": 1,
        }

    def test_render_text(self):
        text = sample_report().render_text()
        assert "ERROR [MissingIncludeTargetError] index.txt:7" in text
        assert "did you mean: missing-label?" in text
        assert "UnknownRoleNotice" in text
        assert "2 documents, 4 anchors, 5 references" in text

    def test_render_text_hides_notices(self):
        text = sample_report().render_text(show_info=False)
        assert "UnknownRoleNotice" not in text
        assert "1 notices" in text

    def test_render_text_clean(self):
        assert "All references resolved" in ValidationReport(documents=1).render_text()
