"""
rstxref.report - Validation report.

Holds the fatal errors and warnings of a run and renders them as text
with a summary of counts, or as JSON lines (one record per issue followed
by one summary record).
"""

from __future__ import annotations

import fnmatch
import json
from dataclasses import dataclass, field
from typing import Iterable

from rstxref.core.errors import Issue, Severity


@dataclass
class ValidationReport:
    """All issues found in one validation run."""

    issues: list[Issue] = field(default_factory=list)
    documents: int = 0
    references: int = 0
    anchors: int = 0

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def infos(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.INFO]

    @property
    def exit_code(self) -> int:
        """Non-zero only when a fatal error occurred; warnings do not fail."""
        return 1 if self.errors else 0

    def sorted_issues(self) -> list[Issue]:
        return sorted(
            self.issues,
            key=lambda i: (i.severity.rank, str(i.location or ""), i.kind, i.message),
        )

    def without(self, patterns: Iterable[str]) -> "ValidationReport":
        """Copy of the report with non-fatal issues matching ``patterns`` removed.

        Patterns are fnmatch patterns over the issue kind. Fatal errors are
        never dropped.
        """
        patterns = list(patterns)
        kept = [
            i
            for i in self.issues
            if i.is_fatal or not any(fnmatch.fnmatch(i.kind, p) for p in patterns)
        ]
        return ValidationReport(kept, self.documents, self.references, self.anchors)

    def counts(self) -> dict[str, int]:
        return {
            "documents": self.documents,
            "anchors": self.anchors,
            "references": self.references,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "infos": len(self.infos),
        }

    def to_jsonl(self) -> str:
        """One JSON record per issue, then a summary record."""
        records = [json.dumps(issue.to_dict(), sort_keys=True) for issue in self.sorted_issues()]
        summary = {"summary": self.counts(), "exit_code": self.exit_code}
        records.append(json.dumps(summary, sort_keys=True))
        return "\n".join(records)

    def render_text(self, show_info: bool = True) -> str:
        """Human-readable report with a summary of counts."""
        out = []
        for issue in self.sorted_issues():
            if issue.severity == Severity.INFO and not show_info:
                continue
            out.append(str(issue))
            out.append("")

        out.append("─" * 60)
        out.append(
            f"{self.documents} documents, {self.anchors} anchors, "
            f"{self.references} references"
        )
        if self.errors:
            out.append(f"❌ {len(self.errors)} errors")
        if self.warnings:
            out.append(f"⚠️  {len(self.warnings)} warnings")
        if self.infos:
            out.append(f"ℹ️  {len(self.infos)} notices")
        if not self.issues:
            out.append("✓ All references resolved")
        return "\n".join(out)
