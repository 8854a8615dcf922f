from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import sys
from typing import Any, Callable

from a11ypatch.approval import Confirm, approve_issues
from a11ypatch.config import ReportConfig
from a11ypatch.document import AccessibilityChecker, LiveDocument
from a11ypatch.models import Issue, PatchResult, ValidatedIssue
from a11ypatch.patcher import PatchWriter, discover_source_files
from a11ypatch.reporters import default_report_path, enrich_report, print_validation_summary, with_approved_fixes, write_report
from a11ypatch.reports import load_issues
from a11ypatch.validator import FixValidator

DiscoverIssues = Callable[[str], dict[str, Any]]


@dataclass(slots=True)
class PatchOptions:
    source_dir: Path
    dry_run: bool = False
    extensions: list[str] | None = None
    skip_dirs: list[str] | None = None
    max_file_size_kb: int = 0
    preview_chars: int = 120


@dataclass(slots=True)
class AuditOutcome:
    report_path: Path
    report: dict[str, Any]
    validated: list[ValidatedIssue]
    approved: list[Issue] = field(default_factory=list)
    patches: list[PatchResult] = field(default_factory=list)


def run_audit(
    url: str,
    discover: DiscoverIssues,
    document: LiveDocument,
    checker: AccessibilityChecker,
    report_path: str | Path | None = None,
    confirm: Confirm | None = None,
    patch: PatchOptions | None = None,
    report_dir: str | Path | None = None,
) -> AuditOutcome:
    """Discover, validate, persist, approve, then patch.

    The validated report is written before approval starts, so it survives
    whatever happens at the prompt. Approval is skipped when ``confirm`` is
    None; patching needs both approved fixes and ``patch`` options. Without
    ``report_path`` the report gets a timestamped name under ``report_dir``,
    which falls back to ``ReportConfig().directory``.
    """
    report = discover(url)
    issues = load_issues(report, source=url)
    print(f"[validate] {len(issues)} issue(s) discovered on {url}", file=sys.stderr)

    document.navigate(url)
    validator = FixValidator(document, checker)
    validated = validator.validate_issues(issues)

    enriched = enrich_report(report, validated)
    if report_path is None:
        out = default_report_path(report_dir if report_dir is not None else ReportConfig().directory)
    else:
        out = Path(report_path)
    write_report(enriched, out)
    print_validation_summary(enriched["validationResults"])
    print(f"[report] validated report saved to {out}", file=sys.stderr)

    outcome = AuditOutcome(report_path=out, report=enriched, validated=validated)
    if confirm is None:
        return outcome

    outcome.approved = approve_issues(validated, confirm)
    outcome.report = with_approved_fixes(enriched, outcome.approved)
    write_report(outcome.report, out)
    print(f"[report] {len(outcome.approved)} approved fix(es) saved to {out}", file=sys.stderr)

    if patch is not None and outcome.approved:
        files = discover_source_files(
            patch.source_dir,
            extensions=patch.extensions,
            skip_dirs=patch.skip_dirs,
            max_file_size_kb=patch.max_file_size_kb,
        )
        writer = PatchWriter(
            files,
            dry_run=patch.dry_run,
            confirm=confirm,
            preview_chars=patch.preview_chars,
            display_root=patch.source_dir,
        )
        outcome.patches = writer.apply_all(outcome.approved)
    return outcome
