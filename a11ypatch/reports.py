from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from a11ypatch.errors import MalformedReportError
from a11ypatch.models import Issue, ValidatedIssue, ValidationResult, issue_from_dict


def load_report(path: str | Path) -> dict[str, Any]:
    report_path = Path(path)
    if not report_path.is_file():
        raise MalformedReportError(f"Report not found: {report_path}")
    try:
        payload = json.loads(report_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedReportError(f"Unable to read report {report_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise MalformedReportError(f"Report {report_path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedReportError(f"Report {report_path} must be a JSON object.")
    return payload


def load_approved_fixes(path: str | Path) -> list[Issue]:
    return _issues_under(load_report(path), "approvedFixes", path)


def load_issues(report: dict[str, Any], source: str | Path = "report") -> list[Issue]:
    return _issues_under(report, "issues", source)


def _issues_under(report: dict[str, Any], key: str, source: str | Path) -> list[Issue]:
    records = report.get(key)
    if not isinstance(records, list):
        raise MalformedReportError(f"{source} must contain a '{key}' array.")
    issues: list[Issue] = []
    for idx, record in enumerate(records):
        try:
            issues.append(issue_from_dict(record))
        except ValueError as exc:
            raise MalformedReportError(f"{source}: {key}[{idx}]: {exc}") from exc
    return issues


def load_validated_issues(report: dict[str, Any], source: str | Path = "report") -> list[ValidatedIssue]:
    """Pair each report issue with its persisted validation outcome (same order)."""
    issues = load_issues(report, source)
    results = report.get("validationResults")
    if not isinstance(results, dict) or not isinstance(results.get("issues"), list):
        raise MalformedReportError(f"{source} has no 'validationResults'; run validation first.")
    entries = results["issues"]
    if len(entries) != len(issues):
        raise MalformedReportError(
            f"{source}: validationResults covers {len(entries)} issue(s) but the report lists {len(issues)}."
        )

    validated: list[ValidatedIssue] = []
    for issue, entry in zip(issues, entries):
        if not isinstance(entry, dict) or entry.get("element") != issue.selector:
            raise MalformedReportError(f"{source}: validationResults entry does not match issue '{issue.selector}'.")
        method = entry.get("method", "dom-injection")
        if method not in ("dom-injection", "skipped"):
            method = "dom-injection"
        reason = entry.get("reason")
        validated.append(
            ValidatedIssue(
                issue=issue,
                result=ValidationResult(
                    method=method,
                    passed=entry.get("status") == "validated",
                    reason=str(reason) if reason else None,
                ),
            )
        )
    return validated
