from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
import json
import os
from pathlib import Path
import sys
from typing import Any

from a11ypatch.models import Issue, PatchResult, ValidatedIssue, issue_to_dict
from a11ypatch.patcher import REASON_DECLINED, REASON_DRY_RUN, REASON_NOT_FOUND


def _validated_issue_to_dict(item: ValidatedIssue) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "element": item.issue.selector,
        "message": item.issue.message,
        "wcagCriteria": item.issue.wcag_criteria,
        "severity": item.issue.severity,
        "status": item.result.status,
        "method": item.result.method,
    }
    if item.result.reason:
        payload["reason"] = item.result.reason
    return payload


def to_validation_results(validated: list[ValidatedIssue], validated_at: datetime | None = None) -> dict[str, Any]:
    total = len(validated)
    passed = sum(1 for item in validated if item.result.passed)
    stamp = validated_at or datetime.now(timezone.utc)
    return {
        "validatedAt": stamp.isoformat(),
        "summary": {
            "total": total,
            "validated": passed,
            "manual": total - passed,
            "validatedPct": round(passed / total * 100) if total else 0,
        },
        "issues": [_validated_issue_to_dict(item) for item in validated],
    }


def enrich_report(
    report: dict[str, Any],
    validated: list[ValidatedIssue],
    validated_at: datetime | None = None,
) -> dict[str, Any]:
    enriched = dict(report)
    enriched["validationResults"] = to_validation_results(validated, validated_at)
    return enriched


def with_approved_fixes(report: dict[str, Any], approved: list[Issue]) -> dict[str, Any]:
    updated = dict(report)
    updated["approvedFixes"] = [issue_to_dict(issue) for issue in approved]
    return updated


def to_patch_report(results: list[PatchResult], dry_run: bool) -> dict[str, Any]:
    counts = _patch_counts(results)
    return {
        "dry_run": dry_run,
        "summary": counts,
        "results": [
            {
                "element": result.issue.selector,
                "message": result.issue.message,
                "file": result.file,
                "applied": result.applied,
                **({"reason": result.reason} if result.reason else {}),
            }
            for result in results
        ],
    }


def _patch_counts(results: list[PatchResult]) -> dict[str, int]:
    reasons = Counter(result.reason for result in results if not result.applied)
    applied = sum(1 for result in results if result.applied)
    accounted = reasons[REASON_DRY_RUN] + reasons[REASON_DECLINED] + reasons[REASON_NOT_FOUND]
    return {
        "total": len(results),
        "applied": applied,
        "would_apply": reasons[REASON_DRY_RUN],
        "skipped": reasons[REASON_DECLINED],
        "not_found": reasons[REASON_NOT_FOUND],
        "failed": len(results) - applied - accounted,
    }


def print_patch_summary(results: list[PatchResult], dry_run: bool) -> None:
    counts = _patch_counts(results)
    if dry_run:
        line = f"[summary] fixes={counts['total']} would_apply={counts['would_apply']}"
    else:
        line = f"[summary] fixes={counts['total']} applied={counts['applied']} skipped={counts['skipped']}"
    line += f" not_found={counts['not_found']} failed={counts['failed']}"
    print(line, file=sys.stderr)

    not_found = [result for result in results if result.reason == REASON_NOT_FOUND]
    if not_found:
        print("[summary] not found (manual action needed):", file=sys.stderr)
        for result in not_found:
            print(f"[summary]   {result.issue.message} ({result.issue.selector})", file=sys.stderr)

    if dry_run and counts["would_apply"]:
        print(
            f"[summary] dry run complete: {counts['would_apply']} fix(es) ready. Re-run without --dry-run to write.",
            file=sys.stderr,
        )
    elif not dry_run and counts["applied"]:
        print(f"[summary] {counts['applied']} file(s) patched. Review with `git diff` before committing.", file=sys.stderr)


def print_validation_summary(results: dict[str, Any]) -> None:
    summary = results["summary"]
    print(
        f"[summary] issues={summary['total']} validated={summary['validated']} "
        f"manual={summary['manual']} validated_pct={summary['validatedPct']}%",
        file=sys.stderr,
    )


def write_report(payload: dict[str, Any], out: str | Path | None) -> None:
    rendered = json.dumps(payload, indent=2, ensure_ascii=False)
    if out is None:
        print(rendered)
        return
    output_path = Path(out)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Readers only ever see the previous report or the complete new one.
    tmp_path = output_path.with_name(f".{output_path.name}.tmp")
    try:
        tmp_path.write_text(rendered, encoding="utf-8")
        os.replace(tmp_path, output_path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def default_report_path(directory: str | Path, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now(timezone.utc)).isoformat().replace(":", "-").replace(".", "-")
    return Path(directory) / f"accessibility-report-{stamp}.json"
