from __future__ import annotations

import sys
from typing import Callable

from a11ypatch.models import Issue, ValidatedIssue

Confirm = Callable[[str], bool]

DECLINE_ANSWERS = {"n", "no"}


def prompt_yes_no(question: str, input_fn: Callable[[str], str] = input) -> bool:
    """Ask on the terminal; anything but an explicit no counts as yes.

    End of input (a closed or non-interactive stdin) declines.
    """
    try:
        answer = input_fn(question)
    except EOFError:
        return False
    return answer.strip().lower() not in DECLINE_ANSWERS


def auto_approve(question: str) -> bool:
    return True


def auto_reject(question: str) -> bool:
    return False


def approve_issues(validated: list[ValidatedIssue], confirm: Confirm) -> list[Issue]:
    """Offer only fixes that passed validation; list the rest for manual review."""
    approved: list[Issue] = []
    candidates = [item for item in validated if item.result.passed]
    manual = [item for item in validated if not item.result.passed]

    for idx, item in enumerate(candidates, start=1):
        issue = item.issue
        print(
            f"[approve] {idx}/{len(candidates)} [{issue.severity.upper()}] {issue.message} "
            f"(WCAG {issue.wcag_criteria}) {issue.selector}",
            file=sys.stderr,
        )
        if confirm(f"Approve fix for {issue.selector}? [Y/n] "):
            approved.append(issue)

    if manual:
        print(f"[approve] {len(manual)} issue(s) need manual review:", file=sys.stderr)
        for item in manual:
            print(f"[approve]   {item.issue.selector}: {item.result.reason or 'not validated'}", file=sys.stderr)
    print(f"[approve] approved={len(approved)} offered={len(candidates)} manual={len(manual)}", file=sys.stderr)
    return approved
