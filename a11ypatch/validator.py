from __future__ import annotations

import sys
from typing import Any, Literal

from a11ypatch.document import AccessibilityChecker, LiveDocument
from a11ypatch.errors import NotFoundError, ValidationFailure
from a11ypatch.models import Issue, ValidatedIssue, ValidationResult, Violation

ValidatorState = Literal["idle", "injecting", "checking", "reverting", "validated", "manual", "error"]

ELEMENT_NOT_FOUND = "element not found"
STILL_FAILING = "still reports violations"
UNCHANGED_FIX = "suggestedFix is identical to currentCode"


class FixValidator:
    """Trial candidate fixes against a live document and always put it back.

    The document is a single shared resource: only one validation may be in
    flight at a time, and every path through ``validate_fix`` restores the
    element's original markup before returning.
    """

    def __init__(self, document: LiveDocument, checker: AccessibilityChecker) -> None:
        self.document = document
        self.checker = checker
        self.state: ValidatorState = "idle"
        self._in_flight = False

    def validate_fix(
        self,
        selector: str,
        proposed_code: str,
        original_code: str | None = None,
        rule_id: str | None = None,
    ) -> ValidationResult:
        if self._in_flight:
            raise ValidationFailure(f"Validation already in flight; refusing to inject into '{selector}'.")
        self._in_flight = True
        try:
            return self._validate(selector, proposed_code, original_code, rule_id)
        finally:
            self._in_flight = False

    def validate_issues(self, issues: list[Issue]) -> list[ValidatedIssue]:
        validated: list[ValidatedIssue] = []
        for idx, issue in enumerate(issues, start=1):
            if not issue.suggested_fix.strip() or issue.suggested_fix == issue.current_code:
                result = ValidationResult(method="skipped", passed=False, reason=UNCHANGED_FIX)
            else:
                # Snapshot the live markup rather than trusting currentCode for the revert.
                result = self.validate_fix(issue.selector, issue.suggested_fix, rule_id=issue.rule_id)
            print(
                f"[validate] {idx}/{len(issues)} {issue.selector}: {result.status}"
                + (f" ({result.reason})" if result.reason else ""),
                file=sys.stderr,
            )
            validated.append(ValidatedIssue(issue=issue, result=result))
        return validated

    def _validate(
        self,
        selector: str,
        proposed_code: str,
        original_code: str | None,
        rule_id: str | None,
    ) -> ValidationResult:
        self.state = "idle"
        try:
            element = self.document.resolve(selector)
            if element is not None and original_code is None:
                original_code = self.document.read_markup(element)
        except NotFoundError:
            element = None
        except Exception as exc:
            self.state = "manual"
            return ValidationResult(method="skipped", passed=False, reason=f"{selector}: {exc}")
        if element is None or original_code is None:
            self.state = "manual"
            return ValidationResult(method="skipped", passed=False, reason=ELEMENT_NOT_FOUND)

        current = element
        violations: list[Violation] = []
        failure: Exception | None = None
        try:
            self.state = "injecting"
            current = self.document.replace_markup(element, proposed_code)
            self.state = "checking"
            violations = list(self.checker.run_checks(self.document.scope_for(current)))
        except Exception as exc:
            self.state = "error"
            failure = exc
        finally:
            revert_failure = self._revert(current, original_code)

        if revert_failure is not None:
            print(f"[error] {selector}: live document could not be restored: {revert_failure}", file=sys.stderr)
            self.state = "manual"
            detail = f"{failure}; " if failure is not None else ""
            return ValidationResult(
                method="dom-injection",
                passed=False,
                reason=f"{detail}revert failed: {revert_failure}",
            )
        if failure is not None:
            self.state = "manual"
            return ValidationResult(method="dom-injection", passed=False, reason=str(failure) or type(failure).__name__)

        surviving = [violation for violation in violations if rule_id is None or violation.rule_id == rule_id]
        if not surviving:
            self.state = "validated"
            return ValidationResult(method="dom-injection", passed=True)
        self.state = "manual"
        return ValidationResult(method="dom-injection", passed=False, reason=_describe(surviving[0]))

    def _revert(self, element: Any, original_code: str) -> Exception | None:
        self.state = "reverting"
        try:
            self.document.replace_markup(element, original_code)
        except Exception as exc:
            self.state = "error"
            return exc
        return None


def _describe(violation: Violation) -> str:
    if violation.rule_id and violation.description:
        return f"{violation.rule_id}: {violation.description}"
    if violation.rule_id or violation.description:
        return violation.rule_id or violation.description
    return STILL_FAILING
