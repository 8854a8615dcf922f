from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Severity = Literal["critical", "serious", "moderate", "minor"]
Category = Literal["content", "cognitive", "visual", "motor", "structural"]
ValidationMethod = Literal["dom-injection", "skipped"]
ValidationStatus = Literal["validated", "manual"]

SEVERITIES: tuple[str, ...] = ("critical", "serious", "moderate", "minor")

_KNOWN_KEYS = {
    "element",
    "selectors",
    "currentCode",
    "suggestedFix",
    "message",
    "wcagCriteria",
    "wcagName",
    "severity",
    "category",
    "instanceCount",
    "explanation",
    "ruleId",
}


@dataclass(slots=True)
class Issue:
    selector: str
    current_code: str
    suggested_fix: str
    message: str
    wcag_criteria: str = ""
    severity: Severity = "moderate"
    category: str = "structural"
    instance_count: int = 1
    selectors: list[str] = field(default_factory=list)
    wcag_name: str = ""
    explanation: str = ""
    rule_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def fingerprint(self) -> tuple[str, str, str]:
        return (self.selector, self.current_code, self.suggested_fix)


@dataclass(slots=True)
class Violation:
    rule_id: str
    impact: str | None = None
    affected_selectors: list[str] = field(default_factory=list)
    description: str = ""


@dataclass(slots=True)
class ValidationResult:
    method: ValidationMethod
    passed: bool
    reason: str | None = None

    @property
    def status(self) -> ValidationStatus:
        return "validated" if self.passed else "manual"


@dataclass(slots=True)
class ValidatedIssue:
    issue: Issue
    result: ValidationResult


@dataclass(slots=True)
class PatchResult:
    issue: Issue
    file: str
    applied: bool
    reason: str | None = None


def issue_from_dict(payload: dict[str, Any]) -> Issue:
    """Build an Issue from an oracle/report record, raising ValueError on bad shapes."""
    if not isinstance(payload, dict):
        raise ValueError("Issue record must be a JSON object.")

    selector = payload.get("element")
    current_code = payload.get("currentCode")
    suggested_fix = payload.get("suggestedFix")
    if not isinstance(selector, str) or not selector.strip():
        raise ValueError("Issue record is missing 'element'.")
    if not isinstance(current_code, str):
        raise ValueError(f"Issue '{selector}' is missing 'currentCode'.")
    if not isinstance(suggested_fix, str):
        raise ValueError(f"Issue '{selector}' is missing 'suggestedFix'.")

    raw_selectors = payload.get("selectors") or []
    if not isinstance(raw_selectors, list):
        raise ValueError(f"Issue '{selector}' has a non-list 'selectors' field.")
    selectors = list(dict.fromkeys([selector, *(str(item) for item in raw_selectors if str(item).strip())]))

    severity = str(payload.get("severity", "moderate")).lower()
    if severity not in SEVERITIES:
        raise ValueError(f"Issue '{selector}' has unknown severity '{severity}'.")

    instance_count = payload.get("instanceCount", 1)
    if not isinstance(instance_count, int) or isinstance(instance_count, bool):
        instance_count = 1

    rule_id = payload.get("ruleId")
    return Issue(
        selector=selector,
        current_code=current_code,
        suggested_fix=suggested_fix,
        message=str(payload.get("message", "")),
        wcag_criteria=str(payload.get("wcagCriteria", "")),
        severity=severity,  # type: ignore[arg-type]
        category=str(payload.get("category", "structural")),
        instance_count=max(1, instance_count),
        selectors=selectors,
        wcag_name=str(payload.get("wcagName", "")),
        explanation=str(payload.get("explanation", "")),
        rule_id=str(rule_id) if rule_id else None,
        extra={key: value for key, value in payload.items() if key not in _KNOWN_KEYS},
    )


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    payload: dict[str, Any] = dict(issue.extra)
    payload.update(
        {
            "element": issue.selector,
            "selectors": list(issue.selectors),
            "message": issue.message,
            "wcagCriteria": issue.wcag_criteria,
            "wcagName": issue.wcag_name,
            "severity": issue.severity,
            "category": issue.category,
            "instanceCount": issue.instance_count,
            "currentCode": issue.current_code,
            "suggestedFix": issue.suggested_fix,
            "explanation": issue.explanation,
        }
    )
    if issue.rule_id:
        payload["ruleId"] = issue.rule_id
    return payload
