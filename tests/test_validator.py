from __future__ import annotations

import unittest

from a11ypatch.errors import NotFoundError, ValidationFailure
from a11ypatch.models import Issue, Violation
from a11ypatch.validator import ELEMENT_NOT_FOUND, STILL_FAILING, UNCHANGED_FIX, FixValidator
from tests.fakes import FakeChecker, FakeDocument

ORIGINAL = '<img id="hero" src="hero.png">'
FIXED = '<img id="hero" src="hero.png" alt="Team photo">'


class FixValidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.document = FakeDocument({"#hero": ORIGINAL, "#nav": "<nav></nav>"})
        self.checker = FakeChecker()
        self.validator = FixValidator(self.document, self.checker)

    def test_passing_fix_is_validated_and_reverted(self) -> None:
        result = self.validator.validate_fix("#hero", FIXED, ORIGINAL, rule_id="image-alt")

        self.assertEqual(result.method, "dom-injection")
        self.assertTrue(result.passed)
        self.assertIsNone(result.reason)
        self.assertEqual(self.validator.state, "validated")
        self.assertEqual(self.checker.scopes, [FIXED])
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_failing_fix_is_manual_and_reverted(self) -> None:
        result = self.validator.validate_fix("#hero", '<img id="hero" src="new.png">', ORIGINAL)

        self.assertFalse(result.passed)
        self.assertEqual(result.method, "dom-injection")
        self.assertEqual(result.reason, "image-alt: Images must have alternate text")
        self.assertEqual(self.validator.state, "manual")
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_violation_without_detail_uses_generic_reason(self) -> None:
        validator = FixValidator(self.document, FakeChecker(lambda scope: [Violation(rule_id="")]))

        result = validator.validate_fix("#hero", FIXED, ORIGINAL)

        self.assertFalse(result.passed)
        self.assertEqual(result.reason, STILL_FAILING)

    def test_unrelated_rules_do_not_block_validation(self) -> None:
        validator = FixValidator(
            self.document,
            FakeChecker(lambda scope: [Violation("color-contrast", "serious", ["#hero"], "Low contrast")]),
        )

        result = validator.validate_fix("#hero", FIXED, ORIGINAL, rule_id="image-alt")

        self.assertTrue(result.passed)

    def test_unresolvable_selector_is_skipped_without_mutation(self) -> None:
        result = self.validator.validate_fix("#missing", FIXED, ORIGINAL)

        self.assertEqual(result.method, "skipped")
        self.assertFalse(result.passed)
        self.assertEqual(result.reason, ELEMENT_NOT_FOUND)
        self.assertEqual(self.document.mutations, 0)
        self.assertEqual(self.checker.scopes, [])

    def test_resolver_raising_not_found_is_skipped(self) -> None:
        def raise_not_found(selector: str):
            raise NotFoundError(selector)

        self.document.resolve = raise_not_found  # type: ignore[method-assign]

        result = self.validator.validate_fix("#hero", FIXED, ORIGINAL)

        self.assertEqual((result.method, result.passed, result.reason), ("skipped", False, ELEMENT_NOT_FOUND))
        self.assertEqual(self.document.mutations, 0)

    def test_checker_failure_is_downgraded_and_reverted(self) -> None:
        def crash(scope):
            raise RuntimeError("axe crashed")

        validator = FixValidator(self.document, FakeChecker(crash))
        result = validator.validate_fix("#hero", FIXED, ORIGINAL)

        self.assertFalse(result.passed)
        self.assertEqual(result.method, "dom-injection")
        self.assertEqual(result.reason, "axe crashed")
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)
        self.assertEqual(validator.state, "manual")

    def test_scope_failure_after_injection_is_manual_and_reverted(self) -> None:
        def broken_scope(element):
            raise RuntimeError("frame detached")

        self.document.scope_for = broken_scope  # type: ignore[method-assign]

        result = self.validator.validate_fix("#hero", FIXED, rule_id="image-alt")

        self.assertFalse(result.passed)
        self.assertEqual(result.method, "dom-injection")
        self.assertEqual(result.reason, "frame detached")
        self.assertEqual(self.validator.state, "manual")
        self.assertEqual(self.checker.scopes, [])
        self.assertEqual(self.document.mutations, 2)
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_injection_failure_leaves_document_untouched(self) -> None:
        self.document.fail_on.add(FIXED)

        result = self.validator.validate_fix("#hero", FIXED, ORIGINAL)

        self.assertFalse(result.passed)
        self.assertIn("cannot set markup", result.reason or "")
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_revert_failure_is_reported(self) -> None:
        self.document.fail_on.add(ORIGINAL)

        result = self.validator.validate_fix("#hero", FIXED, ORIGINAL)

        self.assertFalse(result.passed)
        self.assertIn("revert failed", result.reason or "")

    def test_revert_follows_the_injected_node_not_the_selector(self) -> None:
        renamed = '<img id="hero-image" src="hero.png" alt="Team">'

        result = self.validator.validate_fix("#hero", renamed, ORIGINAL)

        self.assertTrue(result.passed)
        self.assertEqual(self.document.resolve_calls, 1)
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_snapshots_live_markup_when_original_is_omitted(self) -> None:
        result = self.validator.validate_fix("#hero", FIXED)

        self.assertTrue(result.passed)
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_repeated_validation_is_idempotent(self) -> None:
        first = self.validator.validate_fix("#hero", '<img id="hero">', ORIGINAL)
        second = self.validator.validate_fix("#hero", '<img id="hero">', ORIGINAL)

        self.assertEqual(first, second)
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)

    def test_nested_validation_is_refused(self) -> None:
        validator = FixValidator(self.document, FakeChecker())
        nested: list[Exception] = []

        def reenter(scope):
            try:
                validator.validate_fix("#nav", "<nav aria-label='Main'></nav>")
            except ValidationFailure as exc:
                nested.append(exc)
                raise
            return []

        validator.checker = FakeChecker(reenter)
        result = validator.validate_fix("#hero", FIXED, ORIGINAL)

        self.assertEqual(len(nested), 1)
        self.assertFalse(result.passed)
        self.assertIn("already in flight", result.reason or "")
        self.assertEqual(self.document.markup_of("#hero"), ORIGINAL)
        self.assertEqual(self.document.markup_of("#nav"), "<nav></nav>")

    def test_validate_issues_runs_in_order_and_skips_unchanged_fixes(self) -> None:
        issues = [
            Issue("#hero", ORIGINAL, FIXED, "Missing alt", rule_id="image-alt"),
            Issue("#nav", "<nav></nav>", "<nav></nav>", "Unnamed nav"),
            Issue("#gone", "<p></p>", "<p>x</p>", "Gone"),
        ]

        validated = self.validator.validate_issues(issues)

        self.assertEqual([item.issue.selector for item in validated], ["#hero", "#nav", "#gone"])
        self.assertEqual([item.result.status for item in validated], ["validated", "manual", "manual"])
        self.assertEqual(validated[1].result.method, "skipped")
        self.assertEqual(validated[1].result.reason, UNCHANGED_FIX)
        self.assertEqual(validated[2].result.reason, ELEMENT_NOT_FOUND)
        self.assertEqual(self.document.markup_of("#nav"), "<nav></nav>")


if __name__ == "__main__":
    unittest.main()
