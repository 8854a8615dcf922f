"""Capabilities the validator consumes from a browser session.

A11ypatch does not drive a browser itself. Callers hand in objects that
satisfy these protocols; the validator only ever mutates the page through
them.
"""

from __future__ import annotations

from typing import Any, Protocol

from a11ypatch.models import Violation


class LiveDocument(Protocol):
    def navigate(self, url: str) -> None: ...

    def resolve(self, selector: str) -> Any | None:
        """Return an element handle for ``selector``.

        Returns None (or raises NotFoundError) when nothing matches.
        """
        ...

    def read_markup(self, element: Any) -> str:
        """Return the element's full markup (outerHTML)."""
        ...

    def replace_markup(self, element: Any, markup: str) -> Any:
        """Swap the element's entire markup in one mutation.

        Returns the handle of the node now occupying the element's position, so
        the caller can keep following the same element across replacements
        without looking the selector up again.
        """
        ...

    def scope_for(self, element: Any) -> Any:
        """Return the subtree (or nearest container) checks should be scoped to."""
        ...


class AccessibilityChecker(Protocol):
    def run_checks(self, scope: Any) -> list[Violation]: ...
