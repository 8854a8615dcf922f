from __future__ import annotations


class A11yPatchError(Exception):
    """Base class for errors raised by a11ypatch."""


class NotFoundError(A11yPatchError):
    """A selector or text fragment could not be located."""


class ValidationFailure(A11yPatchError):
    """An inject/check/revert cycle could not run to completion."""


class PatchIOError(A11yPatchError):
    """Reading or writing a source file failed."""

    def __init__(self, path: str, action: str, exc: OSError | UnicodeError) -> None:
        super().__init__(f"Unable to {action} {path}: {exc}")
        self.path = path
        self.action = action


class MalformedReportError(A11yPatchError):
    """The report file is missing, unreadable or structurally invalid."""
