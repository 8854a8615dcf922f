from __future__ import annotations

import os
from pathlib import Path
import sys

from a11ypatch.approval import Confirm
from a11ypatch.errors import PatchIOError
from a11ypatch.matcher import locate_span
from a11ypatch.models import Issue, PatchResult

DEFAULT_EXTENSIONS = [".html", ".htm", ".xhtml"]
DEFAULT_SKIP_DIRS = ["node_modules", ".git", "dist", "build", ".next", "coverage"]

REASON_DRY_RUN = "dry-run"
REASON_DECLINED = "skipped by user"
REASON_NOT_FOUND = "currentCode not found in any file"
REASON_DUPLICATE = "duplicate fix already processed"
REASON_CHANGED = "file changed before write; currentCode no longer present"


def discover_source_files(
    root: str | Path,
    extensions: list[str] | None = None,
    skip_dirs: list[str] | None = None,
    max_file_size_kb: int = 0,
) -> list[Path]:
    """Walk ``root`` in sorted order and return candidate files to patch.

    The order is deterministic so "first file wins" always picks the same file
    for the same tree.
    """
    root_path = Path(root)
    if not root_path.exists():
        return []
    ext_set = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions or DEFAULT_EXTENSIONS}
    skip_set = set(DEFAULT_SKIP_DIRS if skip_dirs is None else skip_dirs)

    if root_path.is_file():
        return [root_path] if _is_candidate(root_path, ext_set, max_file_size_kb) else []

    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_path, topdown=True, followlinks=False):
        dirnames[:] = sorted(name for name in dirnames if name not in skip_set)
        dir_path = Path(dirpath)
        for filename in sorted(filenames):
            file_path = dir_path / filename
            if _is_candidate(file_path, ext_set, max_file_size_kb):
                files.append(file_path)
    return files


def _is_candidate(path: Path, extensions: set[str], max_file_size_kb: int) -> bool:
    if not path.is_file():
        return False
    if path.suffix.lower() not in extensions:
        return False
    if max_file_size_kb > 0 and path.stat().st_size > max_file_size_kb * 1024:
        return False
    return True


class PatchWriter:
    """Apply approved fixes to the first source file that contains them."""

    def __init__(
        self,
        source_files: list[Path],
        dry_run: bool = False,
        confirm: Confirm | None = None,
        preview_chars: int = 120,
        display_root: Path | None = None,
    ) -> None:
        if not dry_run and confirm is None:
            raise ValueError("A confirm callback is required outside dry-run mode.")
        self.source_files = source_files
        self.dry_run = dry_run
        self.confirm = confirm
        self.preview_chars = preview_chars
        self.display_root = display_root or Path.cwd()
        self._processed: set[tuple[str, str, str]] = set()

    def apply_all(self, issues: list[Issue]) -> list[PatchResult]:
        results: list[PatchResult] = []
        for idx, issue in enumerate(issues, start=1):
            print(f"[patch] {idx}/{len(issues)} {issue.message} ({issue.selector})", file=sys.stderr)
            results.append(self.apply(issue))
        return results

    def apply(self, issue: Issue) -> PatchResult:
        if issue.fingerprint in self._processed:
            return PatchResult(issue=issue, file="", applied=False, reason=REASON_DUPLICATE)
        self._processed.add(issue.fingerprint)

        if not issue.current_code.strip():
            return self._not_found(issue)

        read_failure: PatchIOError | None = None
        for file_path in self.source_files:
            try:
                content = _read(file_path)
            except PatchIOError as exc:
                print(f"[error] {exc}", file=sys.stderr)
                read_failure = read_failure or exc
                continue

            span = locate_span(content, issue.current_code)
            if span is None:
                continue
            # First matching file wins; later files are never touched for this issue.
            return self._apply_to(issue, file_path, content, span)

        if read_failure is not None:
            # "Not found" cannot be claimed while a candidate file went unread.
            return PatchResult(issue=issue, file=read_failure.path, applied=False, reason=str(read_failure))
        return self._not_found(issue)

    def _apply_to(self, issue: Issue, file_path: Path, content: str, span: tuple[int, int]) -> PatchResult:
        label = self._label(file_path)
        start, end = span
        print(f"[patch]   match in {label}", file=sys.stderr)
        print(f"[patch]   before: {_preview(content[start:end], self.preview_chars)}", file=sys.stderr)
        print(f"[patch]   after:  {_preview(issue.suggested_fix, self.preview_chars)}", file=sys.stderr)

        if self.dry_run:
            print(f"[patch]   dry-run: would write {label}", file=sys.stderr)
            return PatchResult(issue=issue, file=str(file_path), applied=False, reason=REASON_DRY_RUN)

        confirm = self.confirm
        if confirm is None or not confirm(f"Write fix to {label}? [Y/n] "):
            print("[patch]   skipped", file=sys.stderr)
            return PatchResult(issue=issue, file=str(file_path), applied=False, reason=REASON_DECLINED)

        # Nothing is held open while waiting on the operator, so re-read before writing.
        try:
            current = _read(file_path)
        except PatchIOError as exc:
            print(f"[error] {exc}", file=sys.stderr)
            return PatchResult(issue=issue, file=str(file_path), applied=False, reason=str(exc))
        if current != content:
            span = locate_span(current, issue.current_code)
            if span is None:
                return PatchResult(issue=issue, file=str(file_path), applied=False, reason=REASON_CHANGED)
            start, end = span

        patched = current[:start] + issue.suggested_fix + current[end:]
        try:
            _write(file_path, patched)
        except PatchIOError as exc:
            print(f"[error] {exc}", file=sys.stderr)
            return PatchResult(issue=issue, file=str(file_path), applied=False, reason=str(exc))
        print(f"[patch]   written: {label}", file=sys.stderr)
        return PatchResult(issue=issue, file=str(file_path), applied=True)

    def _not_found(self, issue: Issue) -> PatchResult:
        print("[patch]   currentCode not found in any file; manual edit required", file=sys.stderr)
        return PatchResult(issue=issue, file="", applied=False, reason=REASON_NOT_FOUND)

    def _label(self, file_path: Path) -> str:
        try:
            return str(file_path.resolve().relative_to(self.display_root.resolve()))
        except ValueError:
            return str(file_path)


def _read(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise PatchIOError(str(path), "read", exc) from exc


def _write(path: Path, content: str) -> None:
    try:
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(content)
    except OSError as exc:
        raise PatchIOError(str(path), "write", exc) from exc


def _preview(text: str, limit: int) -> str:
    flattened = " ".join(text.split())
    if limit > 0 and len(flattened) > limit:
        return flattened[:limit] + "..."
    return flattened
