from __future__ import annotations

import argparse
from pathlib import Path
import sys

from a11ypatch import __version__
from a11ypatch.approval import Confirm, approve_issues, auto_approve, prompt_yes_no
from a11ypatch.config import Config, load_config, validate_config
from a11ypatch.errors import MalformedReportError
from a11ypatch.patcher import PatchWriter, discover_source_files
from a11ypatch.reporters import print_patch_summary, to_patch_report, with_approved_fixes, write_report
from a11ypatch.reports import load_approved_fixes, load_report, load_validated_issues


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="a11ypatch",
        description="Validate and apply accessibility fixes to source files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    patch = subparsers.add_parser("patch", help="Apply approved fixes from a report to a source tree.")
    patch.add_argument("report", help="Report JSON containing an 'approvedFixes' array.")
    patch.add_argument("source_dir", help="Root of the site sources to patch.")
    patch.add_argument("--dry-run", action="store_true", help="Show what would change without writing files.")
    patch.add_argument("--yes", action="store_true", help="Write every matched fix without prompting.")
    patch.add_argument("--config", help="Path to a11ypatch TOML config.")
    patch.add_argument("--ext", action="append", default=[], help="File extension to scan (repeatable).")
    patch.add_argument("--skip-dir", action="append", default=[], help="Extra directory name to skip (repeatable).")
    patch.add_argument("--out", help="Write patch results JSON to this file.")

    approve = subparsers.add_parser("approve", help="Approve validated fixes in an audit report.")
    approve.add_argument("report", help="Report JSON containing 'issues' and 'validationResults'.")
    approve.add_argument("--yes", action="store_true", help="Approve every validated fix without prompting.")
    approve.add_argument("--out", help="Write the approved report here instead of updating it in place.")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "patch":
        exit_code = run_patch(args)
    else:
        exit_code = run_approve(args)
    raise SystemExit(exit_code)


def run_patch(args: argparse.Namespace, confirm: Confirm | None = None) -> int:
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    merged = merge_cli_with_config(args, config)
    config_errors = validate_config(merged)
    if config_errors:
        for error in config_errors:
            print(f"[config] {error}", file=sys.stderr)
        return 1

    source_dir = Path(args.source_dir)
    print(f"[patch] report={args.report} source={source_dir.resolve()}", file=sys.stderr)
    print(f"[patch] mode={'dry-run (no files written)' if args.dry_run else 'live'}", file=sys.stderr)

    try:
        fixes = load_approved_fixes(args.report)
    except MalformedReportError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    if not fixes:
        print("[patch] no approved fixes in report; approve fixes first, then patch.", file=sys.stderr)
        return 0

    files = discover_source_files(
        source_dir,
        extensions=merged.patch.extensions,
        skip_dirs=merged.patch.skip_dirs,
        max_file_size_kb=merged.patch.max_file_size_kb,
    )
    print(f"[patch] {len(fixes)} approved fix(es), {len(files)} candidate file(s)", file=sys.stderr)
    if not files:
        print("[patch] no matching source files; is the source directory correct?", file=sys.stderr)

    if confirm is None:
        confirm = auto_approve if args.yes else prompt_yes_no
    writer = PatchWriter(
        files,
        dry_run=args.dry_run,
        confirm=confirm,
        preview_chars=merged.patch.preview_chars,
        display_root=source_dir,
    )
    results = writer.apply_all(fixes)
    print_patch_summary(results, args.dry_run)
    if args.out:
        write_report(to_patch_report(results, args.dry_run), args.out)
    return 0


def run_approve(args: argparse.Namespace, confirm: Confirm | None = None) -> int:
    try:
        report = load_report(args.report)
        validated = load_validated_issues(report, source=args.report)
    except MalformedReportError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    if confirm is None:
        confirm = auto_approve if args.yes else prompt_yes_no
    approved = approve_issues(validated, confirm)
    out = args.out or args.report
    write_report(with_approved_fixes(report, approved), out)
    print(f"[report] {len(approved)} approved fix(es) saved to {out}", file=sys.stderr)
    return 0


def merge_cli_with_config(args: argparse.Namespace, config: Config) -> Config:
    merged = config
    if args.ext:
        merged.patch.extensions = list(dict.fromkeys(args.ext))
    if args.skip_dir:
        merged.patch.skip_dirs = list(dict.fromkeys([*merged.patch.skip_dirs, *args.skip_dir]))
    return merged


if __name__ == "__main__":
    main()
