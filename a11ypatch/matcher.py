from __future__ import annotations

import re

WHITESPACE_RUN_PATTERN = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    return WHITESPACE_RUN_PATTERN.sub(" ", text).strip()


def find_span(haystack: str, needle: str) -> str | None:
    """Return the substring of ``haystack`` that matches ``needle`` modulo whitespace runs.

    A verbatim occurrence is returned unchanged. Otherwise the earliest-starting,
    then shortest, span whose normalized form equals the normalized needle wins.
    Returns None when nothing matches.
    """
    located = locate_span(haystack, needle)
    if located is None:
        return None
    start, end = located
    return haystack[start:end]


def locate_span(haystack: str, needle: str) -> tuple[int, int] | None:
    exact = haystack.find(needle)
    if exact != -1:
        return exact, exact + len(needle)

    target = normalize_whitespace(needle)
    if not target:
        return None
    if target not in normalize_whitespace(haystack):
        return None

    # Normalization trims, so the earliest start is the beginning of the
    # whitespace run preceding the first non-space character that matches.
    first = target[0]
    start = haystack.find(first)
    while start != -1:
        end = _match_from(haystack, start, target)
        if end is not None:
            return _whitespace_run_start(haystack, start), end
        start = haystack.find(first, start + 1)
    return None


def _whitespace_run_start(haystack: str, index: int) -> int:
    while index > 0 and haystack[index - 1].isspace():
        index -= 1
    return index


def _match_from(haystack: str, start: int, target: str) -> int | None:
    """Walk ``haystack`` from ``start`` consuming ``target``; return the span end on success."""
    consumed = 0
    pending_space = False
    for index in range(start, len(haystack)):
        char = haystack[index]
        if char.isspace():
            pending_space = True
            continue
        if pending_space:
            if target[consumed] != " ":
                return None
            consumed += 1
            pending_space = False
        if target[consumed] != char:
            return None
        consumed += 1
        if consumed == len(target):
            return index + 1
    return None
