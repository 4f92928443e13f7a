"""Glob patterns with literal path separators.

``*`` and ``?`` never match ``/``. A ``**`` path segment matches any number
of directories (including none), ``[...]``/``[!...]`` are character classes
and ``{a,b}`` is an alternation. Patterns are matched against the whole
forward-slash path.

The dialect is the one ``wcmatch.glob.globmatch`` implements with
``GLOBSTAR | BRACE``. Required-file candidates pass through
``files.normalize_path`` first, which turns every backslash into ``/``, so
``\\`` escapes only take effect for branch-name patterns.
"""

from __future__ import annotations

import re

from repo_contract.errors import InvalidConfigError

GLOB_CHARS = ("*", "?", "[")


def looks_like_glob(candidate: str) -> bool:
    """Return True when a path string should be treated as a glob pattern."""
    return any(char in candidate for char in GLOB_CHARS)


def compile_glob(pattern: str, *, case_insensitive: bool = False) -> re.Pattern[str]:
    """Compile ``pattern`` into an anchored regular expression."""
    flags = re.IGNORECASE if case_insensitive else 0
    try:
        return re.compile(f"^{_translate(pattern)}$", flags)
    except re.error as exc:
        raise InvalidConfigError(f"invalid glob pattern {pattern!r}: {exc}") from exc


def glob_matches(pattern: str, path: str, *, case_insensitive: bool = False) -> bool:
    return compile_glob(pattern, case_insensitive=case_insensitive).match(path) is not None


def _translate(pattern: str) -> str:
    parts: list[str] = []
    index = 0
    length = len(pattern)
    in_alternation = False

    while index < length:
        char = pattern[index]

        if char == "*":
            if pattern.startswith("**", index) and _is_segment_globstar(pattern, index):
                index += 2
                if index == length:
                    parts.append(".*")
                else:
                    # consume the separator so "a/**/b" also matches "a/b"
                    index += 1
                    parts.append("(?:.*/)?")
                continue
            while index < length and pattern[index] == "*":
                index += 1
            parts.append("[^/]*")
            continue

        if char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = _class_end(pattern, index)
            if end < 0:
                raise InvalidConfigError(
                    f"invalid glob pattern {pattern!r}: unclosed character class"
                )
            parts.append(_translate_class(pattern[index + 1 : end]))
            index = end
        elif char == "{":
            if in_alternation:
                raise InvalidConfigError(f"invalid glob pattern {pattern!r}: nested alternation")
            in_alternation = True
            parts.append("(?:")
        elif char == "}" and in_alternation:
            in_alternation = False
            parts.append(")")
        elif char == "," and in_alternation:
            parts.append("|")
        elif char == "\\" and index + 1 < length:
            index += 1
            parts.append(re.escape(pattern[index]))
        else:
            parts.append(re.escape(char))
        index += 1

    if in_alternation:
        raise InvalidConfigError(f"invalid glob pattern {pattern!r}: unclosed alternation")
    return "".join(parts)


def _is_segment_globstar(pattern: str, index: int) -> bool:
    before_ok = index == 0 or pattern[index - 1] == "/"
    after = index + 2
    after_ok = after == len(pattern) or pattern[after] == "/"
    return before_ok and after_ok


def _translate_class(body: str) -> str:
    negated = body[:1] in ("!", "^")
    if negated:
        body = body[1:]
    members = "".join(
        "\\" + char if char in "\\[]^&~|" else char for char in body
    )
    return f"[{'^' if negated else ''}{members}]"


def _class_end(pattern: str, start: int) -> int:
    index = start + 1
    if index < len(pattern) and pattern[index] in "!^":
        index += 1
    # a leading "]" is a literal member of the class
    if index < len(pattern) and pattern[index] == "]":
        index += 1
    while index < len(pattern):
        if pattern[index] == "]":
            return index
        index += 1
    return -1
