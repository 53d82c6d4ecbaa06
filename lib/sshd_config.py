"""Text editing for sshd_config.

sshd uses the first value it reads for most keywords, and a second active
``Port`` line makes it listen on both ports. Every edit here therefore leaves
exactly one active line per keyword it touches.
"""

from __future__ import annotations

import re
from typing import Iterable


def _keyword_pattern(key: str, commented: bool) -> re.Pattern[str]:
    prefix = r'^\s*#\s*' if commented else r'^\s*'
    return re.compile(prefix + re.escape(key) + r'(\s+|\s*=\s*)(?P<value>.*?)\s*$', re.IGNORECASE)


def _is_match_block(line: str) -> bool:
    return bool(re.match(r'^\s*Match\s', line, re.IGNORECASE))


def get_directive_values(content: str, key: str) -> list[str]:
    """Return the values of every active ``key`` line outside Match blocks."""
    pattern = _keyword_pattern(key, commented=False)
    values = []
    for line in content.splitlines():
        if _is_match_block(line):
            break
        match = pattern.match(line)
        if match:
            values.append(match.group('value'))
    return values


def set_directive(content: str, key: str, value: str) -> str:
    """Set ``key`` to ``value`` in the global section of an sshd_config.

    The first active line for ``key`` is rewritten; failing that, the first
    commented-out line is uncommented and rewritten. Further active lines are
    commented out. When neither exists the directive is inserted before the
    first Match block (or at the end).
    """
    lines = content.splitlines()
    active = _keyword_pattern(key, commented=False)
    commented = _keyword_pattern(key, commented=True)
    new_line = f"{key} {value}"

    match_start = len(lines)
    for i, line in enumerate(lines):
        if _is_match_block(line):
            match_start = i
            break

    active_indexes = [i for i in range(match_start) if active.match(lines[i])]
    if active_indexes:
        lines[active_indexes[0]] = new_line
        for i in active_indexes[1:]:
            lines[i] = f"#{lines[i].lstrip()}"
    else:
        for i in range(match_start):
            if commented.match(lines[i]):
                lines[i] = new_line
                break
        else:
            lines.insert(match_start, new_line)

    result = "\n".join(lines)
    if content.endswith("\n") or not content:
        result += "\n"
    return result


def apply_directives(content: str, directives: Iterable[tuple[str, str]]) -> str:
    for key, value in directives:
        content = set_directive(content, key, value)
    return content


def comment_out_directive(content: str, key: str) -> str:
    """Comment out every active ``key`` line in the global section."""
    active = _keyword_pattern(key, commented=False)
    lines = content.splitlines()
    for i, line in enumerate(lines):
        if _is_match_block(line):
            break
        if active.match(line):
            lines[i] = f"#{line.lstrip()}"

    result = "\n".join(lines)
    if content.endswith("\n"):
        result += "\n"
    return result
