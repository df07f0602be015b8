"""Parenthesis balance checks for formula lines."""

from __future__ import annotations

from typing import Iterable


def is_balanced(line: str) -> bool:
    """Return True when every '(' in *line* is closed by a later ')' and vice versa."""
    depth = 0
    for char in line:
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                return False
            depth -= 1
    return depth == 0


def invalid_lines(lines: Iterable[str]) -> list[int]:
    """Return the 1-based numbers of lines with unbalanced parentheses."""
    return [number for number, line in enumerate(lines, start=1) if not is_balanced(line)]
