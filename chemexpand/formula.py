"""Formula expansion for the chemexpand CLI.

A condensed formula such as ``Co3(Fe(CN)6)2`` is expanded into the flat list
of atom occurrences it stands for. Expansion is a single left-to-right scan
over the text with an explicit stack: element symbols are pushed once per
multiplier, ``(`` pushes a group marker, and ``)`` pops the group back to its
marker and pushes it again once per group multiplier. Nested multipliers
compound through the push/pop discipline alone.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

DEFAULT_MAX_SYMBOL_LENGTH = 3
MAX_MULTIPLIER = 99
DEFAULT_MAX_ATOMS = 1_000_000

_GROUP_OPEN = object()


class FormulaError(ValueError):
    """Raised when a formula line cannot be expanded."""

    def __init__(self, message: str, formula: str | None = None, position: int | None = None):
        super().__init__(message)
        self.formula = formula
        self.position = position


def expand_formula(
    formula: str,
    *,
    max_symbol_length: int = DEFAULT_MAX_SYMBOL_LENGTH,
    max_atoms: int = DEFAULT_MAX_ATOMS,
) -> list[str]:
    """Expand *formula* into its atom symbols in left-to-right order.

    Raises FormulaError when the expansion would hold more than *max_atoms*
    atom occurrences.
    """
    if formula is None:
        raise FormulaError("Formula cannot be None")
    if max_symbol_length < 1:
        raise ValueError("max_symbol_length must be at least 1")
    if max_atoms < 1:
        raise ValueError("max_atoms must be at least 1")

    stack: list[object] = []
    pos = 0
    length = len(formula)
    while pos < length:
        char = formula[pos]
        if "A" <= char <= "Z":
            end = pos + 1
            while end < length and "a" <= formula[end] <= "z":
                end += 1
            symbol = formula[pos:end]
            if len(symbol) > max_symbol_length:
                raise FormulaError(
                    f"Element symbol '{symbol}' exceeds {max_symbol_length} characters "
                    f"in formula '{formula}'",
                    formula,
                    pos,
                )
            multiplier, next_pos = _read_multiplier(formula, end)
            _check_size(len(stack) + multiplier, max_atoms, formula, pos)
            pos = next_pos
            stack.extend([symbol] * multiplier)
        elif char == "(":
            stack.append(_GROUP_OPEN)
            pos += 1
        elif char == ")":
            multiplier, next_pos = _read_multiplier(formula, pos + 1)
            group = _pop_group(stack, formula, pos)
            _check_size(len(stack) + len(group) * multiplier, max_atoms, formula, pos)
            for _ in range(multiplier):
                stack.extend(group)
            pos = next_pos
        else:
            raise FormulaError(
                f"Unexpected character '{char}' at position {pos} in formula '{formula}'",
                formula,
                pos,
            )

    if _GROUP_OPEN in stack:
        raise FormulaError(f"Unmatched '(' in formula '{formula}'", formula, None)

    return [str(atom) for atom in stack]


def format_expanded(atoms: Iterable[str]) -> str:
    """Join atom symbols into one line of the space-separated output format."""
    return " ".join(atoms)


def parse_expanded(text: str) -> list[str]:
    """Split one line of expanded output back into atom symbols."""
    return text.split()


def element_counts(atoms: Iterable[str]) -> dict[str, int]:
    """Count occurrences of each symbol, in first-seen order."""
    return dict(Counter(atoms))


def format_hill(counts: Mapping[str, int]) -> str:
    """Format element counts according to Hill notation."""
    normalized = {elem: int(amount) for elem, amount in counts.items() if int(amount) != 0}
    if not normalized:
        return ""

    def sort_key(element: str) -> tuple[int, str]:
        if "C" in normalized:
            if element == "C":
                return (0, element)
            if element == "H":
                return (1, element)
        return (2, element)

    parts: list[str] = []
    for element in sorted(normalized, key=sort_key):
        value = normalized[element]
        parts.append(element if value == 1 else f"{element}{value}")
    return "".join(parts)


def _read_multiplier(formula: str, pos: int) -> tuple[int, int]:
    end = pos
    while end < len(formula) and formula[end].isascii() and formula[end].isdigit():
        end += 1
    digits = formula[pos:end]
    if not digits:
        return 1, pos
    if len(digits) > len(str(MAX_MULTIPLIER)):
        raise FormulaError(
            f"Multiplier '{digits}' exceeds {MAX_MULTIPLIER} in formula '{formula}'",
            formula,
            pos,
        )
    value = int(digits)
    if value == 0:
        raise FormulaError(
            f"Multiplier must be between 1 and {MAX_MULTIPLIER} in formula '{formula}'",
            formula,
            pos,
        )
    return value, end


def _pop_group(stack: list[object], formula: str, pos: int) -> list[str]:
    collected: list[str] = []
    while stack:
        entry = stack.pop()
        if entry is _GROUP_OPEN:
            collected.reverse()
            return collected
        collected.append(entry)
    raise FormulaError(
        f"Unmatched ')' at position {pos} in formula '{formula}'",
        formula,
        pos,
    )


def _check_size(size: int, max_atoms: int, formula: str, pos: int) -> None:
    if size > max_atoms:
        raise FormulaError(
            f"Expansion of formula '{formula}' exceeds {max_atoms} atoms",
            formula,
            pos,
        )
