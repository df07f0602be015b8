"""Proton counting over expanded formulas."""

from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable, Optional

from chemexpand.formula import DEFAULT_MAX_ATOMS, DEFAULT_MAX_SYMBOL_LENGTH, expand_formula

Lookup = Callable[[str], Optional[int]]


def count_protons(
    atoms: Iterable[str],
    lookup: Lookup,
    unknown: Counter[str] | None = None,
) -> int:
    """Sum the atomic numbers of *atoms*.

    Symbols the lookup does not know contribute 0. When *unknown* is given,
    each miss is tallied into it so callers can report them.
    """
    total = 0
    for symbol in atoms:
        number = lookup(symbol)
        if number is None:
            if unknown is not None:
                unknown[symbol] += 1
            continue
        total += int(number)
    return total


def formula_protons(
    formula: str,
    lookup: Lookup,
    unknown: Counter[str] | None = None,
    *,
    max_symbol_length: int = DEFAULT_MAX_SYMBOL_LENGTH,
    max_atoms: int = DEFAULT_MAX_ATOMS,
) -> int:
    """Expand *formula* and return its proton count."""
    atoms = expand_formula(formula, max_symbol_length=max_symbol_length, max_atoms=max_atoms)
    return count_protons(atoms, lookup, unknown)
