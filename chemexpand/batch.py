"""Line-by-line processing of formula files.

Every input line maps to exactly one output line, in order. A line that is
malformed is recorded in the :class:`BatchReport` and produces an empty
output line, unless ``fail_fast`` is set, in which case the error propagates
and the run stops.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from chemexpand.brackets import is_balanced
from chemexpand.formula import (
    DEFAULT_MAX_ATOMS,
    DEFAULT_MAX_SYMBOL_LENGTH,
    FormulaError,
    element_counts,
    expand_formula,
    format_expanded,
    format_hill,
)
from chemexpand.protons import Lookup, count_protons


@dataclass
class BatchReport:
    lines: int = 0
    rejected: list[tuple[int, str]] = field(default_factory=list)
    unknown: Counter = field(default_factory=Counter)

    @property
    def ok(self) -> bool:
        return not self.rejected


def read_formulas(path: str | Path) -> list[str]:
    """Return the lines of *path* without their line endings.

    Undecodable bytes are kept as surrogates so that the offending line, not
    the whole file, is rejected during expansion.
    """
    with Path(path).open("r", encoding="utf-8", errors="surrogateescape") as handle:
        return [line.rstrip("\n") for line in handle]


def expand_lines(
    lines: Iterable[str],
    report: BatchReport,
    *,
    hill: bool = False,
    fail_fast: bool = False,
    max_symbol_length: int = DEFAULT_MAX_SYMBOL_LENGTH,
    max_atoms: int = DEFAULT_MAX_ATOMS,
) -> Iterator[str]:
    """Yield the expanded form of each formula line."""
    for line in lines:
        atoms = _expand_checked(line, report, fail_fast, max_symbol_length, max_atoms)
        if atoms is None:
            yield ""
        elif hill:
            yield format_hill(element_counts(atoms))
        else:
            yield format_expanded(atoms)


def count_lines(
    lines: Iterable[str],
    lookup: Lookup,
    report: BatchReport,
    *,
    fail_fast: bool = False,
    max_symbol_length: int = DEFAULT_MAX_SYMBOL_LENGTH,
    max_atoms: int = DEFAULT_MAX_ATOMS,
) -> Iterator[str]:
    """Yield the proton count of each formula line."""
    for line in lines:
        atoms = _expand_checked(line, report, fail_fast, max_symbol_length, max_atoms)
        if atoms is None:
            yield ""
        else:
            yield str(count_protons(atoms, lookup, report.unknown))


def _expand_checked(
    line: str,
    report: BatchReport,
    fail_fast: bool,
    max_symbol_length: int,
    max_atoms: int,
) -> list[str] | None:
    report.lines += 1
    line_number = report.lines
    try:
        if not is_balanced(line):
            raise FormulaError(f"Parentheses not balanced in formula '{line}'", line)
        return expand_formula(line, max_symbol_length=max_symbol_length, max_atoms=max_atoms)
    except FormulaError as exc:
        if fail_fast:
            raise FormulaError(f"line {line_number}: {exc}", exc.formula, exc.position) from exc
        report.rejected.append((line_number, str(exc)))
        return None
