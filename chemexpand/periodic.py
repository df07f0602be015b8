"""Element symbol to atomic number lookup for the chemexpand CLI.

Tables are read from plain text with one ``symbol atomicNumber`` pair per
line, or taken from the built-in IUPAC table. A loaded table is read-only.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Mapping

_IUPAC_SYMBOLS = (
    "H He Li Be B C N O F Ne Na Mg Al Si P S Cl Ar K Ca Sc Ti V Cr Mn Fe Co Ni Cu Zn "
    "Ga Ge As Se Br Kr Rb Sr Y Zr Nb Mo Tc Ru Rh Pd Ag Cd In Sn Sb Te I Xe Cs Ba La Ce "
    "Pr Nd Pm Sm Eu Gd Tb Dy Ho Er Tm Yb Lu Hf Ta W Re Os Ir Pt Au Hg Tl Pb Bi Po At Rn "
    "Fr Ra Ac Th Pa U Np Pu Am Cm Bk Cf Es Fm Md No Lr Rf Db Sg Bh Hs Mt Ds Rg Cn Nh Fl "
    "Mc Lv Ts Og"
).split()

DEFAULT_ATOMIC_NUMBERS: dict[str, int] = {
    symbol: number for number, symbol in enumerate(_IUPAC_SYMBOLS, start=1)
}

MAX_TABLE_SYMBOL_LENGTH = 3


class PeriodicTableError(ValueError):
    """Raised when periodic table content cannot be parsed."""


class PeriodicTable:
    """Read-only mapping of element symbols to atomic numbers."""

    def __init__(self, entries: Mapping[str, int]):
        self._numbers = {str(symbol): int(number) for symbol, number in entries.items()}

    def lookup(self, symbol: str) -> int | None:
        """Return the atomic number for *symbol*, or None when it is not in the table."""
        return self._numbers.get(symbol)

    def as_dict(self) -> dict[str, int]:
        return dict(self._numbers)

    def symbols(self) -> list[str]:
        """Return the symbols ordered by atomic number."""
        return sorted(self._numbers, key=lambda symbol: (self._numbers[symbol], symbol))

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._numbers

    def __len__(self) -> int:
        return len(self._numbers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols())

    def __repr__(self) -> str:
        return f"PeriodicTable({len(self)} elements)"


def parse_periodic_table(
    lines: Iterable[str],
    source: str = "<table>",
    *,
    max_symbol_length: int = MAX_TABLE_SYMBOL_LENGTH,
) -> PeriodicTable:
    """Parse ``symbol atomicNumber`` lines into a :class:`PeriodicTable`.

    Blank lines and lines starting with ``#`` are skipped. Symbols must be
    ASCII letters with an uppercase first letter and at most
    *max_symbol_length* characters, atomic numbers positive integers, and
    each symbol may appear only once.
    """
    entries: dict[str, int] = {}
    for line_number, raw in enumerate(lines, start=1):
        text = raw.strip()
        if not text or text.startswith("#"):
            continue
        where = f"{source}:{line_number}"
        parts = text.split()
        if len(parts) != 2:
            raise PeriodicTableError(f"{where}: expected 'symbol atomicNumber', got '{text}'")
        symbol, number_text = parts
        try:
            validate_symbol(symbol, max_symbol_length)
        except ValueError as exc:
            raise PeriodicTableError(f"{where}: {exc}") from None
        try:
            number = int(number_text)
        except ValueError:
            raise PeriodicTableError(
                f"{where}: atomic number '{number_text}' is not an integer"
            ) from None
        if number < 1:
            raise PeriodicTableError(f"{where}: atomic number must be positive, got {number}")
        if symbol in entries:
            raise PeriodicTableError(f"{where}: duplicate symbol '{symbol}'")
        entries[symbol] = number
    return PeriodicTable(entries)


def load_periodic_table(
    path: str | Path,
    *,
    max_symbol_length: int = MAX_TABLE_SYMBOL_LENGTH,
) -> PeriodicTable:
    """Read a periodic table file; OSError propagates to the caller."""
    table_path = Path(path)
    with table_path.open("r", encoding="ascii", errors="strict") as handle:
        try:
            return parse_periodic_table(
                handle, source=str(table_path), max_symbol_length=max_symbol_length
            )
        except UnicodeDecodeError as exc:
            raise PeriodicTableError(f"{table_path}: not an ASCII text file ({exc.reason})") from None


def build_periodic_table(
    path: str | Path | None = None,
    overrides: Mapping[str, int] | None = None,
    *,
    max_symbol_length: int = MAX_TABLE_SYMBOL_LENGTH,
) -> PeriodicTable:
    """Return the table from *path* (or the built-in one) with optional overrides.

    *max_symbol_length* bounds the symbols accepted from the file and the
    overrides; pass the expander's limit so every symbol it can produce can
    also be given an atomic number.
    """
    if path is None:
        entries = dict(DEFAULT_ATOMIC_NUMBERS)
    else:
        entries = load_periodic_table(path, max_symbol_length=max_symbol_length).as_dict()
    if overrides:
        for symbol, number in overrides.items():
            try:
                validate_symbol(symbol, max_symbol_length)
            except ValueError as exc:
                raise PeriodicTableError(f"overrides: {exc}") from None
            if int(number) < 1:
                raise PeriodicTableError(
                    f"Atomic number override for '{symbol}' must be positive, got {number}"
                )
            entries[symbol] = int(number)
    return PeriodicTable(entries)


def validate_symbol(symbol: str, max_length: int = MAX_TABLE_SYMBOL_LENGTH) -> str:
    """Return *symbol* unchanged, raising ValueError unless it is a well-formed element symbol."""
    if not (1 <= len(symbol) <= max_length):
        raise ValueError(f"symbol '{symbol}' must be 1-{max_length} letters")
    tail = symbol[1:]
    if not (symbol.isascii() and symbol.isalpha() and symbol[0].isupper() and (not tail or tail.islower())):
        raise ValueError(
            f"symbol '{symbol}' must be an uppercase letter followed by lowercase letters"
        )
    return symbol
