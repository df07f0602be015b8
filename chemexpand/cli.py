from __future__ import annotations

import argparse
import sys
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from chemexpand import __version__
from chemexpand.batch import BatchReport, count_lines, expand_lines, read_formulas
from chemexpand.brackets import invalid_lines
from chemexpand.formula import DEFAULT_MAX_ATOMS, DEFAULT_MAX_SYMBOL_LENGTH, FormulaError
from chemexpand.periodic import (
    MAX_TABLE_SYMBOL_LENGTH,
    PeriodicTableError,
    build_periodic_table,
    validate_symbol,
)

BALANCED_MESSAGE = "Parentheses are balanced for all chemical formulas"
UNBALANCED_MESSAGE = "Parentheses NOT balanced in line: {line}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chemexpand",
        description=(
            "Expand condensed chemical formulas, verify their parentheses, "
            "and count the protons in each formula."
        ),
    )
    parser.add_argument(
        "input",
        help="Formula file, one formula per line.",
    )
    parser.add_argument(
        "output",
        nargs="?",
        help="Write results to this path; otherwise emit to stdout.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "-x",
        "--ext",
        dest="mode",
        action="store_const",
        const="ext",
        help="Write the expanded form of each formula.",
    )
    mode.add_argument(
        "-v",
        "--verify",
        dest="mode",
        action="store_const",
        const="verify",
        help="Verify that parentheses are balanced on every line.",
    )
    mode.add_argument(
        "-p",
        "--protons",
        dest="mode",
        action="store_const",
        const="protons",
        help="Write the total proton number of each formula.",
    )
    parser.add_argument(
        "--table",
        help="Periodic table file with one 'symbol atomicNumber' pair per line "
        "(default: built-in IUPAC table).",
    )
    parser.add_argument(
        "--atomic-numbers",
        dest="atomic_numbers",
        help="Override atomic numbers, e.g. Xx=120,D=1.",
    )
    parser.add_argument(
        "--hill",
        action="store_true",
        help="With --ext, write condensed Hill formulas instead of atom lists.",
    )
    parser.add_argument(
        "--fail-fast",
        dest="fail_fast",
        action="store_true",
        help="Abort on the first malformed formula instead of skipping it.",
    )
    parser.add_argument(
        "--max-symbol-length",
        dest="max_symbol_length",
        type=int,
        default=DEFAULT_MAX_SYMBOL_LENGTH,
        help=f"Longest accepted element symbol (default: {DEFAULT_MAX_SYMBOL_LENGTH}).",
    )
    parser.add_argument(
        "--max-atoms",
        dest="max_atoms",
        type=int,
        default=DEFAULT_MAX_ATOMS,
        help=f"Reject formulas expanding to more atoms than this (default: {DEFAULT_MAX_ATOMS}).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"chemexpand {__version__}",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.mode == "verify" and args.output:
        parser.error("--verify does not take an output file")
    if args.hill and args.mode != "ext":
        parser.error("--hill can only be used with --ext")
    if args.mode != "protons":
        if args.table:
            parser.error("--table can only be used with --protons")
        if args.atomic_numbers:
            parser.error("--atomic-numbers can only be used with --protons")

    try:
        max_symbol_length = _validate_positive(args.max_symbol_length, "--max-symbol-length")
        max_atoms = _validate_positive(args.max_atoms, "--max-atoms")
        overrides = _parse_atomic_number_overrides(args.atomic_numbers, max_symbol_length)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    try:
        formulas = read_formulas(args.input)
    except OSError as exc:
        print(f"Cannot read formulas: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.mode == "verify":
        print(f"[info] Verify balanced parentheses in {args.input}", file=sys.stderr)
        if not _report_unbalanced(formulas):
            sys.exit(1)
        return

    lookup = None
    if args.mode == "protons":
        try:
            table = build_periodic_table(
                args.table,
                overrides,
                max_symbol_length=max(max_symbol_length, MAX_TABLE_SYMBOL_LENGTH),
            )
        except OSError as exc:
            print(f"Cannot read periodic table: {exc}", file=sys.stderr)
            sys.exit(1)
        except PeriodicTableError as exc:
            print(str(exc), file=sys.stderr)
            sys.exit(1)
        lookup = table.lookup
        print(f"[info] Compute total proton number of formulas in {args.input}", file=sys.stderr)
    else:
        print(f"[info] Compute extended version of formulas in {args.input}", file=sys.stderr)

    report = BatchReport()
    if lookup is None:
        results = expand_lines(
            formulas,
            report,
            hill=args.hill,
            fail_fast=args.fail_fast,
            max_symbol_length=max_symbol_length,
            max_atoms=max_atoms,
        )
    else:
        results = count_lines(
            formulas,
            lookup,
            report,
            fail_fast=args.fail_fast,
            max_symbol_length=max_symbol_length,
            max_atoms=max_atoms,
        )

    destination = Path(args.output) if args.output else None
    if destination is not None:
        print(f"[info] Writing results to {destination}", file=sys.stderr)
    try:
        _emit_output(results, destination)
    except FormulaError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)
    except OSError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    _report_problems(report)
    if not report.ok:
        sys.exit(1)


def _validate_positive(value: int, option: str) -> int:
    if value < 1:
        raise ValueError(f"{option} must be a positive integer")
    return int(value)


def _parse_atomic_number_overrides(text: str | None, max_symbol_length: int) -> dict[str, int]:
    """Parse ``Xx=120,D=1`` into validated symbol -> atomic number pairs."""
    if not text:
        return {}
    limit = max(max_symbol_length, MAX_TABLE_SYMBOL_LENGTH)
    overrides: dict[str, int] = {}
    for entry in filter(None, (segment.strip() for segment in text.split(","))):
        symbol, sep, value = (part.strip() for part in entry.partition("="))
        if not sep:
            raise ValueError(f"Atomic number override '{entry}' must be in ELEMENT=value format")
        try:
            validate_symbol(symbol, limit)
        except ValueError as exc:
            raise ValueError(f"Atomic number override '{entry}': {exc}") from None
        if symbol in overrides:
            raise ValueError(f"Atomic number override for '{symbol}' given more than once")
        if not (value.isascii() and value.isdigit()) or int(value) < 1:
            raise ValueError(
                f"Atomic number override '{entry}' must use a positive integer value"
            )
        overrides[symbol] = int(value)
    if not overrides:
        raise ValueError("Atomic number override string is empty")
    return overrides


def _report_unbalanced(formulas: list[str]) -> bool:
    numbers = invalid_lines(formulas)
    for number in numbers:
        print(UNBALANCED_MESSAGE.format(line=number))
    if not numbers:
        print(BALANCED_MESSAGE)
    return not numbers


def _emit_output(results: Iterator[str], destination: Path | None) -> int:
    if destination is None:
        return _write_lines(sys.stdout, results)

    # The destination only appears once every line is written.
    destination.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="ascii",
            newline="\n",
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_path = Path(handle.name)
            written = _write_lines(handle, results)
        tmp_path.replace(destination)
        tmp_path = None
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
    return written


def _write_lines(stream: TextIO, results: Iterator[str]) -> int:
    written = 0
    for text in results:
        stream.write(f"{text}\n")
        written += 1
    stream.flush()
    return written


def _report_problems(report: BatchReport) -> None:
    for number, message in report.rejected:
        print(f"[warn] line {number}: {message}", file=sys.stderr)
    if report.unknown:
        total = sum(report.unknown.values())
        details = ", ".join(f"{symbol}={count}" for symbol, count in sorted(report.unknown.items()))
        print(
            f"[warn] {total} atom(s) with unknown symbols counted as 0 protons: {details}",
            file=sys.stderr,
        )
    if report.rejected:
        print(
            f"[warn] {len(report.rejected)} of {report.lines} formula(s) skipped.",
            file=sys.stderr,
        )


if __name__ == "__main__":  # pragma: no cover
    main()
