from collections import Counter

from chemexpand.formula import expand_formula, format_expanded, parse_expanded
from chemexpand.periodic import build_periodic_table
from chemexpand.protons import count_protons, formula_protons

table = build_periodic_table()

formulas = ["H2O", "Co3(Fe(CN)6)2", "((H)2)3", "C6H12O6", "NaCl", ""]
protons = [10, 3 * 27 + 2 * 26 + 12 * 6 + 12 * 7, 6, 96, 28, 0]


def test_formula_protons():
    for form, count in zip(formulas, protons):
        assert formula_protons(form, table.lookup) == count


def test_count_protons_with_mapping_lookup():
    lookup = {"H": 1, "O": 8}.get
    assert count_protons(["H", "H", "O"], lookup) == 10


def test_unknown_symbols_contribute_zero():
    unknown = Counter()
    assert formula_protons("Xx2", table.lookup, unknown) == 0
    assert formula_protons("Xx2H", table.lookup, unknown) == 1
    assert unknown == Counter({"Xx": 4})


def test_unknown_symbols_not_tallied_without_counter():
    assert count_protons(["Xx", "O"], table.lookup) == 8


def test_counting_expanded_output_is_idempotent():
    for form in formulas:
        line = format_expanded(expand_formula(form))
        assert count_protons(parse_expanded(line), table.lookup) == formula_protons(
            form, table.lookup
        )
