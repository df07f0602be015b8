import pytest

from chemexpand.periodic import (
    DEFAULT_ATOMIC_NUMBERS,
    PeriodicTable,
    PeriodicTableError,
    build_periodic_table,
    load_periodic_table,
    parse_periodic_table,
    validate_symbol,
)


def test_default_table():
    assert len(DEFAULT_ATOMIC_NUMBERS) == 118
    assert DEFAULT_ATOMIC_NUMBERS["H"] == 1
    assert DEFAULT_ATOMIC_NUMBERS["Fr"] == 87
    assert DEFAULT_ATOMIC_NUMBERS["Np"] == 93
    assert DEFAULT_ATOMIC_NUMBERS["Og"] == 118


def test_lookup_is_exact_and_case_sensitive():
    table = PeriodicTable({"Co": 27, "C": 6, "O": 8})
    assert table.lookup("Co") == 27
    assert table.lookup("CO") is None
    assert table.lookup("co") is None
    assert table.lookup("Xx") is None
    assert "C" in table
    assert "Xx" not in table


def test_symbols_sorted_by_atomic_number():
    table = parse_periodic_table(["C 6", "H 1", "He 2", "B 5"])
    assert table.symbols() == ["H", "He", "B", "C"]
    assert list(table) == ["H", "He", "B", "C"]
    assert len(table) == 4


def test_parse_skips_blank_and_comment_lines():
    table = parse_periodic_table(["# symbol number", "", "  H   1  ", "Uue 119\n"])
    assert table.as_dict() == {"H": 1, "Uue": 119}


bad_tables = [
    ["H"],
    ["H 1 extra"],
    ["H one"],
    ["H 0"],
    ["H -1"],
    ["H 1", "H 2"],
    ["h 1"],
    ["HE 2"],
    ["Abcd 5"],
    ["C1 6"],
]


def test_parse_rejects_malformed_lines():
    for lines in bad_tables:
        with pytest.raises(PeriodicTableError):
            parse_periodic_table(lines)


def test_parse_error_names_source_and_line():
    with pytest.raises(PeriodicTableError, match=r"table\.txt:2:"):
        parse_periodic_table(["H 1", "He two"], source="table.txt")


def test_load_periodic_table(tmp_path):
    path = tmp_path / "periodicTable.txt"
    path.write_text("Fr 87\nNp 93\nH 1\n", encoding="ascii")
    table = load_periodic_table(path)
    assert table.lookup("Fr") == 87
    assert table.lookup("Np") == 93
    assert table.symbols() == ["H", "Fr", "Np"]


def test_load_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        load_periodic_table(tmp_path / "missing.txt")


def test_load_non_ascii_file(tmp_path):
    path = tmp_path / "table.txt"
    path.write_bytes("H 1\nÅ 2\n".encode("utf-8"))
    with pytest.raises(PeriodicTableError):
        load_periodic_table(path)


def test_build_periodic_table_overrides(tmp_path):
    table = build_periodic_table(overrides={"Xx": 120, "H": 2})
    assert table.lookup("Xx") == 120
    assert table.lookup("H") == 2
    assert table.lookup("O") == 8
    assert DEFAULT_ATOMIC_NUMBERS["H"] == 1

    path = tmp_path / "table.txt"
    path.write_text("H 1\nO 8\n", encoding="ascii")
    table = build_periodic_table(path, {"D": 1})
    assert table.as_dict() == {"H": 1, "O": 8, "D": 1}

    with pytest.raises(PeriodicTableError):
        build_periodic_table(overrides={"xx": 3})
    with pytest.raises(PeriodicTableError):
        build_periodic_table(overrides={"Xx": 0})


def test_validate_symbol():
    assert validate_symbol("Fe") == "Fe"
    assert validate_symbol("Abcd", 4) == "Abcd"
    for symbol in ("", "fe", "FE", "Abcd", "F2", "Å"):
        with pytest.raises(ValueError):
            validate_symbol(symbol)


def test_longer_symbols_follow_max_symbol_length(tmp_path):
    lines = ["Abcd 5"]
    with pytest.raises(PeriodicTableError):
        parse_periodic_table(lines)
    assert parse_periodic_table(lines, max_symbol_length=4).lookup("Abcd") == 5

    path = tmp_path / "table.txt"
    path.write_text("Abcde 7\n", encoding="ascii")
    assert load_periodic_table(path, max_symbol_length=5).lookup("Abcde") == 7

    table = build_periodic_table(overrides={"Abcd": 5}, max_symbol_length=4)
    assert table.lookup("Abcd") == 5
    with pytest.raises(PeriodicTableError):
        build_periodic_table(overrides={"Abcd": 5})
