"""Tests for model number extraction."""

from prodmatch.model_numbers import canonical_model_number, extract_model_number


def test_authoritative_wins():
    assert extract_model_number("Logicool MX-123A", "Type-S") == "Type-S"


def test_blank_authoritative_ignored():
    assert extract_model_number("MX-123A mouse", "  ") == "MX-123A"
    assert extract_model_number("MX-123A mouse", "") == "MX-123A"


def test_letter_prefix_pattern():
    assert extract_model_number("Widget ABC-100") == "ABC-100"
    assert extract_model_number("Logicool MX3S") == "MX3S"


def test_digit_block_pattern():
    assert extract_model_number("Logicool 910-006567") == "910-006567"


def test_letters_digits_letters_pattern():
    assert extract_model_number("Keychron Q1 Pro") == "Q1"


def test_longest_match_across_patterns():
    assert extract_model_number("ER12 12-34567") == "12-34567"


def test_tie_keeps_first():
    assert extract_model_number("AB12 CD34") == "AB12"


def test_none_when_absent():
    assert extract_model_number("ロジクール マウス") is None
    assert extract_model_number("MX Master 3S") is None
    assert extract_model_number("") is None


def test_fullwidth_code_not_extracted():
    assert extract_model_number("ＭＸ１２３") is None


def test_canonical_model_number():
    assert canonical_model_number("MX-123 A") == "mx123a"
    assert canonical_model_number("Type-S") == canonical_model_number("type s")
