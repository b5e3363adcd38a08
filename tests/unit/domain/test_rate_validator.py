"""Domain tests: rate pair rules, batch validation, create-path validation."""

import pytest

from rateboard.domain.validators import (
    validate_currency_create,
    validate_rate_batch,
    validate_rate_pair,
)
from rateboard.domain.validators.rate_validator import coerce_rate, normalize_code
from rateboard.domain.violations import ViolationKind

ALLOWED = ["USD", "EUR", "GBP", "TRY"]


def _kinds(violations):
    return [v.kind for v in violations]


def test_valid_pair_has_no_violations():
    assert validate_rate_pair("USD", 15000, 15100) == []


def test_numeric_strings_are_accepted():
    assert validate_rate_pair("USD", "15000", " 15100.5 ") == []


def test_inverted_spread_message_names_both_rates():
    violations = validate_rate_pair("EUR", 16600, 16500)
    assert _kinds(violations) == [ViolationKind.INVERTED_SPREAD]
    assert violations[0].message == "EUR: Sell rate (16500) must be greater than buy rate (16600)"


def test_equal_rates_are_an_inverted_spread():
    assert _kinds(validate_rate_pair("USD", 100, 100)) == [ViolationKind.INVERTED_SPREAD]


def test_non_number_reports_field_and_skips_spread_check():
    violations = validate_rate_pair("USD", "abc", 15100)
    assert _kinds(violations) == [ViolationKind.NOT_A_NUMBER]
    assert violations[0].field == "buy_rate"
    assert "abc" in violations[0].message


@pytest.mark.parametrize("value", [None, True, float("nan"), float("inf"), [1], ""])
def test_coerce_rate_rejects_non_numbers(value):
    assert coerce_rate(value) is None


def test_non_positive_rates_both_reported():
    violations = validate_rate_pair("USD", -5, 0)
    assert _kinds(violations) == [ViolationKind.NON_POSITIVE, ViolationKind.NON_POSITIVE]
    assert [v.field for v in violations] == ["buy_rate", "sell_rate"]


def test_empty_batch():
    violations = validate_rate_batch({})
    assert _kinds(violations) == [ViolationKind.EMPTY_BATCH]
    assert violations[0].message == "Currency data is required"


def test_batch_collects_every_violation():
    batch = {
        "USD": {"buy_rate": 15000, "sell_rate": 15100},
        "EUR": {"buy_rate": 16600, "sell_rate": 16500},
        "XXX": {"buy_rate": 1, "sell_rate": 2},
        "GBP": None,
    }
    violations = validate_rate_batch(batch, allowed_codes=ALLOWED)
    by_code = {v.code: v.kind for v in violations}
    assert by_code == {
        "EUR": ViolationKind.INVERTED_SPREAD,
        "XXX": ViolationKind.UNKNOWN_CODE,
        "GBP": ViolationKind.MISSING_DATA,
    }


def test_batch_codes_are_case_insensitive_and_duplicates_flagged():
    batch = {
        "usd": {"buy_rate": 1, "sell_rate": 2},
        "USD": {"buy_rate": 1, "sell_rate": 2},
    }
    violations = validate_rate_batch(batch, allowed_codes=ALLOWED)
    assert _kinds(violations) == [ViolationKind.DUPLICATE_ENTRY]


def test_batch_without_allow_list_skips_code_check():
    assert validate_rate_batch({"XYZ": {"buy_rate": 1, "sell_rate": 2}}) == []


def test_create_requires_allow_listed_code_and_name():
    violations = validate_currency_create("ABC", " ", 1, 2, ALLOWED)
    assert _kinds(violations) == [ViolationKind.UNKNOWN_CODE, ViolationKind.MISSING_DATA]


def test_create_valid():
    assert validate_currency_create("try", "Turkish Lira", 500, 510, ALLOWED) == []


def test_normalize_code():
    assert normalize_code(" usd ") == "USD"
    assert normalize_code(None) == ""
