import math

from property_panel.utils.coerce import pick_first, pick_path, round2, to_int, to_number


def test_to_number_handles_currency_strings():
    assert to_number("$1,234.50") == 1234.50
    assert to_number("  -12.5 ") == -12.5
    assert to_number("2,400/mo") == 2400


def test_to_number_rejects_unparsable_values():
    assert to_number("") is None
    assert to_number("abc") is None
    assert to_number("-") is None
    assert to_number(None) is None
    assert to_number(True) is None
    assert to_number({"value": 1}) is None


def test_to_number_passes_finite_numbers_through():
    assert to_number(42) == 42
    assert to_number(3.5) == 3.5
    assert to_number(math.inf) is None
    assert to_number(float("nan")) is None


def test_to_int_truncates():
    assert to_int("1,499.9") == 1499
    assert to_int("n/a") is None


def test_round2():
    assert round2(7.4099) == 7.41
    assert round2(None) is None


def test_pick_first_skips_null_and_empty_values():
    assert pick_first({"rent": None, "price": 1200}, ["rent", "price"]) == 1200
    assert pick_first({"rent": "", "price": 0}, ["rent", "price"]) == 0
    assert pick_first({"a": 1, "b": 2}, ["b", "a"]) == 2


def test_pick_first_returns_none_without_match():
    assert pick_first({"rent": None}, ["rent", "price"]) is None
    assert pick_first(None, ["rent"]) is None
    assert pick_first({"pricing": {"rent": 900}}, ["rent"]) is None


def test_pick_path_walks_ranked_scopes():
    table = [((), ["rent"]), (("pricing",), ["rent"]), (("listing", "terms"), ["rent"])]
    assert pick_path({"pricing": {"rent": 900}}, table) == 900
    assert pick_path({"rent": 1000, "pricing": {"rent": 900}}, table) == 1000
    assert pick_path({"listing": {"terms": {"rent": 800}}}, table) == 800
    assert pick_path({"pricing": "n/a"}, table) is None
