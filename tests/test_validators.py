from datetime import timezone

from app.exceptions import FailureKind
from app.utils.validators import (
    extract_time_series,
    parse_bar_timestamp,
    parse_float,
    parse_int,
    validate_response,
)


def test_parse_float_accepts_strings_and_numbers():
    assert parse_float("10.25") == 10.25
    assert parse_float(" 1,234.5 ") == 1234.5
    assert parse_float(7) == 7.0
    assert isinstance(parse_float(7), float)


def test_parse_float_rejects_garbage():
    assert parse_float("abc") is None
    assert parse_float("") is None
    assert parse_float(None) is None
    assert parse_float(True) is None
    assert parse_float(float("nan")) is None


def test_parse_int_requires_integral_value():
    assert parse_int("100") == 100
    assert parse_int("1,000") == 1000
    assert parse_int("1e3") == 1000
    assert parse_int("100.0") == 100
    assert parse_int(250) == 250
    assert parse_int("100.5") is None
    assert parse_int("lots") is None


def test_timestamp_parse_is_exact_and_utc():
    ts = parse_bar_timestamp("2024-01-02 09:30:00")
    assert ts.tzinfo == timezone.utc
    assert (ts.year, ts.month, ts.day, ts.hour, ts.minute) == (2024, 1, 2, 9, 30)

    assert parse_bar_timestamp("2024-1-2 9:30:00") is None
    assert parse_bar_timestamp("2024-01-02T09:30:00") is None
    assert parse_bar_timestamp("2024-01-02 09:30") is None
    assert parse_bar_timestamp("2024-02-30 09:30:00") is None


def test_note_is_advisory_failure():
    failure = validate_response({"Note": "Thank you for using Alpha Vantage!"})
    assert failure.kind == FailureKind.UPSTREAM_ADVISORY
    assert failure.message == "Thank you for using Alpha Vantage!"


def test_error_message_is_client_failure():
    failure = validate_response({"Error Message": "Invalid API call"})
    assert failure.kind == FailureKind.UPSTREAM_CLIENT
    assert failure.message == "Invalid API call"


def test_note_wins_over_error_message():
    failure = validate_response({"Error Message": "bad symbol", "Note": "slow down"})
    assert failure.kind == FailureKind.UPSTREAM_ADVISORY
    assert failure.message == "slow down"


def test_null_sentinel_uses_fallback_text():
    failure = validate_response({"Error Message": None})
    assert failure.message == "AlphaVantage returned an error."


def test_clean_response_passes():
    assert validate_response({"Meta Data": {}, "Time Series (15min)": {}}) is None


def test_time_series_lookup_is_case_insensitive_and_first_wins():
    document = {
        "Meta Data": {"1. Information": "Intraday"},
        "time series (15min)": {"a": 1},
        "Time Series (5min)": {"b": 2},
    }
    assert extract_time_series(document) == {"a": 1}


def test_missing_time_series():
    assert extract_time_series({"Meta Data": {}}) is None
    assert extract_time_series(["not", "an", "object"]) is None


def test_underscore_digit_separators_rejected():
    assert parse_float("1_000.5") is None
    assert parse_int("1_000") is None


def test_non_object_time_series_is_missing():
    assert extract_time_series({"Time Series (15min)": "oops"}) is None
    assert extract_time_series({"Time Series (15min)": [1, 2]}) is None
