# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from backoffice.derived import (
    age_text,
    augment_certificates,
    classify,
    compute_age,
    display_status,
    parse_date,
    status_label,
)

TODAY = date(2025, 3, 10)


@pytest.mark.parametrize(
    "offset, expected",
    [(-1, "expired"), (0, "expiring"), (30, "expiring"), (31, "valid"), (400, "valid")],
)
def test_classify_boundaries(offset, expected):
    assert classify(TODAY + timedelta(days=offset), TODAY) == expected


def test_classify_ignores_time_of_day_and_accepts_strings():
    late_evening = datetime(2025, 3, 10, 23, 59)
    assert classify("2025-03-10", late_evening) == "expiring"
    assert classify("2025-04-10T00:00:00Z", TODAY) == "valid"
    assert classify("2025-03-09T12:00:00.000Z", TODAY) == "expired"


@pytest.mark.parametrize("value", [None, "", "not a date", 12])
def test_classify_unknown_is_empty(value):
    assert classify(value, TODAY) == ""


def test_window_comes_from_config(tmp_path, monkeypatch):
    from backoffice import config

    path = tmp_path / "config.yaml"
    path.write_text("compliance:\n  expiring_window_days: 7\n", encoding="utf-8")
    monkeypatch.setenv("BACKOFFICE_CONFIG_PATH", str(path))
    config.load.cache_clear()

    assert classify(TODAY + timedelta(days=8), TODAY) == "valid"
    assert classify(TODAY + timedelta(days=7), TODAY) == "expiring"


def test_server_status_wins():
    assert display_status({"status": "expired", "expiry_date": "2099-01-01"}, TODAY) == "expired"
    assert display_status({"expiry_date": "2099-01-01"}, TODAY) == "valid"


def test_status_label():
    assert status_label("expired") == "Expired"
    assert status_label("Expiring Soon") == "Expiring Soon"
    assert status_label("") == "Valid"


def test_age():
    assert compute_age("1990-03-11", TODAY) == 34
    assert compute_age("1990-03-10", TODAY) == 35
    assert compute_age(None, TODAY) is None
    assert age_text({"date_of_birth": "2000-01-01"}, TODAY) == "25"
    assert age_text({"dob": "garbage"}, TODAY) == "Not specified"
    assert age_text({}, TODAY) == "Not specified"


def test_parse_date():
    assert parse_date(datetime(2025, 1, 2, 3, 4)) == date(2025, 1, 2)
    assert parse_date("2025-01-02") == date(2025, 1, 2)
    assert parse_date("  ") is None


def test_augment_certificates():
    rows = augment_certificates(
        [
            {"id": 1, "property_name": " Sea View ", "expiry_date": "2025-03-01"},
            {"id": 2, "hotel_name": "Harbour", "status": "valid", "expiry_date": "2025-03-01"},
        ],
        TODAY,
    )
    assert rows[0]["hotel_name"] == "Sea View"
    assert rows[0]["display_status"] == "expired"
    assert rows[1]["display_status"] == "valid"
