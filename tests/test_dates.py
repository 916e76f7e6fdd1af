from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from pdfcorex.validate.dates import format_date, parse_date


def test_parse_full_date() -> None:
    value = parse_date("D:20231231235959-05'30'")

    assert value == datetime(2023, 12, 31, 23, 59, 59, tzinfo=timezone(-timedelta(hours=5, minutes=30)))


def test_parse_partial_date_defaults() -> None:
    assert parse_date("D:20") is None
    assert parse_date("D:2021") == datetime(2021, 1, 1, tzinfo=timezone.utc)
    assert parse_date("D:202103") == datetime(2021, 3, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "text",
    ["20210301", "D:20210230", "D:2021030125", "D:20210301120000+25'00'x", "D:20210301120000Z05"],
)
def test_strict_rejects(text: str) -> None:
    assert parse_date(text) is None


def test_relaxed_accepts_missing_prefix_and_out_of_spec_layouts() -> None:
    assert parse_date("20210301", relaxed=True) == datetime(2021, 3, 1, tzinfo=timezone.utc)
    assert parse_date("Mon Mar 01 10:00:00 2021", relaxed=True) == datetime(2021, 3, 1, 10, tzinfo=timezone.utc)


def test_format_date_round_trip() -> None:
    value = datetime(2024, 2, 29, 8, 15, 0, tzinfo=timezone(timedelta(hours=2)))

    assert format_date(value) == "D:20240229081500+02'00'"
    assert parse_date(format_date(value)) == value
