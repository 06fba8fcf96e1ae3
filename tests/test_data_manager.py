"""Tests for the history maximum and latest reading queries."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

import data_manager
from config import HISTORY_URL, LATEST_URL, PAGE_SIZE
from data_manager import WindPowerSource, format_api_time, month_ago
from errors import HistoricalDataNotFoundError, MalformedResponseError

FIXED_NOW = datetime(2024, 3, 31, 12, 0, 0, tzinfo=timezone.utc)


class RecordingFetch:
    """Stand-in for ``fetch_from_url`` returning a canned body."""

    def __init__(self, body: str) -> None:
        self.body = body
        self.calls: List[Dict[str, object]] = []

    def __call__(self, url, api_key=None, **kwargs) -> str:
        self.calls.append({"url": url, "api_key": api_key, **kwargs})
        return self.body


def _source(body: str | dict, api_key: str | None = "k") -> tuple[WindPowerSource, RecordingFetch]:
    text = body if isinstance(body, str) else json.dumps(body)
    fetch = RecordingFetch(text)
    return WindPowerSource(api_key, fetch=fetch, clock=lambda: FIXED_NOW), fetch


def test_month_ago_clamps_to_short_month() -> None:
    assert month_ago(FIXED_NOW) == datetime(2024, 2, 29, 12, 0, tzinfo=timezone.utc)
    assert month_ago(datetime(2024, 1, 15, tzinfo=timezone.utc)).month == 12
    assert month_ago(datetime(2024, 1, 15, tzinfo=timezone.utc)).year == 2023


def test_format_api_time_uses_z_suffix() -> None:
    assert format_api_time(FIXED_NOW) == "2024-03-31T12:00:00.000Z"


def test_max_power_query_parameters() -> None:
    """The history query covers one month, one page, oldest first."""

    source, fetch = _source({"pagination": {"total": 1}, "data": [{"value": 4}]}, api_key="abc")

    source.get_max_power()

    call = fetch.calls[0]
    assert call["url"] == HISTORY_URL
    assert call["api_key"] == "abc"
    assert call["params"] == {
        "startTime": "2024-02-29T12:00:00.000Z",
        "endTime": "2024-03-31T12:00:00.000Z",
        "pageSize": PAGE_SIZE,
        "sortOrder": "asc",
    }


def test_max_power_picks_largest_value() -> None:
    source, _ = _source(
        {"pagination": {"total": 3}, "data": [{"value": 10}, {"value": 25}, {"value": 7}]}
    )

    assert source.get_max_power() == 25


def test_total_larger_than_data_is_tolerated() -> None:
    """Missing and unusable entries count as zero instead of failing the scan."""

    source, _ = _source(
        {
            "pagination": {"total": 5},
            "data": [{"value": 3.5}, {"value": "n/a"}, {"other": 1}],
        }
    )

    assert source.get_max_power() == 3.5


def test_scan_stops_at_declared_total() -> None:
    source, _ = _source(
        {"pagination": {"total": 2}, "data": [{"value": 1}, {"value": 2}, {"value": 99}]}
    )

    assert source.get_max_power() == 2


def test_scan_never_passes_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(data_manager, "PAGE_SIZE", 2)
    source, _ = _source(
        {"pagination": {"total": 50}, "data": [{"value": 1}, {"value": 2}, {"value": 99}]}
    )

    assert source.get_max_power() == 2


def test_null_entries_after_first_count_as_zero() -> None:
    source, _ = _source({"pagination": {"total": 3}, "data": [{"value": 5}, None, {"value": None}]})

    assert source.get_max_power() == 5


@pytest.mark.parametrize(
    "payload",
    [
        {"pagination": {"total": 0}, "data": [{"value": 1}]},
        {"pagination": {"total": -1}, "data": [{"value": 1}]},
        {"pagination": {"total": 3}, "data": []},
        {"pagination": {"total": 3}, "data": [None, {"value": 9}]},
    ],
)
def test_no_history_raises_not_found(payload: dict) -> None:
    source, _ = _source(payload)

    with pytest.raises(HistoricalDataNotFoundError):
        source.get_max_power()


@pytest.mark.parametrize(
    "body",
    [
        "not json at all",
        {"data": [{"value": 1}]},
        {"pagination": {}, "data": [{"value": 1}]},
        {"pagination": {"total": 1}},
        {"pagination": {"total": 1}, "data": {"value": 1}},
        [1, 2, 3],
    ],
)
def test_malformed_history_raises(body) -> None:
    source, _ = _source(body)

    with pytest.raises(MalformedResponseError):
        source.get_max_power()


def test_latest_reading_keeps_end_time_verbatim() -> None:
    """The timestamp string is handed over exactly as the API sent it."""

    raw_end = "2024-01-01T00:03:00.000Z"
    source, fetch = _source({"datasetId": 181, "endTime": raw_end, "value": 12.5})

    reading = source.get_latest_reading()

    assert fetch.calls[0]["url"] == LATEST_URL
    assert reading.end_time == raw_end
    assert reading.value == 12.5


@pytest.mark.parametrize(
    "body",
    [
        {"value": 12.5},
        {"endTime": "2024-01-01T00:00:00Z"},
        {"endTime": "2024-01-01T00:00:00Z", "value": None},
        "{broken",
    ],
)
def test_malformed_latest_reading_raises(body) -> None:
    source, _ = _source(body)

    with pytest.raises(MalformedResponseError):
        source.get_latest_reading()


def test_unparseable_end_time_is_malformed() -> None:
    """A present but garbled endTime is rejected when the reading arrives."""

    source, _ = _source({"endTime": "yesterday afternoon", "value": 12.5})

    with pytest.raises(MalformedResponseError):
        source.get_latest_reading()
