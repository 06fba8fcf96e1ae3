"""Read wind power data from Fingrid's open data API."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from config import HISTORY_URL, LATEST_URL, PAGE_SIZE, REQUEST_TIMEOUT
from console_log import LOG_PREFIX_DATA, LOG_PREFIX_DEBUG, log
from errors import HistoricalDataNotFoundError, MalformedResponseError
from http_fetcher import fetch_from_url
from schemas import HistoricalPage, Reading

Fetcher = Callable[..., str]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_ago(moment: datetime) -> datetime:
    """Step back one calendar month, clamping the day (31.3. -> 28./29.2.)."""

    year, month = moment.year, moment.month - 1
    if month == 0:
        year, month = year - 1, 12
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def format_api_time(moment: datetime) -> str:
    """Render a UTC timestamp the way the API expects (``...Z``)."""

    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_end_time(raw: str) -> datetime:
    """Parse an API timestamp; naive values are taken as UTC."""

    parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _observation_value(entry: Any) -> float:
    """Return an entry's ``value`` as float, or 0 when it has none."""

    if not isinstance(entry, dict):
        return 0.0
    raw = entry.get("value")
    if isinstance(raw, bool):
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


class WindPowerSource:
    """Fetch the monthly maximum and the latest reading for one dataset.

    The API key is handed in explicitly so the class never reaches for the
    environment on its own; pass ``fetch`` to swap out the HTTP layer.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        fetch: Fetcher | None = None,
        clock: Clock | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self._fetch = fetch if fetch is not None else fetch_from_url
        self._clock = clock if clock is not None else _utc_now
        self.timeout = timeout

    def get_max_power(self) -> float:
        """Return the highest power value observed during the last month."""

        now = self._clock()
        params = {
            "startTime": format_api_time(month_ago(now)),
            "endTime": format_api_time(now),
            "pageSize": PAGE_SIZE,
            "sortOrder": "asc",
        }
        body = self._fetch(HISTORY_URL, self.api_key, params=params, timeout=self.timeout)

        try:
            page = HistoricalPage.model_validate_json(body)
        except ValidationError as exc:
            raise MalformedResponseError(
                "History response is not valid JSON or lacks pagination.total/data."
            ) from exc

        total = page.pagination.total
        if total <= 0 or not page.data or page.data[0] is None:
            raise HistoricalDataNotFoundError(
                "No historical data found to determine the maximum power."
            )

        # The declared total may be larger than the page actually returned.
        count = min(total, PAGE_SIZE)
        if count > len(page.data):
            log(
                LOG_PREFIX_DEBUG,
                f"History declares {total} rows but only {len(page.data)} arrived.",
            )

        max_power = 0.0
        for index in range(count):
            entry: Optional[Any] = page.data[index] if index < len(page.data) else None
            power = _observation_value(entry)
            if power > max_power:
                max_power = power

        log(LOG_PREFIX_DATA, f"Maximum power over the last month: {max_power} MW.")
        return max_power

    def get_latest_reading(self) -> Reading:
        """Return the newest reading with its raw ``endTime`` string."""

        body = self._fetch(LATEST_URL, self.api_key, timeout=self.timeout)

        try:
            reading = Reading.model_validate_json(body)
        except ValidationError as exc:
            raise MalformedResponseError(
                "Latest reading response is not valid JSON or lacks endTime/value."
            ) from exc

        try:
            parse_end_time(reading.end_time)
        except ValueError as exc:
            raise MalformedResponseError(
                f"Latest reading endTime {reading.end_time!r} is not a timestamp."
            ) from exc

        log(LOG_PREFIX_DEBUG, f"Latest reading {reading.value} MW ending {reading.end_time}.")
        return reading
