"""Terminal dashboard showing Finnish wind power generation.

Usage: run ``python main.py`` to watch the table tick every second.
Press ``Esc`` or ``q`` (or ``Ctrl+C``) to exit.

The clock rows are redrawn on every wall-clock second; the latest reading
is fetched again only when its three minute window has run out.
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional, TextIO

from config import UPDATE_INTERVAL_MINUTES, DashboardConfig
from console_log import LOG_PREFIX_DATA, LOG_PREFIX_DEBUG, LOG_PREFIX_SYSTEM, log
from data_manager import WindPowerSource, parse_end_time
from errors import LayoutNotReadyError
from key_listener import KeyListener
from table_renderer import (
    CLEAR_SCREEN,
    FULL_TABLE_RETURN,
    HIDE_CURSOR,
    SHOW_CURSOR,
    TableLayout,
    cursor_down,
    render_full,
    render_partial,
)

UPDATE_INTERVAL = timedelta(minutes=UPDATE_INTERVAL_MINUTES)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_tick(now: datetime) -> datetime:
    """The next integral wall-clock second after ``now``."""

    return now.replace(microsecond=0) + timedelta(seconds=1)


class LoopState(Enum):
    RUNNING = "running"
    CANCELLING = "cancelling"
    STOPPED = "stopped"


@dataclass
class DashboardState:
    """Values carried from one tick to the next.

    ``layout`` and ``last_update_end`` are filled in by the first full
    redraw; until then only a full redraw may run.
    """

    max_power: float
    next_update_in: timedelta = timedelta(0)
    last_update_end: str = ""
    layout: Optional[TableLayout] = None
    current_power: Optional[float] = None

    def needs_full_redraw(self) -> bool:
        return self.next_update_in <= timedelta(0)


def full_redraw(state: DashboardState, source: WindPowerSource, out: TextIO, now: datetime) -> None:
    """Fetch the newest reading and print the whole table."""

    reading = source.get_latest_reading()
    if reading.value > state.max_power:
        log(LOG_PREFIX_DATA, f"New maximum {reading.value} MW (was {state.max_power} MW).")
    state.max_power = max(state.max_power, reading.value)
    state.current_power = reading.value
    state.layout = render_full(out, reading.value, state.max_power, now)
    state.last_update_end = reading.end_time


def partial_redraw(state: DashboardState, out: TextIO, now: datetime) -> None:
    """Refresh the clock and countdown rows using the cached layout."""

    if state.layout is None or not state.last_update_end.strip():
        raise LayoutNotReadyError("Partial redraw requested before the table was drawn.")

    state.next_update_in = parse_end_time(state.last_update_end) + UPDATE_INTERVAL - now
    render_partial(out, state.layout, now, state.next_update_in)


class DashboardLoop:
    """Drive one redraw per wall-clock second until cancelled.

    The loop only ever moves RUNNING -> CANCELLING -> STOPPED. Setting
    ``stop_event`` (from any thread) ends it at the next wait.
    """

    def __init__(
        self,
        state: DashboardState,
        source: WindPowerSource,
        *,
        stop_event: threading.Event | None = None,
        out: TextIO | None = None,
        clock: Clock | None = None,
        max_ticks: int | None = None,
    ) -> None:
        self.state = state
        self.source = source
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.out = out if out is not None else sys.stdout
        self._clock = clock if clock is not None else _utc_now
        self.max_ticks = max_ticks
        self.tick_count = 0
        self.full_redraws = 0
        self._finished = False

    @property
    def loop_state(self) -> LoopState:
        if self._finished:
            return LoopState.STOPPED
        if self.stop_event.is_set():
            return LoopState.CANCELLING
        return LoopState.RUNNING

    def cancel(self) -> None:
        """Ask the loop to stop; safe to call more than once."""

        self.stop_event.set()

    def tick(self, now: datetime) -> None:
        if self.state.needs_full_redraw():
            full_redraw(self.state, self.source, self.out, now)
            self.full_redraws += 1
        partial_redraw(self.state, self.out, now)
        self.tick_count += 1

    def run(self) -> None:
        try:
            while not self.stop_event.is_set():
                now = self._clock()
                deadline = next_tick(now)
                self.tick(now)

                if self.max_ticks is not None and self.tick_count >= self.max_ticks:
                    log(LOG_PREFIX_DEBUG, f"Tick limit {self.max_ticks} reached.")
                    break

                remaining = (deadline - self._clock()).total_seconds()
                self.stop_event.wait(max(remaining, 0.0))
        finally:
            self._finished = True


def run_dashboard(
    config: DashboardConfig,
    *,
    source: WindPowerSource | None = None,
    out: TextIO | None = None,
    listen_for_keys: bool | None = None,
) -> DashboardLoop:
    """Load the monthly maximum, then run the live table until exit."""

    if out is None:
        out = sys.stdout
    if source is None:
        source = WindPowerSource(config.api_key, timeout=config.request_timeout)
    if listen_for_keys is None:
        listen_for_keys = sys.stdin.isatty()

    log(LOG_PREFIX_SYSTEM, "Loading one month of history for the gauge scale.")
    state = DashboardState(max_power=source.get_max_power())

    stop_event = threading.Event()
    loop = DashboardLoop(state, source, stop_event=stop_event, out=out, max_ticks=config.max_ticks)
    listener = KeyListener(stop_event) if listen_for_keys else None

    out.write(HIDE_CURSOR)
    out.flush()
    if listener is not None:
        listener.start()

    try:
        loop.run()
    except KeyboardInterrupt:
        stop_event.set()
        raise
    finally:
        if stop_event.is_set():
            out.write(CLEAR_SCREEN)
        elif state.layout is not None:
            # Leave the finished table on screen and continue below it.
            out.write(cursor_down(FULL_TABLE_RETURN))
        out.write(SHOW_CURSOR)
        out.flush()
        stop_event.set()
        if listener is not None:
            listener.join(timeout=1.0)

    return loop
