"""Build and print the fixed-width wind power table.

The table is printed in full whenever new data arrives. Between those
redraws only the time and countdown rows are rewritten in place, using the
column geometry cached in a ``TableLayout``::

     _____________________
    |  16.10.2026 (UTC)   |
    |_____________________|
    | 0 |-----x      | 25 |
    |___|____________|____|
    | Power    | 12.5     |
    |__________|__________|
    | Time     | 20:03:17 |      <- rewritten every second
    |__________|__________|
    | Update   | 00:02.43 |
    |__________|__________|
    |   Press <Esc> or    |
    |     "q" to quit     |
    |_____________________|
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, TextIO, Tuple

from config import BAR_STEPS, MIN_TABLE_WIDTH

# ANSI control sequences.
CLEAR_SCREEN = "\033[2J\033[H"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
RED = "\033[31m"
RESET = "\033[0m"

POWER_LABEL = "Power"
TIME_LABEL = "Time"
UPDATE_LABEL = "Update"
INSTRUCTION_LINES = ("Press <Esc> or", '"q" to quit')

# After a full print the cursor climbs back over the reserved rows, the
# instructions and the bottom border to the first reserved row.
RESERVED_ROWS = 4
FULL_TABLE_RETURN = RESERVED_ROWS + len(INSTRUCTION_LINES) + 1
PARTIAL_ROWS = 4


def cursor_up(lines: int) -> str:
    return f"\033[{lines}A"


def cursor_down(lines: int) -> str:
    return f"\033[{lines}B"


def format_number(value: float) -> str:
    """Print a number without trailing zeros (25, 12.5, 1234.57)."""

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def bar_size(value: float, max_power: float) -> int:
    """Number of filled gauge steps for ``value`` on a ``max_power`` scale."""

    if max_power <= 0:
        return 0
    steps = math.floor(value / max_power * BAR_STEPS)
    return max(0, min(BAR_STEPS, steps))


def build_bar(size: int) -> str:
    """Dashes up to an ``x`` marker, padded with spaces to ``BAR_STEPS``."""

    if size <= 0:
        return " " * BAR_STEPS
    return "-" * (size - 1) + "x" + " " * (BAR_STEPS - size)


def centered_row(row_width: int, text: str) -> str:
    row = f"|{' ' * ((row_width - 2 - len(text)) // 2)}{text}"
    return row + " " * (row_width - len(row) - 1) + "|"


def format_countdown(remaining: timedelta) -> str:
    """Render a countdown as ``HH:MM.SS``; overdue shows as zero."""

    seconds = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}.{seconds:02d}"


@dataclass(frozen=True)
class TableLayout:
    """Column geometry shared by the full table and the partial rows."""

    width: int
    split_row_format: str
    split_row_separator: str

    def split_row(self, left: str, right: str) -> str:
        return self.split_row_format.format(left, right)


def build_layout(width: int) -> TableLayout:
    middle = width // 2
    split_row_format = f"| {{0:<{middle - 2}}}| {{1:<{width - (middle + 3)}}}|"
    split_row_separator = f"|{'_' * (middle - 1)}|{'_' * (width - (middle + 2))}|"
    return TableLayout(width, split_row_format, split_row_separator)


def build_table(
    current_power: float, max_power: float, now: datetime
) -> Tuple[List[str], TableLayout]:
    """Return every line of the full table plus the layout it was built on."""

    max_text = format_number(max_power)
    bar = build_bar(bar_size(current_power, max_power))
    bar_row = f"| 0 |{bar}| {max_text} |"
    bar_row_separator = f"|___|{'_' * BAR_STEPS}|{'_' * (len(max_text) + 2)}|"

    width = max(len(bar_row), MIN_TABLE_WIDTH)
    layout = build_layout(width)

    line = "_" * (width - 2)
    date_text = f"{now.strftime('%d.%m.%Y')} (UTC)"

    lines = [
        f" {line} ",
        centered_row(width, date_text),
        f"|{line}|",
        bar_row,
        bar_row_separator,
        layout.split_row(POWER_LABEL, format_number(current_power)),
        layout.split_row_separator,
    ]
    lines.extend("" for _ in range(RESERVED_ROWS))
    lines.extend(centered_row(width, text) for text in INSTRUCTION_LINES)
    lines.append(f"|{line}|")
    return lines, layout


def build_time_rows(layout: TableLayout, now: datetime, next_update_in: timedelta) -> List[str]:
    return [
        layout.split_row(TIME_LABEL, now.strftime("%H:%M:%S")),
        layout.split_row_separator,
        layout.split_row(UPDATE_LABEL, format_countdown(next_update_in)),
        layout.split_row_separator,
    ]


def render_full(out: TextIO, current_power: float, max_power: float, now: datetime) -> TableLayout:
    """Clear the screen, print the whole table and park on the time rows."""

    lines, layout = build_table(current_power, max_power, now)
    out.write(CLEAR_SCREEN)
    out.write("\n".join(lines) + "\n")
    out.write(cursor_up(FULL_TABLE_RETURN))
    out.flush()
    return layout


def render_partial(
    out: TextIO, layout: TableLayout, now: datetime, next_update_in: timedelta
) -> None:
    """Overwrite the time rows in place and return the cursor to them."""

    out.write("\n".join(build_time_rows(layout, now, next_update_in)) + "\n")
    out.write(cursor_up(PARTIAL_ROWS))
    out.flush()
