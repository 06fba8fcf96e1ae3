"""Settings for the wind power dashboard.

Everything the dashboard needs to know about the outside world lives here so
the fetcher and data accessors can be handed their settings explicitly.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional

# ---------------------------------------------------------------------------
# Fingrid open data endpoints (dataset 181 = wind power generation, MW).
# ---------------------------------------------------------------------------
DATASET_ID = 181
BASE_URL = f"https://data.fingrid.fi/api/datasets/{DATASET_ID}/data"
HISTORY_URL = BASE_URL
LATEST_URL = f"{BASE_URL}/latest"
API_KEY_ENV = "OPENDATA_API_KEY"
API_KEY_HEADER = "x-api-key"

# Largest page the API hands out; the history scan never looks past it.
PAGE_SIZE = 20000
# Rate-limit retries per request (the first attempt is not counted).
MAX_RETRIES = 2
# Seconds before a hung request is abandoned.
REQUEST_TIMEOUT = 30.0

# Each reading covers a three minute window; new data is due when it closes.
UPDATE_INTERVAL_MINUTES = 3

# Table geometry.
BAR_STEPS = 12
MIN_TABLE_WIDTH = 23


@dataclass
class DashboardConfig:
    """Runtime options collected from the command line and environment."""

    api_key: Optional[str] = None
    request_timeout: float = REQUEST_TIMEOUT
    max_ticks: Optional[int] = None
    debug: bool = False


def load_config(
    args: argparse.Namespace | None = None,
    environ: Mapping[str, str] | None = None,
) -> DashboardConfig:
    """Merge CLI arguments over environment values."""

    if environ is None:
        environ = os.environ

    api_key = environ.get(API_KEY_ENV) or None
    config = DashboardConfig(api_key=api_key)

    if args is None:
        return config

    if getattr(args, "api_key", None):
        config.api_key = args.api_key
    if getattr(args, "timeout", None) is not None:
        if args.timeout <= 0:
            raise ValueError("--timeout must be greater than zero.")
        config.request_timeout = float(args.timeout)
    if getattr(args, "ticks", None) is not None:
        if args.ticks <= 0:
            raise ValueError("--ticks COUNT must be greater than zero.")
        config.max_ticks = args.ticks
    config.debug = bool(getattr(args, "debug", False))
    return config
