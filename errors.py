"""Exceptions raised while fetching and drawing wind power data."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for every failure the dashboard reports."""


class TransportError(DashboardError):
    """The request failed on the network or came back with a bad status."""

    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class EmptyResponseError(DashboardError):
    """The server answered with a success status but an empty body."""


class MalformedResponseError(DashboardError):
    """The body could not be parsed or lacks a required field."""


class HistoricalDataNotFoundError(DashboardError):
    """The history query succeeded but held no observations.

    Without history there is no reference value for the gauge, so callers
    treat this as a fatal startup failure.
    """


class LayoutNotReadyError(DashboardError, RuntimeError):
    """A partial redraw was attempted before any full redraw."""
