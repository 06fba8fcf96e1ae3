"""Pydantic models for the Fingrid open data responses.

Only the fields the dashboard reads are declared; anything else the API
sends is ignored.

Latest reading (``/data/latest``)::

    {"datasetId": 181, "startTime": "...", "endTime": "2024-01-01T00:03:00.000Z", "value": 1234.5}

History page (``/data``)::

    {"data": [{"value": 1234.5, ...}, ...], "pagination": {"total": 14880, ...}}
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class Reading(BaseModel):
    """
    The newest observation of wind power generation.

    ``end_time`` keeps the raw ``endTime`` string exactly as sent; the
    dashboard parses it itself when counting down to the next refresh.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: float
    end_time: str = Field(alias="endTime")


class Pagination(BaseModel):
    total: int


class HistoricalPage(BaseModel):
    """
    One page of historical observations.

    ``data`` stays loosely typed: the history scan tolerates entries that
    are missing or carry no usable value.
    """
    pagination: Pagination
    data: List[Any]
