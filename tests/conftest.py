import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from SnowballLib.Base.Calendar import TradingCalendar


def _build_calendar(start, end, base=100.0, overrides=None, drop=(), step=0.0):
    """Weekday calendar; prices start at `base` and move by `step` per trading day."""
    dates = pd.bdate_range(start, end)
    if drop:
        dates = dates[~dates.isin(pd.to_datetime(list(drop)))]
    prices = base + step * np.arange(len(dates))
    series = pd.Series(prices, index=dates)
    for d, p in (overrides or {}).items():
        ts = pd.Timestamp(d)
        assert ts in series.index, f"override date {d} is not in the calendar"
        series[ts] = p
    return TradingCalendar(series.index, series.values)


@pytest.fixture
def make_calendar():
    return _build_calendar


@pytest.fixture
def weekday_calendar():
    return _build_calendar("2019-01-01", "2022-12-30")
