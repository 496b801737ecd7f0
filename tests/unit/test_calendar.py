import datetime as dt

import numpy as np
import pandas as pd
import pytest

from SnowballLib.Base.BaseLayer import PricePoint
from SnowballLib.Base.Calendar import TradingCalendar
from SnowballLib.Base.Exceptions import NotATradingDay


def test_every_series_date_is_a_trading_day(weekday_calendar):
    assert all(weekday_calendar.is_trading_day(d) for d in weekday_calendar.dates)


def test_dates_outside_series_are_not_trading_days(weekday_calendar):
    assert not weekday_calendar.is_trading_day("2020-02-29")  # Saturday
    assert not weekday_calendar.is_trading_day("2018-12-31")  # before first date
    assert not weekday_calendar.is_trading_day("2023-01-02")  # after last date
    assert not weekday_calendar.is_trading_day(None)
    assert not weekday_calendar.is_trading_day(pd.NaT)


def test_accepts_date_datetime_and_string_queries(weekday_calendar):
    assert weekday_calendar.is_trading_day(dt.date(2020, 2, 28))
    assert weekday_calendar.is_trading_day(dt.datetime(2020, 2, 28, 15, 0))
    assert weekday_calendar.is_trading_day("2020-02-28")


def test_ordinals_are_dense_and_oldest_first():
    cal = TradingCalendar.from_pairs([
        ("2021-01-04", 10.0),
        ("2021-01-05", 11.0),
        ("2021-01-07", 12.5),
    ])
    assert len(cal) == 3
    assert cal.ordinal_of("2021-01-04") == 1
    assert cal.ordinal_of("2021-01-07") == 3
    assert cal.date_at(2) == pd.Timestamp("2021-01-05")
    assert cal.price_at("2021-01-07") == 12.5
    assert cal.first_date == pd.Timestamp("2021-01-04")
    assert cal.last_date == pd.Timestamp("2021-01-07")


def test_ordinal_and_date_are_a_bijection(weekday_calendar):
    for ordinal in (1, 100, len(weekday_calendar)):
        assert weekday_calendar.ordinal_of(weekday_calendar.date_at(ordinal)) == ordinal


def test_missing_date_raises_not_a_trading_day(weekday_calendar):
    with pytest.raises(NotATradingDay) as excinfo:
        weekday_calendar.price_at("2020-02-29")
    assert excinfo.value.date == "2020-02-29"
    assert "2020-02-29" in str(excinfo.value)

    with pytest.raises(KeyError):
        weekday_calendar.ordinal_of("2020-03-01")


def test_date_at_out_of_range(weekday_calendar):
    with pytest.raises(IndexError):
        weekday_calendar.date_at(0)
    with pytest.raises(IndexError):
        weekday_calendar.date_at(len(weekday_calendar) + 1)


def test_prices_between_is_inclusive():
    cal = TradingCalendar(pd.bdate_range("2021-01-04", periods=5), [1.0, 2.0, 3.0, 4.0, 5.0])
    np.testing.assert_array_equal(cal.prices_between(2, 4), [2.0, 3.0, 4.0])
    np.testing.assert_array_equal(cal.prices_between(3, 3), [3.0])
    with pytest.raises(IndexError):
        cal.prices_between(0, 2)


def test_iteration_yields_price_points():
    cal = TradingCalendar(["2021-01-04", "2021-01-05"], [10.0, 11.0])
    points = list(cal)
    assert points == [
        PricePoint(ordinal=1, date=pd.Timestamp("2021-01-04"), price=10.0),
        PricePoint(ordinal=2, date=pd.Timestamp("2021-01-05"), price=11.0),
    ]


def test_from_frame_and_to_frame():
    df = pd.DataFrame({"date": pd.to_datetime(["2021-01-04", "2021-01-05"]), "price": [10.0, 11.0]})
    cal = TradingCalendar.from_frame(df)
    out = cal.to_frame()
    assert list(out.columns) == ["ID", "date", "price"]
    assert out["ID"].tolist() == [1, 2]
    assert out["price"].tolist() == [10.0, 11.0]

    with pytest.raises(ValueError):
        TradingCalendar.from_frame(df.rename(columns={"price": "close"}))


@pytest.mark.parametrize(
    "dates, prices",
    [
        (["2021-01-05", "2021-01-04"], [1.0, 2.0]),  # not increasing
        (["2021-01-04", "2021-01-04"], [1.0, 2.0]),  # duplicate
        (["2021-01-04", "2021-01-05"], [1.0, 0.0]),  # non-positive price
        (["2021-01-04", "2021-01-05"], [1.0, float("nan")]),
        (["2021-01-04", None], [1.0, 2.0]),
        (["2021-01-04"], [1.0, 2.0]),  # length mismatch
        ([], []),
    ],
)
def test_construction_rejects_invalid_series(dates, prices):
    with pytest.raises(ValueError):
        TradingCalendar(dates, prices)


def test_prices_are_read_only(weekday_calendar):
    with pytest.raises(ValueError):
        weekday_calendar.prices[0] = 1.0
