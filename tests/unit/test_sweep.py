import dataclasses

import pandas as pd
import pytest

from SnowballLib.Base.BaseLayer import ClassificationResult, SweepRecord
from SnowballLib.Base.Config import EvaluationConfig
from SnowballLib.Base.Exceptions import CalendarExhausted, NotATradingDay
from SnowballLib.Base.Utils import DateUtils
from SnowballLib.Evaluation.Sweep import ContractSweep

R = ClassificationResult


class RaisingClassifier:
    """Stand-in classifier that fails every row with the given error."""

    def __init__(self, error):
        self.error = error
        self.calls = 0

    def classify(self, contract):
        self.calls += 1
        raise self.error


@pytest.fixture
def three_year_calendar(make_calendar):
    return make_calendar("2019-01-01", "2021-12-31")


def test_one_record_per_row_in_ordinal_order(three_year_calendar):
    records = ContractSweep(three_year_calendar).run()
    assert len(records) == len(three_year_calendar)
    assert [r.ordinal for r in records] == list(range(1, len(three_year_calendar) + 1))
    assert records[0].date == three_year_calendar.first_date


def test_rows_without_enough_history_are_indeterminate(three_year_calendar):
    sweep = ContractSweep(three_year_calendar, EvaluationConfig(tenure=24))
    assert sweep.latest_eligible_date == pd.Timestamp("2019-12-31")

    records = sweep.run()
    eligible = [r for r in records if r.date <= pd.Timestamp("2019-12-31")]
    recent = [r for r in records if r.date > pd.Timestamp("2019-12-31")]

    assert len(eligible) == len(pd.bdate_range("2019-01-01", "2019-12-31"))
    assert all(r.knock_out_result is not R.INDETERMINATE for r in eligible)
    assert all(r.knock_out_result is R.INDETERMINATE and r.neither_result is R.INDETERMINATE
               for r in recent)


def test_recent_rows_stay_indeterminate_regardless_of_prices(make_calendar):
    cal = make_calendar("2019-01-01", "2021-12-31", overrides={"2021-06-01": 500.0, "2021-06-02": 1.0})
    records = {r.date: r for r in ContractSweep(cal).run()}
    for day in ("2021-06-01", "2021-06-02"):
        record = records[pd.Timestamp(day)]
        assert record.knock_out_result is R.INDETERMINATE
        assert record.neither_result is R.INDETERMINATE


def test_flat_prices_with_default_contract(three_year_calendar):
    # upper ratio 1.0: the first observation already equals the start price
    records = ContractSweep(three_year_calendar).run()
    eligible = [r for r in records if r.knock_out_result is not R.INDETERMINATE]
    assert eligible
    assert all(r.knock_out_result is R.KNOCK_OUT for r in eligible)
    assert all(r.neither_result is R.KNOCK_IN_OR_EARLY_KNOCK_OUT for r in eligible)


def test_slowly_falling_prices_with_default_contract(make_calendar):
    cal = make_calendar("2019-01-01", "2021-12-31", base=1000.0, step=-0.01)
    records = ContractSweep(cal).run()
    eligible = [r for r in records if r.knock_out_result is not R.INDETERMINATE]
    assert all(r.knock_out_result is R.NO_KNOCK_OUT for r in eligible)
    assert all(r.neither_result is R.NEITHER_KNOCK_IN_NOR_KNOCK_OUT for r in eligible)


def test_eligibility_uses_month_end_safe_subtraction(make_calendar):
    cal = make_calendar("2021-01-01", "2021-03-31")
    sweep = ContractSweep(cal, EvaluationConfig(tenure=1, lock_in_period=1))
    assert sweep.latest_eligible_date == pd.Timestamp("2021-02-28")
    assert sweep.is_eligible("2021-02-26")
    assert not sweep.is_eligible("2021-03-01")


def test_evaluate_row_matches_run(three_year_calendar):
    sweep = ContractSweep(three_year_calendar)
    points = list(three_year_calendar)
    records = sweep.run()
    assert sweep.evaluate_row(points[10]) == records[10]
    assert sweep.evaluate_row(points[-1]) == records[-1]


def test_records_are_immutable(three_year_calendar):
    record = ContractSweep(three_year_calendar).run()[0]
    assert isinstance(record, SweepRecord)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.knock_out_result = R.NO_KNOCK_OUT


def test_to_frame_uses_nullable_flags(three_year_calendar):
    df = ContractSweep.to_frame(ContractSweep(three_year_calendar).run())
    assert list(df.columns) == ["ID", "date", "price", "knock_out_result", "neither_result"]
    assert str(df["knock_out_result"].dtype) == "Int64"
    assert str(df["neither_result"].dtype) == "Int64"
    assert df.loc[0, "knock_out_result"] == 1
    assert df.loc[0, "neither_result"] == 0
    assert df["knock_out_result"].iloc[-1] is pd.NA


def test_to_frame_handles_empty_input():
    df = ContractSweep.to_frame([])
    assert df.empty
    assert list(df.columns) == ["ID", "date", "price", "knock_out_result", "neither_result"]


def test_calendar_exhausted_is_raised_in_strict_mode(three_year_calendar):
    error = CalendarExhausted(pd.Timestamp("2022-01-03"), "forward")
    sweep = ContractSweep(three_year_calendar, classifier=RaisingClassifier(error))
    with pytest.raises(CalendarExhausted):
        sweep.run()


def test_calendar_exhausted_degrades_when_not_strict(three_year_calendar, caplog):
    error = CalendarExhausted(pd.Timestamp("2022-01-03"), "forward")
    classifier = RaisingClassifier(error)
    sweep = ContractSweep(three_year_calendar, classifier=classifier, strict=False)
    records = sweep.run()
    assert all(r.knock_out_result is R.INDETERMINATE for r in records)
    assert classifier.calls == len(pd.bdate_range("2019-01-01", "2019-12-31"))
    assert any(rec.levelname == "ERROR" for rec in caplog.records)


def test_not_a_trading_day_degrades_row(three_year_calendar):
    sweep = ContractSweep(three_year_calendar, classifier=RaisingClassifier(NotATradingDay("2019-01-05")))
    records = sweep.run()
    assert all(r.neither_result is R.INDETERMINATE for r in records)


def test_progress_bar_does_not_change_results(three_year_calendar):
    sweep = ContractSweep(three_year_calendar, EvaluationConfig(tenure=30, lock_in_period=6))
    assert sweep.run(show_progress=True) == sweep.run()


def test_eligibility_cutoff_is_computed_once(three_year_calendar, monkeypatch):
    sweep = ContractSweep(three_year_calendar)
    calls = []
    original = DateUtils.subtract_months
    monkeypatch.setattr(DateUtils, "subtract_months",
                        staticmethod(lambda d, n: calls.append(n) or original(d, n)))

    sweep.run()
    assert calls == []
    assert sweep.latest_eligible_date == pd.Timestamp("2019-12-31")
