import logging
import numpy as np
import pandas as pd
from typing import Iterable, Iterator, Tuple

from .BaseLayer import PricePoint
from .Exceptions import NotATradingDay
from .Utils import DateUtils

logger = logging.getLogger(__name__)


class TradingCalendar:
    """
    交易日历：持有按时间升序排列的全部 PricePoint。

    约定：
    1. 日期严格递增、无重复，价格为正。
    2. 序号 (ordinal) 从 1 开始稠密分配，最早一天为 1，最新一天为 N。
    3. 构造完成后只读，所有查询无副作用。
    """

    def __init__(self, dates: Iterable, prices: Iterable[float]):
        index = pd.DatetimeIndex([DateUtils.to_timestamp(d) for d in dates])
        values = np.asarray(list(prices), dtype=float)

        if len(index) != len(values):
            raise ValueError(f"dates and prices must have the same length ({len(index)} != {len(values)})")
        if len(index) == 0:
            raise ValueError("TradingCalendar requires at least one price point")
        if index.hasnans:
            raise ValueError("TradingCalendar dates must not contain missing values")
        if not index.is_monotonic_increasing or not index.is_unique:
            raise ValueError("TradingCalendar dates must be strictly increasing with no duplicates")
        if np.isnan(values).any() or (values <= 0).any():
            raise ValueError("TradingCalendar prices must be positive numbers")

        self._dates = index
        self._prices = values
        self._prices.setflags(write=False)
        # date -> ordinal (1-based)，一次构建，O(1) 查询
        self._ordinals = {d: i + 1 for i, d in enumerate(index)}

        logger.debug("TradingCalendar built: %d points from %s to %s",
                     len(index), self.first_date.date(), self.last_date.date())

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple]):
        """由 (date, price) 序列构建。"""
        pairs = list(pairs)
        return cls([p[0] for p in pairs], [p[1] for p in pairs])

    @classmethod
    def from_frame(cls, df: pd.DataFrame, date_col: str = 'date', price_col: str = 'price'):
        """由已清洗并升序排列的 DataFrame 构建。"""
        missing = [c for c in (date_col, price_col) if c not in df.columns]
        if missing:
            raise ValueError(f"Price data must contain columns: {missing}")
        return cls(df[date_col].tolist(), df[price_col].tolist())

    # --- 基础查询 ---

    def is_trading_day(self, d) -> bool:
        ts = DateUtils.to_timestamp(d)
        return ts is not None and ts in self._ordinals

    def ordinal_of(self, d) -> int:
        ts = DateUtils.to_timestamp(d)
        try:
            return self._ordinals[ts]
        except KeyError:
            raise NotATradingDay(d) from None

    def price_at(self, d) -> float:
        return float(self._prices[self.ordinal_of(d) - 1])

    def date_at(self, ordinal: int) -> pd.Timestamp:
        if not 1 <= ordinal <= len(self):
            raise IndexError(f"ordinal {ordinal} out of range [1, {len(self)}]")
        return self._dates[ordinal - 1]

    def prices_between(self, first_ordinal: int, last_ordinal: int) -> np.ndarray:
        """返回序号落在 [first_ordinal, last_ordinal] (闭区间) 内的每日价格。"""
        if first_ordinal < 1 or last_ordinal > len(self):
            raise IndexError(f"ordinal range [{first_ordinal}, {last_ordinal}] outside [1, {len(self)}]")
        return self._prices[first_ordinal - 1:last_ordinal]

    # --- 区间信息 ---

    @property
    def first_date(self) -> pd.Timestamp:
        return self._dates[0]

    @property
    def last_date(self) -> pd.Timestamp:
        return self._dates[-1]

    @property
    def dates(self) -> pd.DatetimeIndex:
        return self._dates

    @property
    def prices(self) -> np.ndarray:
        return self._prices

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self) -> Iterator[PricePoint]:
        for i, (d, p) in enumerate(zip(self._dates, self._prices)):
            yield PricePoint(ordinal=i + 1, date=d, price=float(p))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'ID': np.arange(1, len(self) + 1),
            'date': self._dates,
            'price': self._prices,
        })
