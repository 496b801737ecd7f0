import logging
import pandas as pd
from typing import List, Optional

from ..Base.BaseLayer import ContractSpec, ObservationDate
from ..Base.Calendar import TradingCalendar
from ..Base.Exceptions import CalendarExhausted
from ..Base.Utils import DateUtils

logger = logging.getLogger(__name__)

FORWARD = 'forward'
BACKWARD = 'backward'


class ObservationScheduler:
    """
    月度敲出观察日排程器。

    把 "起始日 + 锁定期 + 第 i 次观察" 映射为理论观察日 (纯日历月偏移)，
    再按方向规则落到实际交易日上。
    """

    def __init__(self, calendar: TradingCalendar):
        self.calendar = calendar

    def theoretical_date(self, start_date, lock_in_period: int, i: int) -> Optional[pd.Timestamp]:
        """
        第 i 个理论观察日 = 起始日 + (lock_in_period - 1 + i) 个月 (月末截断)。
        起始日不是交易日时无定义，返回 None。
        注意：结果可能是非交易日。
        """
        if i < 1:
            raise ValueError(f"observation index must be >= 1, got {i}")
        if not self.calendar.is_trading_day(start_date):
            return None
        return DateUtils.add_months(start_date, lock_in_period - 1 + i)

    @staticmethod
    def search_direction(start_date) -> str:
        """
        方向只看【起始日】的日期 (不看理论观察日)：
        上半月 (1~15 号) 发行的产品向后找，下半月发行的产品向前找。
        """
        return FORWARD if DateUtils.is_first_half_of_month(start_date) else BACKWARD

    def actual_date(self, start_date, lock_in_period: int, i: int) -> Optional[pd.Timestamp]:
        """
        第 i 个实际观察日 (一定是交易日)。

        从理论观察日开始逐日移动 (上半月 +1 天，下半月 -1 天)，直到碰到交易日。
        搜索范围限定在日历首尾之间，越界则抛出 CalendarExhausted。
        理论观察日晚于日历最后一天时直接越界：下半月的倒推 (backward) 搜索不会从日历之外退回到最后一个交易日。
        """
        theoretical = self.theoretical_date(start_date, lock_in_period, i)
        if theoretical is None:
            return None

        direction = self.search_direction(start_date)
        step = 1 if direction == FORWARD else -1
        first, last = self.calendar.first_date, self.calendar.last_date

        offset = 0
        candidate = theoretical
        while first <= candidate <= last:
            if self.calendar.is_trading_day(candidate):
                return candidate
            offset += 1
            candidate = DateUtils.shift_days(theoretical, step * offset)

        raise CalendarExhausted(theoretical, direction, first_date=first, last_date=last)

    def observation(self, start_date, lock_in_period: int, i: int) -> Optional[ObservationDate]:
        theoretical = self.theoretical_date(start_date, lock_in_period, i)
        if theoretical is None:
            return None
        return ObservationDate(
            start_date=DateUtils.to_timestamp(start_date),
            index=i,
            theoretical=theoretical,
            actual=self.actual_date(start_date, lock_in_period, i),
        )

    def schedule(self, contract: ContractSpec) -> List[ObservationDate]:
        """合约全部月度观察日 (i = 1 .. tenure - lock_in_period + 1)。起始日非交易日时为空。"""
        if not self.calendar.is_trading_day(contract.start_date):
            return []
        return [
            self.observation(contract.start_date, contract.lock_in_period, n)
            for n in range(1, contract.observation_count + 1)
        ]
