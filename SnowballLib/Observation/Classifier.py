import logging
import numpy as np
from typing import Optional, Tuple

from ..Base.BaseLayer import ClassificationResult, ContractSpec
from ..Base.Calendar import TradingCalendar
from .Scheduler import ObservationScheduler

logger = logging.getLogger(__name__)


class BarrierClassifier:
    """
    雪球障碍事件判定器。

    两个判定共用同一个期初价 base_price = 起始日收盘价：
    1. classify_knock_out: 只在【月度观察日】检查敲出。
    2. classify_neither:   在首个与最后一个观察日之间的【每一个交易日】检查敲入和敲出。

    注意两者对敲出的观察频率不同 (月度 vs 每日)，这是有意保留的口径差异，不要合并。
    """

    def __init__(self, calendar: TradingCalendar, scheduler: Optional[ObservationScheduler] = None):
        self.calendar = calendar
        self.scheduler = scheduler if scheduler is not None else ObservationScheduler(calendar)

    def base_price(self, start_date) -> float:
        """期初价。起始日不是交易日时抛出 NotATradingDay。"""
        return self.calendar.price_at(start_date)

    def classify_knock_out(self, start_date, upper_ratio: float, tenure: int,
                           lock_in_period: int) -> ClassificationResult:
        """
        到期前是否在某个月度观察日敲出 (价格 >= 期初价 * upper_ratio)。
        第一次敲出即返回，不再继续观察。
        """
        base_price = self.base_price(start_date)
        barrier = base_price * upper_ratio

        for n in range(1, tenure - lock_in_period + 2):
            obs_date = self.scheduler.actual_date(start_date, lock_in_period, n)
            obs_price = self.calendar.price_at(obs_date)
            if obs_price >= barrier:
                logger.debug("Knock-out for start %s at observation %d (%s): %.4f >= %.4f",
                             start_date, n, obs_date.date(), obs_price, barrier)
                return ClassificationResult.KNOCK_OUT

        return ClassificationResult.NO_KNOCK_OUT

    def classify_neither(self, start_date, lower_ratio: float, upper_ratio: float, tenure: int,
                         lock_in_period: int) -> ClassificationResult:
        """
        首个观察日到最后一个观察日之间 (按交易日序号的闭区间)，
        是否每天都满足 lower_ratio * 期初价 <= 价格 < upper_ratio * 期初价。
        任意一天越界即判定为 KNOCK_IN_OR_EARLY_KNOCK_OUT。
        """
        base_price = self.base_price(start_date)

        first_obs = self.scheduler.actual_date(start_date, lock_in_period, 1)
        last_obs = self.scheduler.actual_date(start_date, lock_in_period, tenure - lock_in_period + 1)
        first_id = self.calendar.ordinal_of(first_obs)
        last_id = self.calendar.ordinal_of(last_obs)

        window = self.calendar.prices_between(first_id, last_id)
        breached = (window < lower_ratio * base_price) | (window >= upper_ratio * base_price)

        if breached.any():
            hit_id = first_id + int(np.argmax(breached))
            logger.debug("Barrier breached for start %s on %s (price %.4f)",
                         start_date, self.calendar.date_at(hit_id).date(), window[hit_id - first_id])
            return ClassificationResult.KNOCK_IN_OR_EARLY_KNOCK_OUT

        return ClassificationResult.NEITHER_KNOCK_IN_NOR_KNOCK_OUT

    def classify(self, contract: ContractSpec) -> Tuple[ClassificationResult, ClassificationResult]:
        """对一个合约同时做两种判定，返回 (knock_out_result, neither_result)。"""
        knock_out = self.classify_knock_out(
            contract.start_date, contract.upper_ratio, contract.tenure, contract.lock_in_period
        )
        neither = self.classify_neither(
            contract.start_date, contract.lower_ratio, contract.upper_ratio,
            contract.tenure, contract.lock_in_period
        )
        return knock_out, neither
