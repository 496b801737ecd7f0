import logging
import pandas as pd
from tqdm import tqdm
from typing import List, Optional

from ..Base.BaseLayer import ClassificationResult, PricePoint, SweepRecord
from ..Base.Calendar import TradingCalendar
from ..Base.Config import EvaluationConfig
from ..Base.Exceptions import CalendarExhausted, NotATradingDay
from ..Base.Utils import DateUtils
from ..Observation.Classifier import BarrierClassifier

logger = logging.getLogger(__name__)

INDETERMINATE = ClassificationResult.INDETERMINATE


class ContractSweep:
    """
    逐行扫描器：把行情中的每一个交易日都当作一次雪球产品的起始日进行判定。

    核心职责：
    1. 判断该起始日之后是否还有足够长的历史 (>= 产品期限)，不足则记为 INDETERMINATE。
    2. 对满足条件的起始日分别调用敲出判定与 "既未敲入也未敲出" 判定。
    3. 每行输出一条不可变记录，行与行之间互不依赖。
    """

    def __init__(self, calendar: TradingCalendar, config: Optional[EvaluationConfig] = None,
                 classifier: Optional[BarrierClassifier] = None, strict: bool = True):
        """
        Args:
            calendar: 交易日历 (全部行情)。
            config: 合约参数，默认使用 EvaluationConfig()。
            classifier: 判定器，默认基于同一份日历构建。
            strict: True 时日历越界 (CalendarExhausted) 直接抛出；
                    False 时记录错误日志并把该行记为 INDETERMINATE。
        """
        self.calendar = calendar
        self.cfg = config if config is not None else EvaluationConfig()
        self.classifier = classifier if classifier is not None else BarrierClassifier(calendar)
        self.strict = strict
        # 日历与配置均不可变，截止日只算一次
        self._latest_eligible_date = DateUtils.subtract_months(calendar.last_date, self.cfg.tenure)

    @property
    def latest_eligible_date(self) -> pd.Timestamp:
        """最新数据日期往前推一个完整期限，晚于此日期的起始日历史不足。"""
        return self._latest_eligible_date

    def is_eligible(self, d) -> bool:
        return DateUtils.to_timestamp(d) <= self.latest_eligible_date

    def evaluate_row(self, point: PricePoint) -> SweepRecord:
        """单行判定，纯函数 (只读日历与配置)。"""
        knock_out, neither = INDETERMINATE, INDETERMINATE

        if self.is_eligible(point.date):
            contract = self.cfg.contract_for(point.date)
            try:
                knock_out, neither = self.classifier.classify(contract)
            except NotATradingDay as e:
                logger.warning("Row %d (%s) degraded to Indeterminate: %s",
                               point.ordinal, point.date.date(), e)
                knock_out, neither = INDETERMINATE, INDETERMINATE
            except CalendarExhausted as e:
                if self.strict:
                    raise
                logger.error("Row %d (%s) degraded to Indeterminate: %s",
                             point.ordinal, point.date.date(), e)
                knock_out, neither = INDETERMINATE, INDETERMINATE

        return SweepRecord(
            ordinal=point.ordinal,
            date=point.date,
            price=point.price,
            knock_out_result=knock_out,
            neither_result=neither,
        )

    def run(self, show_progress: bool = False) -> List[SweepRecord]:
        """
        执行全量扫描。
        Returns:
            List[SweepRecord]: 与日历逐行对应 (按序号升序)。
        """
        logger.info("Evaluating %d start dates (tenure=%d, lock_in=%d, upper=%.4f, lower=%.4f); "
                    "start dates after %s are indeterminate",
                    len(self.calendar), self.cfg.tenure, self.cfg.lock_in_period,
                    self.cfg.upper_ratio, self.cfg.lower_ratio, self.latest_eligible_date.date())

        points = iter(self.calendar)
        if show_progress:
            points = tqdm(points, total=len(self.calendar), mininterval=1.0)

        records = [self.evaluate_row(p) for p in points]

        n_evaluated = sum(r.knock_out_result is not INDETERMINATE for r in records)
        logger.info("Sweep completed: %d evaluated, %d indeterminate",
                    n_evaluated, len(records) - n_evaluated)
        return records

    @staticmethod
    def to_frame(records: List[SweepRecord]) -> pd.DataFrame:
        """转换为结果表，结果列为可空整数 (1 / 0 / <NA>)。"""
        df = pd.DataFrame(
            [r.as_row() for r in records],
            columns=['ID', 'date', 'price', 'knock_out_result', 'neither_result'],
        )
        for col in ('knock_out_result', 'neither_result'):
            df[col] = df[col].astype('Int64')
        return df
