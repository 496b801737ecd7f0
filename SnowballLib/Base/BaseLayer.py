import pandas as pd
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


# ==========================================================
# ======= 1. Price Point (行情数据点) =======================
# ==========================================================
@dataclass(frozen=True)
class PricePoint:
    """
    单个交易日的收盘价记录。
    ordinal 为按时间升序分配的稠密序号 (最早 = 1, 最新 = N)。
    """
    ordinal: int
    date: pd.Timestamp
    price: float


# ==========================================================
# ======= 2. Contract Spec (雪球合约条款) ===================
# ==========================================================
@dataclass(frozen=True)
class ContractSpec:
    """
    不可变的雪球合约定义 (按某一行起始日生成，评估一次后丢弃)。

    Attributes:
        start_date: 产品起始日 (期初观察日)。
        lock_in_period: 锁定期 (月)，锁定期内不观察敲出。
        tenure: 产品总期限 (月)。
        upper_ratio: 敲出价 / 期初价。
        lower_ratio: 敲入价 / 期初价。
    """
    start_date: pd.Timestamp
    lock_in_period: int = 3
    tenure: int = 24
    upper_ratio: float = 1.0
    lower_ratio: float = 0.8

    def __post_init__(self):
        if int(self.lock_in_period) != self.lock_in_period or self.lock_in_period < 1:
            raise ValueError(f"lock_in_period must be an integer >= 1, got {self.lock_in_period}")
        if int(self.tenure) != self.tenure or self.tenure < self.lock_in_period:
            raise ValueError(f"tenure must be an integer >= lock_in_period, got {self.tenure}")
        if self.upper_ratio <= 0:
            raise ValueError(f"upper_ratio must be positive, got {self.upper_ratio}")
        if not (0 < self.lower_ratio <= self.upper_ratio):
            raise ValueError(
                f"lower_ratio must satisfy 0 < lower_ratio <= upper_ratio, got {self.lower_ratio}"
            )
        # 整数值的 float (如 Excel 读入的 24.0) 统一存为 int
        object.__setattr__(self, 'lock_in_period', int(self.lock_in_period))
        object.__setattr__(self, 'tenure', int(self.tenure))

    @property
    def observation_count(self) -> int:
        """锁定期结束后的月度敲出观察次数。"""
        return self.tenure - self.lock_in_period + 1

    def clone(self, **kwargs):
        """创建一个修改了部分条款的新合约。"""
        return replace(self, **kwargs)


# ==========================================================
# ======= 3. Observation Date (观察日) ======================
# ==========================================================
@dataclass(frozen=True)
class ObservationDate:
    """
    第 index 个月度观察日。
    theoretical 可能落在非交易日 (仅作中间量)，actual 一定是交易日。
    """
    start_date: pd.Timestamp
    index: int
    theoretical: pd.Timestamp
    actual: pd.Timestamp


# ==========================================================
# ======= 4. Classification Result (判定结果) ===============
# ==========================================================
class ClassificationResult(Enum):
    KNOCK_OUT = "KnockOut"
    NO_KNOCK_OUT = "NoKnockOut"
    NEITHER_KNOCK_IN_NOR_KNOCK_OUT = "NeitherKnockInNorKnockOut"
    KNOCK_IN_OR_EARLY_KNOCK_OUT = "KnockInOrEarlyKnockOut"
    INDETERMINATE = "Indeterminate"

    @property
    def flag(self) -> Optional[int]:
        """结果列取值: 1 (True) / 0 (False) / None (NA，历史数据不足)。"""
        if self is ClassificationResult.INDETERMINATE:
            return None
        if self in (ClassificationResult.KNOCK_OUT,
                    ClassificationResult.NEITHER_KNOCK_IN_NOR_KNOCK_OUT):
            return 1
        return 0


@dataclass(frozen=True)
class SweepRecord:
    """逐行扫描的输出记录，生成后只读。"""
    ordinal: int
    date: pd.Timestamp
    price: float
    knock_out_result: ClassificationResult
    neither_result: ClassificationResult

    def as_row(self) -> dict:
        return {
            'ID': self.ordinal,
            'date': self.date,
            'price': self.price,
            'knock_out_result': self.knock_out_result.flag,
            'neither_result': self.neither_result.flag,
        }
