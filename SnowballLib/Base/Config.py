from dataclasses import dataclass, asdict

from .BaseLayer import ContractSpec
from .Utils import DateUtils


@dataclass(frozen=True)
class EvaluationConfig:
    """
    雪球历史回测的合约参数 (所有起始日共用)。
    默认值对应标准的 24 个月、锁定 3 个月、100% 敲出 / 80% 敲入的雪球。
    """
    tenure: int = 24
    lock_in_period: int = 3
    upper_ratio: float = 1.0
    lower_ratio: float = 0.8

    def __post_init__(self):
        # 借用 ContractSpec 的校验规则，保证配置能生成合法合约
        spec = ContractSpec(
            start_date=None,
            lock_in_period=self.lock_in_period,
            tenure=self.tenure,
            upper_ratio=self.upper_ratio,
            lower_ratio=self.lower_ratio,
        )
        object.__setattr__(self, 'lock_in_period', spec.lock_in_period)
        object.__setattr__(self, 'tenure', spec.tenure)

    @classmethod
    def from_dict(cls, config: dict):
        """
        从配置字典读取 (缺省项或值为 None 时使用默认值，Excel 空单元格读出即为 None)。
        Excel 读出的数字均为 float，期限类参数在此转为 int。
        """
        defaults = cls()

        def get(key):
            value = config.get(key)
            return getattr(defaults, key) if value is None else value

        return cls(
            tenure=_as_int(get('tenure'), 'tenure'),
            lock_in_period=_as_int(get('lock_in_period'), 'lock_in_period'),
            upper_ratio=float(get('upper_ratio')),
            lower_ratio=float(get('lower_ratio')),
        )

    def contract_for(self, start_date) -> ContractSpec:
        return ContractSpec(
            start_date=DateUtils.to_timestamp(start_date),
            lock_in_period=self.lock_in_period,
            tenure=self.tenure,
            upper_ratio=self.upper_ratio,
            lower_ratio=self.lower_ratio,
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _as_int(value, name: str) -> int:
    if float(value) != int(float(value)):
        raise ValueError(f"{name} must be a whole number of months, got {value}")
    return int(float(value))
