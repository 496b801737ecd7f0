import logging
import pandas as pd
from typing import Tuple, Union

from ..Base.Calendar import TradingCalendar
from ..Base.Config import EvaluationConfig
from ..Base.DataLoader import prepare_price_frame
from .Sweep import ContractSweep
from .Analytics import SweepAnalyzer

logger = logging.getLogger(__name__)


def run_evaluation_logic(price_df: pd.DataFrame, config: Union[dict, EvaluationConfig],
                         show_progress: bool = False, strict: bool = True) -> Tuple[pd.DataFrame, dict]:
    """
    纯业务逻辑入口。

    Args:
        price_df: 行情 DataFrame (至少包含 date, price 两列)。
        config: 合约参数字典或 EvaluationConfig。
    Returns:
        result_df: 逐行结果表 [ID, date, price, knock_out_result, neither_result]。
        summary: 统计字典。
    """
    logger.info("Initializing Snowball Evaluation...")

    cfg = config if isinstance(config, EvaluationConfig) else EvaluationConfig.from_dict(config)
    clean_df = prepare_price_frame(price_df)
    calendar = TradingCalendar.from_frame(clean_df)

    sweep = ContractSweep(calendar, cfg, strict=strict)
    result_df = ContractSweep.to_frame(sweep.run(show_progress=show_progress))

    summary = SweepAnalyzer(result_df).summary()
    logger.info("Knock-out rate %.2f%%, neither rate %.2f%% over %d evaluated start dates",
                100 * summary['knock_out_rate'], 100 * summary['neither_rate'], summary['evaluated'])
    return result_df, summary
