import logging
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {'.xlsx', '.xlsm', '.xls'}


def load_price_series(path: Union[str, Path], date_col: str = 'date', price_col: str = 'price',
                      sheet_name=0) -> pd.DataFrame:
    """
    读取历史行情文件 (Excel 或 CSV)，输出标准化的 [ID, date, price] 表。

    Args:
        path: 行情文件路径。
        date_col / price_col: 源文件中的日期列与价格列名。
        sheet_name: Excel 工作表 (仅对 Excel 生效)。
    Returns:
        pd.DataFrame: 按日期升序，ID 从 1 (最早) 到 N (最新)。
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Price file not found: {path}")

    if path.suffix.lower() in EXCEL_SUFFIXES:
        raw = pd.read_excel(path, sheet_name=sheet_name)
    elif path.suffix.lower() == '.csv':
        raw = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported price file type: {path.suffix}")

    logger.info("Loaded %d raw rows from %s", len(raw), path)
    return prepare_price_frame(raw, date_col=date_col, price_col=price_col)


def prepare_price_frame(raw: pd.DataFrame, date_col: str = 'date', price_col: str = 'price') -> pd.DataFrame:
    """
    列选择 + 日期解析 + 排序 + 分配 ID。
    源数据通常是最新日期在最上面，这里统一改为升序。
    """
    missing = [c for c in (date_col, price_col) if c not in raw.columns]
    if missing:
        raise ValueError(f"Price data must contain columns: {missing}")

    df = raw[[date_col, price_col]].copy()
    df.columns = ['date', 'price']
    df['date'] = pd.to_datetime(df['date']).dt.normalize()
    df['price'] = pd.to_numeric(df['price'], errors='coerce')

    n_before = len(df)
    df = df.dropna(subset=['date', 'price'])
    if len(df) < n_before:
        logger.warning("Dropped %d rows with missing date or price", n_before - len(df))

    df = df.sort_values('date').reset_index(drop=True)
    df.insert(0, 'ID', np.arange(1, len(df) + 1))
    return df
