import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

# ==========================================================
# ======= 1. Date Utilities (日期工具库) ===================
# ==========================================================
class DateUtils:
    """统一管理日期的标准化与日历运算，避免各模块各自处理 datetime / date / str"""

    @staticmethod
    def to_timestamp(d):
        """
        转换为去掉时分秒的 pd.Timestamp。
        None / NaN / NaT 统一返回 None。
        """
        if d is None:
            return None
        ts = pd.Timestamp(d)
        if pd.isna(ts):
            return None
        return ts.normalize()

    @staticmethod
    def add_months(d, n: int):
        """
        月份加法 (月末安全)。
        目标月份更短时截断到该月最后一天，例如 2019-11-30 + 3个月 = 2020-02-29。
        """
        return DateUtils.to_timestamp(d) + pd.DateOffset(months=n)

    @staticmethod
    def subtract_months(d, n: int):
        return DateUtils.to_timestamp(d) - pd.DateOffset(months=n)

    @staticmethod
    def shift_days(d, n: int):
        return d + pd.Timedelta(days=n)

    @staticmethod
    def is_first_half_of_month(d) -> bool:
        """1 ~ 15 号为上半月"""
        return 1 <= DateUtils.to_timestamp(d).day <= 15


# ==========================================================
# ======= 2. Plot Utilities (绘图工具) =====================
# ==========================================================
class PlotUtils:
    """结果可视化，只负责画图，不参与任何判定逻辑"""

    OUTCOME_STYLES = {
        1: ('tab:green', 'Knock-out'),
        0: ('tab:red', 'No knock-out'),
    }

    @staticmethod
    def plot_sweep_results(result_df: pd.DataFrame, column: str = 'knock_out_result',
                           title: str = 'Snowball Evaluation', show_plot: bool = True):
        """
        画出标的价格走势，并按判定结果给每个起始日着色。
        结果为 NA 的起始日 (历史数据不足) 不着色。

        Args:
            result_df: ContractSweep.to_frame() 的输出 (需包含 date, price 及结果列)。
            column: 用于着色的结果列。
            show_plot: 是否直接弹出窗口 (Excel 嵌图时应为 False)。
        Returns:
            matplotlib.figure.Figure
        """
        fig, (ax_price, ax_rate) = plt.subplots(
            2, 1, figsize=(12, 8), sharex=True, gridspec_kw={'height_ratios': [3, 1]}
        )

        dates = pd.to_datetime(result_df['date'])
        ax_price.plot(dates, result_df['price'], color='grey', linewidth=1.0, label='Price')

        flags = result_df[column]
        for flag, (color, label) in PlotUtils.OUTCOME_STYLES.items():
            mask = (flags == flag).fillna(False).to_numpy(dtype=bool)
            if mask.any():
                ax_price.scatter(dates[mask], result_df['price'][mask], s=6, color=color, label=label)

        ax_price.set_title(title)
        ax_price.set_ylabel('Price')
        ax_price.legend(loc='upper left')
        ax_price.grid(True, alpha=0.3)

        # 下图: 按起始月份统计的结果比例 (滚动观察结论的稳定性)
        evaluated = result_df.loc[flags.notna(), ['date', column]].copy()
        if not evaluated.empty:
            evaluated['month'] = pd.to_datetime(evaluated['date']).dt.to_period('M').dt.to_timestamp()
            monthly_rate = evaluated.groupby('month')[column].mean().astype(float)
            ax_rate.bar(monthly_rate.index, monthly_rate.values, width=20, color='tab:blue', alpha=0.7)
        ax_rate.set_ylim(0, 1)
        ax_rate.set_ylabel(f'{column} rate')
        ax_rate.grid(True, alpha=0.3)

        fig.tight_layout()
        if show_plot:
            plt.show()
        return fig

    @staticmethod
    def summary_table(summary: dict) -> np.ndarray:
        """把统计字典转成两列二维数组，便于写入 Excel。"""
        return np.array([[k, v] for k, v in summary.items()], dtype=object)
