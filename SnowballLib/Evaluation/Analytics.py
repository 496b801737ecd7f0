import pandas as pd

RESULT_COLUMNS = ('knock_out_result', 'neither_result')


class SweepAnalyzer:
    """基于逐行结果表统计敲出概率 / 安全到期概率"""

    def __init__(self, result_df: pd.DataFrame):
        missing = [c for c in ('date',) + RESULT_COLUMNS if c not in result_df.columns]
        if missing:
            raise ValueError(f"Result table must contain columns: {missing}")
        self.df = result_df.copy()
        self.df['date'] = pd.to_datetime(self.df['date'])

    def summary(self) -> dict:
        evaluated = self.df['knock_out_result'].notna()
        n_evaluated = int(evaluated.sum())
        n_knock_out = int((self.df['knock_out_result'] == 1).fillna(False).sum())
        n_neither = int((self.df['neither_result'] == 1).fillna(False).sum())

        return {
            'rows': len(self.df),
            'evaluated': n_evaluated,
            'indeterminate': len(self.df) - n_evaluated,
            'knock_out': n_knock_out,
            'neither': n_neither,
            'knock_out_rate': n_knock_out / n_evaluated if n_evaluated else float('nan'),
            'neither_rate': n_neither / n_evaluated if n_evaluated else float('nan'),
        }

    def by_year(self) -> pd.DataFrame:
        """按起始年份统计 (只包含已判定的行)。"""
        evaluated = self.df[self.df['knock_out_result'].notna()].copy()
        evaluated['year'] = evaluated['date'].dt.year
        for col in RESULT_COLUMNS:
            evaluated[col] = evaluated[col].astype(float)

        grouped = evaluated.groupby('year')
        out = pd.DataFrame({
            'evaluated': grouped.size(),
            'knock_out': grouped['knock_out_result'].sum().astype(int),
            'neither': grouped['neither_result'].sum().astype(int),
        })
        out['knock_out_rate'] = out['knock_out'] / out['evaluated']
        out['neither_rate'] = out['neither'] / out['evaluated']
        return out
