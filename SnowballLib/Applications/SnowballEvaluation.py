import xlwings as xw
import pandas as pd
import matplotlib.pyplot as plt

from SnowballLib.Evaluation.EvaluationApp import run_evaluation_logic
from SnowballLib.Base.Utils import PlotUtils


def run_snowball_evaluation(sheet: xw.Sheet):
    """
    Excel 按钮入口：读取合约参数与历史行情，逐日回测雪球产品，写回结果并作图。

    Sheet 布局:
        B1:B4  产品期限(月) / 锁定期(月) / 敲出比例 / 敲入比例
        D1     行情表 (表头: date, price)
        H1     输出逐行结果
        A7     输出统计
    """
    # -----------------------------------------------------
    # 1. 从 Excel 读取配置参数 (B列)
    # -----------------------------------------------------
    tenure, lock_in_period, upper_ratio, lower_ratio = sheet.range('B1:B4').value
    config = {
        'tenure': tenure,
        'lock_in_period': lock_in_period,
        'upper_ratio': upper_ratio,
        'lower_ratio': lower_ratio,
    }

    # -----------------------------------------------------
    # 2. 读取行情数据 (D列 - E列)
    # -----------------------------------------------------
    raw_data = sheet.range('D1').options(pd.DataFrame, index=False, expand='table').value
    df = raw_data.copy()
    df.columns = ['date', 'price'] + list(df.columns[2:])

    # -----------------------------------------------------
    # 3. 调用业务逻辑
    # -----------------------------------------------------
    result_df, summary = run_evaluation_logic(df, config)

    # -----------------------------------------------------
    # 4. 画图并嵌入 Excel
    # -----------------------------------------------------
    fig = PlotUtils.plot_sweep_results(result_df, show_plot=False)
    pic_name = 'Snowball_Evaluation_Chart'

    for pic in sheet.pictures:
        if pic.name == pic_name:
            pic.delete()
            break

    sheet.pictures.add(fig, name=pic_name, update=True,
                       left=sheet.range('N1').left,
                       top=sheet.range('N1').top)
    plt.close(fig)

    # -----------------------------------------------------
    # 5. 结果写回当前 Sheet
    # -----------------------------------------------------
    output_cell = 'H1'
    sheet.range(output_cell).expand('table').clear_contents()

    # <NA> 写入 Excel 会报错，统一转为空单元格
    out_df = result_df.astype(object).where(result_df.notna(), None)
    sheet.range(output_cell).options(index=False).value = out_df

    sheet.range('A7').expand('table').clear_contents()
    sheet.range('A7').value = PlotUtils.summary_table(summary).tolist()
