import sys
import time
from pathlib import Path

# 将项目根目录加入 Python 搜索路径，使 Excel 直接调用时也能找到 SnowballLib
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from SnowballLib.Applications.SnowballEvaluation import run_snowball_evaluation

import xlwings as xw


def main():
    wb = xw.Book.caller()
    active_sheet = wb.sheets.active

    start_time = time.time()
    active_sheet.range('H1').value = "Running..."

    if active_sheet.name == 'Snowball_Evaluation':
        run_snowball_evaluation(active_sheet)
    else:
        active_sheet.range('A1').value = "Error: 请在 Snowball_Evaluation 页面运行"

    end_time = time.time()

    active_sheet.range('A6').value = f"Done in {end_time - start_time:.4f}s"

if __name__ == "__main__":
    xw.Book("SnowballEvaluation.xlsm").set_mock_caller()
    main()
