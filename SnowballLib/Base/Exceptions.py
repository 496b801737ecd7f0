# ==========================================================
# ======= 异常体系 (Error Taxonomy) ========================
# ==========================================================
class SnowballError(Exception):
    """本库所有业务异常的基类。"""


class NotATradingDay(SnowballError, KeyError):
    """
    按日期查询价格 / 序号时，日期不在交易日历中。
    调用方只能通过修正查询日期来恢复。
    """
    def __init__(self, date):
        self.date = date
        super().__init__(f"{date} is not a trading day in the calendar")

    def __str__(self):
        # KeyError 默认会给消息加引号
        return self.args[0]


class CalendarExhausted(SnowballError, RuntimeError):
    """
    实际观察日搜索越出了日历的首尾范围仍未找到交易日。
    说明产品的评估区间超出了已有数据，属于数据/逻辑错误。
    """
    def __init__(self, theoretical_date, direction: str, first_date=None, last_date=None):
        self.theoretical_date = theoretical_date
        self.direction = direction
        self.first_date = first_date
        self.last_date = last_date
        super().__init__(
            f"No trading day found searching {direction} from {theoretical_date} "
            f"within calendar range [{first_date}, {last_date}]"
        )
