# -*- coding: utf-8 -*-
"""
時間工具 - 一律使用 naive UTC
"""

from calendar import monthrange
from datetime import datetime, timezone
from typing import Tuple


def utcnow() -> datetime:
    """目前 UTC 時間（不含 tzinfo，與資料庫欄位一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def first_day_of_month(moment: datetime) -> datetime:
    """當月第一天 00:00"""
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def first_day_of_next_month(moment: datetime) -> datetime:
    """下個月第一天 00:00"""
    start = first_day_of_month(moment)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def month_window(moment: datetime) -> Tuple[datetime, datetime]:
    """當月區間 [月初, 下月初)"""
    return first_day_of_month(moment), first_day_of_next_month(moment)


def subtract_months(moment: datetime, months: int) -> datetime:
    """往前推 N 個日曆月，日期超出該月天數時取月底"""
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
