# -*- coding: utf-8 -*-
"""
每月免費額度服務

每位病人每個日曆月前 3 次就診免費。當月次數以就診紀錄的 created_at
落在 [月初, 下月初) 計算，與終身就診序號無關。
"""

from datetime import datetime
from typing import List
from sqlalchemy.orm import Session

from ..models.visit import Visit
from ..time_utils import month_window, utcnow

FREE_VISIT_LIMIT = 3


def _current_month_query(db: Session, patient_id: int, now: datetime = None):
    if now is None:
        now = utcnow()
    start, end = month_window(now)
    return db.query(Visit).filter(
        Visit.patient_id == patient_id,
        Visit.created_at >= start,
        Visit.created_at < end,
    )


def count_visits_in_current_month(db: Session, patient_id: int, now: datetime = None) -> int:
    """當月就診次數"""
    return _current_month_query(db, patient_id, now).count()


def list_visits_in_current_month(db: Session, patient_id: int, now: datetime = None) -> List[Visit]:
    """當月就診紀錄（依建立時間由舊到新）"""
    return (
        _current_month_query(db, patient_id, now)
        .order_by(Visit.created_at.asc(), Visit.id.asc())
        .all()
    )


def remaining_free_visits(monthly_count: int) -> int:
    """剩餘免費次數（不會是負數）"""
    return max(0, FREE_VISIT_LIMIT - monthly_count)


def is_free_visit(monthly_visit_number: int) -> bool:
    """第 N 次（當月）就診是否免費"""
    return monthly_visit_number <= FREE_VISIT_LIMIT
