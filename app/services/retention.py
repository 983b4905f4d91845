# -*- coding: utf-8 -*-
"""
就診紀錄保存服務 - 清除超過保存期限的就診紀錄

清除不調整病人的 visit_count：visit_count 是終身累計，
清除後資料表只保留近期紀錄，兩者不再相等。
"""

import logging
from datetime import datetime
from sqlalchemy.orm import Session

from ..exceptions import InvalidArgument
from ..models.audit import AuditAction
from ..models.user import User
from ..models.visit import Visit
from ..time_utils import subtract_months, utcnow
from . import audit as audit_service

logger = logging.getLogger(__name__)


def get_cutoff(months_old: int, now: datetime = None) -> datetime:
    """保存期限：now 往前推 months_old 個日曆月"""
    if now is None:
        now = utcnow()
    return subtract_months(now, months_old)


def purge_visits_older_than(
    db: Session,
    months_old: int,
    now: datetime = None,
    actor: User = None,
) -> int:
    """
    刪除所有病人中建立時間早於保存期限的就診紀錄

    Returns:
        刪除筆數
    """
    if months_old is None or months_old < 1:
        raise InvalidArgument("months 參數至少為 1")

    cutoff = get_cutoff(months_old, now)

    deleted = (
        db.query(Visit)
        .filter(Visit.created_at < cutoff)
        .delete(synchronize_session=False)
    )

    audit_service.log_action(
        db,
        AuditAction.VISIT_PURGE.value,
        user=actor,
        target_type="visit",
        details={"months_old": months_old, "cutoff": cutoff.isoformat(), "deleted": deleted},
    )
    db.commit()

    logger.info("Purged %s visits created before %s", deleted, cutoff.isoformat())
    return deleted
