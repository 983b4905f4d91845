# -*- coding: utf-8 -*-
"""
操作日誌服務 - 記錄與查詢操作日誌
"""

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc
import json

from ..models.audit import AuditLog, AuditAction, ACTION_LABELS
from ..models.user import User


def log_action(
    db: Session,
    action: str,
    user: Optional[User] = None,
    target_type: str = None,
    target_id: int = None,
    target_name: str = None,
    details: dict = None,
) -> AuditLog:
    """
    記錄操作日誌

    只加入 session，不 commit：與被記錄的異動在同一個交易內提交。
    """
    log = AuditLog(
        user_id=user.id if user else None,
        user_name=user.username if user else None,
        action=action,
        target_type=target_type,
        target_id=target_id,
        target_name=target_name,
        details=json.dumps(details, ensure_ascii=False, default=str) if details else None,
    )
    db.add(log)
    return log


def get_audit_logs(
    db: Session,
    action: str = None,
    user_id: int = None,
    target_type: str = None,
    limit: int = 100,
    offset: int = 0,
) -> List[AuditLog]:
    """查詢操作日誌（新到舊）"""
    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action == action)

    if user_id:
        query = query.filter(AuditLog.user_id == user_id)

    if target_type:
        query = query.filter(AuditLog.target_type == target_type)

    return query.order_by(desc(AuditLog.created_at), desc(AuditLog.id)).offset(offset).limit(limit).all()


# 所有可用的操作類型（供篩選使用）
ALL_ACTIONS = [
    {"value": a.value, "label": ACTION_LABELS.get(a.value, a.value)}
    for a in AuditAction
]
