# -*- coding: utf-8 -*-
"""
管理 API - 操作日誌查詢
"""

from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from ..schemas import AuditLogOut
from ..services.auth import require_admin
from ..services import audit as audit_service

router = APIRouter(prefix="/api/admin", tags=["管理"])


@router.get("/audit-logs", response_model=List[AuditLogOut])
async def list_audit_logs(
    action: str = None,
    user_id: int = None,
    target_type: str = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """操作日誌（新到舊）"""
    return audit_service.get_audit_logs(
        db,
        action=action,
        user_id=user_id,
        target_type=target_type,
        limit=limit,
        offset=offset,
    )


@router.get("/audit-actions")
async def list_audit_actions(current_user: User = Depends(require_admin)):
    """可篩選的操作類型"""
    return audit_service.ALL_ACTIONS
