# -*- coding: utf-8 -*-
"""
就診服務 - 登記就診、付款狀態、就診紀錄查詢

登記就診時同時決定：
- 終身序號 visit_number = 病人累計就診次數 + 1
- 是否免費 = 當月第幾次就診（另外計算）是否在免費額度內
兩者來自不同查詢，刻意不合併成同一個序號。
"""

import logging
from datetime import datetime
from typing import Dict, Optional, Tuple
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import NotFound, Conflict, InvalidState
from ..models.audit import AuditAction
from ..models.patient import Patient
from ..models.user import User
from ..models.visit import Visit
from ..time_utils import utcnow
from . import audit as audit_service
from . import quota

logger = logging.getLogger(__name__)


def get_visit(db: Session, visit_id: int) -> Visit:
    """取得就診紀錄"""
    visit = db.query(Visit).filter(Visit.id == visit_id).first()
    if not visit:
        raise NotFound("找不到就診紀錄")
    return visit


def record_visit(
    db: Session,
    patient_id: int,
    actor: User,
    charges: Optional[float] = None,
    notes: Optional[str] = None,
    now: datetime = None,
) -> Tuple[Visit, Dict]:
    """
    登記一次就診

    Returns:
        (visit, {"visit_count", "monthly_visit_count", "remaining_free_visits"})
    """
    if now is None:
        now = utcnow()

    # 第一個敘述就是原子遞增：取得病人列（SQLite 為整個資料庫）的寫入鎖，
    # 之後的當月次數讀取與新增就診在 commit 前不會與同一病人的請求交錯
    result = db.execute(
        update(Patient)
        .where(Patient.id == patient_id)
        .values(visit_count=Patient.visit_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFound("找不到病人")

    patient = db.get(Patient, patient_id, populate_existing=True)
    total_visit_number = patient.visit_count

    monthly_visit_number = quota.count_visits_in_current_month(db, patient_id, now) + 1
    free = quota.is_free_visit(monthly_visit_number)

    if free:
        visit_charges = 0
    elif charges is not None:
        visit_charges = charges
    else:
        visit_charges = patient.charges or 0

    visit = Visit(
        patient_id=patient_id,
        visit_number=total_visit_number,
        is_free_visit=free,
        charges=visit_charges,
        paid=free,  # 免費就診視為已付款
        notes=notes or "",
        created_by=actor.id,
        created_at=now,
        updated_at=now,
    )
    db.add(visit)

    try:
        db.flush()
        audit_service.log_action(
            db,
            AuditAction.VISIT_RECORD.value,
            user=actor,
            target_type="visit",
            target_id=visit.id,
            target_name=patient.id_card,
            details={
                "patient_id": patient_id,
                "visit_number": total_visit_number,
                "is_free_visit": free,
                "charges": visit_charges,
            },
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Duplicate visit number %s for patient %s", total_visit_number, patient_id)
        raise Conflict("就診序號重複，請重新登記")

    db.refresh(visit)
    logger.info(
        "Recorded visit #%s for patient %s (%s, charges=%s)",
        visit.visit_number, patient_id, "free" if free else "billable", visit_charges,
    )

    summary = {
        "visit_count": total_visit_number,
        "monthly_visit_count": monthly_visit_number,
        "remaining_free_visits": quota.remaining_free_visits(monthly_visit_number),
    }
    return visit, summary


def mark_visit_paid(db: Session, visit_id: int, actor: User = None) -> Visit:
    """標記已付款（已付款者不可重複標記，也沒有改回未付款的操作）"""
    visit = get_visit(db, visit_id)

    if visit.paid:
        raise InvalidState("此就診已標記為已付款")

    visit.paid = True
    audit_service.log_action(
        db,
        AuditAction.VISIT_PAID.value,
        user=actor,
        target_type="visit",
        target_id=visit.id,
        details={"patient_id": visit.patient_id, "charges": visit.charges},
    )
    db.commit()
    db.refresh(visit)

    logger.info("Visit %s marked as paid", visit.id)
    return visit


def update_visit(db: Session, visit_id: int, fields: Dict, actor: User = None) -> Visit:
    """更新就診收費或備註（付款狀態只能透過 mark_visit_paid 變更）"""
    visit = get_visit(db, visit_id)

    changes = {}
    if fields.get("charges") is not None:
        if visit.is_free_visit and fields["charges"] != 0:
            raise InvalidState("免費就診的收費必須為 0")
        changes["charges"] = fields["charges"]
    if "notes" in fields:
        changes["notes"] = fields["notes"] or ""

    if not changes:
        return visit

    for key, value in changes.items():
        setattr(visit, key, value)

    audit_service.log_action(
        db,
        AuditAction.VISIT_UPDATE.value,
        user=actor,
        target_type="visit",
        target_id=visit.id,
        details=changes,
    )
    db.commit()
    db.refresh(visit)
    return visit


def get_visit_overview(db: Session, patient: Patient, now: datetime = None) -> Dict:
    """病人所有就診 + 當月就診 + 免費額度摘要"""
    visits = (
        db.query(Visit)
        .filter(Visit.patient_id == patient.id)
        .order_by(Visit.visit_number.desc())
        .all()
    )
    current_month_visits = quota.list_visits_in_current_month(db, patient.id, now)
    monthly_count = len(current_month_visits)

    return {
        "visits": visits,
        "current_month_visits": current_month_visits,
        "summary": {
            "visit_count": patient.visit_count,
            "monthly_visit_count": monthly_count,
            "remaining_free_visits_this_month": quota.remaining_free_visits(monthly_count),
        },
    }
