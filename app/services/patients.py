# -*- coding: utf-8 -*-
"""
病人服務 - 建立、查詢、部分更新、刪除
"""

import logging
import math
from typing import Dict
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import NotFound, Conflict
from ..models.audit import AuditAction
from ..models.patient import Patient
from ..models.user import User
from ..models.visit import Visit
from . import audit as audit_service

logger = logging.getLogger(__name__)

# 部分更新允許的欄位
UPDATABLE_FIELDS = ("name", "date_of_birth", "category", "charges")


def _category_value(category):
    return category.value if hasattr(category, "value") else category


def get_patient(db: Session, patient_id: int) -> Patient:
    """取得病人"""
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient:
        raise NotFound("找不到病人")
    return patient


def find_by_id_card(db: Session, id_card: str):
    """以身分證號查詢（不分大小寫）"""
    return db.query(Patient).filter(Patient.id_card == id_card.strip().upper()).first()


def create_patient(
    db: Session,
    data: Dict,
    actor: User,
    action: str = AuditAction.PATIENT_CREATE.value,
) -> Patient:
    """建立病人"""
    id_card = data["id_card"].strip().upper()

    if find_by_id_card(db, id_card):
        raise Conflict(f"身分證號 {id_card} 已存在")

    patient = Patient(
        id_card=id_card,
        name=data["name"].strip(),
        date_of_birth=data.get("date_of_birth"),
        category=_category_value(data.get("category")),
        charges=data.get("charges") or 0,
        visit_count=data.get("visit_count") or 0,
        created_by=actor.id,
        is_active=True,
    )
    db.add(patient)

    try:
        db.flush()
        audit_service.log_action(
            db,
            action,
            user=actor,
            target_type="patient",
            target_id=patient.id,
            target_name=patient.id_card,
            details={"name": patient.name, "visit_count": patient.visit_count},
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"身分證號 {id_card} 已存在")

    db.refresh(patient)
    return patient


def list_patients(db: Session, page: int = 1, limit: int = None, search: str = "") -> Dict:
    """
    分頁查詢病人（新到舊）

    search 比對身分證號或姓名
    """
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    page = max(page, 1)
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)

    query = db.query(Patient)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Patient.id_card.ilike(pattern), Patient.name.ilike(pattern)))

    total = query.count()
    patients = (
        query.order_by(Patient.created_at.desc(), Patient.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "patients": patients,
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit),
    }


def update_patient(db: Session, patient_id: int, fields: Dict, actor: User = None) -> Patient:
    """部分更新 - 只更新有提供的欄位"""
    patient = get_patient(db, patient_id)

    changes = {}
    for key in UPDATABLE_FIELDS:
        if key not in fields:
            continue
        value = fields[key]
        # 姓名與收費不可為空，None 視為未提供
        if key in ("name", "charges") and value is None:
            continue
        if key == "category":
            value = _category_value(value)
        changes[key] = value

    if not changes:
        return patient

    for key, value in changes.items():
        setattr(patient, key, value)

    audit_service.log_action(
        db,
        AuditAction.PATIENT_UPDATE.value,
        user=actor,
        target_type="patient",
        target_id=patient.id,
        target_name=patient.id_card,
        details=changes,
    )
    db.commit()
    db.refresh(patient)
    return patient


def delete_patient(db: Session, patient_id: int, actor: User = None) -> int:
    """
    刪除病人及其所有就診紀錄（同一交易）

    Returns:
        刪除的就診紀錄筆數
    """
    patient = get_patient(db, patient_id)
    id_card = patient.id_card

    deleted_visits = (
        db.query(Visit)
        .filter(Visit.patient_id == patient_id)
        .delete(synchronize_session=False)
    )
    # 已載入的 visits 集合作廢，避免 ORM 再對已刪除的列做串聯刪除
    db.expire(patient, ["visits"])
    db.delete(patient)

    audit_service.log_action(
        db,
        AuditAction.PATIENT_DELETE.value,
        user=actor,
        target_type="patient",
        target_id=patient_id,
        target_name=id_card,
        details={"deleted_visits": deleted_visits},
    )
    db.commit()

    logger.info("Deleted patient %s (%s) with %s visits", patient_id, id_card, deleted_visits)
    return deleted_visits
