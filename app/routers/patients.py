# -*- coding: utf-8 -*-
"""
病人與就診 API
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..exceptions import InvalidArgument
from ..models.user import User
from ..schemas import (
    BulkImportRequest,
    PatientCreate,
    PatientListOut,
    PatientOut,
    PatientUpdate,
    VisitCreate,
    VisitOut,
    VisitSummary,
    VisitUpdate,
)
from ..services.auth import require_admin, require_login
from ..services import import_service
from ..services import patients as patient_service
from ..services import retention as retention_service
from ..services import visits as visit_service

router = APIRouter(prefix="/api/patients", tags=["病人"])


def _visit_list(visits):
    return [VisitOut.model_validate(v) for v in visits]


# ======================
# 匯入
# ======================

@router.post("/import", status_code=201)
async def bulk_import_patients(
    payload: BulkImportRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """批量匯入病人（JSON）"""
    results = import_service.bulk_import(db, payload.patients, current_user)
    return {
        "message": f"匯入完成：成功 {results['success_count']} 筆，失敗 {results['failed_count']} 筆",
        "results": results,
    }


@router.post("/import/csv", status_code=201)
async def bulk_import_patients_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """批量匯入病人（CSV 上傳）"""
    content = await file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidArgument("CSV 必須是 UTF-8 編碼")

    rows, errors = import_service.parse_csv_content(text)
    if errors:
        raise InvalidArgument("；".join(errors))

    results = import_service.bulk_import(db, rows, current_user)
    return {
        "message": f"匯入完成：成功 {results['success_count']} 筆，失敗 {results['failed_count']} 筆",
        "results": results,
    }


@router.get("/import/template")
async def csv_template(current_user: User = Depends(require_login)):
    """CSV 範本"""
    return {"columns": import_service.CSV_COLUMNS, "template": import_service.get_csv_template()}


# ======================
# 就診紀錄（依就診 ID）
# ======================

@router.delete("/visits/cleanup")
async def cleanup_old_visits(
    months: int = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """清除超過 N 個月的就診紀錄"""
    if months is None:
        months = settings.DEFAULT_RETENTION_MONTHS

    deleted_count = retention_service.purge_visits_older_than(db, months, actor=current_user)
    return {
        "message": "已清除舊就診紀錄",
        "deleted_count": deleted_count,
        "older_than_months": months,
    }


@router.patch("/visits/{visit_id}/paid")
async def mark_visit_paid(
    visit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """標記已付款"""
    visit = visit_service.mark_visit_paid(db, visit_id, actor=current_user)
    return {"message": "已標記為已付款", "visit": VisitOut.model_validate(visit)}


@router.patch("/visits/{visit_id}")
async def update_visit(
    visit_id: int,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """更新就診收費或備註"""
    visit = visit_service.update_visit(
        db, visit_id, payload.model_dump(exclude_unset=True), actor=current_user
    )
    return {"message": "就診紀錄已更新", "visit": VisitOut.model_validate(visit)}


# ======================
# 病人
# ======================

@router.post("", status_code=201)
async def create_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """新增病人"""
    patient = patient_service.create_patient(db, payload.model_dump(), current_user)
    return {"message": "病人建立成功", "patient": PatientOut.model_validate(patient)}


@router.get("", response_model=PatientListOut)
async def list_patients(
    page: int = Query(1, ge=1),
    limit: int = Query(None, ge=1),
    search: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """病人列表（分頁、搜尋）"""
    return patient_service.list_patients(db, page=page, limit=limit, search=search)


@router.get("/{patient_id}")
async def get_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """病人詳細資料 + 就診紀錄 + 當月免費額度"""
    patient = patient_service.get_patient(db, patient_id)
    overview = visit_service.get_visit_overview(db, patient)
    summary = overview["summary"]

    return {
        "patient": PatientOut.model_validate(patient),
        "visits": _visit_list(overview["visits"]),
        "current_month_visits": _visit_list(overview["current_month_visits"]),
        "monthly_visit_count": summary["monthly_visit_count"],
        "remaining_free_visits_this_month": summary["remaining_free_visits_this_month"],
    }


@router.put("/{patient_id}")
async def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """更新病人（部分更新）"""
    patient = patient_service.update_patient(
        db, patient_id, payload.model_dump(exclude_unset=True), actor=current_user
    )
    return {"message": "病人資料已更新", "patient": PatientOut.model_validate(patient)}


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """刪除病人（連同所有就診紀錄）"""
    deleted_visits = patient_service.delete_patient(db, patient_id, actor=current_user)
    return {"message": "病人已刪除", "deleted_visits": deleted_visits}


# ======================
# 病人的就診
# ======================

@router.post("/{patient_id}/visits", status_code=201)
async def record_visit(
    patient_id: int,
    payload: VisitCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """登記就診"""
    visit, summary = visit_service.record_visit(
        db,
        patient_id,
        current_user,
        charges=payload.charges,
        notes=payload.notes,
    )
    return {
        "message": "就診登記成功",
        "visit": VisitOut.model_validate(visit),
        "patient": {
            "visit_count": summary["visit_count"],
            "monthly_visit_count": summary["monthly_visit_count"],
            "remaining_free_visits_this_month": summary["remaining_free_visits"],
        },
    }


@router.get("/{patient_id}/visits")
async def get_patient_visits(
    patient_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_login),
):
    """病人就診紀錄"""
    patient = patient_service.get_patient(db, patient_id)
    overview = visit_service.get_visit_overview(db, patient)

    return {
        "visits": _visit_list(overview["visits"]),
        "current_month_visits": _visit_list(overview["current_month_visits"]),
        "patient": VisitSummary(**overview["summary"]),
    }
