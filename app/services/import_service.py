# -*- coding: utf-8 -*-
"""
病人匯入服務 - JSON / CSV 批量匯入

每筆資料獨立驗證與建立，單筆失敗不影響其他筆。
匯入的 visit_count 只是計數器起始值，不會產生就診紀錄。
"""

import csv
import io
import logging
import math
from datetime import date
from typing import Any, Dict, List, Tuple
from sqlalchemy.orm import Session

from ..exceptions import ClinicError, InvalidArgument
from ..models.audit import AuditAction
from ..models.patient import ALL_CATEGORIES
from ..models.user import User
from . import patients as patient_service

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["id_card", "name", "date_of_birth", "category", "charges", "visit_count"]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_row(row: Dict) -> Dict:
    """
    驗證單筆匯入資料

    Returns:
        可直接傳給 create_patient 的資料

    Raises:
        InvalidArgument: 欄位不合法
    """
    id_card = row.get("id_card")
    name = row.get("name")

    if not isinstance(id_card, str) or not id_card.strip():
        raise InvalidArgument("id_card 為必填，且必須是非空字串")
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument("name 為必填，且必須是非空字串")

    id_card = id_card.strip()
    name = name.strip()

    if not 2 <= len(name) <= 100:
        raise InvalidArgument("name 長度必須介於 2 到 100 字元")
    if not 1 <= len(id_card) <= 50:
        raise InvalidArgument("id_card 長度必須介於 1 到 50 字元")

    date_of_birth = None
    raw_dob = row.get("date_of_birth")
    if not _is_blank(raw_dob):
        try:
            date_of_birth = date.fromisoformat(str(raw_dob).strip())
        except ValueError:
            raise InvalidArgument("date_of_birth 必須是有效日期（YYYY-MM-DD）")

    category = None
    raw_category = row.get("category")
    if not _is_blank(raw_category):
        category = str(raw_category).strip().lower()
        if category not in ALL_CATEGORIES:
            raise InvalidArgument(f"category 必須是 {', '.join(ALL_CATEGORIES)} 其中之一")

    charges = 0
    raw_charges = row.get("charges")
    if not _is_blank(raw_charges):
        try:
            charges = float(raw_charges)
        except (TypeError, ValueError):
            raise InvalidArgument("charges 必須是不小於 0 的數字")
        if isinstance(raw_charges, bool) or charges < 0 or not math.isfinite(charges):
            raise InvalidArgument("charges 必須是不小於 0 的數字")

    visit_count = 0
    raw_visit_count = row.get("visit_count")
    if not _is_blank(raw_visit_count):
        try:
            as_float = float(raw_visit_count)
        except (TypeError, ValueError):
            raise InvalidArgument("visit_count 必須是不小於 0 的整數")
        if isinstance(raw_visit_count, bool) or as_float < 0 or not as_float.is_integer():
            raise InvalidArgument("visit_count 必須是不小於 0 的整數")
        visit_count = int(as_float)

    return {
        "id_card": id_card,
        "name": name,
        "date_of_birth": date_of_birth,
        "category": category,
        "charges": charges,
        "visit_count": visit_count,
    }


def bulk_import(db: Session, records: List[Dict], actor: User) -> Dict:
    """
    批量匯入病人

    Returns:
        {"success": [...], "failed": [...], "total", "success_count", "failed_count"}
    """
    if not records:
        raise InvalidArgument("patients 至少需要一筆資料")

    results = {
        "success": [],
        "failed": [],
        "total": len(records),
        "success_count": 0,
        "failed_count": 0,
    }

    for index, row in enumerate(records):
        if not isinstance(row, dict):
            row = {}
        try:
            data = validate_row(row)
            patient = patient_service.create_patient(
                db, data, actor, action=AuditAction.PATIENT_IMPORT.value
            )
            results["success"].append({
                "index": index,
                "id": patient.id,
                "id_card": patient.id_card,
                "name": patient.name,
            })
            results["success_count"] += 1
        except ClinicError as e:
            results["failed"].append({
                "index": index,
                "id_card": row.get("id_card") or "N/A",
                "name": row.get("name") or "N/A",
                "error": e.detail,
            })
            results["failed_count"] += 1

    logger.info(
        "Patient import finished: %s succeeded, %s failed",
        results["success_count"], results["failed_count"],
    )
    return results


def parse_csv_content(content: str) -> Tuple[List[Dict], List[str]]:
    """
    解析 CSV 內容

    預期格式（有標題行）:
    id_card,name,date_of_birth,category,charges,visit_count

    Returns:
        (rows, errors) - errors 只包含整份檔案層級的錯誤
    """
    rows = []
    errors = []

    try:
        reader = csv.DictReader(io.StringIO(content))
        missing = [c for c in ("id_card", "name") if c not in (reader.fieldnames or [])]
        if missing:
            errors.append(f"CSV 缺少欄位：{', '.join(missing)}")
            return rows, errors

        for row in reader:
            rows.append({key: (row.get(key) or "").strip() for key in CSV_COLUMNS})

    except csv.Error as e:
        errors.append(f"CSV 解析錯誤：{str(e)}")

    return rows, errors


def get_csv_template() -> str:
    """取得 CSV 範本"""
    return """id_card,name,date_of_birth,category,charges,visit_count
A123456789,Wang Xiao Ming,1980-01-15,man,500,0
B234567890,Li Xiao Hua,1990-05-20,woman,500,4
C345678901,Zhang Da Tong,2015-12-01,child,300,"""
