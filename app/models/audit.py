# -*- coding: utf-8 -*-
"""
操作日誌模型 - 記錄所有異動操作
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from ..database import Base
from ..time_utils import utcnow
import enum


class AuditAction(str, enum.Enum):
    """操作類型"""
    # 病人管理
    PATIENT_CREATE = "patient_create"
    PATIENT_UPDATE = "patient_update"
    PATIENT_DELETE = "patient_delete"
    PATIENT_IMPORT = "patient_import"

    # 就診
    VISIT_RECORD = "visit_record"
    VISIT_UPDATE = "visit_update"
    VISIT_PAID = "visit_paid"

    # 系統維護
    VISIT_PURGE = "visit_purge"


# 操作類型中文對照
ACTION_LABELS = {
    AuditAction.PATIENT_CREATE.value: "新增病人",
    AuditAction.PATIENT_UPDATE.value: "更新病人",
    AuditAction.PATIENT_DELETE.value: "刪除病人",
    AuditAction.PATIENT_IMPORT.value: "匯入病人",
    AuditAction.VISIT_RECORD.value: "登記就診",
    AuditAction.VISIT_UPDATE.value: "更新就診",
    AuditAction.VISIT_PAID.value: "標記已付款",
    AuditAction.VISIT_PURGE.value: "清除舊就診紀錄",
}


class AuditLog(Base):
    """操作日誌"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # 操作者
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    user_name = Column(String(100), nullable=True)  # 冗餘存儲，方便查詢

    # 操作內容
    action = Column(String(50), nullable=False, index=True)
    target_type = Column(String(50), nullable=True)  # patient, visit
    target_id = Column(Integer, nullable=True)  # 病人刪除後仍保留，不設外鍵
    target_name = Column(String(100), nullable=True)

    # 詳細資訊
    details = Column(Text, nullable=True)  # JSON 格式的詳細資料

    # 時間戳
    created_at = Column(DateTime, default=utcnow, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.user_name} @ {self.created_at}>"

    @property
    def action_label(self) -> str:
        """取得操作的中文標籤"""
        return ACTION_LABELS.get(self.action, self.action)
