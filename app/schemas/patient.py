# -*- coding: utf-8 -*-
"""
病人資料結構 - 欄位限制沿用櫃檯表單規則
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.patient import PatientCategory
from .user import UserBrief


class PatientCreate(BaseModel):
    """新增病人"""
    id_card: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=2, max_length=100)
    date_of_birth: Optional[date] = None
    category: Optional[PatientCategory] = None
    charges: float = Field(0, ge=0, allow_inf_nan=False)
    visit_count: int = Field(0, ge=0)  # 匯入舊資料時的起始次數

    @field_validator("id_card", "name", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class PatientUpdate(BaseModel):
    """部分更新 - 未提供的欄位保持不變"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    date_of_birth: Optional[date] = None
    category: Optional[PatientCategory] = None
    charges: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class PatientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    id_card: str
    name: str
    date_of_birth: Optional[date] = None
    category: Optional[str] = None
    charges: float
    visit_count: int
    is_active: bool
    creator: Optional[UserBrief] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PatientListOut(BaseModel):
    patients: List[PatientOut]
    page: int
    limit: int
    total: int
    pages: int


class BulkImportRequest(BaseModel):
    """批量匯入 - 每筆原始資料由服務層逐筆驗證"""
    patients: List[Dict[str, Any]] = Field(..., min_length=1)
