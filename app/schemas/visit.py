# -*- coding: utf-8 -*-
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .user import UserBrief


class VisitCreate(BaseModel):
    """登記就診"""
    charges: Optional[float] = Field(None, ge=0, allow_inf_nan=False)  # 未提供則使用病人預設收費
    notes: Optional[str] = Field(None, max_length=500)


class VisitUpdate(BaseModel):
    """就診紀錄只允許修改收費與備註"""
    charges: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=500)


class VisitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    visit_number: int
    is_free_visit: bool
    charges: float
    paid: bool
    notes: Optional[str] = None
    creator: Optional[UserBrief] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class VisitSummary(BaseModel):
    """病人就診摘要"""
    visit_count: int
    monthly_visit_count: int
    remaining_free_visits_this_month: int
