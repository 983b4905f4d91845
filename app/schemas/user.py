# -*- coding: utf-8 -*-
from pydantic import BaseModel, ConfigDict


class UserBrief(BaseModel):
    """建立者資訊（不含敏感欄位）"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
