# -*- coding: utf-8 -*-
"""
使用者模型 - 操作者身分（建立者、付款標記者）
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from ..database import Base
from ..time_utils import utcnow
import enum


class UserRole(str, enum.Enum):
    """使用者角色"""
    ADMIN = "admin"   # 管理員 - 可清除舊紀錄、查詢操作日誌
    STAFF = "staff"   # 櫃檯人員


class User(Base):
    """使用者"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    role = Column(String(20), default=UserRole.STAFF.value, nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"

    def is_admin_role(self) -> bool:
        """是否為管理員"""
        return self.role == UserRole.ADMIN.value
