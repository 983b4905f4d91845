# -*- coding: utf-8 -*-
"""
病人模型 - 身分、累計就診次數、預設收費
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Float, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base
from ..time_utils import utcnow
import enum


class PatientCategory(str, enum.Enum):
    """病人類別"""
    CHILD = "child"
    MAN = "man"
    WOMAN = "woman"


ALL_CATEGORIES = [c.value for c in PatientCategory]


class Patient(Base):
    """病人"""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    id_card = Column(String(50), unique=True, nullable=False, index=True)  # 一律大寫
    name = Column(String(100), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    category = Column(String(10), nullable=True)

    # 付費就診的預設收費
    charges = Column(Float, default=0, nullable=False)

    # 累計就診次數（終身，不因清除舊紀錄而減少）
    visit_count = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # 關聯
    creator = relationship("User", foreign_keys=[created_by])
    visits = relationship(
        "Visit",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Visit.visit_number",
    )

    def __repr__(self):
        return f"<Patient {self.id_card}: {self.name}>"
