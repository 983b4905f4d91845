# -*- coding: utf-8 -*-
"""
就診紀錄模型
"""

from sqlalchemy import Column, Integer, Boolean, DateTime, Float, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ..time_utils import utcnow


class Visit(Base):
    """就診紀錄"""
    __tablename__ = "visits"
    __table_args__ = (
        UniqueConstraint("patient_id", "visit_number", name="uq_visits_patient_visit_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(
        Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # 終身序號 = 建立當下病人的累計就診次數（不是當月序號）
    visit_number = Column(Integer, nullable=False)

    is_free_visit = Column(Boolean, default=True, nullable=False)
    charges = Column(Float, default=0, nullable=False)
    paid = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, default="")

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # 月額度與保存期限都以 created_at 判斷
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # 關聯
    patient = relationship("Patient", back_populates="visits")
    creator = relationship("User", foreign_keys=[created_by])

    def __repr__(self):
        return f"<Visit #{self.visit_number} for Patient {self.patient_id}>"
