# -*- coding: utf-8 -*-
"""
請求 / 回應資料結構
"""

from .user import UserBrief
from .patient import PatientCreate, PatientUpdate, PatientOut, PatientListOut, BulkImportRequest
from .visit import VisitCreate, VisitUpdate, VisitOut, VisitSummary
from .audit import AuditLogOut
