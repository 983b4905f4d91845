# -*- coding: utf-8 -*-
"""
資料模型
"""

from .user import User, UserRole
from .patient import Patient, PatientCategory, ALL_CATEGORIES
from .visit import Visit
from .audit import AuditLog, AuditAction, ACTION_LABELS
