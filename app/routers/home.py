# -*- coding: utf-8 -*-
"""
首頁路由
"""

from fastapi import APIRouter

from ..config import settings

router = APIRouter(tags=["首頁"])


@router.get("/")
async def home():
    """服務資訊"""
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "patients": "/api/patients",
            "admin": "/api/admin",
        },
    }


@router.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}
