# -*- coding: utf-8 -*-
"""
認證服務 - JWT 操作者身分

帳號註冊 / 登入流程不在本服務範圍，只負責驗證 Bearer Token
並取得目前操作者。
"""

import jwt
from datetime import timedelta
from typing import Optional, Dict
from fastapi import Request, HTTPException, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models.user import User
from ..time_utils import utcnow


# ===================================
# JWT 設定
# ===================================

JWT_SECRET = settings.SECRET_KEY
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_DAYS = settings.JWT_EXPIRATION_DAYS


def create_access_token(user_id: int) -> str:
    """建立 JWT Token"""
    now = utcnow()
    payload = {
        "user_id": user_id,
        "exp": now + timedelta(days=JWT_EXPIRATION_DAYS),
        "iat": now,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """解碼 JWT Token"""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


# ===================================
# 從 Authorization header 取得當前用戶
# ===================================

def get_current_user(request: Request, db: Session) -> Optional[User]:
    """從 Bearer Token 取得當前使用者"""
    auth_header = request.headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None

    payload = decode_access_token(token)
    if not payload:
        return None

    user_id = payload.get("user_id")
    if not user_id:
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        return None

    return user


def require_login(request: Request, db: Session = Depends(get_db)) -> User:
    """要求登入"""
    user = get_current_user(request, db)
    if not user:
        raise HTTPException(status_code=401, detail="請先登入")
    return user


def require_admin(request: Request, db: Session = Depends(get_db)) -> User:
    """要求管理員權限"""
    user = get_current_user(request, db)
    if not user:
        raise HTTPException(status_code=401, detail="請先登入")
    if not user.is_admin_role():
        raise HTTPException(status_code=403, detail="需要管理員權限")
    return user
