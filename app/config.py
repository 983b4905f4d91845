# -*- coding: utf-8 -*-
"""
設定檔 - 環境變數
"""

import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """應用程式設定"""

    # 應用程式
    APP_NAME: str = "Clinic Visit Ledger"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # 資料庫
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")

    # JWT（操作者身分）
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
    JWT_EXPIRATION_DAYS: int = 7

    # 分頁
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # 就診紀錄保存（月）
    DEFAULT_RETENTION_MONTHS: int = 1

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
