# -*- coding: utf-8 -*-
"""
資料庫連線與初始化 - 含欄位遷移
"""

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite 預設不啟用外鍵，ON DELETE CASCADE 需要它"""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    """取得資料庫 session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_and_add_column(conn, table_name: str, column_name: str, column_type: str, default_value=None):
    """檢查並新增欄位"""
    columns = [c["name"] for c in inspect(conn).get_columns(table_name)]
    if column_name in columns:
        return False

    if default_value is not None:
        sql = f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type} DEFAULT {default_value}"
    else:
        sql = f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type}"

    conn.execute(text(sql))
    conn.commit()
    print(f"✅ 已新增 {table_name}.{column_name} 欄位")
    return True


def run_migrations(bind=None):
    """執行資料庫遷移（舊版資料庫缺少的欄位）"""
    with (bind or engine).connect() as conn:
        print("🔄 檢查資料庫欄位...")

        # patients 表欄位
        check_and_add_column(conn, 'patients', 'date_of_birth', 'DATE')
        check_and_add_column(conn, 'patients', 'category', 'VARCHAR(10)')
        check_and_add_column(conn, 'patients', 'is_active', 'BOOLEAN', '1')

        # visits 表欄位
        check_and_add_column(conn, 'visits', 'updated_at', 'TIMESTAMP')

        print("✅ 欄位檢查完成")


def init_db(bind=None):
    """初始化資料庫"""
    # 導入所有 models 以便建立表格
    from .models import user, patient, visit, audit

    bind = bind or engine

    # 建立表格（如果不存在）
    Base.metadata.create_all(bind=bind)

    # 執行遷移
    run_migrations(bind)

    print("✅ 資料庫初始化完成")
