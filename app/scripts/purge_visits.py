# -*- coding: utf-8 -*-
"""
清除舊就診紀錄 - 排程用指令

使用方式：
    python -m app.scripts.purge_visits --months 1

可搭配 cron 每月執行一次。病人的累計就診次數不會改變。
"""

import argparse
import logging

from app.config import settings
from app.database import SessionLocal, init_db
from app.services.retention import get_cutoff, purge_visits_older_than


def run_purge(months: int, dry_run: bool = False) -> int:
    """執行清除，回傳刪除（或將刪除）的筆數"""
    from app.models.visit import Visit

    db = SessionLocal()
    try:
        if dry_run:
            cutoff = get_cutoff(months)
            count = db.query(Visit).filter(Visit.created_at < cutoff).count()
            print(f"🔍 將刪除 {count} 筆 {cutoff:%Y-%m-%d %H:%M} 以前的就診紀錄")
            return count

        deleted = purge_visits_older_than(db, months)
        print(f"✅ 已刪除 {deleted} 筆超過 {months} 個月的就診紀錄")
        return deleted
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="清除舊就診紀錄")
    parser.add_argument(
        "--months",
        type=int,
        default=settings.DEFAULT_RETENTION_MONTHS,
        help="保留最近幾個月（至少 1）",
    )
    parser.add_argument("--dry-run", action="store_true", help="只計算筆數，不刪除")
    args = parser.parse_args(argv)

    if args.months < 1:
        parser.error("--months 至少為 1")

    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
    run_purge(args.months, dry_run=args.dry_run)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
