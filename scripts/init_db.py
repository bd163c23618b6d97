#!/usr/bin/env python3
"""
数据库初始化脚本
创建 users / authors / books / author_book / loans 表
"""

import sys
from pathlib import Path

# 添加项目根目录到PATH
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger
from core.config import get_settings
from core.database import DatabaseManager
from core.utils.logger import setup_logger


def create_tables(db: DatabaseManager) -> None:
    """创建所有数据库表"""
    logger.info("正在创建数据库表...")

    try:
        db.init()
        db.create_tables()
        logger.info("数据库表创建成功")
    except Exception as e:
        logger.error(f"创建数据库表失败: {e}")
        raise


def main():
    """主初始化流程"""
    settings = get_settings()
    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)
    settings.ensure_directories()

    logger.info("=== 数据库初始化 ===")
    logger.info(f"数据库: {settings.DATABASE_URL}")

    db = DatabaseManager(settings=settings)
    try:
        create_tables(db)
        logger.info("=== 数据库初始化成功完成 ===")
    except Exception as e:
        logger.error(f"数据库初始化失败: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
