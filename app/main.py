"""
Library Demo - 主入口

演示用户 CRUD 流程：插入 -> 查询 -> 更新 -> 查询 -> 删除 -> 列表
"""

import atexit
import sys
from datetime import date
from pathlib import Path

# 添加项目根目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from core.config import get_settings
from core.database import DatabaseManager
from core.models import User
from core.utils.logger import setup_logger
from services.user_service import UserService


def run_demo(service: UserService) -> list:
    """执行演示流程，返回最终的用户列表"""
    today = date.today()
    user1 = User.build("Usuario Prueba1", "usuario1@example.com", today)
    user2 = User.build("Usuario Prueba2", "usuario2@example.com", today)
    user3 = User.build("Usuario Prueba3", "usuario3@example.com", today)

    service.insert_user(user1)
    service.insert_user(user3)
    print(f"User inserted -> {service.get_user(user1.id)}")

    service.update_user(user1.id, user2)
    print(f"User updated -> {service.get_user(user1.id)}")

    service.delete_user(user1.id)
    print("User deleted")

    users = service.list_users()
    print("All users:")
    for user in users:
        print(user)
    return users


def main():
    """演示程序主入口"""
    settings = get_settings()
    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)
    settings.ensure_directories()

    logger.info("=" * 70)
    logger.info("📚 Library-Store User Demo")
    logger.info("=" * 70)

    db = DatabaseManager(settings=settings)
    try:
        db.init()
        db.create_tables()
        logger.info("✓ Database connected")
    except Exception as e:
        logger.error(f"✗ Database connection failed: {e}")
        sys.exit(1)

    service = UserService(db=db)
    # 进程退出时释放会话工厂
    atexit.register(service.shutdown)

    run_demo(service)


if __name__ == "__main__":
    main()
