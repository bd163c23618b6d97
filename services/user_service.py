"""
User Service - 用户持久化服务

职责：
- 在整个生命周期内独占一个 DatabaseManager（引擎 + 会话工厂）
- 每次调用获取一个独立会话，委托给 UserRepository，退出时保证释放
- shutdown() 之后拒绝任何 CRUD 调用
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from core.database import DatabaseManager
from core.exceptions import ServiceClosedException, UserNotFoundException
from core.models import User
from repositories.user_repository import UserRepository


class UserService:
    """
    用户 CRUD 服务

    用法示例:
        service = UserService()
        user = service.insert_user(User.build("Alice", "alice@x.com", date.today()))
        service.shutdown()
    """

    def __init__(
        self,
        db: Optional[DatabaseManager] = None,
        repository: Optional[UserRepository] = None,
    ):
        """
        初始化服务

        Args:
            db: 数据库管理器（可选，用于依赖注入）；未初始化时自动初始化
            repository: 用户仓储（可选，用于依赖注入）
        """
        self._db = db or DatabaseManager()
        if not self._db.is_initialized():
            self._db.init()
        self._repository = repository or UserRepository()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """单次调用的会话作用域，已关闭时不访问存储"""
        if self._closed:
            raise ServiceClosedException(type(self).__name__)
        with self._db.get_session() as session:
            yield session

    # ========== 写操作 ==========

    def insert_user(self, user: User) -> User:
        """插入用户，返回带有 ID 的同一对象"""
        with self._session() as session:
            return self._repository.insert(session, user)

    def delete_user(self, user_id: int) -> bool:
        """删除用户，不存在时返回 False"""
        with self._session() as session:
            return self._repository.delete(session, user_id)

    def update_user(self, user_id: int, incoming: User) -> bool:
        """用 incoming 的字段覆盖已有用户，不存在时返回 False"""
        with self._session() as session:
            return self._repository.update(session, user_id, incoming)

    # ========== 查询 ==========

    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as session:
            return self._repository.find_by_id(session, user_id)

    def require_user(self, user_id: int) -> User:
        """
        获取用户，不存在时抛出异常

        Raises:
            UserNotFoundException: 用户不存在
        """
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    def list_users(self) -> List[User]:
        with self._session() as session:
            return self._repository.find_all(session)

    def get_user_loan_ids(self, user_id: int) -> List[int]:
        with self._session() as session:
            return self._repository.find_loan_ids(session, user_id)

    # ========== 生命周期 ==========

    def shutdown(self) -> None:
        """释放会话工厂，只生效一次"""
        if self._closed:
            logger.warning("UserService 已经关闭")
            return
        self._closed = True
        self._db.close()
        logger.info("UserService 已关闭")
