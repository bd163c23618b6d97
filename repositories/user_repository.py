"""
用户数据库操作仓储

每个写操作都在同一个事务辅助方法中执行：
成功则提交，任何异常则回滚并抛出 PersistenceFailureException。
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.exceptions import PersistenceFailureException
from core.models import Loan, User


class UserRepository:
    """
    用户数据访问对象

    职责：
    - 在调用方提供的会话上执行单个 CRUD 操作
    - 写操作各自占用一个事务
    - 不负责会话的创建与关闭
    """

    # ========== 事务 ==========

    @staticmethod
    @contextmanager
    def _transaction(session: Session, operation: str) -> Iterator[Session]:
        """
        事务作用域

        开启事务 -> 执行操作 -> 提交；
        会话已自动开启事务时（例如先做过查询）沿用该事务，由本作用域负责提交或回滚。
        出现异常时，若事务仍处于活动状态则回滚，再抛出 PersistenceFailureException。
        所有退出路径都以提交或回滚结束。
        """
        try:
            if not session.in_transaction():
                session.begin()
            yield session
            session.commit()
        except Exception as e:
            if session.in_transaction():
                session.rollback()
            logger.error(f"[UserRepository] {operation} 失败，事务已回滚: {e}")
            raise PersistenceFailureException(operation, e) from e

    # ========== 写操作 ==========

    @classmethod
    def insert(cls, session: Session, user: User) -> User:
        """
        插入用户

        提交成功后 user.id 被赋值；失败时 user.id 被清空，即使 INSERT 已经执行。

        Args:
            session: 数据库会话
            user: 待插入的用户

        Returns:
            已持久化的用户（同一对象）
        """
        try:
            with cls._transaction(session, "insert"):
                session.add(user)
        except PersistenceFailureException:
            user.id = None
            raise
        logger.debug(f"[UserRepository] 插入成功: id={user.id}")
        return user

    @classmethod
    def delete(cls, session: Session, user_id: int) -> bool:
        """
        删除用户

        用户不存在时提交一个空事务，不视为错误。

        Returns:
            是否删除了记录
        """
        with cls._transaction(session, "delete"):
            user = session.get(User, user_id)
            if user is None:
                logger.debug(f"[UserRepository] 删除跳过，用户不存在: id={user_id}")
                return False
            session.delete(user)
        logger.debug(f"[UserRepository] 删除成功: id={user_id}")
        return True

    @classmethod
    def update(cls, session: Session, user_id: int, incoming: User) -> bool:
        """
        更新用户

        更新字段：name, email, registration_date（id 保持不变）。
        用户不存在时提交一个空事务，不创建新记录。

        Args:
            session: 数据库会话
            user_id: 目标用户ID
            incoming: 携带新字段值的用户对象

        Returns:
            是否更新了记录
        """
        with cls._transaction(session, "update"):
            existing = session.get(User, user_id)
            if existing is None:
                logger.debug(f"[UserRepository] 更新跳过，用户不存在: id={user_id}")
                return False
            existing.copy_fields_from(incoming)
            session.merge(existing)
        logger.debug(f"[UserRepository] 更新成功: id={user_id}")
        return True

    # ========== 查询 ==========

    @staticmethod
    def find_by_id(session: Session, user_id: int) -> Optional[User]:
        return session.get(User, user_id)

    @staticmethod
    def find_all(session: Session) -> List[User]:
        """获取所有用户，顺序不保证"""
        return list(session.execute(select(User)).scalars().all())

    @staticmethod
    def find_loan_ids(session: Session, user_id: int) -> List[int]:
        """获取引用该用户的借阅ID（按ID升序）"""
        stmt = select(Loan.id).where(Loan.user_id == user_id).order_by(Loan.id)
        return list(session.execute(stmt).scalars().all())
