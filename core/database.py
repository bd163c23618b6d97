"""
数据库连接管理
- 引擎与会话工厂由 DatabaseManager 持有，整个生命周期只创建一次
- 每次操作通过 get_session() 获取独立会话，退出时保证关闭
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlmodel import SQLModel
from loguru import logger

from .config import Settings, get_settings
from .exceptions import DatabaseNotInitializedException


class DatabaseManager:
    """
    同步数据库连接管理器

    事务边界不在这里处理：会话内的提交与回滚由仓储层负责，
    本类只保证会话的获取与释放。
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings
        self._database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker[Session]] = None

    def init(self) -> None:
        """初始化数据库引擎和会话工厂"""
        if self._engine is not None:
            logger.warning("DatabaseManager 已经初始化过")
            return

        settings = self._settings or get_settings()
        database_url = self._database_url or settings.DATABASE_URL

        self._engine = create_engine(
            database_url,
            echo=settings.DATABASE_ECHO,
            future=True,
        )

        # 创建会话工厂
        self._session_factory = sessionmaker(
            self._engine,
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(f"数据库管理器初始化完成: {self._engine.url.render_as_string()}")

    def close(self) -> None:
        """关闭数据库引擎并清理连接"""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("数据库连接已关闭")

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """
        获取一个数据库会话（上下文管理器）

        用法示例：
            with db.get_session() as session:
                user = session.get(User, 1)

        会话在所有退出路径上关闭，未完成的事务随关闭一并丢弃。
        """
        if self._session_factory is None:
            raise DatabaseNotInitializedException("DatabaseManager")

        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    def create_tables(self) -> None:
        """创建所有数据库表"""
        if self._engine is None:
            raise DatabaseNotInitializedException("DatabaseManager")

        # 确保模型已注册到 metadata
        from . import models  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("数据库表已创建")

    @property
    def session_factory(self) -> sessionmaker:
        """获取会话工厂"""
        if self._session_factory is None:
            raise DatabaseNotInitializedException("DatabaseManager")
        return self._session_factory

    @property
    def engine(self) -> Engine:
        """获取引擎实例"""
        if self._engine is None:
            raise DatabaseNotInitializedException("DatabaseManager")
        return self._engine

    def is_initialized(self) -> bool:
        """检查是否已初始化"""
        return self._engine is not None
