"""
使用 Pydantic Settings 进行配置管理
从 app.properties 文件和环境变量加载配置
"""

from functools import lru_cache
from typing import Optional
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger

from .exceptions import InvalidConfigException


class Settings(BaseSettings):
    """应用配置，包含参数校验"""

    # 数据库配置
    DATABASE_URL: str = Field(
        default="sqlite:///./library.db", description="SQLAlchemy 数据库连接 URL"
    )
    DATABASE_ECHO: bool = Field(default=False, description="是否输出 SQL 语句")

    # 日志配置
    LOG_LEVEL: str = Field(default="INFO", description="日志级别")
    LOG_FILE: Optional[str] = Field(default=None, description="日志文件路径")

    model_config = SettingsConfigDict(
        env_file="app.properties",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if "://" not in v:
            raise ValueError("DATABASE_URL 必须是合法的 SQLAlchemy URL")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL 必须为 {valid_levels} 中的一项")
        return v_upper

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def get_sqlite_path(self) -> Optional[Path]:
        """
        获取 SQLite 数据库文件路径

        返回:
            文件路径；非 SQLite 或内存数据库时返回 None
        """
        if not self.is_sqlite:
            return None
        _, _, path = self.DATABASE_URL.partition(":///")
        if not path or path == ":memory:":
            return None
        return Path(path)

    def ensure_directories(self) -> None:
        """确保所有需要的目录存在"""
        sqlite_path = self.get_sqlite_path()
        if sqlite_path is not None:
            try:
                sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise InvalidConfigException(
                    "DATABASE_URL", self.DATABASE_URL, str(e)
                ) from e

        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)


# ========== 配置获取函数 ==========


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置实例（单例）

    返回:
        配置实例
    """
    settings = Settings()
    logger.info("Settings loaded")
    return settings
