"""
图书馆数据访问层的自定义异常
"""
from typing import Any, Optional


class LibraryStoreException(Exception):
    """Library-Store 基础异常类"""
    pass


# ========== 数据库异常 ==========

class DatabaseException(LibraryStoreException):
    """数据库相关异常基类"""
    pass


class DatabaseNotInitializedException(DatabaseException):
    """数据库未初始化异常"""
    def __init__(self, manager_name: str = "DatabaseManager"):
        super().__init__(
            f"{manager_name} not initialized. Call init() first."
        )


class PersistenceFailureException(DatabaseException):
    """事务性写操作失败异常（事务已回滚）"""
    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Persistence operation '{operation}' failed{detail}")


class ServiceClosedException(DatabaseException):
    """服务已关闭后仍被调用"""
    def __init__(self, service_name: str = "UserService"):
        self.service_name = service_name
        super().__init__(
            f"{service_name} has been shut down and cannot be used."
        )


# ========== 配置异常 ==========

class ConfigurationException(LibraryStoreException):
    """配置相关异常基类"""
    pass


class InvalidConfigException(ConfigurationException):
    """无效的配置异常"""
    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration: {key}={value} - {reason}"
        )


# ========== 用户异常 ==========

class UserNotFoundException(LibraryStoreException):
    """用户未找到异常"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"用户 {user_id} 未找到")
