"""
Repositories - 数据访问层
"""

from .user_repository import UserRepository

__all__ = ["UserRepository"]
