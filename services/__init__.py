"""
Services - 服务层
"""

from .user_service import UserService

__all__ = ["UserService"]
