"""
SQLModel 数据库模型
结合了 SQLAlchemy ORM 和 Pydantic 的优势

实体之间的关联只通过外键标识（按 ID 引用），不建立对象图，也不做级联删除。
"""
from datetime import date
from typing import Optional

from sqlmodel import Field, SQLModel, Index


# 可被 update 覆盖的用户字段，id 不在其中
USER_MUTABLE_FIELDS = ("name", "email", "registration_date")


class User(SQLModel, table=True):
    """用户表 - 核心 CRUD 操作的唯一实体"""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, description="用户ID（自动生成）")

    name: str = Field(min_length=1, max_length=255, nullable=False, description="用户姓名")
    email: str = Field(
        min_length=1,
        max_length=255,
        nullable=False,
        unique=True,
        description="用户邮箱（唯一）"
    )
    registration_date: date = Field(nullable=False, description="注册日期")

    __table_args__ = (
        Index("idx_user_name", "name"),
    )

    @classmethod
    def build(cls, name: str, email: str, registration_date: date) -> "User":
        """
        构造一个新用户，校验必填字段

        Raises:
            pydantic.ValidationError: 任一必填字段为空或类型不符
        """
        return cls.model_validate(
            {"name": name, "email": email, "registration_date": registration_date}
        )

    def copy_fields_from(self, other: "User") -> None:
        """将 other 的可变字段复制到当前记录"""
        for field_name in USER_MUTABLE_FIELDS:
            setattr(self, field_name, getattr(other, field_name))


class Author(SQLModel, table=True):
    """作者表"""

    __tablename__ = "authors"

    id: Optional[int] = Field(default=None, primary_key=True, description="作者ID")
    name: str = Field(max_length=255, description="作者姓名")
    nationality: Optional[str] = Field(default=None, max_length=100, description="国籍")


class Book(SQLModel, table=True):
    """图书表"""

    __tablename__ = "books"

    id: Optional[int] = Field(default=None, primary_key=True, description="图书ID")
    title: str = Field(max_length=512, description="书名")
    genre: Optional[str] = Field(default=None, max_length=100, description="体裁")
    publication_date: Optional[date] = Field(default=None, description="出版日期")


class AuthorBookLink(SQLModel, table=True):
    """作者-图书多对多关联表"""

    __tablename__ = "author_book"

    author_id: int = Field(foreign_key="authors.id", primary_key=True)
    book_id: int = Field(foreign_key="books.id", primary_key=True)


class Loan(SQLModel, table=True):
    """借阅表 - 用户与图书之间的借阅记录，外键由借阅方持有"""

    __tablename__ = "loans"

    id: Optional[int] = Field(default=None, primary_key=True, description="借阅ID")
    loan_date: date = Field(description="借出日期")
    due_date: Optional[date] = Field(default=None, description="应还日期")

    user_id: Optional[int] = Field(default=None, foreign_key="users.id", description="借阅用户ID")
    book_id: Optional[int] = Field(default=None, foreign_key="books.id", description="借阅图书ID")

    __table_args__ = (
        Index("idx_loan_user", "user_id"),
        Index("idx_loan_book", "book_id"),
    )
