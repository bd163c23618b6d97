"""
Library-Store 安装配置
"""
from setuptools import setup, find_packages

setup(
    name="library-store",
    version="1.0.0",
    description="图书馆用户事务性持久化层",
    author="Library-Store Team",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "sqlalchemy>=2.0",
        "sqlmodel>=0.0.16",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "loguru>=0.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "library-demo=app.main:main",
        ],
    },
)
