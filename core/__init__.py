"""
Core - 配置、数据库连接、模型与异常
"""
