"""
App - 命令行演示入口
"""

__version__ = "1.0.0"
