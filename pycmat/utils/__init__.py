# 文件: pycmat/utils/__init__.py
"""
工具模块

- MaterialCardReader: Abaqus 风格材料卡片解析
"""

from .inp_reader import MaterialCardReader

__all__ = ['MaterialCardReader']
