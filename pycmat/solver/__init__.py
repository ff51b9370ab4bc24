# 文件: pycmat/solver/__init__.py
"""
求解器模块

- MaterialPointDriver: 单积分点驱动器 (应变控制 / 单轴应力路径)
"""

from .material_point import MaterialPointDriver

__all__ = ['MaterialPointDriver']
