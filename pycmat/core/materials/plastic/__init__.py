# 文件: pycmat/core/materials/plastic/__init__.py
"""
塑性模型组件模块

提供塑性本构的核心组件:
- 屈服函数 (yield_functions): VonMises, DruckerPrager
- 硬化规律 (hardening): PerfectPlasticity, ExponentialHardening
- 返回映射 (return_mapping): RadialReturn, ConeReturn
"""

from .yield_functions import VonMises, DruckerPrager
from ..tensors import equivalent_plastic_strain
from .hardening import PerfectPlasticity, ExponentialHardening
from .return_mapping import RadialReturn, ConeReturn

__all__ = [
    # 屈服函数
    'VonMises',
    'DruckerPrager',

    # 硬化规律
    'PerfectPlasticity',
    'ExponentialHardening',
    'equivalent_plastic_strain',

    # 返回映射
    'RadialReturn',
    'ConeReturn',
]
