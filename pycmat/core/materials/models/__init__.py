# 文件: pycmat/core/materials/models/__init__.py
"""
预置材料模型

提供组装好的、可直接使用的弹塑性材料模型:
- VonMisesPlasticMaterial: Von Mises 弹塑性材料 (金属)
- DruckerPragerPlasticMaterial: Drucker-Prager 弹塑性材料 (岩土、颗粒)
"""

from .von_mises import VonMisesPlasticMaterial
from .drucker_prager import DruckerPragerPlasticMaterial

__all__ = ['VonMisesPlasticMaterial', 'DruckerPragerPlasticMaterial']
