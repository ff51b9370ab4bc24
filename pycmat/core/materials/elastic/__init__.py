# 文件: pycmat/core/materials/elastic/__init__.py
"""
弹性模型模块

提供各种弹性响应模型:
- ElasticMaterial: 各向同性线弹性 (Hooke's Law)
"""

from .isotropic import ElasticMaterial

__all__ = ['ElasticMaterial']
