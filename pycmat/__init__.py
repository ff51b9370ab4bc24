# 文件: pycmat/__init__.py
"""
pycmat - 连续介质本构材料库

弹性与弹塑性 (Von Mises / Drucker-Prager) 材料的应力、应变换算与塑性流动。
"""

from .core import (
    VoigtTensor,
    StressTensor,
    StrainTensor,
    ElastoplasticMaterial,
    StressResult,
    PlasticState,
    MaterialFactory,
    ElasticMaterial,
    VonMisesPlasticMaterial,
    DruckerPragerPlasticMaterial,
)

__version__ = '1.0.0'

__all__ = [
    'VoigtTensor',
    'StressTensor',
    'StrainTensor',
    'ElastoplasticMaterial',
    'StressResult',
    'PlasticState',
    'MaterialFactory',
    'ElasticMaterial',
    'VonMisesPlasticMaterial',
    'DruckerPragerPlasticMaterial',
]
