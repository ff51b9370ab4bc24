# 文件: pycmat/core/__init__.py
"""
pycmat 核心模块

导出张量、材料、状态管理等核心类
"""

from .materials import (
    # 张量
    VoigtTensor,
    StressTensor,
    StrainTensor,

    # 核心接口
    ElastoplasticMaterial,
    StressResult,

    # 状态
    PlasticState,

    # 工厂
    MaterialFactory,

    # 材料
    ElasticMaterial,
    VonMisesPlasticMaterial,
    DruckerPragerPlasticMaterial,
)


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
