# 文件: pycmat/core/materials/__init__.py
"""
pycmat 材料系统

分层架构:
- tensors.py: Voigt 紧凑张量及不变量
- interfaces.py: 弹塑性抽象基类和组件协议
- state.py: 积分点状态 (由调用者持有)
- elastic/: 弹性模型
- plastic/: 塑性模型组件 (屈服函数、硬化规律、返回映射)
- models/: 预置弹塑性材料
- factory.py: 材料工厂
- serialization.py: 版本化二进制存档

使用方法:
    from pycmat.core.materials import MaterialFactory, StrainTensor

    # 创建材料
    mat = MaterialFactory.create_von_mises(
        E=210e9, nu=0.3, elastic_yield=250e6
    )

    # 创建状态 (调用者持有)
    state = mat.create_state()

    # 计算应力
    result = mat.compute_stress(StrainTensor([2e-3, 0, 0, 0, 0, 0]), state)
    print(result.stress)       # 应力张量
    print(result.is_plastic)   # 是否塑性
    state = result.state       # 收敛后保存

扩展指南:
    添加新屈服准则:
        1. 在 plastic/yield_functions.py 添加新类
        2. 实现 evaluate() 和 flow_direction() 方法

    添加新硬化模型:
        1. 在 plastic/hardening.py 添加新类
        2. 实现 get_yield_stress() 和 get_hardening_modulus() 方法

    添加新材料模型:
        1. 在 models/ 目录添加新文件
        2. 继承 ElastoplasticMaterial，实现 compute_yield_function()、
           compute_plastic_strain_flow() 和 compute_return_mapping()
"""

# 张量
from .tensors import VoigtTensor, StressTensor, StrainTensor

# 核心接口
from .interfaces import (
    ElastoplasticMaterial,
    StressResult,
    YieldFunction,
    HardeningLaw,
)

# 状态管理
from .state import PlasticState

# 弹性组件
from .elastic import ElasticMaterial

# 塑性组件
from .plastic import (
    VonMises,
    DruckerPrager,
    PerfectPlasticity,
    ExponentialHardening,
    equivalent_plastic_strain,
    RadialReturn,
    ConeReturn,
)

# 预置模型
from .models import VonMisesPlasticMaterial, DruckerPragerPlasticMaterial

# 工厂
from .factory import MaterialFactory

# 存档
from .serialization import SerializationError, dumps, loads, dump, load


__all__ = [
    # 张量
    'VoigtTensor',
    'StressTensor',
    'StrainTensor',

    # 核心接口
    'ElastoplasticMaterial',
    'StressResult',
    'YieldFunction',
    'HardeningLaw',

    # 状态
    'PlasticState',

    # 弹性组件
    'ElasticMaterial',

    # 塑性组件
    'VonMises',
    'DruckerPrager',
    'PerfectPlasticity',
    'ExponentialHardening',
    'equivalent_plastic_strain',
    'RadialReturn',
    'ConeReturn',

    # 预置模型
    'VonMisesPlasticMaterial',
    'DruckerPragerPlasticMaterial',

    # 工厂
    'MaterialFactory',

    # 存档
    'SerializationError',
    'dumps',
    'loads',
    'dump',
    'load',
]
