# 文件: pycmat/core/materials/models/von_mises.py
"""
Von Mises 弹塑性材料模型

使用组合模式将弹性模型、屈服函数、硬化规律和返回映射算法组合成完整的材料。
"""

import numpy as np
from typing import Optional

from ..interfaces import ElastoplasticMaterial
from ..tensors import VoigtTensor, StrainTensor, as_voigt_array
from ..plastic.yield_functions import VonMises
from ..plastic.hardening import PerfectPlasticity
from ..plastic.return_mapping import RadialReturn


class VonMisesPlasticMaterial(ElastoplasticMaterial):
    """
    Von Mises 弹塑性材料 (组合式实现)

    将各组件组合成完整的材料模型:
    - 弹性: ElasticMaterial
    - 屈服: VonMises
    - 硬化: PerfectPlasticity (无硬化)
    - 返回映射: RadialReturn

    两个屈服阈值:
    - elastic_yield: 弹性 -> 塑性的转变 (屈服面)
    - plastic_yield: 塑性 -> 断裂的转变。材料本身不处理断裂，
      由调用者通过 exceeds_plastic_yield() 判断。

    Attributes:
        elastic_yield: 初始屈服的 Von Mises 等效应力 (> 0)
        plastic_yield: 断裂阈值 (>= elastic_yield)
        flow_rate: 塑性流动速率系数

    Example:
        mat = VonMisesPlasticMaterial(E=210e9, nu=0.3,
                                      elastic_yield=250e6, plastic_yield=400e6)
        state = mat.create_state()
        result = mat.compute_stress(d_strain, state)
    """

    def __init__(
        self,
        E: float = 1e7,
        nu: float = 0.4,
        density: float = 1000.0,
        elastic_yield: float = 0.1,
        plastic_yield: float = 0.2,
        flow_rate: float = 1.0
    ):
        """
        初始化 Von Mises 弹塑性材料

        Args:
            E: 杨氏模量
            nu: 泊松比
            density: 密度
            elastic_yield: 初始屈服应力 σ_y
            plastic_yield: 断裂阈值
            flow_rate: 塑性流动速率系数

        Raises:
            ValueError: 参数超出有效范围
        """
        super().__init__(E=E, nu=nu, density=density, flow_rate=flow_rate)

        self._check_yields(elastic_yield, plastic_yield)
        self._plastic_yield = float(plastic_yield)

        # 创建组件
        self.yield_fn = VonMises()
        self.hardening = PerfectPlasticity(elastic_yield)
        self.return_mapping = RadialReturn(self.elastic, self.yield_fn)

    @staticmethod
    def _check_yields(elastic_yield: float, plastic_yield: float) -> None:
        if not np.isfinite(elastic_yield) or elastic_yield <= 0:
            raise ValueError(f"Elastic yield must be positive, got {elastic_yield}")
        if not np.isfinite(plastic_yield) or plastic_yield < elastic_yield:
            raise ValueError(
                f"Plastic yield ({plastic_yield}) must not be lower than "
                f"elastic yield ({elastic_yield})"
            )

    @property
    def elastic_yield(self) -> float:
        """弹性 -> 塑性转变的 Von Mises 等效应力"""
        return self.hardening.yield_stress

    @elastic_yield.setter
    def elastic_yield(self, value: float) -> None:
        self._check_yields(value, self._plastic_yield)
        self.hardening = PerfectPlasticity(value)

    @property
    def plastic_yield(self) -> float:
        """塑性 -> 断裂转变的 Von Mises 等效应力"""
        return self._plastic_yield

    @plastic_yield.setter
    def plastic_yield(self, value: float) -> None:
        self._check_yields(self.elastic_yield, value)
        self._plastic_yield = float(value)

    def compute_yield_function(
        self,
        stress: VoigtTensor,
        plastic_strain: Optional[VoigtTensor] = None
    ) -> float:
        """f = σ_eq - σ_y (无硬化，plastic_strain 不影响结果)"""
        return self.yield_fn.evaluate(stress, self.elastic_yield)

    def compute_plastic_strain_flow(self, total_strain: VoigtTensor) -> StrainTensor:
        """
        塑性应变流动

        方向为偏应变 (垂直于 Von Mises 圆柱面)，大小与超出屈服面的量成正比。
        """
        plastic_flow, _ = self.return_mapping.apply(
            total_strain, self.elastic_yield, self.flow_rate
        )
        return plastic_flow

    def compute_return_mapping(
        self,
        increment_strain: VoigtTensor,
        last_elastic_strain: VoigtTensor,
        last_plastic_strain: VoigtTensor
    ) -> StrainTensor:
        """径向返回 (见 RadialReturn)"""
        trial_strain = StrainTensor(as_voigt_array(last_elastic_strain)) + as_voigt_array(increment_strain)
        plastic_flow, _ = self.return_mapping.apply(
            trial_strain, self.elastic_yield, self.flow_rate
        )
        return plastic_flow

    def exceeds_plastic_yield(self, stress: VoigtTensor) -> bool:
        """等效应力是否达到断裂阈值 (由调用者决定如何处理断裂)"""
        return bool(self.yield_fn.equivalent_stress(stress) >= self._plastic_yield)

    def copy(self) -> 'VonMisesPlasticMaterial':
        return VonMisesPlasticMaterial(
            E=self.E, nu=self.nu, density=self.density,
            elastic_yield=self.elastic_yield,
            plastic_yield=self.plastic_yield,
            flow_rate=self.flow_rate
        )

    def __repr__(self) -> str:
        return (
            f"VonMisesPlasticMaterial(E={self.E:.2e}, nu={self.nu:.3f}, "
            f"σ_y={self.elastic_yield:.2e}, σ_f={self.plastic_yield:.2e}, "
            f"flow_rate={self.flow_rate:.2f})"
        )
