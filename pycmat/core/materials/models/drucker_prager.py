# 文件: pycmat/core/materials/models/drucker_prager.py
"""
Drucker-Prager 弹塑性材料模型

适用于土体、砂石等颗粒材料: 屈服与围压相关，支持非关联流动 (剪胀)
以及随塑性应变指数饱和的硬化/软化。
"""

import numpy as np
from typing import Optional

from ..interfaces import ElastoplasticMaterial
from ..tensors import VoigtTensor, StrainTensor, as_voigt_array, equivalent_plastic_strain
from ..plastic.yield_functions import DruckerPrager
from ..plastic.hardening import ExponentialHardening
from ..plastic.return_mapping import ConeReturn


class DruckerPragerPlasticMaterial(ElastoplasticMaterial):
    """
    Drucker-Prager 弹塑性材料

    组件:
    - 弹性: ElasticMaterial
    - 屈服: DruckerPrager (f = α I1 + √J2 - k)
    - 硬化: ExponentialHardening (k 随 ε̄p 趋向 hardening_limit)
    - 返回映射: ConeReturn

    硬化变量 ε̄p 由调用者传入的塑性应变计算，材料不保存历史。

    Attributes:
        elastic_yield: 初始屈服参数 k0 (类黏聚力)
        alpha: 内摩擦系数 α
        dilatancy: 剪胀系数 ψ (通常 0 <= ψ <= α)
        hardening_speed: 硬化速度的倒数 (越大越慢，0 表示无硬化)
        hardening_limit: 硬化/软化的渐近屈服值
        flow_rate: 塑性流动速率系数

    Example:
        mat = DruckerPragerPlasticMaterial(E=50e6, nu=0.3)
        mat.set_from_mohr_coulomb(np.radians(30), 10e3)
        state = mat.create_state()
        result = mat.compute_stress(d_strain, state)
    """

    def __init__(
        self,
        E: float = 1e7,
        nu: float = 0.4,
        density: float = 1000.0,
        elastic_yield: float = 0.1,
        alpha: float = 0.5,
        dilatancy: float = 0.0,
        hardening_speed: float = 0.0,
        hardening_limit: Optional[float] = None,
        flow_rate: float = 1.0
    ):
        """
        初始化 Drucker-Prager 材料

        Args:
            E: 杨氏模量
            nu: 泊松比
            density: 密度
            elastic_yield: 初始屈服参数 k0
            alpha: 内摩擦系数 (>= 0)
            dilatancy: 剪胀系数 (>= 0)
            hardening_speed: 硬化速度的倒数 (>= 0)
            hardening_limit: 渐近屈服值 (None 表示等于 elastic_yield)
            flow_rate: 塑性流动速率系数

        Raises:
            ValueError: 参数超出有效范围
        """
        super().__init__(E=E, nu=nu, density=density, flow_rate=flow_rate)

        # 创建组件
        self.yield_fn = DruckerPrager(alpha, dilatancy)
        self.hardening = ExponentialHardening(elastic_yield, hardening_limit, hardening_speed)
        self.return_mapping = ConeReturn(self.elastic, self.yield_fn, self.hardening)

    # =========================================================================
    # 参数
    # =========================================================================

    def _set_hardening(self, elastic_yield, hardening_limit, hardening_speed) -> None:
        # 返回映射持有同一个硬化对象
        self.hardening = ExponentialHardening(elastic_yield, hardening_limit, hardening_speed)
        self.return_mapping.hardening = self.hardening

    @property
    def elastic_yield(self) -> float:
        """初始屈服参数 k0"""
        return self.hardening.yield_stress

    @elastic_yield.setter
    def elastic_yield(self, value: float) -> None:
        self._set_hardening(value, self.hardening.limit, self.hardening.speed)

    @property
    def alpha(self) -> float:
        """内摩擦系数"""
        return self.yield_fn.alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        if not np.isfinite(value) or value < 0:
            raise ValueError(f"Friction coefficient alpha must be non-negative, got {value}")
        self.yield_fn.alpha = float(value)

    @property
    def dilatancy(self) -> float:
        """剪胀系数"""
        return self.yield_fn.dilatancy

    @dilatancy.setter
    def dilatancy(self, value: float) -> None:
        if not np.isfinite(value) or value < 0:
            raise ValueError(f"Dilatancy must be non-negative, got {value}")
        self.yield_fn.dilatancy = float(value)

    @property
    def hardening_speed(self) -> float:
        return self.hardening.speed

    @hardening_speed.setter
    def hardening_speed(self, value: float) -> None:
        self._set_hardening(self.elastic_yield, self.hardening.limit, value)

    @property
    def hardening_limit(self) -> float:
        """硬化极限 (通常略大于屈服值；小于屈服值时为软化)"""
        return self.hardening.hardening_limit

    @hardening_limit.setter
    def hardening_limit(self, value: float) -> None:
        self._set_hardening(self.elastic_yield, value, self.hardening.speed)

    def set_from_mohr_coulomb(
        self,
        phi: float,
        cohesion: float,
        inner_approx: bool = True
    ) -> None:
        """
        由 Mohr-Coulomb 参数设置 α 与 elastic_yield

        hardening_limit 重置为跟随新的 elastic_yield (hardening_speed 保留)，
        需要硬化/软化时在拟合之后再设置 hardening_limit。

        Args:
            phi: 内摩擦角 (弧度)
            cohesion: 黏聚力
            inner_approx: True 使用内切锥 (默认)，False 使用外接锥
        """
        alpha, k = DruckerPrager.from_mohr_coulomb(phi, cohesion, inner_approx)
        self._set_hardening(k, None, self.hardening.speed)
        self.yield_fn.alpha = alpha

    def current_yield(self, plastic_strain: Optional[VoigtTensor] = None) -> float:
        """
        当前 (硬化后的) 屈服值

        Args:
            plastic_strain: 调用者持有的塑性应变，None 返回初始值
        """
        if plastic_strain is None:
            return self.elastic_yield
        ep = equivalent_plastic_strain(StrainTensor(as_voigt_array(plastic_strain)))
        return self.hardening.get_yield_stress(ep)

    # =========================================================================
    # 本构操作
    # =========================================================================

    def compute_yield_function(
        self,
        stress: VoigtTensor,
        plastic_strain: Optional[VoigtTensor] = None
    ) -> float:
        """f = α I1 + √J2 - k(ε̄p)"""
        return self.yield_fn.evaluate(stress, self.current_yield(plastic_strain))

    def compute_plastic_strain_flow(self, total_strain: VoigtTensor) -> StrainTensor:
        """
        塑性应变流动

        偏量 (剪切) 部分按锥面法向，体积 (剪胀) 部分按 dilatancy 加权。
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
        """
        锥面返回 (见 ConeReturn)

        屈服值按修正后的塑性应变计算 (隐式硬化)，试探判断使用上一步的屈服值。
        """
        trial_strain = StrainTensor(as_voigt_array(last_elastic_strain)) + as_voigt_array(increment_strain)
        k = self.current_yield(last_plastic_strain)
        plastic_flow, _ = self.return_mapping.apply(
            trial_strain, k, self.flow_rate, plastic_strain=last_plastic_strain
        )
        return plastic_flow

    def copy(self) -> 'DruckerPragerPlasticMaterial':
        return DruckerPragerPlasticMaterial(
            E=self.E, nu=self.nu, density=self.density,
            elastic_yield=self.elastic_yield,
            alpha=self.alpha,
            dilatancy=self.dilatancy,
            hardening_speed=self.hardening_speed,
            hardening_limit=self.hardening.limit,
            flow_rate=self.flow_rate
        )

    def __repr__(self) -> str:
        return (
            f"DruckerPragerPlasticMaterial(E={self.E:.2e}, nu={self.nu:.3f}, "
            f"k={self.elastic_yield:.2e}, alpha={self.alpha:.4f}, "
            f"dilatancy={self.dilatancy:.4f}, flow_rate={self.flow_rate:.2f})"
        )
