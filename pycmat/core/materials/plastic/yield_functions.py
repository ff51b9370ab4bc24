# 文件: pycmat/core/materials/plastic/yield_functions.py
"""
屈服函数模块

提供各种屈服准则:
- VonMises: Von Mises (J2) 屈服准则，关联流动
- DruckerPrager: Drucker-Prager 锥面屈服准则，带剪胀系数的非关联流动

扩展指南:
    要添加新的屈服函数，只需创建一个类实现以下方法:
    - evaluate(stress, yield_stress) -> float
    - flow_direction(stress) -> StrainTensor (塑性势梯度 ∂g/∂σ)
"""

import numpy as np
from typing import Tuple

from ..tensors import VoigtTensor, StrainTensor

# √J2 小于该值时视为纯静水应力，偏量方向无定义
_DEV_EPS = 1e-16

_IDENTITY = np.array([1.0, 1.0, 1.0, 0.0, 0.0, 0.0])


class VonMises:
    """
    Von Mises (J2) 屈服准则

    屈服函数: f = σ_eq - σ_y
    其中 σ_eq = √(3 * J2)

    适用于金属材料的等向屈服，与静水压力无关。

    Example:
        yield_fn = VonMises()
        f = yield_fn.evaluate(stress, yield_stress=250e6)
        if f > 0:
            n = yield_fn.gradient(stress)  # 流动方向
    """

    def evaluate(self, stress: VoigtTensor, yield_stress: float) -> float:
        """
        计算屈服函数值

        Args:
            stress: 应力张量
            yield_stress: 当前屈服应力 σ_y

        Returns:
            f: 屈服函数值
               f < 0: 弹性状态
               f = 0: 位于屈服面
               f > 0: 需要塑性修正
        """
        return stress.get_equivalent_von_mises() - yield_stress

    def gradient(self, stress: VoigtTensor) -> StrainTensor:
        """
        计算屈服函数对应力的梯度 (流动方向)

        n = ∂σ_eq/∂σ = (3/2) * s / σ_eq，垂直于 Von Mises 圆柱面

        Returns:
            n: 流动方向 (张量分量)，纯静水应力时为零
        """
        sigma_eq = stress.get_equivalent_von_mises()
        if sigma_eq < _DEV_EPS:
            return StrainTensor(dtype=stress.dtype)

        s = stress.get_deviatoric_part()
        return StrainTensor(np.asarray(s) * (1.5 / sigma_eq))

    def flow_direction(self, stress: VoigtTensor) -> StrainTensor:
        """关联流动: 塑性势等于屈服函数"""
        return self.gradient(stress)

    def equivalent_stress(self, stress: VoigtTensor) -> float:
        """Von Mises 等效应力 σ_eq = √(3 J2)"""
        return stress.get_equivalent_von_mises()

    def __repr__(self) -> str:
        return "VonMises()"


class DruckerPrager:
    """
    Drucker-Prager 屈服准则

    屈服函数: f = α * I1 + √J2 - k
    塑性势:   g = ψ * I1 + √J2

    主应力空间中为以静水轴为轴线的圆锥，α = 0 时退化为 Von Mises 圆柱。
    剪胀系数 ψ ≠ α 时为非关联流动 (通常 0 <= ψ <= α)。
    适用于岩土、颗粒材料，考虑围压效应。

    Attributes:
        alpha: 内摩擦系数 α
        dilatancy: 剪胀系数 ψ

    Example:
        yield_fn = DruckerPrager(alpha=0.2, dilatancy=0.1)
        f = yield_fn.evaluate(stress, yield_stress=1e5)
    """

    def __init__(self, alpha: float = 0.5, dilatancy: float = 0.0):
        """
        Args:
            alpha: 内摩擦系数，控制围压敏感性 (>= 0)
            dilatancy: 剪胀系数 (>= 0)
        """
        if not np.isfinite(alpha) or alpha < 0:
            raise ValueError(f"Friction coefficient alpha must be non-negative, got {alpha}")
        if not np.isfinite(dilatancy) or dilatancy < 0:
            raise ValueError(f"Dilatancy must be non-negative, got {dilatancy}")
        self.alpha = float(alpha)
        self.dilatancy = float(dilatancy)

    def evaluate(self, stress: VoigtTensor, yield_stress: float) -> float:
        """计算屈服函数值 f = α I1 + √J2 - k"""
        return self.alpha * stress.invariant_I1 + np.sqrt(stress.invariant_J2) - yield_stress

    def flow_direction(self, stress: VoigtTensor) -> StrainTensor:
        """
        塑性势梯度 ∂g/∂σ = ψ * 1 + s / (2√J2)

        偏量部分产生剪切流动，体积部分 ψ * 1 产生剪胀。
        """
        return self._cone_normal(stress, self.dilatancy)

    def _cone_normal(self, stress: VoigtTensor, slope: float) -> StrainTensor:
        sqrt_j2 = np.sqrt(stress.invariant_J2)
        n = slope * _IDENTITY
        if sqrt_j2 > _DEV_EPS:
            n = n + np.asarray(stress.get_deviatoric_part()) / (2.0 * sqrt_j2)
        return StrainTensor(n.astype(stress.dtype))

    def apex_stress(self, yield_stress: float, dtype=np.float64) -> VoigtTensor:
        """
        锥顶对应的静水应力状态

        s = 0, α I1 = k  =>  σ_xx = σ_yy = σ_zz = k / (3α)
        """
        if self.alpha <= 0:
            raise ValueError("Cone apex is undefined for alpha = 0")
        p = yield_stress / (3.0 * self.alpha)
        return VoigtTensor(p * _IDENTITY, dtype=dtype)

    @staticmethod
    def from_mohr_coulomb(
        phi: float,
        cohesion: float,
        inner_approx: bool = True
    ) -> Tuple[float, float]:
        """
        由 Mohr-Coulomb 内摩擦角与黏聚力拟合 Drucker-Prager 参数

        两种圆锥共享锥顶 I1 = 3c / tanφ:
        - 内切 (inner_approx=True): 与 Mohr-Coulomb 六棱锥各面相切
            α = sinφ / (√3 √(3 + sin²φ))
            k = √3 c cosφ / √(3 + sin²φ)
        - 外接 (inner_approx=False): 通过受压子午线上的棱
            α = 2 sinφ / (√3 (3 - sinφ))
            k = 6 c cosφ / (√3 (3 - sinφ))

        Args:
            phi: 内摩擦角 (弧度)，0 < φ < π/2
            cohesion: 黏聚力 c > 0
            inner_approx: True 使用内切锥，False 使用外接锥

        Returns:
            (alpha, k): 内摩擦系数与屈服参数
        """
        if not (0.0 < phi < 0.5 * np.pi):
            raise ValueError(f"Friction angle must be in (0, pi/2) radians, got {phi}")
        if not np.isfinite(cohesion) or cohesion <= 0:
            raise ValueError(f"Cohesion must be positive, got {cohesion}")

        sin_phi = np.sin(phi)
        cos_phi = np.cos(phi)
        sqrt3 = np.sqrt(3.0)

        if inner_approx:
            root = np.sqrt(3.0 + sin_phi * sin_phi)
            alpha = sin_phi / (sqrt3 * root)
            k = sqrt3 * cohesion * cos_phi / root
        else:
            denom = sqrt3 * (3.0 - sin_phi)
            alpha = 2.0 * sin_phi / denom
            k = 6.0 * cohesion * cos_phi / denom

        return float(alpha), float(k)

    def __repr__(self) -> str:
        return f"DruckerPrager(alpha={self.alpha}, dilatancy={self.dilatancy})"
