# 文件: pycmat/core/materials/plastic/hardening.py
"""
硬化规律模块

提供各种硬化模型:
- PerfectPlasticity: 理想塑性 (无硬化)
- ExponentialHardening: 指数饱和型硬化/软化，屈服值渐近趋向极限值

硬化变量取自调用者持有的塑性应变张量 (见 equivalent_plastic_strain)，
硬化对象本身不保存任何积分点历史。

扩展指南:
    要添加新的硬化模型，只需创建一个类实现以下方法:
    - get_yield_stress(ep) -> float
    - get_hardening_modulus(ep) -> float
"""

import numpy as np
from typing import Optional


class PerfectPlasticity:
    """
    理想塑性 (无硬化)

    屈服应力保持恒定: σ_y = σ_y0

    Example:
        hardening = PerfectPlasticity(yield_stress=250e6)
        sigma_y = hardening.get_yield_stress(ep=0.05)  # 始终返回 250e6
    """

    def __init__(self, yield_stress: float):
        """
        Args:
            yield_stress: 屈服应力 σ_y0
        """
        if not np.isfinite(yield_stress) or yield_stress <= 0:
            raise ValueError(f"Yield stress must be positive, got {yield_stress}")
        self.yield_stress = float(yield_stress)

    def get_yield_stress(self, ep: float) -> float:
        """
        获取当前屈服应力

        Args:
            ep: 累积等效塑性应变 (不使用)

        Returns:
            σ_y: 屈服应力 (恒定)
        """
        return self.yield_stress

    def get_hardening_modulus(self, ep: float) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"PerfectPlasticity(σ_y={self.yield_stress:.2e})"


class ExponentialHardening:
    """
    指数饱和硬化

    屈服值随等效塑性应变指数趋向极限值:
    k(ε̄p) = k_lim + (k0 - k_lim) * exp(-ε̄p / s)

    s (hardening_speed) 越大，趋近越慢。k_lim > k0 为硬化，
    k_lim < k0 为软化。s = 0 表示关闭硬化，k 恒为 k0。
    k 单调地落在 [k0, k_lim] 区间内，不会越过极限值。

    Example:
        hardening = ExponentialHardening(yield_stress=1e5, hardening_limit=2e5,
                                         hardening_speed=0.01)
        k = hardening.get_yield_stress(ep=0.02)
    """

    def __init__(
        self,
        yield_stress: float,
        hardening_limit: Optional[float] = None,
        hardening_speed: float = 0.0
    ):
        """
        Args:
            yield_stress: 初始屈服值 k0
            hardening_limit: 渐近极限 k_lim (None 表示与 k0 相同，即无硬化)
            hardening_speed: 硬化速度的倒数 s (>= 0)
        """
        if not np.isfinite(yield_stress) or yield_stress <= 0:
            raise ValueError(f"Yield stress must be positive, got {yield_stress}")
        if hardening_limit is not None and (not np.isfinite(hardening_limit) or hardening_limit <= 0):
            raise ValueError(f"Hardening limit must be positive, got {hardening_limit}")
        if not np.isfinite(hardening_speed) or hardening_speed < 0:
            raise ValueError(f"Hardening speed must be non-negative, got {hardening_speed}")

        self.yield_stress = float(yield_stress)
        self.limit = None if hardening_limit is None else float(hardening_limit)
        self.speed = float(hardening_speed)

    @property
    def hardening_limit(self) -> float:
        return self.yield_stress if self.limit is None else self.limit

    def get_yield_stress(self, ep: float) -> float:
        """
        获取当前屈服值

        Args:
            ep: 等效塑性应变 ε̄p

        Returns:
            k: 当前屈服值
        """
        if self.speed == 0.0:
            return self.yield_stress
        k_lim = self.hardening_limit
        return k_lim + (self.yield_stress - k_lim) * np.exp(-ep / self.speed)

    def get_hardening_modulus(self, ep: float) -> float:
        """
        硬化模量 dk/dε̄p = (k_lim - k0) / s * exp(-ε̄p / s)
        """
        if self.speed == 0.0:
            return 0.0
        return (self.hardening_limit - self.yield_stress) / self.speed * np.exp(-ep / self.speed)

    def __repr__(self) -> str:
        return (
            f"ExponentialHardening(k0={self.yield_stress:.2e}, "
            f"k_lim={self.hardening_limit:.2e}, s={self.speed:.2e})"
        )
