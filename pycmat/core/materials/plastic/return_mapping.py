# 文件: pycmat/core/materials/plastic/return_mapping.py
"""
返回映射算法模块

提供塑性修正算法:
- RadialReturn: 径向返回 (Von Mises 圆柱)
- ConeReturn: 锥面返回 (Drucker-Prager 圆锥，含锥顶区域，隐式硬化)

两种算法都是罚函数正则化的投影:
    给定试探弹性应变 ε_tr，返回应累加到塑性应变上的修正量 Δεp。
    投影比例为 min(flow_rate, 1)；flow_rate >= 1 时修正后的应力
    恰好回到屈服面，较小的 flow_rate 使塑性流动滞后 (软化的延迟塑性)。

扩展指南:
    要添加新的返回映射算法，只需创建一个类实现:
    - apply(trial_strain, yield_stress, flow_rate) -> (plastic_flow, f_trial)
"""

import numpy as np
from typing import Optional, Tuple

from ..tensors import VoigtTensor, StrainTensor, as_voigt_array, equivalent_plastic_strain
from ..interfaces import YieldFunction, HardeningLaw

# 局部迭代: 残差相对容差与迭代上限
_RETURN_TOL = 1e-12
_MAX_ITER = 100

# 区间宽度小于该相对值时停止二分
_X_EPS = 4.0 * np.finfo(np.float64).eps

_IDENTITY = np.array([1.0, 1.0, 1.0, 0.0, 0.0, 0.0])


def _projection_fraction(flow_rate: float) -> float:
    return min(float(flow_rate), 1.0)


def _bracketed_newton(fun, x: float, lo: float, hi: float, tol: float) -> float:
    """
    有界 Newton 迭代求 fun(x) = 0 的根

    fun(x) 返回 (残差, 导数)，lo、hi 处残差异号。
    Newton 步落在当前区间之外时改用二分，区间随残差符号收缩。

    Raises:
        RuntimeError: 迭代未收敛
    """
    r_lo, _ = fun(lo)
    if abs(r_lo) <= tol:
        return lo
    r = r_lo
    for _ in range(_MAX_ITER):
        r, dr = fun(x)
        if abs(r) <= tol:
            return x
        if (r > 0.0) == (r_lo > 0.0):
            lo, r_lo = x, r
        else:
            hi = x
        if hi - lo <= _X_EPS * max(abs(lo), abs(hi)):
            return x

        step = x - r / dr if dr != 0.0 else lo
        x = step if lo < step < hi else 0.5 * (lo + hi)

    raise RuntimeError(
        f"Return mapping did not converge in {_MAX_ITER} iterations (residual {r:.3e})"
    )


class RadialReturn:
    """
    径向返回算法 (Radial Return Algorithm)

    J2 屈服面在偏平面上是圆，返回路径沿半径方向 (直线)，故名径向返回。
    塑性流动只有偏量部分 (等体积)。

    算法步骤:
    1. 计算试探应力 σ_tr = C : ε_tr
    2. 检查屈服条件 f = σ_eq - σ_y
    3. 若 f > 0，塑性修正 Δεp = r * (f / σ_eq) * dev(ε_tr)，r = min(flow_rate, 1)
    4. 修正后 σ_eq = σ_eq_tr - r * f (r = 1 时恰为 σ_y)

    Attributes:
        elastic: 弹性模型 (需提供 compute_elastic_stress)
        yield_fn: 屈服函数 (需提供 evaluate, equivalent_stress)

    Example:
        return_mapping = RadialReturn(elastic, VonMises())
        plastic_flow, f_trial = return_mapping.apply(trial_strain, 250e6, 1.0)
    """

    def __init__(self, elastic, yield_fn):
        """
        Args:
            elastic: 弹性模型对象
            yield_fn: 屈服函数对象
        """
        if not isinstance(yield_fn, YieldFunction):
            raise TypeError(f"{type(yield_fn).__name__} does not implement YieldFunction")
        self.elastic = elastic
        self.yield_fn = yield_fn

    def apply(
        self,
        trial_strain: VoigtTensor,
        yield_stress: float,
        flow_rate: float = 1.0
    ) -> Tuple[StrainTensor, float]:
        """
        执行返回映射

        Args:
            trial_strain: 试探弹性应变 (假设本步增量全部为弹性)
            yield_stress: 当前屈服应力
            flow_rate: 塑性流动速率系数

        Returns:
            plastic_flow: 塑性应变修正量
            f_trial: 试探状态的屈服函数值
        """
        eps = StrainTensor(as_voigt_array(trial_strain))
        stress_trial = self.elastic.compute_elastic_stress(eps)

        f_trial = self.yield_fn.evaluate(stress_trial, yield_stress)
        if f_trial <= 0:
            # 弹性状态：无需修正
            return StrainTensor(dtype=eps.dtype), f_trial

        # f > 0 且 σ_y > 0 时 σ_eq > 0
        sigma_eq = self.yield_fn.equivalent_stress(stress_trial)
        factor = _projection_fraction(flow_rate) * f_trial / sigma_eq

        return eps.get_deviatoric_part() * factor, f_trial

    def __repr__(self) -> str:
        return f"RadialReturn(elastic={self.elastic}, yield_fn={self.yield_fn})"


class ConeReturn:
    """
    Drucker-Prager 锥面返回算法

    对线弹性各向同性材料，沿塑性势梯度 m = ψ 1 + s/(2√J2) 返回时
    偏量方向不变，修正后
        √J2 = √J2_tr - G Δλ,   I1 = I1_tr - 9 K ψ Δλ
    屈服值 k 取修正后塑性应变 εp + Δλ m 的等效塑性应变 (隐式硬化)，
    塑性乘子由一维方程
        r(Δλ) = α I1_tr + √J2_tr - (G + 9 K α ψ) Δλ - k(ε̄p(Δλ)) = 0
    求得 (有界 Newton 迭代)。无硬化时即闭式解 Δλ = f_tr / (G + 9 K α ψ)。

    若 √J2_tr - G Δλ < 0，试探应力落在锥顶对应的区域 (梯度无定义)，
    此时投影到锥顶的静水应力 I1 = k/α, s = 0，k 同样按修正后的
    塑性应变隐式求解。

    Attributes:
        elastic: 弹性模型 (需提供 G, K, compute_elastic_stress/strain)
        yield_fn: DruckerPrager 屈服函数
        hardening: 硬化律 (需提供初始值 yield_stress，饱和型另提供
                   hardening_limit，如 ExponentialHardening)；None 表示屈服值恒定
    """

    def __init__(self, elastic, yield_fn, hardening=None):
        if not isinstance(yield_fn, YieldFunction):
            raise TypeError(f"{type(yield_fn).__name__} does not implement YieldFunction")
        if hardening is not None and not isinstance(hardening, HardeningLaw):
            raise TypeError(f"{type(hardening).__name__} does not implement HardeningLaw")
        self.elastic = elastic
        self.yield_fn = yield_fn
        self.hardening = hardening

    def apply(
        self,
        trial_strain: VoigtTensor,
        yield_stress: float,
        flow_rate: float = 1.0,
        plastic_strain: Optional[VoigtTensor] = None
    ) -> Tuple[StrainTensor, float]:
        """
        执行返回映射

        Args:
            trial_strain: 试探弹性应变
            yield_stress: 本步开始时的屈服值 k (用于试探判断)
            flow_rate: 塑性流动速率系数
            plastic_strain: 本步开始时的塑性应变；给出且有硬化律时
                            屈服值随修正量隐式更新，None 时 k 恒为 yield_stress

        Returns:
            plastic_flow: 塑性应变修正量
            f_trial: 试探状态的屈服函数值

        Raises:
            RuntimeError: 塑性乘子迭代未收敛
        """
        eps = StrainTensor(as_voigt_array(trial_strain))
        stress_trial = self.elastic.compute_elastic_stress(eps)

        f_trial = self.yield_fn.evaluate(stress_trial, yield_stress)
        if f_trial <= 0:
            return StrainTensor(dtype=eps.dtype), f_trial

        if self.hardening is None or plastic_strain is None:
            ep_old = None
        else:
            ep_old = StrainTensor(as_voigt_array(plastic_strain), dtype=np.float64)

        r = _projection_fraction(flow_rate)
        sqrt_j2 = np.sqrt(stress_trial.invariant_J2)
        d_lambda = self._cone_multiplier(stress_trial, f_trial + yield_stress, yield_stress, ep_old)

        if sqrt_j2 - self.elastic.G * d_lambda >= 0.0:
            # 光滑锥面返回
            m = self.yield_fn.flow_direction(stress_trial)
            return m * (r * d_lambda), f_trial

        # 锥顶返回 (α = 0 时 √J2_tr - G Δλ >= k > 0，不会进入该分支)
        k = self._apex_yield(eps, yield_stress, ep_old)
        target = self.yield_fn.apex_stress(k, dtype=eps.dtype)
        target_strain = self.elastic.compute_elastic_strain(target)
        return (eps - target_strain) * r, f_trial

    def _cone_multiplier(self, stress_trial, pressure_shear, yield_stress, ep_old) -> float:
        """光滑锥面的塑性乘子 Δλ，pressure_shear = α I1_tr + √J2_tr"""
        c = self.elastic.G + 9.0 * self.elastic.K * self.yield_fn.alpha * self.yield_fn.dilatancy
        if ep_old is None:
            return (pressure_shear - yield_stress) / c

        m = StrainTensor(np.asarray(self.yield_fn.flow_direction(stress_trial)), dtype=np.float64)
        m_norm = np.sqrt(2.0 / 3.0 * m.double_dot(m))

        def residual(d_lambda):
            ep = ep_old + m * d_lambda
            ep_eq = equivalent_plastic_strain(ep)
            k = self.hardening.get_yield_stress(ep_eq)
            H = self.hardening.get_hardening_modulus(ep_eq)
            d_ep_eq = 2.0 / 3.0 * ep.double_dot(m) / ep_eq if ep_eq > 0.0 else m_norm
            return pressure_shear - c * d_lambda - k, -c - H * d_ep_eq

        # r(0) = f_tr > 0；k > 0 时 r(pressure_shear / c) = -k < 0
        return _bracketed_newton(residual, 0.0, 0.0, pressure_shear / c,
                                 _RETURN_TOL * max(pressure_shear, yield_stress))

    def _apex_yield(self, eps: StrainTensor, yield_stress: float, ep_old) -> float:
        """锥顶处修正后的屈服值 k"""
        if ep_old is None:
            return yield_stress

        k0 = self.hardening.yield_stress
        k_lim = getattr(self.hardening, "hardening_limit", k0)
        lo, hi = min(k0, k_lim), max(k0, k_lim)
        if lo == hi:
            return lo

        K = self.elastic.K
        alpha = self.yield_fn.alpha
        eps64 = StrainTensor(np.asarray(eps), dtype=np.float64)
        # 锥顶静水应力 k/(3α) 对应的弹性体积应变为 k/(9Kα) (每个正应变分量)
        d_flow = StrainTensor(-_IDENTITY / (9.0 * K * alpha))

        def residual(k):
            ep = ep_old + eps64 + d_flow * k
            ep_eq = equivalent_plastic_strain(ep)
            H = self.hardening.get_hardening_modulus(ep_eq)
            d_ep_eq = 2.0 / 3.0 * ep.double_dot(d_flow) / ep_eq if ep_eq > 0.0 else 0.0
            return k - self.hardening.get_yield_stress(ep_eq), 1.0 - H * d_ep_eq

        # 硬化值落在 [lo, hi] 内，故 residual(lo) <= 0 <= residual(hi)
        k_start = min(max(yield_stress, lo), hi)
        return _bracketed_newton(residual, k_start, lo, hi, _RETURN_TOL * hi)

    def __repr__(self) -> str:
        return (
            f"ConeReturn(elastic={self.elastic}, yield_fn={self.yield_fn}, "
            f"hardening={self.hardening})"
        )
