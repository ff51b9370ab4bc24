# 文件: pycmat/core/materials/elastic/isotropic.py
"""
各向同性弹性模型

提供:
- ElasticMaterial: 各向同性线弹性 (Hooke's Law)
"""

import numpy as np

from ..tensors import VoigtTensor, StressTensor, StrainTensor, as_voigt_array


class ElasticMaterial:
    """
    各向同性线弹性材料 (Hooke's Law)

    本构关系 (Lamé 形式):
        σ_ii = λ * tr(ε) + 2G * ε_ii
        σ_ij = 2G * ε_ij

    E, ν, G, λ 只有两个独立自由度:
        G = E / (2(1+ν))
        λ = Eν / ((1+ν)(1-2ν))

    E 与 ν 是权威参数；设置 G 时由 G 与 E 反算 ν。
    所有 setter 都会校验输入，非法值抛出 ValueError 且不修改状态。

    Attributes:
        density: 密度 (kg/m³)
        E: 杨氏模量
        nu: 泊松比, -1 < ν < 0.5
        G: 剪切模量
        lam: Lamé 第一参数 λ
        K: 体积模量 K = E / (3(1-2ν))
        D: 弹性矩阵 (6,6)

    Example:
        elastic = ElasticMaterial(E=210e9, nu=0.3)
        stress = elastic.compute_elastic_stress(strain)
        strain = elastic.compute_elastic_strain(stress)
    """

    def __init__(self, E: float = 1e7, nu: float = 0.4, density: float = 1000.0):
        """
        初始化各向同性弹性材料

        默认值对应一种较软的橡胶类材料。钢材 E≈210e9，铝 E≈69e9，
        高模量需要外层积分器相应地减小时间步。

        Args:
            E: 杨氏模量 (Young's modulus)
            nu: 泊松比 (Poisson's ratio), 需满足 -1 < ν < 0.5
            density: 密度

        Raises:
            ValueError: 参数超出有效范围
        """
        self._check_E(E)
        self._check_nu(nu)
        self._check_density(density)

        self._E = float(E)
        self._nu = float(nu)
        self._density = float(density)
        self._update_derived()

    # =========================================================================
    # 参数校验
    # =========================================================================

    @staticmethod
    def _check_E(E: float) -> None:
        if not np.isfinite(E) or E <= 0:
            raise ValueError(f"Young's modulus must be positive, got {E}")

    @staticmethod
    def _check_nu(nu: float) -> None:
        # ν = 0.5 (不可压缩) 与 ν = -1 会使 λ、K 除零
        if not (-1.0 < nu < 0.5):
            raise ValueError(f"Poisson's ratio must be in (-1, 0.5), got {nu}")

    @staticmethod
    def _check_density(density: float) -> None:
        if not np.isfinite(density) or density <= 0:
            raise ValueError(f"Density must be positive, got {density}")

    def _update_derived(self) -> None:
        """由 (E, ν) 重新计算 G 与 λ"""
        E, nu = self._E, self._nu
        self._G = E / (2.0 * (1.0 + nu))
        self._lam = E * nu / ((1.0 + nu) * (1.0 - 2.0 * nu))

    # =========================================================================
    # 参数访问
    # =========================================================================

    @property
    def density(self) -> float:
        """密度"""
        return self._density

    @density.setter
    def density(self, value: float) -> None:
        self._check_density(value)
        self._density = float(value)

    @property
    def E(self) -> float:
        """杨氏模量"""
        return self._E

    @E.setter
    def E(self, value: float) -> None:
        self._check_E(value)
        self._E = float(value)
        self._update_derived()

    @property
    def nu(self) -> float:
        """泊松比 ν = -横向应变/轴向应变"""
        return self._nu

    @nu.setter
    def nu(self, value: float) -> None:
        self._check_nu(value)
        self._nu = float(value)
        self._update_derived()

    @property
    def G(self) -> float:
        """剪切模量 G"""
        return self._G

    @G.setter
    def G(self, value: float) -> None:
        """设置剪切模量，保持 E 不变，反算 ν = E/(2G) - 1"""
        if not np.isfinite(value) or value <= 0:
            raise ValueError(f"Shear modulus must be positive, got {value}")
        nu = self._E / (2.0 * value) - 1.0
        if not (-1.0 < nu < 0.5):
            raise ValueError(
                f"Shear modulus {value} with E={self._E} gives Poisson's ratio {nu} "
                f"outside (-1, 0.5)"
            )
        self._nu = nu
        self._update_derived()

    @property
    def mu(self) -> float:
        """剪切模量 (G 的别名)"""
        return self._G

    @property
    def lam(self) -> float:
        """Lamé 第一参数 λ"""
        return self._lam

    @property
    def K(self) -> float:
        """体积模量 K = E / (3(1-2ν))"""
        return self._E / (3.0 * (1.0 - 2.0 * self._nu))

    @property
    def bulk_modulus(self) -> float:
        return self.K

    @property
    def wave_modulus(self) -> float:
        """
        P 波模量 M = E(1-ν) / ((1+ν)(1-2ν))

        P 波波速 V 满足 M / density = V²
        """
        E, nu = self._E, self._nu
        return E * (1.0 - nu) / ((1.0 + nu) * (1.0 - 2.0 * nu))

    @property
    def D(self) -> np.ndarray:
        """
        弹性矩阵 (6,6)，σ = D @ ε

        分量顺序 [XX, YY, ZZ, XY, XZ, YZ]，剪切为张量分量，
        因此剪切对角项为 2G。
        """
        lam, G = self._lam, self._G
        D = np.zeros((6, 6))
        D[:3, :3] = lam
        D[0, 0] = D[1, 1] = D[2, 2] = lam + 2.0 * G
        D[3, 3] = D[4, 4] = D[5, 5] = 2.0 * G
        return D

    # =========================================================================
    # 应力-应变转换
    # =========================================================================

    def compute_elastic_stress(self, strain: VoigtTensor) -> StressTensor:
        """
        由弹性应变计算应力

        Args:
            strain: 弹性应变张量

        Returns:
            stress: 应力张量 (与输入相同的浮点精度)
        """
        e = as_voigt_array(strain)
        dtype = e.dtype
        lam = dtype.type(self._lam)
        two_G = dtype.type(2.0 * self._G)

        tr = e[0] + e[1] + e[2]
        s = np.empty(6, dtype=dtype)
        s[:3] = lam * tr + two_G * e[:3]
        s[3:] = two_G * e[3:]
        return StressTensor(s)

    def compute_elastic_strain(self, stress: VoigtTensor) -> StrainTensor:
        """
        由应力计算弹性应变 (compute_elastic_stress 的逆映射)

        ε_xx = (σ_xx - ν σ_yy - ν σ_zz) / E
        ε_xy = σ_xy / (2G)
        """
        s = as_voigt_array(stress)
        dtype = s.dtype
        inv_E = dtype.type(1.0 / self._E)
        inv_2G = dtype.type(0.5 / self._G)
        nu = dtype.type(self._nu)

        e = np.empty(6, dtype=dtype)
        e[0] = inv_E * (s[0] - nu * s[1] - nu * s[2])
        e[1] = inv_E * (-nu * s[0] + s[1] - nu * s[2])
        e[2] = inv_E * (-nu * s[0] - nu * s[1] + s[2])
        e[3:] = s[3:] * inv_2G
        return StrainTensor(e)

    def copy(self) -> 'ElasticMaterial':
        return ElasticMaterial(E=self._E, nu=self._nu, density=self._density)

    def __repr__(self) -> str:
        return f"ElasticMaterial(E={self._E:.2e}, nu={self._nu:.3f}, density={self._density:.1f})"
