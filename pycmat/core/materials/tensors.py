# 文件: pycmat/core/materials/tensors.py
"""
Voigt 紧凑张量

提供:
- VoigtTensor: 对称二阶张量的 6 分量表示 [XX, YY, ZZ, XY, XZ, YZ]
- StressTensor / StrainTensor: 应力、应变的类型标记子类

约定:
    剪切分量存储张量分量 (不是工程剪应变)，即 XY = T[0, 1]。
    分量的浮点精度由 dtype 决定 (默认 float64，可选 float32)，
    所有公式对任意精度保持一致。
"""

import numpy as np
from typing import Optional, Sequence, Union


# 分量索引
XX, YY, ZZ, XY, XZ, YZ = range(6)

# 双点积权重: A:B = Σ 正应力项 + 2 Σ 剪切项
_CONTRACTION_WEIGHTS = np.array([1.0, 1.0, 1.0, 2.0, 2.0, 2.0])


class VoigtTensor:
    """
    对称二阶张量 (Voigt 记号)

    只存储上三角 6 个分量，下三角由对称性给出。
    所有不变量都是 6 个分量的纯函数，不缓存任何派生量。

    Attributes:
        data: 分量数组 (6,) [XX, YY, ZZ, XY, XZ, YZ]

    Example:
        t = VoigtTensor.from_matrix(np.eye(3))
        t.get_volumetric_part()      # 3.0
        t.get_equivalent_von_mises() # 0.0
    """

    # numpy 标量在左侧时回落到 __rmul__ 等方法
    __array_ufunc__ = None

    def __init__(
        self,
        components: Optional[Union[Sequence[float], np.ndarray]] = None,
        dtype=None
    ):
        """
        Args:
            components: 6 个分量 [XX, YY, ZZ, XY, XZ, YZ]，None 表示零张量
            dtype: 浮点类型 (None 时沿用输入的浮点类型，否则 float64)

        Raises:
            ValueError: 分量个数不为 6
        """
        if components is None:
            self._data = np.zeros(6, dtype=np.float64 if dtype is None else dtype)
            return

        arr = np.asarray(components)
        if dtype is None:
            dtype = arr.dtype if np.issubdtype(arr.dtype, np.floating) else np.float64

        if arr.shape != (6,):
            raise ValueError(f"Voigt tensor needs 6 components, got shape {arr.shape}")

        self._data = np.array(arr, dtype=dtype)

    # =========================================================================
    # 分量访问
    # =========================================================================

    @property
    def data(self) -> np.ndarray:
        """分量数组 (可写视图)"""
        return self._data

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def XX(self):
        return self._data[XX]

    @XX.setter
    def XX(self, value):
        self._data[XX] = value

    @property
    def YY(self):
        return self._data[YY]

    @YY.setter
    def YY(self, value):
        self._data[YY] = value

    @property
    def ZZ(self):
        return self._data[ZZ]

    @ZZ.setter
    def ZZ(self, value):
        self._data[ZZ] = value

    @property
    def XY(self):
        return self._data[XY]

    @XY.setter
    def XY(self, value):
        self._data[XY] = value

    @property
    def XZ(self):
        return self._data[XZ]

    @XZ.setter
    def XZ(self, value):
        self._data[XZ] = value

    @property
    def YZ(self):
        return self._data[YZ]

    @YZ.setter
    def YZ(self, value):
        self._data[YZ] = value

    def __getitem__(self, idx):
        return self._data[idx]

    def __setitem__(self, idx, value):
        self._data[idx] = value

    def __len__(self) -> int:
        return 6

    def __iter__(self):
        return iter(self._data)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    # =========================================================================
    # 与 3x3 矩阵的转换
    # =========================================================================

    @classmethod
    def from_matrix(cls, matrix: np.ndarray, dtype=None) -> 'VoigtTensor':
        """从 3x3 对称矩阵构造张量 (只读取上三角)"""
        m = np.asarray(matrix)
        if dtype is None and np.issubdtype(m.dtype, np.floating):
            dtype = m.dtype
        tensor = cls(dtype=dtype)
        tensor.convert_from_matrix(m)
        return tensor

    def convert_from_matrix(self, matrix: np.ndarray) -> None:
        """
        从 3x3 矩阵写入分量

        只读取上三角 (0,1), (0,2), (1,2)，调用者需保证输入对称。

        Raises:
            ValueError: 输入不是 3x3 矩阵
        """
        m = np.asarray(matrix)
        if m.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {m.shape}")

        self._data[XX] = m[0, 0]
        self._data[YY] = m[1, 1]
        self._data[ZZ] = m[2, 2]
        self._data[XY] = m[0, 1]
        self._data[XZ] = m[0, 2]
        self._data[YZ] = m[1, 2]

    def convert_to_matrix(self, dest: np.ndarray) -> np.ndarray:
        """
        写入 3x3 对称矩阵

        Args:
            dest: 目标矩阵 (3,3)，原地写入

        Returns:
            dest: 同一个矩阵对象
        """
        if dest.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {dest.shape}")

        d = self._data
        dest[0, 0] = d[XX]
        dest[1, 1] = d[YY]
        dest[2, 2] = d[ZZ]
        dest[0, 1] = dest[1, 0] = d[XY]
        dest[0, 2] = dest[2, 0] = d[XZ]
        dest[1, 2] = dest[2, 1] = d[YZ]
        return dest

    def to_matrix(self) -> np.ndarray:
        """返回新的 3x3 对称矩阵"""
        return self.convert_to_matrix(np.zeros((3, 3), dtype=self.dtype))

    # =========================================================================
    # 体积/偏量分解
    # =========================================================================

    def get_volumetric_part(self):
        """体积部分 V = Txx + Tyy + Tzz (即迹)"""
        d = self._data
        return d[XX] + d[YY] + d[ZZ]

    def get_deviatoric_part(self) -> 'VoigtTensor':
        """
        偏量部分

        dev(T) = T - (1/3) * tr(T) * I
        """
        dev = self.copy()
        mean = self.get_volumetric_part() / 3.0
        dev._data[:3] -= mean
        return dev

    # =========================================================================
    # 不变量
    # =========================================================================

    @property
    def invariant_I1(self):
        """第一不变量 I1 = tr(T)"""
        return self.get_volumetric_part()

    @property
    def invariant_I2(self):
        """第二不变量 I2 = XX*YY + YY*ZZ + XX*ZZ - XY² - YZ² - XZ²"""
        xx, yy, zz, xy, xz, yz = self._data
        return xx * yy + yy * zz + xx * zz - xy * xy - yz * yz - xz * xz

    @property
    def invariant_I3(self):
        """第三不变量 I3 = det(T)"""
        xx, yy, zz, xy, xz, yz = self._data
        return (xx * yy * zz + 2 * xy * yz * xz
                - xy * xy * zz - yz * yz * xx - xz * xz * yy)

    @property
    def invariant_J1(self):
        """偏量第一不变量 (恒为 0)"""
        return self.dtype.type(0)

    @property
    def invariant_J2(self):
        """
        偏量第二不变量

        J2 = I1²/3 - I2，截断到 >= 0 以消除舍入误差造成的微小负值
        """
        I1 = self.invariant_I1
        j2 = I1 * I1 / 3.0 - self.invariant_I2
        return max(self.dtype.type(0), j2)

    @property
    def invariant_J3(self):
        """偏量第三不变量 J3 = (2/27) I1³ - (1/3) I1 I2 + I3"""
        I1 = self.invariant_I1
        return (I1 ** 3) * (2.0 / 27.0) - I1 * self.invariant_I2 / 3.0 + self.invariant_I3

    def get_equivalent_von_mises(self):
        """
        Von Mises 等效值

        σ_eq = √(0.5 * [(XX-YY)² + (YY-ZZ)² + (ZZ-XX)²] + 3 * (XY² + XZ² + YZ²))
        """
        xx, yy, zz, xy, xz, yz = self._data
        return np.sqrt(
            0.5 * ((xx - yy) ** 2 + (yy - zz) ** 2 + (zz - xx) ** 2)
            + 3.0 * (xy * xy + xz * xz + yz * yz)
        )

    # =========================================================================
    # 张量运算
    # =========================================================================

    def double_dot(self, other: 'VoigtTensor'):
        """双点积 A:B (剪切项计两次)"""
        return np.sum(_CONTRACTION_WEIGHTS * self._data * np.asarray(other))

    def norm(self):
        """Frobenius 范数 √(T:T)"""
        return np.sqrt(self.double_dot(self))

    def copy(self) -> 'VoigtTensor':
        return type(self)(self._data.copy())

    def allclose(self, other, rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        return bool(np.allclose(self._data, np.asarray(other), rtol=rtol, atol=atol))

    def _wrap(self, values: np.ndarray) -> 'VoigtTensor':
        return type(self)(values, dtype=values.dtype)

    def __add__(self, other):
        return self._wrap(self._data + np.asarray(other))

    def __sub__(self, other):
        return self._wrap(self._data - np.asarray(other))

    def __neg__(self):
        return self._wrap(-self._data)

    def __mul__(self, scalar):
        return self._wrap(self._data * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return self._wrap(self._data / scalar)

    def __repr__(self) -> str:
        comps = ", ".join(f"{v:.4e}" for v in self._data)
        return f"{type(self).__name__}([{comps}])"


def as_voigt_array(values) -> np.ndarray:
    """将张量或 6 元序列转换为浮点分量数组 (保留浮点精度)"""
    arr = np.asarray(values)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    if arr.shape != (6,):
        raise ValueError(f"Voigt tensor needs 6 components, got shape {arr.shape}")
    return arr


class StressTensor(VoigtTensor):
    """应力张量 (Voigt 记号)"""


class StrainTensor(VoigtTensor):
    """应变张量 (Voigt 记号，剪切为张量分量 ε_ij，非工程剪应变 γ_ij)"""


def equivalent_plastic_strain(plastic_strain: VoigtTensor) -> float:
    """
    等效塑性应变

    ε̄p = √(2/3 εp:εp)

    单轴等体积塑性流动时 ε̄p 等于轴向塑性应变。
    """
    return float(np.sqrt(2.0 / 3.0 * plastic_strain.double_dot(plastic_strain)))
