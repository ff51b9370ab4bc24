# 文件: pycmat/core/materials/interfaces.py
"""
材料系统核心接口定义

设计原则:
1. ElastoplasticMaterial: 所有弹塑性材料的抽象基类，定义屈服函数、
   塑性流动与返回映射三个必须实现的本构操作
2. 材料是无状态的参数记录: 应变历史由调用者持有，通过参数传入
3. 弹性部分通过组合 ElasticMaterial 实现，不使用多层继承
4. Protocol: 组件接口，使用鸭子类型实现松耦合
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import numpy as np

from .tensors import VoigtTensor, StrainTensor, StressTensor, as_voigt_array
from .state import PlasticState
from .elastic.isotropic import ElasticMaterial


@dataclass
class StressResult:
    """
    一次积分点本构更新的结果

    Attributes:
        stress: 修正后的应力
        plastic_flow: 本步塑性应变修正量 (已累加进 state.plastic_strain)
        state: 更新后的积分点状态 (新对象，输入状态不被修改)
        yield_value: 试探状态的屈服函数值
        is_plastic: 是否发生塑性流动
    """
    stress: StressTensor
    plastic_flow: StrainTensor
    state: PlasticState
    yield_value: float = 0.0
    is_plastic: bool = False


class ElastoplasticMaterial(ABC):
    """
    弹塑性材料抽象基类

    所有具体材料都必须实现:
    - compute_yield_function(): 屈服函数，<0 弹性，=0 屈服面上，>0 需要修正
    - compute_plastic_strain_flow(): 塑性流动 (流动法则梯度 × flow_rate)
    - compute_return_mapping(): 返回映射，给出塑性应变修正量

    缺少任一方法的子类在实例化时即抛出 TypeError。

    基类提供:
    - 弹性参数与应力/应变转换 (委托给 self.elastic)
    - flow_rate: 塑性流动速率系数
    - compute_stress(): 按调用约定完成一次积分点更新

    Example:
        mat = VonMisesPlasticMaterial(E=210e9, nu=0.3, elastic_yield=250e6)
        state = mat.create_state()
        result = mat.compute_stress(d_strain, state)
        state = result.state
    """

    def __init__(
        self,
        E: float = 1e7,
        nu: float = 0.4,
        density: float = 1000.0,
        flow_rate: float = 1.0
    ):
        self.elastic = ElasticMaterial(E=E, nu=nu, density=density)
        self._check_flow_rate(flow_rate)
        self._flow_rate = float(flow_rate)

    # =========================================================================
    # 必须实现的本构操作
    # =========================================================================

    @abstractmethod
    def compute_yield_function(
        self,
        stress: VoigtTensor,
        plastic_strain: Optional[VoigtTensor] = None
    ) -> float:
        """
        计算屈服函数值

        Args:
            stress: 应力张量
            plastic_strain: 调用者持有的塑性应变，用于确定硬化后的屈服值；
                            None 表示使用初始屈服值

        Returns:
            f: <0 弹性，=0 位于屈服面，>0 不可容许，需要塑性修正
        """

    @abstractmethod
    def compute_plastic_strain_flow(self, total_strain: VoigtTensor) -> StrainTensor:
        """
        计算塑性应变流动

        将给定应变视为全部弹性，按流动法则给出回到屈服面所需的
        塑性应变 (已乘以 flow_rate)。

        Args:
            total_strain: 应变张量

        Returns:
            plastic_flow: 塑性应变流动
        """

    @abstractmethod
    def compute_return_mapping(
        self,
        increment_strain: VoigtTensor,
        last_elastic_strain: VoigtTensor,
        last_plastic_strain: VoigtTensor
    ) -> StrainTensor:
        """
        返回映射

        假设本步应变增量全部为弹性得到试探弹性应变，若试探应力超出屈服面，
        计算使应力回到屈服面所需的塑性应变修正量。返回值是修正量而非应力:
        调用者将其累加到自己的塑性应变上，并以 总应变 - 塑性应变 更新弹性应变。

        Args:
            increment_strain: 本步总应变增量
            last_elastic_strain: 上一步弹性应变 (调用者持有)
            last_plastic_strain: 上一步塑性应变 (调用者持有)

        Returns:
            plastic_flow: 塑性应变修正量
        """

    # =========================================================================
    # 流动速率
    # =========================================================================

    @staticmethod
    def _check_flow_rate(flow_rate: float) -> None:
        if not np.isfinite(flow_rate) or flow_rate <= 0:
            raise ValueError(f"Flow rate must be positive, got {flow_rate}")

    @property
    def flow_rate(self) -> float:
        """
        塑性流动速率系数

        越小则动态仿真中的塑性流动越慢 (延迟塑性)；>= 1 时为精确投影。
        """
        return self._flow_rate

    @flow_rate.setter
    def flow_rate(self, value: float) -> None:
        self._check_flow_rate(value)
        self._flow_rate = float(value)

    # =========================================================================
    # 弹性部分 (委托)
    # =========================================================================

    @property
    def E(self) -> float:
        return self.elastic.E

    @E.setter
    def E(self, value: float) -> None:
        self.elastic.E = value

    @property
    def nu(self) -> float:
        return self.elastic.nu

    @nu.setter
    def nu(self, value: float) -> None:
        self.elastic.nu = value

    @property
    def G(self) -> float:
        return self.elastic.G

    @G.setter
    def G(self, value: float) -> None:
        self.elastic.G = value

    @property
    def density(self) -> float:
        return self.elastic.density

    @density.setter
    def density(self, value: float) -> None:
        self.elastic.density = value

    @property
    def lam(self) -> float:
        return self.elastic.lam

    @property
    def K(self) -> float:
        return self.elastic.K

    @property
    def D(self) -> np.ndarray:
        """弹性矩阵 (6,6)"""
        return self.elastic.D

    def compute_elastic_stress(self, strain: VoigtTensor) -> StressTensor:
        return self.elastic.compute_elastic_stress(strain)

    def compute_elastic_strain(self, stress: VoigtTensor) -> StrainTensor:
        return self.elastic.compute_elastic_strain(stress)

    # =========================================================================
    # 调用约定
    # =========================================================================

    def create_state(self) -> PlasticState:
        """创建初始积分点状态 (由调用者持有)"""
        return PlasticState()

    def compute_stress(
        self,
        increment_strain: VoigtTensor,
        state: Optional[PlasticState] = None
    ) -> StressResult:
        """
        一次积分点更新

        算法流程:
        1. 返回映射得到塑性修正量 Δεp
        2. εp_new = εp_old + Δεp
        3. εe_new = εe_old + Δε - Δεp (即 总应变 - 塑性应变)
        4. σ = C : εe_new

        Args:
            increment_strain: 本步总应变增量
            state: 上一步状态 (若为 None，将创建新状态)

        Returns:
            StressResult: 包含应力、塑性修正量和更新后的状态
        """
        if state is None:
            state = self.create_state()

        d_strain = StrainTensor(as_voigt_array(increment_strain))
        trial_strain = state.elastic_strain + d_strain
        plastic_flow = self.compute_return_mapping(
            d_strain, state.elastic_strain, state.plastic_strain
        )

        plastic_strain = state.plastic_strain + plastic_flow
        elastic_strain = trial_strain - plastic_flow
        stress = self.compute_elastic_stress(elastic_strain)

        f_trial = self.compute_yield_function(
            self.compute_elastic_stress(trial_strain), state.plastic_strain
        )

        # 创建新状态，不修改输入
        new_state = PlasticState(
            elastic_strain=elastic_strain,
            plastic_strain=plastic_strain,
            stress=stress
        )
        return StressResult(
            stress=stress,
            plastic_flow=plastic_flow,
            state=new_state,
            yield_value=float(f_trial),
            is_plastic=bool(np.any(np.asarray(plastic_flow) != 0.0))
        )


# =============================================================================
# 组件协议 (Protocol for duck typing)
# 使用 Protocol 而非 ABC，允许更灵活的组合
# =============================================================================

@runtime_checkable
class YieldFunction(Protocol):
    """
    屈服函数协议

    任何实现了以下方法的类都可以作为屈服函数使用:
    - evaluate(): 计算屈服函数值
    - flow_direction(): 计算塑性势梯度 (流动方向)
    """

    def evaluate(self, stress: VoigtTensor, yield_stress: float) -> float:
        ...

    def flow_direction(self, stress: VoigtTensor) -> StrainTensor:
        ...


@runtime_checkable
class HardeningLaw(Protocol):
    """
    硬化律协议

    任何实现了以下方法的类都可以作为硬化律使用:
    - get_yield_stress(): 获取当前屈服值
    - get_hardening_modulus(): 获取硬化模量
    """

    def get_yield_stress(self, ep: float) -> float:
        """
        Args:
            ep: 等效塑性应变

        Returns:
            当前屈服值
        """
        ...

    def get_hardening_modulus(self, ep: float) -> float:
        ...
