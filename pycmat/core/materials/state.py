# 文件: pycmat/core/materials/state.py
"""
材料状态管理

PlasticState: 积分点应变历史的容器，由调用者 (外层积分循环) 持有和保存。
材料对象只是无状态的本构函数，从不保存或修改该容器。
"""

from dataclasses import dataclass, field

from .tensors import StrainTensor, StressTensor, equivalent_plastic_strain


@dataclass
class PlasticState:
    """
    塑性积分点状态容器

    存储积分点的历史变量，用于增量塑性计算。
    总应变 = elastic_strain + plastic_strain。

    Attributes:
        elastic_strain: 上一步的弹性应变
        plastic_strain: 上一步累积的塑性应变
        stress: 上一步的应力

    Example:
        state = mat.create_state()
        result = mat.compute_stress(d_strain, state)
        state = result.state  # 收敛后保存
    """

    elastic_strain: StrainTensor = field(default_factory=StrainTensor)
    plastic_strain: StrainTensor = field(default_factory=StrainTensor)
    stress: StressTensor = field(default_factory=StressTensor)

    @property
    def total_strain(self) -> StrainTensor:
        return self.elastic_strain + self.plastic_strain

    @property
    def equivalent_plastic_strain(self) -> float:
        """等效塑性应变 ε̄p = √(2/3 εp:εp)"""
        return equivalent_plastic_strain(self.plastic_strain)

    def copy(self) -> 'PlasticState':
        """
        深拷贝

        用于在时间步收敛后保存 committed 状态。
        """
        return PlasticState(
            elastic_strain=self.elastic_strain.copy(),
            plastic_strain=self.plastic_strain.copy(),
            stress=self.stress.copy()
        )

    def reset(self) -> None:
        """重置为初始状态"""
        self.elastic_strain = StrainTensor()
        self.plastic_strain = StrainTensor()
        self.stress = StressTensor()

    def __repr__(self) -> str:
        return (
            f"PlasticState(ep={self.equivalent_plastic_strain:.6f}, "
            f"stress_vm={self.stress.get_equivalent_von_mises():.2e})"
        )
