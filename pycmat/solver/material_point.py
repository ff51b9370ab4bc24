# 文件: pycmat/solver/material_point.py
"""
单积分点驱动器 (Material Point Driver)

模拟外层积分循环对一个积分点的调用: 驱动器持有应变历史 (PlasticState)，
每个子增量调用一次材料，收敛后保存新状态。用于材料标定和验证。

支持两种加载路径:
1. 应变控制: 给定一系列目标总应变
2. 单轴应力: 给定轴向应变，横向应变由 σYY = σZZ = 0 求解
"""

from typing import Dict, List, Sequence, Any

import numpy as np
from scipy.optimize import root

from ..core.materials.tensors import StrainTensor, as_voigt_array
from ..core.materials.state import PlasticState
from ..core.materials.elastic.isotropic import ElasticMaterial
from ..core.materials.models.von_mises import VonMisesPlasticMaterial


class MaterialPointDriver:
    """
    单积分点驱动器

    特性:
    1. 应变历史由驱动器持有，材料对象保持无状态
    2. 每个加载目标分为 num_increments 个等分子增量
    3. 单轴应力路径使用 scipy.optimize.root 求解横向应变
    4. Von Mises 材料达到断裂阈值时记录日志并 (默认) 停止加载

    Example:
        driver = MaterialPointDriver(mat, config={'num_increments': 20})
        history = driver.run_uniaxial_stress(np.linspace(0, 0.01, 11)[1:])
        print(history['stress'][:, 0])
    """

    def __init__(self, material, config: Dict[str, Any] = None):
        """
        Args:
            material: ElasticMaterial 或 ElastoplasticMaterial
            config: 配置字典 (num_increments, max_iter, tolerance, stop_on_fracture)
        """
        self.material = material

        # 配置 (未给出的项使用默认值)
        self.config = {
            "num_increments": 10,
            "max_iter": 50,          # 横向应变求解的迭代上限
            "tolerance": 1e-10,      # 横向应变求解的相对容差
            "stop_on_fracture": True
        }
        self.config.update(config or {})

        if int(self.config["num_increments"]) < 1:
            raise ValueError(
                f"num_increments must be at least 1, got {self.config['num_increments']}"
            )

        self.state = PlasticState()
        self.fractured = False
        self.log_callback = print

    def set_log_callback(self, callback):
        self.log_callback = callback

    def reset(self) -> None:
        """清空应变历史"""
        self.state = PlasticState()
        self.fractured = False

    # =========================================================================
    # 单步更新
    # =========================================================================

    def _step(self, d_strain: StrainTensor, state: PlasticState):
        """
        一个子增量的本构更新 (不修改 state)

        Returns:
            (new_state, yield_value)
        """
        if isinstance(self.material, ElasticMaterial):
            elastic_strain = state.elastic_strain + d_strain
            stress = self.material.compute_elastic_stress(elastic_strain)
            new_state = PlasticState(
                elastic_strain=elastic_strain,
                plastic_strain=state.plastic_strain.copy(),
                stress=stress
            )
            return new_state, 0.0

        result = self.material.compute_stress(d_strain, state)
        return result.state, result.yield_value

    def _check_fracture(self, d_strain: StrainTensor, state: PlasticState) -> bool:
        """试探应力是否达到 Von Mises 断裂阈值"""
        if not isinstance(self.material, VonMisesPlasticMaterial):
            return False
        trial_stress = self.material.compute_elastic_stress(state.elastic_strain + d_strain)
        return self.material.exceeds_plastic_yield(trial_stress)

    def _commit(self, d_strain: StrainTensor, new_state: PlasticState) -> bool:
        """
        保存收敛后的状态

        Returns:
            是否继续加载
        """
        if self._check_fracture(d_strain, self.state):
            self.fractured = True
            self.log_callback(
                f"Fracture: trial stress reached plastic yield "
                f"{self.material.plastic_yield:.4e}"
            )
            if self.config["stop_on_fracture"]:
                return False

        self.state = new_state
        return True

    # =========================================================================
    # 加载路径
    # =========================================================================

    def _record(self, history: Dict[str, List], yield_value: float) -> None:
        history['strain'].append(self.state.total_strain.data.copy())
        history['stress'].append(self.state.stress.data.copy())
        history['plastic_strain'].append(self.state.plastic_strain.data.copy())
        history['yield_value'].append(float(yield_value))

    @staticmethod
    def _finish(history: Dict[str, List]) -> Dict[str, np.ndarray]:
        return {
            'strain': np.array(history['strain']).reshape(-1, 6),
            'stress': np.array(history['stress']).reshape(-1, 6),
            'plastic_strain': np.array(history['plastic_strain']).reshape(-1, 6),
            'yield_value': np.array(history['yield_value']),
        }

    def _log_header(self) -> None:
        self.log_callback(f"{'STEP':<5} | {'EXX':<12} | {'SXX':<12} | {'SVM':<12} | {'EP':<12}")
        self.log_callback("-" * 65)

    def _log_step(self, step: int) -> None:
        s = self.state
        self.log_callback(
            f"{step:<5} | {s.total_strain.XX:<12.4e} | {s.stress.XX:<12.4e} | "
            f"{s.stress.get_equivalent_von_mises():<12.4e} | "
            f"{s.equivalent_plastic_strain:<12.4e}"
        )

    def run_strain_path(self, targets: Sequence) -> Dict[str, np.ndarray]:
        """
        应变控制加载

        每个目标总应变从当前总应变出发，分 num_increments 个等分子增量到达。

        Args:
            targets: 目标总应变序列，每个为 6 分量

        Returns:
            history: 每个目标结束时的 'strain', 'stress', 'plastic_strain' (N, 6)
                     和 'yield_value' (N,)
        """
        n_inc = int(self.config["num_increments"])
        history = {'strain': [], 'stress': [], 'plastic_strain': [], 'yield_value': []}

        self._log_header()
        for step, target in enumerate(targets, start=1):
            target = StrainTensor(as_voigt_array(target))
            d_strain = (target - self.state.total_strain) / n_inc

            yield_value = 0.0
            for _ in range(n_inc):
                new_state, yield_value = self._step(d_strain, self.state)
                if not self._commit(d_strain, new_state):
                    return self._finish(history)

            self._record(history, yield_value)
            self._log_step(step)

        return self._finish(history)

    def _solve_lateral(self, d_axial: float) -> StrainTensor:
        """
        求解横向应变增量，使 σYY = σZZ = 0

        Raises:
            RuntimeError: 求解未收敛
        """
        if d_axial == 0.0:
            return StrainTensor()

        state = self.state
        nu = self.material.nu

        def lateral_stress(x):
            d_strain = StrainTensor([d_axial, x[0], x[1], 0.0, 0.0, 0.0])
            new_state, _ = self._step(d_strain, state)
            return [new_state.stress.YY, new_state.stress.ZZ]

        # 弹性泊松收缩作为初值
        x0 = np.array([-nu * d_axial, -nu * d_axial])
        sol = root(
            lateral_stress, x0, method='hybr',
            options={'xtol': self.config["tolerance"],
                     'maxfev': int(self.config["max_iter"]) * (len(x0) + 1)}
        )
        # hybr 在舍入噪声下可能报告 "not making good progress"，此时按残差判断
        residual = float(np.max(np.abs(sol.fun)))
        scale = self.material.E * abs(d_axial)
        if not sol.success and residual > 1e-6 * scale:
            raise RuntimeError(
                f"Lateral strain solve did not converge (axial increment {d_axial:.4e}): "
                f"{sol.message}"
            )

        return StrainTensor([d_axial, sol.x[0], sol.x[1], 0.0, 0.0, 0.0])

    def run_uniaxial_stress(self, axial_strains: Sequence[float]) -> Dict[str, np.ndarray]:
        """
        单轴应力加载

        轴向 (XX) 总应变按给定序列加载，横向应变由 σYY = σZZ = 0 求解，
        剪切应变保持为零。

        Args:
            axial_strains: 目标轴向总应变序列

        Returns:
            history: 同 run_strain_path

        Raises:
            RuntimeError: 横向应变求解未收敛
        """
        n_inc = int(self.config["num_increments"])
        history = {'strain': [], 'stress': [], 'plastic_strain': [], 'yield_value': []}

        self._log_header()
        for step, target in enumerate(axial_strains, start=1):
            d_axial = (float(target) - self.state.total_strain.XX) / n_inc

            yield_value = 0.0
            for _ in range(n_inc):
                d_strain = self._solve_lateral(d_axial)
                new_state, yield_value = self._step(d_strain, self.state)
                if not self._commit(d_strain, new_state):
                    return self._finish(history)

            self._record(history, yield_value)
            self._log_step(step)

        return self._finish(history)
