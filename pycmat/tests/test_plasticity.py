# 文件: pycmat/tests/test_plasticity.py
"""
弹塑性材料单元测试
"""

import numpy as np
import pytest
from pycmat.core.materials import (
    ElastoplasticMaterial,
    ElasticMaterial,
    VonMisesPlasticMaterial,
    DruckerPragerPlasticMaterial,
    VonMises,
    DruckerPrager,
    PerfectPlasticity,
    ExponentialHardening,
    equivalent_plastic_strain,
    RadialReturn,
    ConeReturn,
    PlasticState,
    StressTensor,
    StrainTensor,
    YieldFunction,
    HardeningLaw,
)


class TestVonMises:
    """测试 Von Mises 屈服函数"""

    def test_uniaxial_yield(self):
        """测试单轴屈服"""
        yield_fn = VonMises()
        yield_stress = 250e6

        # 正好屈服
        stress = StressTensor([250e6, 0, 0, 0, 0, 0])
        f = yield_fn.evaluate(stress, yield_stress)
        assert np.isclose(f, 0, atol=1e-3)

    def test_hydrostatic_no_yield(self):
        """测试静水压力不屈服"""
        yield_fn = VonMises()
        stress = StressTensor([1e9, 1e9, 1e9, 0, 0, 0])
        f = yield_fn.evaluate(stress, 250e6)
        assert f < 0, "纯静水压力不应屈服"

    def test_gradient(self):
        """测试梯度 n = 3/2 s / σ_eq"""
        yield_fn = VonMises()
        stress = StressTensor([300e6, -100e6, 50e6, 10e6, 20e6, 30e6])
        n = yield_fn.gradient(stress)

        s = stress.get_deviatoric_part()
        expected = 1.5 * s.data / stress.get_equivalent_von_mises()
        assert np.allclose(n.data, expected)
        # 梯度为偏量
        assert np.isclose(n.get_volumetric_part(), 0.0, atol=1e-12)

    def test_gradient_hydrostatic(self):
        """测试纯静水应力梯度为零"""
        n = VonMises().gradient(StressTensor([5.0, 5.0, 5.0, 0, 0, 0]))
        assert np.array_equal(n.data, np.zeros(6))

    def test_protocols(self):
        """测试组件满足协议"""
        assert isinstance(VonMises(), YieldFunction)
        assert isinstance(DruckerPrager(), YieldFunction)
        assert isinstance(PerfectPlasticity(1.0), HardeningLaw)
        assert isinstance(ExponentialHardening(1.0), HardeningLaw)

    def test_return_mapping_checks_components(self):
        """测试返回映射拒绝不满足协议的组件"""
        elastic = ElasticMaterial()
        with pytest.raises(TypeError):
            RadialReturn(elastic, object())
        with pytest.raises(TypeError):
            ConeReturn(elastic, DruckerPrager(), hardening=object())


class TestDruckerPrager:
    """测试 Drucker-Prager 屈服函数"""

    def test_evaluate(self):
        """测试 f = α I1 + √J2 - k"""
        yield_fn = DruckerPrager(alpha=0.2)
        # 静水应力: I1 = 3p, J2 = 0
        assert np.isclose(yield_fn.evaluate(StressTensor([1.0, 1.0, 1.0, 0, 0, 0]), 1.0), -0.4)
        # 纯剪切: I1 = 0, √J2 = |τ|
        assert np.isclose(yield_fn.evaluate(StressTensor([0, 0, 0, 3.0, 0, 0]), 1.0), 2.0)

    def test_pressure_sensitivity(self):
        """测试围压提高强度"""
        yield_fn = DruckerPrager(alpha=0.3)
        shear = StressTensor([0, 0, 0, 1.0, 0, 0])
        confined = shear + StressTensor([-1.0, -1.0, -1.0, 0, 0, 0])
        assert yield_fn.evaluate(confined, 1.0) < yield_fn.evaluate(shear, 1.0)

    def test_flow_direction_uses_dilatancy(self):
        """测试塑性势梯度的体积部分由剪胀系数决定"""
        yield_fn = DruckerPrager(alpha=0.4, dilatancy=0.1)
        stress = StressTensor([2.0, -1.0, 0.5, 0.3, 0.2, 0.1])
        m = yield_fn.flow_direction(stress)
        assert np.isclose(m.get_volumetric_part(), 3 * 0.1)

        # 偏量部分 s / (2√J2)，与 α 无关
        s = stress.get_deviatoric_part()
        expected = s.data / (2.0 * np.sqrt(stress.invariant_J2))
        assert np.allclose(m.get_deviatoric_part().data, expected)

    def test_apex_stress(self):
        """测试锥顶应力位于屈服面上"""
        yield_fn = DruckerPrager(alpha=0.25)
        apex = yield_fn.apex_stress(2.0)
        assert np.isclose(yield_fn.evaluate(apex, 2.0), 0.0)
        assert np.isclose(apex.invariant_J2, 0.0)
        with pytest.raises(ValueError):
            DruckerPrager(alpha=0.0).apex_stress(1.0)

    @pytest.mark.parametrize("kwargs", [
        {'alpha': -0.1},
        {'dilatancy': -0.1},
        {'alpha': float('nan')},
        {'dilatancy': float('inf')},
    ])
    def test_reject_negative(self, kwargs):
        """测试负参数被拒绝"""
        with pytest.raises(ValueError):
            DruckerPrager(**kwargs)


class TestMohrCoulombFit:
    """测试 Mohr-Coulomb 拟合"""

    @pytest.mark.parametrize("phi_deg", [1.0, 10.0, 30.0, 45.0, 60.0, 89.0])
    def test_inner_inside_outer(self, phi_deg):
        """测试内切锥严格位于外接锥内部"""
        phi = np.radians(phi_deg)
        c = 1e4
        a_in, k_in = DruckerPrager.from_mohr_coulomb(phi, c, inner_approx=True)
        a_out, k_out = DruckerPrager.from_mohr_coulomb(phi, c, inner_approx=False)

        assert a_in != a_out and k_in != k_out
        assert a_in < a_out
        assert k_in < k_out

        # 两个锥共享锥顶 I1 = 3c / tanφ
        apex = 3.0 * c / np.tan(phi)
        assert np.isclose(k_in / a_in, apex, rtol=1e-10)
        assert np.isclose(k_out / a_out, apex, rtol=1e-10)

        # 锥顶以下各处，内切锥的半径 √J2 = k - α I1 更小
        for I1 in np.linspace(-10 * apex, 0.99 * apex, 7):
            assert k_in - a_in * I1 < k_out - a_out * I1

        # 内切锥面上的点相对外接锥是弹性的
        I1 = -apex
        r_in = k_in - a_in * I1
        stress = StressTensor([I1 / 3.0, I1 / 3.0, I1 / 3.0, r_in, 0, 0])
        assert np.isclose(DruckerPrager(a_in).evaluate(stress, k_in), 0.0, atol=1e-6 * c)
        assert DruckerPrager(a_out).evaluate(stress, k_out) < 0.0

    def test_known_values(self):
        """测试 φ = 30° 的解析值"""
        phi = np.radians(30.0)
        alpha, k = DruckerPrager.from_mohr_coulomb(phi, 1.0, inner_approx=False)
        assert np.isclose(alpha, 2 * 0.5 / (np.sqrt(3) * 2.5))
        assert np.isclose(k, 6 * np.cos(phi) / (np.sqrt(3) * 2.5))

    @pytest.mark.parametrize("phi, c", [
        (0.0, 1.0), (np.pi / 2, 1.0), (-0.1, 1.0), (0.5, 0.0),
        (float('nan'), 1.0), (0.5, float('nan')),
    ])
    def test_invalid(self, phi, c):
        """测试非法 Mohr-Coulomb 参数"""
        with pytest.raises(ValueError):
            DruckerPrager.from_mohr_coulomb(phi, c)


class TestHardening:
    """测试硬化模型"""

    def test_perfect_plasticity(self):
        """测试理想塑性"""
        h = PerfectPlasticity(yield_stress=250e6)

        assert h.get_yield_stress(0.0) == 250e6
        assert h.get_yield_stress(0.1) == 250e6
        assert h.get_hardening_modulus(0.0) == 0.0

    def test_exponential_saturation(self):
        """测试指数硬化趋向极限且不越过"""
        h = ExponentialHardening(yield_stress=1.0, hardening_limit=2.0, hardening_speed=0.01)
        eps = np.linspace(0.0, 1.0, 201)
        k = np.array([h.get_yield_stress(e) for e in eps])

        assert k[0] == 1.0
        assert np.all(np.diff(k) >= 0.0)
        assert np.all(k <= 2.0)
        assert np.isclose(k[-1], 2.0, rtol=1e-12)
        assert h.get_hardening_modulus(0.0) == pytest.approx(100.0)

    def test_exponential_softening(self):
        """测试软化趋向较低极限且不越过"""
        h = ExponentialHardening(yield_stress=1.0, hardening_limit=0.5, hardening_speed=0.05)
        k = np.array([h.get_yield_stress(e) for e in np.linspace(0.0, 2.0, 101)])
        assert np.all(np.diff(k) <= 0.0)
        assert np.all(k >= 0.5)
        assert np.isclose(k[-1], 0.5, rtol=1e-12)

    def test_zero_speed_disables(self):
        """测试 hardening_speed = 0 关闭硬化"""
        h = ExponentialHardening(yield_stress=1.0, hardening_limit=5.0, hardening_speed=0.0)
        assert h.get_yield_stress(10.0) == 1.0
        assert h.get_hardening_modulus(10.0) == 0.0

    def test_limit_defaults_to_yield(self):
        """测试未给出极限时等于初始屈服值"""
        h = ExponentialHardening(yield_stress=3.0, hardening_speed=0.1)
        assert h.hardening_limit == 3.0
        assert h.get_yield_stress(1.0) == 3.0

    @pytest.mark.parametrize("args", [
        (float('nan'),),
        (float('inf'),),
        (1.0, float('nan')),
        (1.0, None, float('nan')),
        (1.0, None, float('inf')),
    ])
    def test_exponential_rejects_non_finite(self, args):
        """测试非有限参数被拒绝"""
        with pytest.raises(ValueError):
            ExponentialHardening(*args)

    def test_perfect_rejects_non_finite(self):
        with pytest.raises(ValueError):
            PerfectPlasticity(float('nan'))

    def test_equivalent_plastic_strain(self):
        """测试等容单轴塑性流动的等效塑性应变等于轴向应变"""
        ep = StrainTensor([0.01, -0.005, -0.005, 0, 0, 0])
        assert np.isclose(equivalent_plastic_strain(ep), 0.01)


class TestRadialReturn:
    """测试径向返回算法"""

    def setup_method(self):
        """测试准备"""
        self.elastic = ElasticMaterial(E=210e9, nu=0.3)
        self.yield_fn = VonMises()
        self.return_mapping = RadialReturn(self.elastic, self.yield_fn)

    def test_elastic_response(self):
        """测试弹性响应"""
        trial = self.elastic.compute_elastic_strain(StressTensor([200e6, 0, 0, 0, 0, 0]))
        flow, f = self.return_mapping.apply(trial, 250e6)
        assert f < 0
        assert np.array_equal(flow.data, np.zeros(6))

    def test_plastic_response(self):
        """测试塑性响应: 修正后应力回到屈服面"""
        trial = self.elastic.compute_elastic_strain(StressTensor([400e6, 0, 0, 50e6, 0, 0]))
        flow, f = self.return_mapping.apply(trial, 250e6)
        assert f > 0

        stress = self.elastic.compute_elastic_stress(trial - flow)
        sigma_eq = self.yield_fn.equivalent_stress(stress)
        assert np.isclose(sigma_eq, 250e6, rtol=1e-10)

        # 等体积流动
        assert np.isclose(flow.get_volumetric_part(), 0.0, atol=1e-18)

    def test_partial_projection(self):
        """测试 flow_rate < 1 只投影一部分"""
        trial = self.elastic.compute_elastic_strain(StressTensor([400e6, 0, 0, 0, 0, 0]))
        full, f = self.return_mapping.apply(trial, 250e6, flow_rate=1.0)
        half, _ = self.return_mapping.apply(trial, 250e6, flow_rate=0.5)
        over, _ = self.return_mapping.apply(trial, 250e6, flow_rate=3.0)

        assert np.allclose(half.data, 0.5 * full.data, rtol=1e-12)
        assert np.allclose(over.data, full.data, rtol=1e-12)

        stress = self.elastic.compute_elastic_stress(trial - half)
        assert np.isclose(stress.get_equivalent_von_mises(), 400e6 - 0.5 * f, rtol=1e-10)


class TestConeReturn:
    """测试锥面返回算法"""

    def setup_method(self):
        self.elastic = ElasticMaterial(E=1e7, nu=0.3)

    @pytest.mark.parametrize("alpha, dilatancy", [(0.2, 0.2), (0.3, 0.1), (0.1, 0.0), (0.0, 0.0)])
    def test_smooth_return_on_surface(self, alpha, dilatancy):
        """测试光滑锥面返回后位于屈服面上"""
        yield_fn = DruckerPrager(alpha, dilatancy)
        rm = ConeReturn(self.elastic, yield_fn)
        k = 1e3

        trial = self.elastic.compute_elastic_strain(StressTensor([-2e3, -1e3, -1.5e3, 5e3, 1e3, -2e3]))
        flow, f = rm.apply(trial, k)
        assert f > 0

        stress = self.elastic.compute_elastic_stress(trial - flow)
        assert np.isclose(yield_fn.evaluate(stress, k), 0.0, atol=1e-8 * k)
        # 体积塑性应变由剪胀系数决定
        d_lambda = f / (self.elastic.G + 9 * self.elastic.K * alpha * dilatancy)
        assert np.isclose(flow.get_volumetric_part(), 3 * dilatancy * d_lambda, atol=1e-15)

    def test_apex_return(self):
        """测试超出锥顶区域时投影到锥顶"""
        yield_fn = DruckerPrager(alpha=0.5)
        rm = ConeReturn(self.elastic, yield_fn)
        k = 0.1

        trial = StrainTensor([1e-3, 1e-3, 1e-3, 1e-6, 0, 0])
        flow, f = rm.apply(trial, k)
        assert f > 0

        stress = self.elastic.compute_elastic_stress(trial - flow)
        apex = yield_fn.apex_stress(k)
        assert np.allclose(stress.data, apex.data, atol=1e-6)
        assert np.isclose(yield_fn.evaluate(stress, k), 0.0, atol=1e-6)

    def test_elastic_inside_cone(self):
        """测试锥内为弹性"""
        rm = ConeReturn(self.elastic, DruckerPrager(alpha=0.3))
        trial = self.elastic.compute_elastic_strain(StressTensor([-1e3, -1e3, -1e3, 10.0, 0, 0]))
        flow, f = rm.apply(trial, 1.0)
        assert f < 0
        assert np.array_equal(flow.data, np.zeros(6))


class TestVonMisesPlasticMaterial:
    """测试 Von Mises 弹塑性材料"""

    def setup_method(self):
        self.mat = VonMisesPlasticMaterial(
            E=210e9, nu=0.3, elastic_yield=250e6, plastic_yield=400e6
        )

    def test_defaults(self):
        """测试默认参数"""
        mat = VonMisesPlasticMaterial()
        assert mat.E == 1e7 and mat.nu == 0.4 and mat.density == 1000.0
        assert mat.elastic_yield == 0.1
        assert mat.plastic_yield == 0.2
        assert mat.flow_rate == 1.0

    def test_yield_function_sign(self):
        """测试屈服函数: 屈服面上为 0，内部为负，外部为正"""
        on = StressTensor([250e6, 0, 0, 0, 0, 0])
        assert np.isclose(self.mat.compute_yield_function(on), 0.0, atol=1e-3)
        assert self.mat.compute_yield_function(on * 0.5) < 0
        assert self.mat.compute_yield_function(on * 1.5) > 0

        shear = StressTensor([0, 0, 0, 250e6 / np.sqrt(3.0), 0, 0])
        assert np.isclose(self.mat.compute_yield_function(shear), 0.0, atol=1e-3)

    def test_elastic_deformation(self):
        """测试弹性变形"""
        state = self.mat.create_state()
        result = self.mat.compute_stress(StrainTensor([1e-4, -3e-5, -3e-5, 0, 0, 0]), state)

        assert not result.is_plastic
        assert result.state.equivalent_plastic_strain == 0.0
        assert result.yield_value < 0

    def test_plastic_deformation(self):
        """测试塑性变形: 应力回到屈服面"""
        state = self.mat.create_state()
        result = self.mat.compute_stress(StrainTensor([1e-2, -3e-3, -3e-3, 0, 0, 0]), state)

        assert result.is_plastic
        assert result.yield_value > 0
        assert result.state.equivalent_plastic_strain > 0.0
        assert np.isclose(result.stress.get_equivalent_von_mises(), 250e6, rtol=1e-10)
        assert np.isclose(self.mat.compute_yield_function(result.stress), 0.0, atol=1e-2)

    def test_state_immutability(self):
        """测试状态不可变性"""
        state = self.mat.create_state()
        original_ep = state.equivalent_plastic_strain

        result = self.mat.compute_stress(StrainTensor([1e-2, -3e-3, -3e-3, 0, 0, 0]), state)

        # 原始状态不应被修改
        assert state.equivalent_plastic_strain == original_ep
        assert np.array_equal(state.elastic_strain.data, np.zeros(6))
        # 返回的新状态应被更新
        assert result.state.equivalent_plastic_strain > original_ep

    def test_caller_contract(self):
        """测试调用约定: 弹性应变 = 总应变 - 塑性应变"""
        state = PlasticState()
        increments = [StrainTensor([4e-4, 0, 0, 2e-4, 0, 0])] * 10
        total = np.zeros(6)
        for d in increments:
            flow = self.mat.compute_return_mapping(d, state.elastic_strain, state.plastic_strain)
            total = total + d.data
            plastic = state.plastic_strain + flow
            elastic = StrainTensor(total) - plastic
            state = PlasticState(elastic, plastic, self.mat.compute_elastic_stress(elastic))

            result_stress = state.stress
            assert self.mat.compute_yield_function(result_stress) <= 1e-3

        assert np.allclose(state.total_strain.data, total)

    def test_plastic_strain_flow(self):
        """测试 compute_plastic_strain_flow 等价于零历史的返回映射"""
        strain = StrainTensor([2e-3, -1e-3, 0, 5e-4, 0, 0])
        flow_a = self.mat.compute_plastic_strain_flow(strain)
        flow_b = self.mat.compute_return_mapping(strain, StrainTensor(), StrainTensor())
        assert np.allclose(flow_a.data, flow_b.data)
        assert np.linalg.norm(flow_a.data) > 0

    def test_flow_rate_delays_plasticity(self):
        """测试较小的 flow_rate 使塑性流动滞后"""
        slow = self.mat.copy()
        slow.flow_rate = 0.25
        strain = StrainTensor([3e-3, 0, 0, 0, 0, 0])
        fast_flow = self.mat.compute_plastic_strain_flow(strain)
        slow_flow = slow.compute_plastic_strain_flow(strain)
        assert np.allclose(slow_flow.data, 0.25 * fast_flow.data)

    def test_exceeds_plastic_yield(self):
        """测试断裂阈值判断"""
        assert not self.mat.exceeds_plastic_yield(StressTensor([399e6, 0, 0, 0, 0, 0]))
        assert self.mat.exceeds_plastic_yield(StressTensor([400e6, 0, 0, 0, 0, 0]))

    @pytest.mark.parametrize("attr, value", [
        ('elastic_yield', 0.0),
        ('elastic_yield', 500e6),   # 高于 plastic_yield
        ('plastic_yield', 100e6),   # 低于 elastic_yield
        ('elastic_yield', float('nan')),
        ('elastic_yield', float('inf')),
        ('plastic_yield', float('nan')),
        ('plastic_yield', float('inf')),
        ('flow_rate', 0.0),
        ('flow_rate', -1.0),
        ('nu', 0.5),
        ('E', -1.0),
    ])
    def test_setters_reject_invalid(self, attr, value):
        """测试非法值被拒绝且状态不变"""
        before = repr(self.mat)
        with pytest.raises(ValueError):
            setattr(self.mat, attr, value)
        assert repr(self.mat) == before

    def test_elastic_delegation(self):
        """测试弹性参数委托"""
        self.mat.E = 200e9
        assert self.mat.elastic.E == 200e9
        assert np.isclose(self.mat.G, 200e9 / 2.6)
        assert np.allclose(self.mat.D, self.mat.elastic.D)


class TestDruckerPragerPlasticMaterial:
    """测试 Drucker-Prager 弹塑性材料"""

    def test_defaults(self):
        """测试默认参数"""
        mat = DruckerPragerPlasticMaterial()
        assert mat.elastic_yield == 0.1
        assert mat.alpha == 0.5
        assert mat.dilatancy == 0.0
        assert mat.hardening_speed == 0.0
        assert mat.hardening_limit == 0.1
        assert mat.flow_rate == 1.0

    @pytest.mark.parametrize("seed", range(5))
    def test_equivalent_to_von_mises(self, seed):
        """测试 α = ψ = 0 时与 Von Mises (σ_y = √3 k) 一致"""
        k = 1e3
        dp = DruckerPragerPlasticMaterial(E=1e7, nu=0.3, elastic_yield=k, alpha=0.0, dilatancy=0.0)
        vm = VonMisesPlasticMaterial(E=1e7, nu=0.3, elastic_yield=np.sqrt(3.0) * k,
                                     plastic_yield=10 * k)

        rng = np.random.default_rng(seed)
        strain = StrainTensor(rng.normal(scale=1e-3, size=6))
        stress = dp.compute_elastic_stress(strain)

        assert np.isclose(vm.compute_yield_function(stress),
                          np.sqrt(3.0) * dp.compute_yield_function(stress), rtol=1e-10)
        assert np.allclose(dp.compute_plastic_strain_flow(strain).data,
                           vm.compute_plastic_strain_flow(strain).data,
                           rtol=1e-9, atol=1e-18)

    def test_mohr_coulomb_setup(self):
        """测试由 Mohr-Coulomb 参数设置"""
        mat = DruckerPragerPlasticMaterial(E=50e6, nu=0.3)
        mat.set_from_mohr_coulomb(np.radians(30.0), 10e3)
        alpha, k = DruckerPrager.from_mohr_coulomb(np.radians(30.0), 10e3)
        assert mat.alpha == alpha
        assert mat.elastic_yield == k

        outer = DruckerPragerPlasticMaterial(E=50e6, nu=0.3)
        outer.set_from_mohr_coulomb(np.radians(30.0), 10e3, inner_approx=False)
        assert outer.alpha > mat.alpha

    def test_hardening_saturation(self):
        """测试剪切加载下屈服值单调趋向硬化极限"""
        mat = DruckerPragerPlasticMaterial(
            E=1e7, nu=0.3, elastic_yield=1e3, alpha=0.1,
            hardening_speed=1e-3, hardening_limit=2e3
        )
        state = mat.create_state()
        d_strain = StrainTensor([0, 0, 0, 1e-3, 0, 0])

        history = [mat.current_yield(state.plastic_strain)]
        for _ in range(50):
            state = mat.compute_stress(d_strain, state).state
            history.append(mat.current_yield(state.plastic_strain))

        history = np.array(history)
        assert history[0] == 1e3
        assert np.all(np.diff(history) >= 0.0)
        assert np.all(history <= 2e3)
        assert np.isclose(history[-1], 2e3, rtol=1e-9)

    def test_yield_uses_plastic_strain(self):
        """测试屈服函数使用硬化后的屈服值"""
        mat = DruckerPragerPlasticMaterial(
            elastic_yield=1.0, alpha=0.2, hardening_speed=0.01, hardening_limit=3.0
        )
        stress = StressTensor([0, 0, 0, 2.0, 0, 0])
        ep = StrainTensor([0, 0, 0, 0.5, 0, 0])
        assert np.isclose(mat.compute_yield_function(stress), 1.0)
        assert np.isclose(mat.compute_yield_function(stress, ep), -1.0)

    def test_apex_return_through_material(self):
        """测试静水拉伸时应力投影到锥顶"""
        mat = DruckerPragerPlasticMaterial()
        result = mat.compute_stress(StrainTensor([1e-3, 1e-3, 1e-3, 0, 0, 0]))
        apex = mat.elastic_yield / (3.0 * mat.alpha)
        assert result.is_plastic
        assert np.allclose(result.stress.data, [apex, apex, apex, 0, 0, 0], atol=1e-6)

    def test_softening_stays_on_surface(self):
        """测试软化材料修正后的应力位于更新后的屈服面上"""
        k0 = 1e3
        mat = DruckerPragerPlasticMaterial(
            E=1e7, nu=0.3, elastic_yield=k0, alpha=0.1,
            hardening_speed=1e-3, hardening_limit=5e2
        )
        state = mat.create_state()
        d_strain = StrainTensor([0, 0, 0, 1e-3, 0, 0])

        for _ in range(10):
            result = mat.compute_stress(d_strain, state)
            state = result.state
            assert result.is_plastic
            f = mat.compute_yield_function(result.stress, state.plastic_strain)
            assert abs(f) <= 1e-6 * k0

        # 屈服值已明显软化
        assert mat.current_yield(state.plastic_strain) < 0.6 * k0

    def test_softening_apex_return(self):
        """测试软化材料静水拉伸时投影到软化后的锥顶"""
        k0 = 100.0
        mat = DruckerPragerPlasticMaterial(
            E=1e7, nu=0.3, elastic_yield=k0, alpha=0.3,
            hardening_speed=1e-4, hardening_limit=50.0
        )
        state = mat.create_state()
        d_strain = StrainTensor([1e-4, 1e-4, 1e-4, 0, 0, 0])

        for _ in range(5):
            result = mat.compute_stress(d_strain, state)
            state = result.state
            k = mat.current_yield(state.plastic_strain)
            p = k / (3.0 * mat.alpha)
            assert np.allclose(result.stress.data, [p, p, p, 0, 0, 0], rtol=1e-9, atol=1e-9 * k0)
            f = mat.compute_yield_function(result.stress, state.plastic_strain)
            assert abs(f) <= 1e-6 * k0

        assert k < k0

    def test_hardening_setters_update_return_mapping(self):
        """测试修改硬化参数后返回映射使用新的硬化律"""
        mat = DruckerPragerPlasticMaterial(hardening_speed=0.1)
        mat.hardening_limit = 0.3
        assert mat.return_mapping.hardening is mat.hardening
        mat.elastic_yield = 0.2
        assert mat.return_mapping.hardening is mat.hardening
        assert mat.return_mapping.hardening.hardening_limit == 0.3

    def test_mohr_coulomb_resets_hardening_limit(self):
        """测试 Mohr-Coulomb 拟合后硬化极限跟随新的屈服值"""
        mat = DruckerPragerPlasticMaterial(
            E=50e6, nu=0.3, hardening_speed=0.01, hardening_limit=0.5
        )
        mat.set_from_mohr_coulomb(np.radians(30.0), 10e3)
        assert mat.hardening_limit == mat.elastic_yield
        assert mat.hardening_speed == 0.01
        assert mat.return_mapping.hardening is mat.hardening

        # 拟合之后再设置硬化极限
        mat.hardening_limit = 2.0 * mat.elastic_yield
        assert mat.current_yield(StrainTensor([0, 0, 0, 1.0, 0, 0])) > mat.elastic_yield

    @pytest.mark.parametrize("attr, value", [
        ('alpha', -0.1),
        ('dilatancy', -0.1),
        ('elastic_yield', 0.0),
        ('hardening_speed', -1.0),
        ('hardening_limit', 0.0),
        ('flow_rate', 0.0),
        ('alpha', float('nan')),
        ('alpha', float('inf')),
        ('dilatancy', float('nan')),
        ('elastic_yield', float('nan')),
        ('hardening_speed', float('nan')),
        ('hardening_speed', float('inf')),
        ('hardening_limit', float('nan')),
        ('flow_rate', float('nan')),
    ])
    def test_setters_reject_invalid(self, attr, value):
        """测试非法值被拒绝且状态不变"""
        mat = DruckerPragerPlasticMaterial(hardening_speed=0.1, hardening_limit=0.2)
        before = (repr(mat), mat.hardening_speed, mat.hardening_limit)
        with pytest.raises(ValueError):
            setattr(mat, attr, value)
        assert (repr(mat), mat.hardening_speed, mat.hardening_limit) == before

    def test_copy(self):
        """测试拷贝保留全部参数"""
        mat = DruckerPragerPlasticMaterial(
            E=3e7, nu=0.25, density=1800.0, elastic_yield=5.0, alpha=0.3,
            dilatancy=0.1, hardening_speed=0.02, hardening_limit=8.0, flow_rate=0.5
        )
        other = mat.copy()
        other.alpha = 0.1
        assert mat.alpha == 0.3
        for name in ('E', 'nu', 'density', 'elastic_yield', 'dilatancy',
                     'hardening_speed', 'hardening_limit', 'flow_rate'):
            assert getattr(other, name) == getattr(mat, name)


class TestAbstractContract:
    """测试弹塑性抽象接口"""

    def test_missing_operation_rejected(self):
        """测试缺少必需操作的子类不能实例化"""

        class Incomplete(ElastoplasticMaterial):
            def compute_yield_function(self, stress, plastic_strain=None):
                return -1.0

        with pytest.raises(TypeError):
            Incomplete()

    def test_complete_subclass(self):
        """测试实现全部操作的子类可以使用 compute_stress"""

        class AlwaysElastic(ElastoplasticMaterial):
            def compute_yield_function(self, stress, plastic_strain=None):
                return -1.0

            def compute_plastic_strain_flow(self, total_strain):
                return StrainTensor()

            def compute_return_mapping(self, increment_strain, last_elastic_strain,
                                       last_plastic_strain):
                return StrainTensor()

        mat = AlwaysElastic(E=1e7, nu=0.3)
        result = mat.compute_stress(StrainTensor([1e-3, 0, 0, 0, 0, 0]))
        assert not result.is_plastic
        assert np.allclose(result.stress.data, mat.D @ np.array([1e-3, 0, 0, 0, 0, 0]))
