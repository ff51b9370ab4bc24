# 文件: pycmat/core/materials/factory.py
"""
材料工厂模块

提供统一的材料创建入口。
"""

from typing import Dict, Any, Optional, Union

from .elastic.isotropic import ElasticMaterial
from .models.von_mises import VonMisesPlasticMaterial
from .models.drucker_prager import DruckerPragerPlasticMaterial


Material = Union[ElasticMaterial, VonMisesPlasticMaterial, DruckerPragerPlasticMaterial]

# 属性字典中 'plastic' 段的模型名
VON_MISES = 'von_mises'
DRUCKER_PRAGER = 'drucker_prager'


class MaterialFactory:
    """
    材料工厂

    根据材料属性字典创建对应的材料对象。
    提供便捷的工厂方法简化常见材料的创建。

    Example:
        # 从属性字典创建
        mat = MaterialFactory.create('Steel', {
            'E': 210e9,
            'nu': 0.3,
            'plastic': {'model': 'von_mises', 'elastic_yield': 250e6}
        })

        # 使用便捷方法
        mat = MaterialFactory.create_elastic(E=210e9, nu=0.3)
        mat = MaterialFactory.create_mohr_coulomb(E=50e6, nu=0.3, phi=np.radians(30),
                                                  cohesion=10e3)
    """

    @staticmethod
    def create(name: str, props: Dict[str, Any]) -> Material:
        """
        根据属性字典创建材料

        Args:
            name: 材料名称 (用于错误消息)
            props: 材料属性字典，结构:
                {
                    'E': float,          # 杨氏模量 (必需)
                    'nu': float,         # 泊松比 (必需)
                    'density': float,    # 密度 (可选)
                    'plastic': {         # 塑性参数 (可选)
                        'model': 'von_mises' | 'drucker_prager',  # 默认 von_mises
                        'elastic_yield': float,
                        ...              # 其余为各模型的可选参数
                    }
                }

                Drucker-Prager 可以用 'phi' (弧度) + 'cohesion' 代替
                'elastic_yield' / 'alpha'，此时 'inner_approx' 选择内切/外接锥。

        Returns:
            材料对象 (无 'plastic' 段时为 ElasticMaterial)

        Raises:
            ValueError: 缺少必需参数或模型未知
        """
        # 检查必需参数
        E = props.get('E')
        nu = props.get('nu')

        if E is None or nu is None:
            raise ValueError(
                f"Material '{name}' missing required parameters. "
                f"Got E={E}, nu={nu}"
            )

        common = {'E': float(E), 'nu': float(nu)}
        if props.get('density') is not None:
            common['density'] = float(props['density'])

        plastic = props.get('plastic')
        if plastic is None:
            return ElasticMaterial(**common)

        model = plastic.get('model', VON_MISES)
        if model == VON_MISES:
            return MaterialFactory._create_von_mises(name, common, plastic)
        if model == DRUCKER_PRAGER:
            return MaterialFactory._create_drucker_prager(name, common, plastic)

        raise ValueError(
            f"Material '{name}' has unknown plastic model '{model}'. "
            f"Expected '{VON_MISES}' or '{DRUCKER_PRAGER}'"
        )

    @staticmethod
    def _create_von_mises(
        name: str,
        common: Dict[str, float],
        plastic: Dict[str, Any]
    ) -> VonMisesPlasticMaterial:
        elastic_yield = plastic.get('elastic_yield')
        if elastic_yield is None:
            raise ValueError(
                f"Material '{name}' has plastic section but missing 'elastic_yield'"
            )

        kwargs = dict(common, elastic_yield=float(elastic_yield))
        # 未给出断裂阈值时，令其等于 elastic_yield 的两倍 (与默认值 0.1 / 0.2 一致)
        kwargs['plastic_yield'] = float(plastic.get('plastic_yield', 2.0 * elastic_yield))
        if 'flow_rate' in plastic:
            kwargs['flow_rate'] = float(plastic['flow_rate'])
        return VonMisesPlasticMaterial(**kwargs)

    @staticmethod
    def _create_drucker_prager(
        name: str,
        common: Dict[str, float],
        plastic: Dict[str, Any]
    ) -> DruckerPragerPlasticMaterial:
        kwargs = dict(common)
        for key in ('dilatancy', 'hardening_speed', 'hardening_limit', 'flow_rate'):
            if plastic.get(key) is not None:
                kwargs[key] = float(plastic[key])

        if 'phi' in plastic or 'cohesion' in plastic:
            phi = plastic.get('phi')
            cohesion = plastic.get('cohesion')
            if phi is None or cohesion is None:
                raise ValueError(
                    f"Material '{name}' Mohr-Coulomb data needs both 'phi' and 'cohesion'"
                )
            # 拟合会重置 hardening_limit，之后再设置
            hardening_limit = kwargs.pop('hardening_limit', None)
            mat = DruckerPragerPlasticMaterial(**kwargs)
            mat.set_from_mohr_coulomb(
                float(phi), float(cohesion), bool(plastic.get('inner_approx', True))
            )
            if hardening_limit is not None:
                mat.hardening_limit = hardening_limit
            return mat

        elastic_yield = plastic.get('elastic_yield')
        if elastic_yield is None:
            raise ValueError(
                f"Material '{name}' has plastic section but missing 'elastic_yield' "
                f"(or 'phi' and 'cohesion')"
            )
        kwargs['elastic_yield'] = float(elastic_yield)
        if plastic.get('alpha') is not None:
            kwargs['alpha'] = float(plastic['alpha'])
        return DruckerPragerPlasticMaterial(**kwargs)

    @staticmethod
    def create_elastic(E: float, nu: float, density: float = 1000.0) -> ElasticMaterial:
        """
        创建纯弹性材料

        Args:
            E: 杨氏模量
            nu: 泊松比
            density: 密度

        Returns:
            ElasticMaterial
        """
        return ElasticMaterial(E=E, nu=nu, density=density)

    @staticmethod
    def create_von_mises(
        E: float,
        nu: float,
        elastic_yield: float,
        plastic_yield: Optional[float] = None,
        density: float = 1000.0,
        flow_rate: float = 1.0
    ) -> VonMisesPlasticMaterial:
        """
        创建 Von Mises 弹塑性材料

        Args:
            E: 杨氏模量
            nu: 泊松比
            elastic_yield: 初始屈服应力
            plastic_yield: 断裂阈值 (None 表示 2 * elastic_yield)
            density: 密度
            flow_rate: 塑性流动速率系数
        """
        if plastic_yield is None:
            plastic_yield = 2.0 * elastic_yield
        return VonMisesPlasticMaterial(
            E=E, nu=nu, density=density,
            elastic_yield=elastic_yield,
            plastic_yield=plastic_yield,
            flow_rate=flow_rate
        )

    @staticmethod
    def create_drucker_prager(
        E: float,
        nu: float,
        elastic_yield: float,
        alpha: float,
        dilatancy: float = 0.0,
        hardening_speed: float = 0.0,
        hardening_limit: Optional[float] = None,
        density: float = 1000.0,
        flow_rate: float = 1.0
    ) -> DruckerPragerPlasticMaterial:
        """创建 Drucker-Prager 弹塑性材料 (直接给出 α 与 k)"""
        return DruckerPragerPlasticMaterial(
            E=E, nu=nu, density=density,
            elastic_yield=elastic_yield,
            alpha=alpha,
            dilatancy=dilatancy,
            hardening_speed=hardening_speed,
            hardening_limit=hardening_limit,
            flow_rate=flow_rate
        )

    @staticmethod
    def create_mohr_coulomb(
        E: float,
        nu: float,
        phi: float,
        cohesion: float,
        inner_approx: bool = True,
        dilatancy: float = 0.0,
        density: float = 1000.0
    ) -> DruckerPragerPlasticMaterial:
        """
        由 Mohr-Coulomb 参数创建 Drucker-Prager 材料

        Args:
            phi: 内摩擦角 (弧度)
            cohesion: 黏聚力
            inner_approx: True 使用内切锥，False 使用外接锥
        """
        mat = DruckerPragerPlasticMaterial(E=E, nu=nu, density=density, dilatancy=dilatancy)
        mat.set_from_mohr_coulomb(phi, cohesion, inner_approx)
        return mat
