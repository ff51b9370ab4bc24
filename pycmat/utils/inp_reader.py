import numpy as np

from ..core.materials.factory import MaterialFactory, VON_MISES, DRUCKER_PRAGER


class MaterialCardReader:
    """
    Abaqus 风格材料卡片解析器。

    支持的关键字：
        *MATERIAL, NAME=...
        *ELASTIC          E, nu
        *DENSITY          density
        *PLASTIC          elastic_yield[, plastic_yield]        (Von Mises)
        *DRUCKER PRAGER   alpha, elastic_yield[, dilatancy]
        *MOHR COULOMB     phi(度), cohesion      参数 INNER (默认) 或 OUTER
        *DP HARDENING     hardening_limit, hardening_speed
        *FLOW RATE        flow_rate

    注释行 (**) 和未知关键字会被跳过。
    解析结果为 {材料名: 属性字典}，属性字典的结构与 MaterialFactory.create 一致。
    """

    def __init__(self):
        self.materials = {}  # {mat_name: {'E': float, 'nu': float, 'density': float, 'plastic': {...}}}

        # 材料解析状态：记录最近一次 *MATERIAL 声明的材料名
        self.current_material = None
        self.log_callback = print

    def set_log_callback(self, callback):
        self.log_callback = callback

    def read(self, filename):
        """从文件中读取并解析全部材料卡片。"""
        self.log_callback(f"正在解析材料卡片: {filename} ...")

        with open(filename, 'r') as f:
            all_lines = [line.strip() for line in f.readlines()]

        return self._parse_lines(all_lines)

    def parse(self, text):
        """解析字符串形式的材料卡片。"""
        return self._parse_lines([line.strip() for line in text.splitlines()])

    def build_materials(self):
        """
        将已解析的属性字典转换为材料对象。

        Returns:
            {材料名: 材料对象}

        Raises:
            ValueError: 某个材料缺少必需参数
        """
        return {
            name: MaterialFactory.create(name, props)
            for name, props in self.materials.items()
        }

    def _parse_lines(self, all_lines):
        idx = 0
        total_lines = len(all_lines)

        while idx < total_lines:
            line = all_lines[idx]

            # 跳过空行和注释
            if not line or line.startswith('**'):
                idx += 1
                continue

            if line.startswith('*'):
                keyword_line = line.upper()
                keyword = keyword_line.split(',')[0].strip()

                # --- *MATERIAL: 材料名称 ---
                if keyword == '*MATERIAL':
                    name = self._extract_param(keyword_line, 'NAME')
                    if name:
                        self.current_material = name.upper()
                        if self.current_material not in self.materials:
                            self.materials[self.current_material] = {
                                'E': None,
                                'nu': None,
                                'density': None
                            }
                    idx += 1
                    continue

                handler = self._handlers().get(keyword)
                if handler is not None and self.current_material:
                    blk, next_idx = self._read_data_block(all_lines, idx + 1)
                    vals = self._parse_csv_matrix(blk)
                    if len(vals) > 0:
                        handler(vals[0], keyword_line)
                    idx = next_idx
                    continue

            # 数据行或未知关键字，继续下一行
            idx += 1

        self._drop_orphan_flow_rate()
        return self.materials

    def _drop_orphan_flow_rate(self):
        """没有塑性卡片的材料忽略 *FLOW RATE (按纯弹性材料处理)"""
        for name, props in self.materials.items():
            plastic = props.get('plastic')
            if plastic is not None and 'model' not in plastic:
                del props['plastic']
                self.log_callback(
                    f"警告: 材料 {name} 只有 *FLOW RATE 而没有塑性卡片，已忽略流动速率"
                )

    def _handlers(self):
        return {
            '*ELASTIC': self._process_elastic,
            '*DENSITY': self._process_density,
            '*PLASTIC': self._process_plastic,
            '*DRUCKER PRAGER': self._process_drucker_prager,
            '*MOHR COULOMB': self._process_mohr_coulomb,
            '*DP HARDENING': self._process_dp_hardening,
            '*FLOW RATE': self._process_flow_rate,
        }

    # ================= 辅助方法 (Helpers) =================

    def _read_data_block(self, lines, idx):
        """读取从给定行开始、直到下一条关键字行（以 * 开头）的数据块。"""
        blk = []
        while idx < len(lines):
            l = lines[idx].strip()
            # 如果遇到新关键字 (且不是注释 **)，则停止
            if l.startswith('*') and not l.startswith('**'):
                break
            if l and not l.startswith('**'):
                blk.append(l)
            idx += 1
        return blk, idx

    def _parse_csv_matrix(self, blk):
        """解析逗号分隔的数值矩阵，自动忽略非数值项。"""
        res = []
        for line in blk:
            # 移除结尾逗号，处理换行续写的情况
            parts = line.rstrip(',').split(',')
            row = []
            for p in parts:
                try:
                    row.append(float(p))
                except ValueError:
                    pass
            if row:
                res.append(row)
        return res

    def _extract_param(self, header, key):
        """从关键字行中提取形如 KEY=VALUE 的参数值（例如 NAME=STEEL）。"""
        for p in header.split(','):
            if '=' in p:
                k, v = p.split('=', 1)
                if k.strip() == key:
                    return v.strip()
        return None

    def _has_flag(self, header, flag):
        """关键字行中是否含有不带值的参数（例如 OUTER）。"""
        return any(p.strip() == flag for p in header.split(',')[1:])

    def _plastic_section(self, model):
        """
        取得当前材料的塑性参数字典，并设定塑性模型。

        换成另一种模型时丢弃旧模型的参数，只保留流动速率。
        """
        props = self.materials[self.current_material]
        plastic = props.get('plastic')
        if plastic is None or plastic.get('model') != model:
            plastic = {k: v for k, v in (plastic or {}).items() if k == 'flow_rate'}
            plastic['model'] = model
            props['plastic'] = plastic
        return plastic

    # ================= 材料关键字处理 =================

    def _process_elastic(self, row, header):
        """*ELASTIC: E, nu"""
        if len(row) >= 2:
            self.materials[self.current_material]['E'] = row[0]
            self.materials[self.current_material]['nu'] = row[1]

    def _process_density(self, row, header):
        self.materials[self.current_material]['density'] = row[0]

    def _process_plastic(self, row, header):
        """*PLASTIC: elastic_yield[, plastic_yield] (Von Mises)"""
        plastic = self._plastic_section(VON_MISES)
        plastic['elastic_yield'] = row[0]
        if len(row) >= 2:
            plastic['plastic_yield'] = row[1]

    def _process_drucker_prager(self, row, header):
        """*DRUCKER PRAGER: alpha, elastic_yield[, dilatancy]"""
        if len(row) < 2:
            return
        plastic = self._plastic_section(DRUCKER_PRAGER)
        for key in ('phi', 'cohesion', 'inner_approx'):
            plastic.pop(key, None)
        plastic['alpha'] = row[0]
        plastic['elastic_yield'] = row[1]
        if len(row) >= 3:
            plastic['dilatancy'] = row[2]

    def _process_mohr_coulomb(self, row, header):
        """
        *MOHR COULOMB: phi, cohesion

        卡片中的内摩擦角以度为单位，存入属性字典时转换为弧度。
        """
        if len(row) < 2:
            return
        plastic = self._plastic_section(DRUCKER_PRAGER)
        plastic.pop('alpha', None)
        plastic.pop('elastic_yield', None)
        plastic['phi'] = float(np.radians(row[0]))
        plastic['cohesion'] = row[1]
        plastic['inner_approx'] = not self._has_flag(header, 'OUTER')

    def _process_dp_hardening(self, row, header):
        """*DP HARDENING: hardening_limit, hardening_speed"""
        if len(row) < 2:
            return
        plastic = self._plastic_section(DRUCKER_PRAGER)
        plastic['hardening_limit'] = row[0]
        plastic['hardening_speed'] = row[1]

    def _process_flow_rate(self, row, header):
        """*FLOW RATE: flow_rate (可在塑性卡片之前或之后给出)"""
        plastic = self.materials[self.current_material].setdefault('plastic', {})
        plastic['flow_rate'] = row[0]
