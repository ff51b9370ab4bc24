# 文件: pycmat/core/materials/serialization.py
"""
材料参数的版本化二进制存档

格式 (小端):
    magic    4 字节  b"PCMT"
    version  uint16  格式版本 (当前为 1)
    tag      uint8   材料类型标记
    count    uint8   字段个数
    fields   count × float64

字段顺序 (density 总在最前，其后为各类型自己的参数):
    1 ElasticMaterial:              density, E, nu
    2 VonMisesPlasticMaterial:      density, E, nu, elastic_yield, plastic_yield, flow_rate
    3 DruckerPragerPlasticMaterial: density, E, nu, elastic_yield, alpha, dilatancy,
                                    hardening_speed, hardening_limit, flow_rate

只存储标量参数，不存储任何应变历史 (历史由调用者持有)。

使用方法:
    blob = dumps(mat)
    mat2 = loads(blob)

    with open('steel.pcmt', 'wb') as f:
        dump(mat, f)
"""

import struct
from typing import BinaryIO, Union

import numpy as np

from .elastic.isotropic import ElasticMaterial
from .models.von_mises import VonMisesPlasticMaterial
from .models.drucker_prager import DruckerPragerPlasticMaterial


MAGIC = b"PCMT"
FORMAT_VERSION = 1

TAG_ELASTIC = 1
TAG_VON_MISES = 2
TAG_DRUCKER_PRAGER = 3

_HEADER = struct.Struct('<4sHBB')
_FIELD_DTYPE = np.dtype('<f8')

_FIELDS = {
    TAG_ELASTIC: ('density', 'E', 'nu'),
    TAG_VON_MISES: ('density', 'E', 'nu', 'elastic_yield', 'plastic_yield', 'flow_rate'),
    TAG_DRUCKER_PRAGER: ('density', 'E', 'nu', 'elastic_yield', 'alpha', 'dilatancy',
                         'hardening_speed', 'hardening_limit', 'flow_rate'),
}

Material = Union[ElasticMaterial, VonMisesPlasticMaterial, DruckerPragerPlasticMaterial]


class SerializationError(ValueError):
    """存档格式错误或材料类型不受支持"""


def _tag_of(material) -> int:
    # 先判断具体塑性类型，再判断纯弹性
    if isinstance(material, DruckerPragerPlasticMaterial):
        return TAG_DRUCKER_PRAGER
    if isinstance(material, VonMisesPlasticMaterial):
        return TAG_VON_MISES
    if isinstance(material, ElasticMaterial):
        return TAG_ELASTIC
    raise SerializationError(
        f"Unsupported material type for serialization: {type(material).__name__}"
    )


def dumps(material: Material) -> bytes:
    """
    将材料参数编码为字节串

    Raises:
        SerializationError: 材料类型不受支持
    """
    tag = _tag_of(material)
    names = _FIELDS[tag]
    values = np.array([getattr(material, name) for name in names], dtype=_FIELD_DTYPE)
    return _HEADER.pack(MAGIC, FORMAT_VERSION, tag, len(names)) + values.tobytes()


def loads(data: bytes) -> Material:
    """
    由字节串重建材料

    Raises:
        SerializationError: 魔数错误、版本不支持、未知类型、字段数不符或数据截断
    """
    data = bytes(data)
    if len(data) < _HEADER.size:
        raise SerializationError(
            f"Truncated header: expected {_HEADER.size} bytes, got {len(data)}"
        )

    magic, version, tag, count = _HEADER.unpack_from(data)
    if magic != MAGIC:
        raise SerializationError(f"Bad magic {magic!r}, expected {MAGIC!r}")
    if version != FORMAT_VERSION:
        raise SerializationError(
            f"Unsupported format version {version} (supported: {FORMAT_VERSION})"
        )
    if tag not in _FIELDS:
        raise SerializationError(f"Unknown material tag {tag}")

    names = _FIELDS[tag]
    if count != len(names):
        raise SerializationError(
            f"Field count mismatch for tag {tag}: expected {len(names)}, got {count}"
        )

    payload = data[_HEADER.size:]
    expected = count * _FIELD_DTYPE.itemsize
    if len(payload) < expected:
        raise SerializationError(
            f"Truncated payload: expected {expected} bytes, got {len(payload)}"
        )

    values = np.frombuffer(payload[:expected], dtype=_FIELD_DTYPE)
    fields = {name: float(v) for name, v in zip(names, values)}

    if tag == TAG_ELASTIC:
        return ElasticMaterial(**fields)
    if tag == TAG_VON_MISES:
        return VonMisesPlasticMaterial(**fields)
    return DruckerPragerPlasticMaterial(**fields)


def dump(material: Material, stream: BinaryIO) -> None:
    """写入二进制流"""
    stream.write(dumps(material))


def load(stream: BinaryIO) -> Material:
    """
    从二进制流读取一个材料

    只读取该材料占用的字节，流中后续数据保持不动。
    """
    header = stream.read(_HEADER.size)
    if len(header) < _HEADER.size:
        raise SerializationError(
            f"Truncated header: expected {_HEADER.size} bytes, got {len(header)}"
        )
    count = header[-1]
    payload = stream.read(count * _FIELD_DTYPE.itemsize)
    return loads(header + payload)
