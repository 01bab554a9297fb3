import logging
from typing import Dict, Any, List

import yaml

from .constants import DEFAULT_LINK_BANDWIDTH, DEFAULT_LINK_LATENCY
from .network_config import NetworkConfig
from ..utils.types import TopologyBuildingBlock, ConfigDict, Coordinate, DeviceId
from ..utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    网络配置加载器

    YAML格式:

        topology: [ SparseMesh2D ]
        npus_count: [ 16 ]
        bandwidth: [ 50.0 ]
        latency: [ 500.0 ]
        mesh_width: 6
        mesh_height: 4
        excluded_coords: [ [0, 1], [1, 1] ]
        npu_placement: [ [0, 0, 3], [1, 0, 2] ]   # x, y, npu_id
    """

    def load_config(self, config_path: str) -> ConfigDict:
        """从YAML文件加载原始配置字典"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"配置文件不存在: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"解析YAML配置文件失败: {config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"配置文件顶层必须是映射: {config_path}")
        return config

    def load_network_config(self, config_path: str) -> NetworkConfig:
        """从YAML文件加载NetworkConfig"""
        logger.info(f"加载网络配置: {config_path}")
        return self.parse_network_config(self.load_config(config_path))

    def parse_network_config(self, raw: ConfigDict) -> NetworkConfig:
        """
        将原始配置字典转换为NetworkConfig。

        每维参数可以写成标量，会被提升为单元素列表。bandwidth和latency
        缺省时使用默认值。

        Raises:
            ConfigurationError: 缺少必需字段或字段格式错误
        """
        if "topology" not in raw:
            raise ConfigurationError("配置缺少 'topology' 字段")
        if "npus_count" not in raw:
            raise ConfigurationError("配置缺少 'npus_count' 字段")

        try:
            topology = [TopologyBuildingBlock.from_name(name) for name in _as_list(raw["topology"])]
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        dims = len(topology)
        config = NetworkConfig(
            topology=topology,
            npus_count=_numbers(raw["npus_count"], int, "npus_count"),
            bandwidth=_numbers(raw.get("bandwidth", [DEFAULT_LINK_BANDWIDTH] * dims), float, "bandwidth"),
            latency=_numbers(raw.get("latency", [DEFAULT_LINK_LATENCY] * dims), float, "latency"),
            mesh_width=_number(raw.get("mesh_width", 0), int, "mesh_width"),
            mesh_height=_number(raw.get("mesh_height", 0), int, "mesh_height"),
            excluded_coords=_parse_excluded(raw.get("excluded_coords") or []),
            npu_placement=_parse_placement(raw.get("npu_placement") or []),
        )

        is_valid, error_msg = config.validate()
        if not is_valid:
            raise ConfigurationError(f"配置验证失败: {error_msg}")
        return config

    def save_config(self, config: NetworkConfig, config_path: str):
        """将NetworkConfig保存到YAML文件"""
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(to_dict(config), f, sort_keys=False, default_flow_style=None)
        logger.info(f"配置已保存到 {config_path}")


def to_dict(config: NetworkConfig) -> ConfigDict:
    """NetworkConfig -> 可序列化字典"""
    raw: ConfigDict = {
        "topology": [t.value for t in config.topology],
        "npus_count": list(config.npus_count),
        "bandwidth": list(config.bandwidth),
        "latency": list(config.latency),
    }
    if config.mesh_width or config.mesh_height:
        raw["mesh_width"] = config.mesh_width
        raw["mesh_height"] = config.mesh_height
    if config.excluded_coords:
        raw["excluded_coords"] = [[x, y] for x, y in sorted(config.excluded_coords)]
    if config.npu_placement:
        raw["npu_placement"] = [[x, y, npu_id] for (x, y), npu_id in sorted(config.npu_placement.items())]
    return raw


def load_network_config(config_path: str) -> NetworkConfig:
    return ConfigLoader().load_network_config(config_path)


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _number(value: Any, kind, key: str):
    if isinstance(value, bool):
        raise ConfigurationError(f"'{key}' 必须是数字，给定: {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{key}' 必须是数字，给定: {value!r}") from e


def _numbers(value: Any, kind, key: str) -> list:
    return [_number(v, kind, key) for v in _as_list(value)]


def _parse_excluded(entries: Any) -> set:
    excluded = set()
    for entry in _as_list(entries):
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise ConfigurationError(f"excluded_coords 条目必须是 [x, y]，给定: {entry!r}")
        excluded.add((_number(entry[0], int, "excluded_coords"), _number(entry[1], int, "excluded_coords")))
    return excluded


def _parse_placement(entries: Any) -> Dict[Coordinate, DeviceId]:
    placement: Dict[Coordinate, DeviceId] = {}
    for entry in _as_list(entries):
        if not isinstance(entry, (list, tuple)) or len(entry) != 3:
            raise ConfigurationError(f"npu_placement 条目必须是 [x, y, npu_id]，给定: {entry!r}")
        x, y, npu_id = (_number(v, int, "npu_placement") for v in entry)
        if (x, y) in placement:
            logger.warning(f"npu_placement 中坐标 ({x},{y}) 重复，使用最后一次的值 {npu_id}")
        placement[(x, y)] = npu_id
    return placement
