"""
拓扑工厂（拓扑选择器）。

本模块负责根据NetworkConfig创建相应的拓扑实例：校验维度数和各拓扑
特有的参数，然后分派到具体的拓扑构造函数。配置错误以ConfigurationError
返回给调用方，由调用方决定是否终止进程。
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from .types import TopologyBuildingBlock, ValidationResult
from .exceptions import ConfigurationError
from .events import TopologyObserver
from ..config.constants import SUPPORTED_DIMS_COUNT
from ..config.network_config import NetworkConfig
from ..topology.base import BaseTopology
from ..topology.ring import Ring
from ..topology.switch import Switch
from ..topology.fully_connected import FullyConnected
from ..topology.mesh2d import Mesh2D
from ..topology.sparse_mesh2d import SparseMesh2D

logger = logging.getLogger(__name__)

TopologyBuilderFn = Callable[[NetworkConfig, Optional[TopologyObserver]], BaseTopology]


class TopologyConfigValidator(ABC):
    """拓扑配置验证器抽象基类。"""

    @abstractmethod
    def validate(self, config: NetworkConfig) -> ValidationResult:
        """
        验证配置是否适用于特定拓扑。

        Args:
            config: 网络配置

        Returns:
            验证结果
        """
        pass


class Mesh2DConfigValidator(TopologyConfigValidator):
    """Mesh2D配置验证器。"""

    def validate(self, config: NetworkConfig) -> ValidationResult:
        # 宽高只指定一个时回退到正方形Mesh，这里只提示
        if (config.mesh_width > 0) != (config.mesh_height > 0):
            logger.warning(f"Mesh2D只指定了宽或高 ({config.mesh_width}×{config.mesh_height})，将按NPU数量构建正方形Mesh")
        if config.excluded_coords:
            logger.warning("Mesh2D忽略 excluded_coords，需要空洞请使用 SparseMesh2D")
        return True, None


class SparseMesh2DConfigValidator(TopologyConfigValidator):
    """SparseMesh2D配置验证器。"""

    def validate(self, config: NetworkConfig) -> ValidationResult:
        if not config.has_mesh_dimensions:
            return False, f"SparseMesh2D需要指定宽和高，给定: {config.mesh_width}×{config.mesh_height}"
        return True, None


def _build_ring(config: NetworkConfig, observer: Optional[TopologyObserver]) -> BaseTopology:
    return Ring(config.npus_count[0], config.bandwidth[0], config.latency[0], observer=observer)


def _build_switch(config: NetworkConfig, observer: Optional[TopologyObserver]) -> BaseTopology:
    return Switch(config.npus_count[0], config.bandwidth[0], config.latency[0], observer=observer)


def _build_fully_connected(config: NetworkConfig, observer: Optional[TopologyObserver]) -> BaseTopology:
    return FullyConnected(config.npus_count[0], config.bandwidth[0], config.latency[0], observer=observer)


def _build_mesh2d(config: NetworkConfig, observer: Optional[TopologyObserver]) -> BaseTopology:
    bandwidth, latency = config.bandwidth[0], config.latency[0]
    if config.has_mesh_dimensions:
        return Mesh2D(config.mesh_width, config.mesh_height, bandwidth, latency, observer=observer)
    return Mesh2D.from_npus_count(config.npus_count[0], bandwidth, latency, observer=observer)


def _build_sparse_mesh2d(config: NetworkConfig, observer: Optional[TopologyObserver]) -> BaseTopology:
    return SparseMesh2D(
        config.mesh_width,
        config.mesh_height,
        config.excluded_coords,
        config.bandwidth[0],
        config.latency[0],
        placement=config.npu_placement or None,
        observer=observer,
    )


class TopologyFactory:
    """
    拓扑工厂类。

    管理拓扑类型注册表和配置验证器，根据NetworkConfig创建拓扑实例。
    """

    # 拓扑构建函数注册表
    _builders: Dict[TopologyBuildingBlock, TopologyBuilderFn] = {
        TopologyBuildingBlock.RING: _build_ring,
        TopologyBuildingBlock.SWITCH: _build_switch,
        TopologyBuildingBlock.FULLY_CONNECTED: _build_fully_connected,
        TopologyBuildingBlock.MESH_2D: _build_mesh2d,
        TopologyBuildingBlock.SPARSE_MESH_2D: _build_sparse_mesh2d,
    }

    # 验证器注册表
    _validators: Dict[TopologyBuildingBlock, TopologyConfigValidator] = {
        TopologyBuildingBlock.MESH_2D: Mesh2DConfigValidator(),
        TopologyBuildingBlock.SPARSE_MESH_2D: SparseMesh2DConfigValidator(),
    }

    @classmethod
    def register_topology(
        cls,
        topology_type: TopologyBuildingBlock,
        builder: TopologyBuilderFn,
        validator: Optional[TopologyConfigValidator] = None,
    ) -> None:
        """
        注册新的拓扑类型。

        Args:
            topology_type: 拓扑类型
            builder: 构建函数 (config, observer) -> 拓扑实例
            validator: 验证器（可选）
        """
        cls._builders[topology_type] = builder
        if validator is not None:
            cls._validators[topology_type] = validator
        logger.info(f"已注册拓扑类型: {topology_type.value}")

    @classmethod
    def unregister_topology(cls, topology_type: TopologyBuildingBlock) -> None:
        """注销拓扑类型。"""
        cls._builders.pop(topology_type, None)
        cls._validators.pop(topology_type, None)
        logger.info(f"已注销拓扑类型: {topology_type.value}")

    @classmethod
    def validate_config(cls, config: NetworkConfig) -> ValidationResult:
        """
        验证配置。

        Args:
            config: 网络配置

        Returns:
            验证结果
        """
        if config.dims_count != SUPPORTED_DIMS_COUNT:
            return False, f"只支持{SUPPORTED_DIMS_COUNT}维拓扑，给定: {config.dims_count}维"

        basic_valid, basic_error = config.validate()
        if not basic_valid:
            return basic_valid, basic_error

        topology_type = config.topology[0]
        if topology_type not in cls._builders:
            return False, f"不支持的拓扑类型: {topology_type.value}. 支持的类型: {[t.value for t in cls._builders]}"

        if topology_type in cls._validators:
            return cls._validators[topology_type].validate(config)

        return True, None

    @classmethod
    def create_topology(cls, config: NetworkConfig, observer: Optional[TopologyObserver] = None) -> BaseTopology:
        """
        根据配置创建拓扑实例。

        Args:
            config: 网络配置
            observer: 可选的事件观察者

        Returns:
            拓扑实例

        Raises:
            ConfigurationError: 配置无效（多维、SparseMesh2D缺少宽高、未知类型等）
            InvalidTopologyError: 拓扑参数无效
        """
        is_valid, error_msg = cls.validate_config(config)
        if not is_valid:
            logger.error(f"拓扑配置无效: {error_msg}")
            raise ConfigurationError(error_msg)

        topology_type = config.topology[0]
        topology = cls._builders[topology_type](config, observer)
        logger.info(f"成功创建{topology_type.value}拓扑，NPU数: {topology.npus_count}")
        return topology

    @classmethod
    def get_supported_topologies(cls) -> List[TopologyBuildingBlock]:
        return list(cls._builders.keys())

    @classmethod
    def is_topology_supported(cls, topology_type: TopologyBuildingBlock) -> bool:
        return topology_type in cls._builders


def construct_topology(config: NetworkConfig, observer: Optional[TopologyObserver] = None) -> BaseTopology:
    """根据NetworkConfig构建拓扑"""
    return TopologyFactory.create_topology(config, observer)
