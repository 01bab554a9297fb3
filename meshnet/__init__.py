"""
meshnet - 加速器互连拓扑建模与路由
构建2D Mesh（含空洞的稀疏Mesh）、Ring、Switch、FullyConnected拓扑，
并为上层拥塞感知网络仿真器计算确定性的最短跳数路由
"""

from . import topology
from . import utils
from . import config

from .topology import Device, Link, BaseTopology, Ring, Switch, FullyConnected, Mesh2D, SparseMesh2D, GridLayout
from .config import NetworkConfig, ConfigLoader, load_network_config
from .utils.factory import TopologyFactory, construct_topology
from .utils.types import TopologyBuildingBlock
from .utils.events import EventKind, TopologyEvent, EventRecorder
from .utils.exceptions import *

__version__ = "1.0.0"

__all__ = [
    # 子模块
    "topology",
    "utils",
    "config",
    # 拓扑类
    "Device",
    "Link",
    "BaseTopology",
    "Ring",
    "Switch",
    "FullyConnected",
    "Mesh2D",
    "SparseMesh2D",
    "GridLayout",
    # 配置与工厂
    "NetworkConfig",
    "ConfigLoader",
    "load_network_config",
    "TopologyFactory",
    "construct_topology",
    "TopologyBuildingBlock",
    # 事件
    "EventKind",
    "TopologyEvent",
    "EventRecorder",
    # 异常类
    "MeshNetError",
    "TopologyError",
    "InvalidTopologyError",
    "DeviceOutOfRangeError",
    "NoRouteError",
    "ConfigurationError",
]
