"""
meshnet 工具模块
包含类型定义、异常定义、事件与邻接矩阵工具

拓扑工厂依赖拓扑实现，请从 meshnet.utils.factory 导入。
"""

# 导入异常类
from .exceptions import (
    MeshNetError,
    TopologyError,
    InvalidTopologyError,
    DeviceOutOfRangeError,
    NoRouteError,
    ConfigurationError,
)

# 导入类型定义
from .types import TopologyBuildingBlock, PlacementRejection, DeviceId, Coordinate, Route, NO_DEVICE

# 导入事件
from .events import EventKind, TopologyEvent, EventRecorder

__all__ = [
    # 异常类
    "MeshNetError",
    "TopologyError",
    "InvalidTopologyError",
    "DeviceOutOfRangeError",
    "NoRouteError",
    "ConfigurationError",
    # 类型定义
    "TopologyBuildingBlock",
    "PlacementRejection",
    "DeviceId",
    "Coordinate",
    "Route",
    "NO_DEVICE",
    # 事件
    "EventKind",
    "TopologyEvent",
    "EventRecorder",
]
