"""
meshnet 拓扑模块
包含设备链路表、拓扑基类、网格布局构建器和具体拓扑实现
"""

# 导入基础类
from .base import Device, Link, DeviceDirectory, BaseTopology

# 导入网格布局构建器
from .builder import GridLayout, GridLayoutBuilder, RejectedPlacement, valid_npu_count

# 导入具体拓扑
from .ring import Ring
from .switch import Switch
from .fully_connected import FullyConnected
from .mesh2d import Mesh2D
from .sparse_mesh2d import SparseMesh2D

# 导入图结构
from .graph import to_networkx, topology_statistics

__all__ = [
    # 基础类
    "Device",
    "Link",
    "DeviceDirectory",
    "BaseTopology",
    # 网格布局
    "GridLayout",
    "GridLayoutBuilder",
    "RejectedPlacement",
    "valid_npu_count",
    # 具体拓扑
    "Ring",
    "Switch",
    "FullyConnected",
    "Mesh2D",
    "SparseMesh2D",
    # 图结构
    "to_networkx",
    "topology_statistics",
]
