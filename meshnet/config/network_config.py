"""
网络配置。

NetworkConfig是拓扑选择器的输入：每个维度的拓扑类型、NPU数量、带宽、延迟，
以及Mesh专用的宽高、排除坐标和自定义NPU放置。
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set

from ..utils.types import TopologyBuildingBlock, Coordinate, DeviceId, ValidationResult


@dataclass
class NetworkConfig:
    """网络配置"""

    # 每个维度的参数
    topology: List[TopologyBuildingBlock] = field(default_factory=list)
    npus_count: List[int] = field(default_factory=list)
    bandwidth: List[float] = field(default_factory=list)  # GB/s
    latency: List[float] = field(default_factory=list)  # ns

    # Mesh参数，0表示未指定
    mesh_width: int = 0
    mesh_height: int = 0
    excluded_coords: Set[Coordinate] = field(default_factory=set)
    npu_placement: Dict[Coordinate, DeviceId] = field(default_factory=dict)

    @property
    def dims_count(self) -> int:
        return len(self.topology)

    @property
    def has_mesh_dimensions(self) -> bool:
        return self.mesh_width > 0 and self.mesh_height > 0

    def validate(self) -> ValidationResult:
        """
        验证配置的一致性。

        Returns:
            ValidationResult: (是否有效, 错误消息)
        """
        if self.dims_count == 0:
            return False, "至少需要一个维度的拓扑"

        for key in ("npus_count", "bandwidth", "latency"):
            values = getattr(self, key)
            if len(values) != self.dims_count:
                return False, f"{key} 长度 {len(values)} 与维度数 {self.dims_count} 不一致"

        for dim, count in enumerate(self.npus_count):
            if count <= 0:
                return False, f"维度{dim}的NPU数量必须为正数，给定: {count}"
        for dim, bandwidth in enumerate(self.bandwidth):
            if bandwidth <= 0:
                return False, f"维度{dim}的带宽必须为正数，给定: {bandwidth}"
        for dim, latency in enumerate(self.latency):
            if latency < 0:
                return False, f"维度{dim}的延迟不能为负数，给定: {latency}"

        return True, None
