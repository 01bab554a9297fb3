"""
Mesh2D拓扑实现。

本模块实现标准的2D Mesh拓扑，包括：
- 行优先NPU编号 (id = y * width + x)
- 相邻节点之间的双向链路
- XY路由算法（先X后Y的维序路由）
- 曼哈顿距离计算

示例: Mesh2D(4, 3)

      0 ---  1 ---  2 ---  3
      |      |      |      |
      4 ---  5 ---  6 ---  7
      |      |      |      |
      8 ---  9 --- 10 --- 11
"""

import logging
import math
from typing import Optional, Tuple

from .base import BaseTopology
from .builder import GridLayout, GridLayoutBuilder
from ..utils.types import TopologyBuildingBlock, DeviceId, Route
from ..utils.exceptions import InvalidTopologyError
from ..utils.events import EventKind, TopologyObserver, emit

logger = logging.getLogger(__name__)


class Mesh2D(BaseTopology):
    """
    2D Mesh拓扑。

    width × height 的完整矩形网格，没有空洞。每个内部节点连接上下左右
    4个邻居，边缘节点邻居更少（无环绕）。有向链路总数为
    2 × (width × (height - 1) + height × (width - 1))。
    """

    topology_type = TopologyBuildingBlock.MESH_2D

    def __init__(self, width: int, height: int, bandwidth: float, latency: float, observer: Optional[TopologyObserver] = None):
        """
        初始化Mesh2D拓扑。

        Args:
            width: 列数 (X方向)
            height: 行数 (Y方向)
            bandwidth: 每条链路带宽 (GB/s)
            latency: 每条链路延迟 (ns)
            observer: 可选的事件观察者

        Raises:
            InvalidTopologyError: 参数无效时抛出
        """
        if width < 1 or height < 1:
            raise InvalidTopologyError(f"Mesh2D至少需要1×1节点，给定: {width}×{height}")

        super().__init__(width * height, width * height, bandwidth, latency, observer)
        self._width = width
        self._height = height

        # 二维元数据
        self._dims_count = 2
        self._npus_count_per_dim = [width, height]
        self._bandwidth_per_dim = [bandwidth, bandwidth]

        self._layout = GridLayoutBuilder(width, height, name=self.name, observer=observer).assign_row_major().build()
        self._build_links()

    @classmethod
    def from_npus_count(
        cls, npus_count: int, bandwidth: float, latency: float, strict: bool = False, observer: Optional[TopologyObserver] = None
    ) -> "Mesh2D":
        """
        根据NPU总数创建正方形Mesh。

        width = height = floor(sqrt(npus_count))。npus_count不是完全平方数时，
        默认截断为不超过npus_count的最大正方形并记录警告，多余的NPU被丢弃。

        Args:
            npus_count: NPU总数
            bandwidth: 每条链路带宽
            latency: 每条链路延迟
            strict: 为True时，非完全平方数直接抛出InvalidTopologyError
            observer: 可选的事件观察者

        Returns:
            Mesh2D实例
        """
        if npus_count < 1:
            raise InvalidTopologyError(f"NPU数量必须为正数，给定: {npus_count}")

        side = math.isqrt(npus_count)
        if side * side != npus_count:
            lost = npus_count - side * side
            if strict:
                raise InvalidTopologyError(f"npus_count {npus_count} 不是完全平方数，" f"可用: {side * side} 或 {(side + 1) ** 2}")
            logger.warning(
                f"npus_count {npus_count} 不是完全平方数，使用 {side}×{side} = {side * side} 个NPU，"
                f"丢弃 {lost} 个。完全平方数可选: {side * side} 或 {(side + 1) ** 2}"
            )
            emit(observer, EventKind.MESH_TRUNCATED, cls.topology_type.value, requested=npus_count, used=side * side, lost=lost)

        return cls(side, side, bandwidth, latency, observer=observer)

    def _build_links(self) -> None:
        """连接右侧与下方邻居，双向链路"""
        logger.debug(f"{self.name} {self._width}×{self._height} 网格布局:\n{self._layout.render()}")

        for current, neighbor in self._layout.link_pairs():
            self.connect(current, neighbor, self._bandwidth, self._latency, bidirectional=True)

        self._finish_build(width=self._width, height=self._height)

    # ========== 属性 ==========

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def layout(self) -> GridLayout:
        return self._layout

    # ========== 坐标转换 ==========

    def get_2d_coords(self, npu_id: DeviceId) -> Tuple[int, int]:
        """NPU ID -> (x, y)"""
        self._check_npu(npu_id)
        return npu_id % self._width, npu_id // self._width

    def coords_to_npu_id(self, x: int, y: int) -> DeviceId:
        """(x, y) -> NPU ID"""
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise InvalidTopologyError(f"坐标 ({x},{y}) 超出 {self._width}×{self._height} 网格")
        return y * self._width + x

    # ========== 路由 ==========

    def route(self, src: DeviceId, dest: DeviceId) -> Route:
        """
        XY路由。

        先沿X方向逐步移动到目标列，再沿Y方向逐步移动到目标行。
        跳数等于曼哈顿距离，同一(src, dest)总是得到同一路径。

        Args:
            src: 源NPU ID
            dest: 目标NPU ID

        Returns:
            设备序列（包含源和目标）

        Raises:
            DeviceOutOfRangeError: src或dest不在[0, npus_count)范围内
        """
        self._check_npu(src)
        self._check_npu(dest)

        if src == dest:
            return self._devices_for([src])

        x, y = self.get_2d_coords(src)
        dest_x, dest_y = self.get_2d_coords(dest)
        path = [src]

        # 第一阶段：X方向
        while x != dest_x:
            x += 1 if dest_x > x else -1
            path.append(self.coords_to_npu_id(x, y))

        # 第二阶段：Y方向
        while y != dest_y:
            y += 1 if dest_y > y else -1
            path.append(self.coords_to_npu_id(x, y))

        self._route_computed(src, dest, path)
        return self._devices_for(path)

    # ========== 辅助查询 ==========

    def manhattan_distance(self, src: DeviceId, dest: DeviceId) -> int:
        """曼哈顿距离 |dx| + |dy|"""
        src_x, src_y = self.get_2d_coords(src)
        dest_x, dest_y = self.get_2d_coords(dest)
        return abs(dest_x - src_x) + abs(dest_y - src_y)

    def are_neighbors(self, src: DeviceId, dest: DeviceId) -> bool:
        """两个NPU是否直接相邻（曼哈顿距离为1）"""
        return self.manhattan_distance(src, dest) == 1

    def get_diameter(self) -> int:
        return (self._width - 1) + (self._height - 1)

    def __repr__(self):
        return f"<Mesh2D({self._width}x{self._height}, links={self.links_count})>"
