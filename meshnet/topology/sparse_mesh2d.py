"""
SparseMesh2D拓扑实现。

支持空洞（被排除位置）的2D Mesh。有效节点按连续编号 0..valid_count-1，
可以是行优先自动编号，也可以由调用方指定坐标到ID的放置（例如蛇形布局，
使环形集合通信的相邻节点在物理上也相邻）。

示例: SparseMesh2D(6, 4)，排除 (0..1, 1..3) 与 (2..3, 3)

      0 ---  1 ---  2 ---  3 ---  4 ---  5
                    |      |      |      |
      x      x      6 ---  7 ---  8 ---  9
                    |      |      |      |
      x      x     10 --- 11 --- 12 --- 13
                                  |      |
      x      x      x      x     14 --- 15

路由使用基于坐标的BFS，绕开空洞并保证最短跳数。
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from .base import BaseTopology
from .builder import GridLayout, GridLayoutBuilder, valid_npu_count
from ..utils.types import TopologyBuildingBlock, Coordinate, DeviceId, Placement, Route
from ..utils.exceptions import InvalidTopologyError, NoRouteError
from ..utils.events import TopologyObserver

logger = logging.getLogger(__name__)


class SparseMesh2D(BaseTopology):
    """
    带空洞的2D Mesh拓扑。

    只在相邻的有效位置之间创建双向链路，空洞不接收也不传递链路。
    """

    topology_type = TopologyBuildingBlock.SPARSE_MESH_2D

    def __init__(
        self,
        width: int,
        height: int,
        excluded: Iterable[Coordinate],
        bandwidth: float,
        latency: float,
        placement: Optional[Placement] = None,
        observer: Optional[TopologyObserver] = None,
    ):
        """
        初始化SparseMesh2D拓扑。

        Args:
            width: 网格最大列数
            height: 网格最大行数
            excluded: 没有设备的(x, y)坐标集合，越界坐标被忽略
            bandwidth: 每条链路带宽 (GB/s)
            latency: 每条链路延迟 (ns)
            placement: 可选的 (x, y) -> NPU ID 自定义放置，为空时按行优先自动编号
            observer: 可选的事件观察者
        """
        if width < 1 or height < 1:
            raise InvalidTopologyError(f"SparseMesh2D至少需要1×1网格，给定: {width}×{height}")

        excluded = {(int(x), int(y)) for x, y in excluded}
        count = valid_npu_count(width, height, excluded)
        if count < 1:
            raise InvalidTopologyError(f"{width}×{height} 网格中所有位置都被排除")

        super().__init__(count, count, bandwidth, latency, observer)
        self._width = width
        self._height = height
        self._custom_placement = bool(placement)

        self._dims_count = 2
        self._npus_count_per_dim = [width, height]
        self._bandwidth_per_dim = [bandwidth, bandwidth]

        builder = GridLayoutBuilder(width, height, excluded, name=self.name, observer=observer)
        if placement:
            builder.apply_placement(placement)
        else:
            builder.assign_row_major()
        self._layout = builder.build()

        self._build_links()

    @classmethod
    def with_placement(
        cls,
        width: int,
        height: int,
        excluded: Iterable[Coordinate],
        placement: Placement,
        bandwidth: float,
        latency: float,
        observer: Optional[TopologyObserver] = None,
    ) -> "SparseMesh2D":
        """使用自定义NPU放置创建拓扑"""
        return cls(width, height, excluded, bandwidth, latency, placement=placement, observer=observer)

    def _build_links(self) -> None:
        """在相邻的有效位置之间创建双向链路"""
        logger.info(
            f"{self.name} 网格 {self._width}×{self._height}，排除 {len(self._layout.excluded)} 个位置，"
            f"有效NPU {self.valid_npu_count}" + ("（自定义放置）" if self._custom_placement else "")
        )
        logger.debug(f"{self.name} 网格布局:\n{self._layout.render()}")

        for current, neighbor in self._layout.link_pairs():
            self.connect(current, neighbor, self._bandwidth, self._latency, bidirectional=True)

        self._finish_build(
            width=self._width,
            height=self._height,
            excluded=len(self._layout.excluded),
            custom_placement=self._custom_placement,
        )

    # ========== 属性 ==========

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def valid_npu_count(self) -> int:
        return self._layout.valid_count

    @property
    def layout(self) -> GridLayout:
        return self._layout

    # ========== 坐标查询 ==========

    def is_valid_position(self, x: int, y: int) -> bool:
        """坐标在网格范围内且未被排除"""
        return self._layout.is_valid_position(x, y)

    def get_npu_at(self, x: int, y: int) -> Optional[DeviceId]:
        """获取坐标处的NPU ID，空洞或越界返回None"""
        return self._layout.npu_at(x, y)

    device_at = get_npu_at

    def get_coords(self, npu_id: DeviceId) -> Coordinate:
        """获取NPU的网格坐标"""
        self._check_npu(npu_id)
        return self._layout.coords_of(npu_id)

    coordinates_of = get_coords

    def get_valid_neighbors(self, x: int, y: int) -> List[Coordinate]:
        """获取坐标的有效邻居（+x, -x, +y, -y 顺序）"""
        return self._layout.valid_neighbors(x, y)

    # ========== 路由 ==========

    def route(self, src: DeviceId, dest: DeviceId) -> Route:
        """
        BFS最短路径路由。

        在网格坐标上进行广度优先搜索，只扩展有效邻居，记录前驱，
        取出目标坐标后回溯得到路径。

        Args:
            src: 源NPU ID
            dest: 目标NPU ID

        Returns:
            设备序列（包含源和目标）

        Raises:
            DeviceOutOfRangeError: src或dest不在[0, valid_count)范围内
            NoRouteError: 网格不连通，目标不可达
        """
        self._check_npu(src)
        self._check_npu(dest)

        if src == dest:
            return self._devices_for([src])

        path = self._bfs_path(self.get_coords(src), self.get_coords(dest))
        if path is None:
            logger.error(f"{self.name}: 没有从 {src} 到 {dest} 的路径")
            raise NoRouteError(src, dest)

        route_ids = [self._layout.npu_at(x, y) for x, y in path]
        self._route_computed(src, dest, route_ids)
        return self._devices_for(route_ids)

    def _bfs_path(self, start: Coordinate, goal: Coordinate) -> Optional[List[Coordinate]]:
        parent: Dict[Coordinate, Optional[Coordinate]] = {start: None}
        queue = deque([start])

        while queue:
            current = queue.popleft()
            if current == goal:
                path = []
                node: Optional[Coordinate] = current
                while node is not None:
                    path.append(node)
                    node = parent[node]
                path.reverse()
                return path

            for neighbor in self._layout.valid_neighbors(*current):
                if neighbor not in parent:
                    parent[neighbor] = current
                    queue.append(neighbor)

        return None

    # ========== 连通性 ==========

    def connected_components(self) -> List[List[DeviceId]]:
        """获取连通分量（每个分量按NPU ID排序，分量按最小ID排序）"""
        graph = self.to_graph().to_undirected()
        components = [sorted(component) for component in nx.connected_components(graph)]
        return sorted(components, key=lambda component: component[0])

    def is_connected(self) -> bool:
        return len(self.connected_components()) == 1

    def ring_order(self) -> List[Tuple[DeviceId, Coordinate]]:
        """
        集合通信环的物理位置。

        环按NPU ID顺序 0 -> 1 -> ... -> n-1 -> 0 访问所有有效节点，
        返回每个NPU及其坐标。
        """
        return [(npu_id, self._layout.coords_of(npu_id)) for npu_id in range(self.valid_npu_count)]

    def __repr__(self):
        return f"<SparseMesh2D({self._width}x{self._height}, valid={self.valid_npu_count}, links={self.links_count})>"
