"""
拓扑基础组件。

本模块定义设备、链路、设备链路表以及所有拓扑必须实现的核心接口：
- Device / Link: 设备与有向链路
- DeviceDirectory: 设备集合与链路表（connect、按ID查找设备）
- BaseTopology: 拓扑抽象基类，组合DeviceDirectory并声明route接口
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional, Any

from ..utils.types import DeviceId, Route, RouteIds, TopologyBuildingBlock, AdjacencyMatrix
from ..utils.exceptions import TopologyError, InvalidTopologyError, DeviceOutOfRangeError
from ..utils.events import EventKind, TopologyObserver, emit

logger = logging.getLogger(__name__)


class Link:
    """有向链路"""

    def __init__(self, src: DeviceId, dest: DeviceId, bandwidth: float, latency: float):
        self._src = src
        self._dest = dest
        self._bandwidth = bandwidth
        self._latency = latency

    @property
    def src(self) -> DeviceId:
        return self._src

    @property
    def dest(self) -> DeviceId:
        return self._dest

    @property
    def bandwidth(self) -> float:
        """链路带宽 (GB/s)"""
        return self._bandwidth

    @property
    def latency(self) -> float:
        """链路延迟 (ns)"""
        return self._latency

    def __repr__(self):
        return f"<Link({self.src}->{self.dest}, bw={self.bandwidth}, lat={self.latency})>"


class Device:
    """设备节点（NPU或交换机）"""

    def __init__(self, device_id: DeviceId):
        self._device_id = device_id
        self._links: Dict[DeviceId, Link] = {}  # dest id -> Link

    @property
    def device_id(self) -> DeviceId:
        return self._device_id

    def connected(self, dest: DeviceId) -> bool:
        """检查是否存在到dest的有向链路"""
        return dest in self._links

    def get_link(self, dest: DeviceId) -> Optional[Link]:
        return self._links.get(dest)

    def next_links(self) -> List[Link]:
        """获取所有出链路"""
        return list(self._links.values())

    def _add_link(self, link: Link) -> None:
        self._links[link.dest] = link

    def __eq__(self, other):
        if isinstance(other, Device):
            return self._device_id == other._device_id
        return NotImplemented

    def __hash__(self):
        return hash(self._device_id)

    def __repr__(self):
        return f"<Device(id={self.device_id})>"


class DeviceDirectory:
    """
    设备集合与链路表。

    负责创建设备、注册链路以及按ID查找设备。拓扑构建完成后调用
    freeze()，之后任何connect都会抛出TopologyError。
    """

    def __init__(self, devices_count: int, name: str = "topology", observer: Optional[TopologyObserver] = None):
        """
        初始化设备表。

        Args:
            devices_count: 设备数量（NPU数量加上交换机等额外设备）
            name: 所属拓扑名称，用于日志与事件
            observer: 可选的事件观察者
        """
        if devices_count < 1:
            raise InvalidTopologyError(f"设备数量必须为正数，给定: {devices_count}")

        self._name = name
        self._observer = observer
        self._devices: List[Device] = [Device(i) for i in range(devices_count)]
        self._links_count = 0
        self._frozen = False

    @property
    def devices(self) -> List[Device]:
        return list(self._devices)

    @property
    def devices_count(self) -> int:
        return len(self._devices)

    @property
    def links_count(self) -> int:
        """有向链路总数"""
        return self._links_count

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_device(self, device_id: DeviceId) -> Device:
        """根据ID获取设备"""
        if not 0 <= device_id < len(self._devices):
            raise DeviceOutOfRangeError(device_id, len(self._devices))
        return self._devices[device_id]

    def connect(self, src: DeviceId, dest: DeviceId, bandwidth: float, latency: float, bidirectional: bool = True) -> None:
        """
        注册链路。

        Args:
            src: 源设备ID
            dest: 目标设备ID
            bandwidth: 链路带宽，必须为正数
            latency: 链路延迟，不能为负数
            bidirectional: 是否同时创建dest->src的反向链路

        Raises:
            TopologyError: 参数无效、链路重复或设备表已冻结时抛出
        """
        if self._frozen:
            raise TopologyError(f"{self._name}: 拓扑已构建完成，不能再添加链路 {src}->{dest}")
        if bandwidth <= 0:
            raise TopologyError(f"链路带宽必须为正数，给定: {bandwidth}")
        if latency < 0:
            raise TopologyError(f"链路延迟不能为负数，给定: {latency}")
        if src == dest:
            raise TopologyError(f"不允许自环链路: {src}->{dest}")

        self._connect_one(src, dest, bandwidth, latency)
        if bidirectional:
            self._connect_one(dest, src, bandwidth, latency)

        logger.debug(f"{self._name}: 链路 {src} {'<->' if bidirectional else '->'} {dest}")
        emit(self._observer, EventKind.LINK_CREATED, self._name, src=src, dest=dest, bidirectional=bidirectional)

    def _connect_one(self, src: DeviceId, dest: DeviceId, bandwidth: float, latency: float) -> None:
        src_device = self.get_device(src)
        self.get_device(dest)
        if src_device.connected(dest):
            raise TopologyError(f"链路已存在: {src}->{dest}")
        src_device._add_link(Link(src, dest, bandwidth, latency))
        self._links_count += 1

    def links(self) -> Iterator[Link]:
        """遍历所有有向链路（按源设备ID顺序）"""
        for device in self._devices:
            yield from device.next_links()

    def freeze(self) -> None:
        self._frozen = True


class BaseTopology(ABC):
    """
    拓扑抽象基类。

    组合一个DeviceDirectory保存设备与链路，子类在构造函数中完成连线后
    调用_finish_build()冻结链路表。构建完成后的拓扑不可变，route等查询
    均为纯函数。
    """

    topology_type: TopologyBuildingBlock

    def __init__(
        self,
        npus_count: int,
        devices_count: int,
        bandwidth: float,
        latency: float,
        observer: Optional[TopologyObserver] = None,
    ):
        if npus_count < 1:
            raise InvalidTopologyError(f"NPU数量必须为正数，给定: {npus_count}")
        if bandwidth <= 0:
            raise InvalidTopologyError(f"带宽必须为正数，给定: {bandwidth}")
        if latency < 0:
            raise InvalidTopologyError(f"延迟不能为负数，给定: {latency}")

        self._npus_count = npus_count
        self._bandwidth = bandwidth
        self._latency = latency
        self._observer = observer
        self._directory = DeviceDirectory(devices_count, name=self.name, observer=observer)

        # 一维拓扑的默认元数据，二维Mesh会覆盖
        self._dims_count = 1
        self._npus_count_per_dim = [npus_count]
        self._bandwidth_per_dim = [bandwidth]

    # ========== 元数据 ==========

    @property
    def name(self) -> str:
        return self.topology_type.value

    @property
    def basic_topology_type(self) -> TopologyBuildingBlock:
        return self.topology_type

    @property
    def npus_count(self) -> int:
        return self._npus_count

    @property
    def devices_count(self) -> int:
        return self._directory.devices_count

    @property
    def dims_count(self) -> int:
        return self._dims_count

    @property
    def npus_count_per_dim(self) -> List[int]:
        return list(self._npus_count_per_dim)

    @property
    def bandwidth_per_dim(self) -> List[float]:
        return list(self._bandwidth_per_dim)

    @property
    def bandwidth(self) -> float:
        return self._bandwidth

    @property
    def latency(self) -> float:
        return self._latency

    @property
    def links_count(self) -> int:
        return self._directory.links_count

    # ========== 设备与链路 ==========

    def get_device(self, device_id: DeviceId):
        return self._directory.get_device(device_id)

    @property
    def devices(self):
        return self._directory.devices

    def links(self):
        return self._directory.links()

    def connect(self, src: DeviceId, dest: DeviceId, bandwidth: float, latency: float, bidirectional: bool = True) -> None:
        self._directory.connect(src, dest, bandwidth, latency, bidirectional)

    def _finish_build(self, **info: Any) -> None:
        """冻结链路表并记录构建完成信息"""
        self._directory.freeze()
        logger.info(f"{self.name} 拓扑构建完成: NPU={self.npus_count}, 设备={self.devices_count}, 有向链路={self.links_count}")
        emit(self._observer, EventKind.TOPOLOGY_BUILT, self.name, npus_count=self.npus_count, links_count=self.links_count, **info)

    # ========== 路由 ==========

    @abstractmethod
    def route(self, src: DeviceId, dest: DeviceId) -> Route:
        """
        计算src到dest的路由。

        Args:
            src: 源NPU ID
            dest: 目标NPU ID

        Returns:
            设备序列（包含源和目标）
        """
        pass

    def route_ids(self, src: DeviceId, dest: DeviceId) -> RouteIds:
        """与route相同，但返回设备ID列表"""
        return [device.device_id for device in self.route(src, dest)]

    def hop_count(self, src: DeviceId, dest: DeviceId) -> int:
        return len(self.route(src, dest)) - 1

    def _check_npu(self, device_id: DeviceId) -> None:
        if not 0 <= device_id < self._npus_count:
            raise DeviceOutOfRangeError(device_id, self._npus_count)

    def _devices_for(self, ids: RouteIds) -> Route:
        return [self._directory.get_device(i) for i in ids]

    def _route_computed(self, src: DeviceId, dest: DeviceId, route_ids: RouteIds) -> None:
        logger.debug(f"{self.name} 路由 {src}->{dest}: {route_ids} ({len(route_ids) - 1} 跳)")
        emit(self._observer, EventKind.ROUTE_COMPUTED, self.name, src=src, dest=dest, route=tuple(route_ids))

    # ========== 分析 ==========

    def to_graph(self):
        """转换为networkx有向图"""
        from .graph import to_networkx

        return to_networkx(self)

    def get_topology_statistics(self) -> Dict[str, Any]:
        """获取拓扑统计信息"""
        from .graph import topology_statistics

        return topology_statistics(self)

    def get_adjacency_matrix(self) -> AdjacencyMatrix:
        """获取设备邻接矩阵（按设备ID排序）"""
        from ..utils.adjacency import adjacency_from_topology

        return adjacency_from_topology(self)

    def __repr__(self):
        return f"<{self.__class__.__name__}(npus={self.npus_count}, devices={self.devices_count}, links={self.links_count})>"
