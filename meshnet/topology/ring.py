"""
Ring拓扑实现。

NPU i 与 (i + 1) mod n 相连；双向环上路由选择较短方向。
"""

from typing import Optional

from .base import BaseTopology
from ..utils.types import TopologyBuildingBlock, DeviceId, Route
from ..utils.exceptions import InvalidTopologyError
from ..utils.events import TopologyObserver


class Ring(BaseTopology):
    """Ring拓扑"""

    topology_type = TopologyBuildingBlock.RING

    def __init__(
        self, npus_count: int, bandwidth: float, latency: float, bidirectional: bool = True, observer: Optional[TopologyObserver] = None
    ):
        """
        初始化Ring拓扑。

        Args:
            npus_count: NPU数量，至少为2
            bandwidth: 每条链路带宽
            latency: 每条链路延迟
            bidirectional: 是否为双向环
            observer: 可选的事件观察者
        """
        if npus_count < 2:
            raise InvalidTopologyError(f"Ring拓扑至少需要2个节点，给定: {npus_count}")

        super().__init__(npus_count, npus_count, bandwidth, latency, observer)
        self._bidirectional = bidirectional

        # 两节点双向环只有一对链路
        last = npus_count - 1 if (npus_count == 2 and bidirectional) else npus_count
        for i in range(last):
            self.connect(i, (i + 1) % npus_count, bandwidth, latency, bidirectional=bidirectional)

        self._finish_build(bidirectional=bidirectional)

    @property
    def bidirectional(self) -> bool:
        return self._bidirectional

    def route(self, src: DeviceId, dest: DeviceId) -> Route:
        """
        沿环路由。

        单向环总是顺时针（ID递增方向）；双向环选择较短方向，距离相同时顺时针。
        """
        self._check_npu(src)
        self._check_npu(dest)

        n = self._npus_count
        clockwise = (dest - src) % n
        step = 1
        if self._bidirectional and clockwise > n - clockwise:
            step = -1

        path = [src]
        current = src
        while current != dest:
            current = (current + step) % n
            path.append(current)

        if src != dest:
            self._route_computed(src, dest, path)
        return self._devices_for(path)
