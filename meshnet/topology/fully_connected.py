"""
FullyConnected拓扑实现。

任意两个NPU之间都有直连链路，路由总是一跳。
"""

from typing import Optional

from .base import BaseTopology
from ..utils.types import TopologyBuildingBlock, DeviceId, Route
from ..utils.events import TopologyObserver


class FullyConnected(BaseTopology):
    """FullyConnected拓扑"""

    topology_type = TopologyBuildingBlock.FULLY_CONNECTED

    def __init__(self, npus_count: int, bandwidth: float, latency: float, observer: Optional[TopologyObserver] = None):
        super().__init__(npus_count, npus_count, bandwidth, latency, observer)

        for src in range(npus_count):
            for dest in range(src + 1, npus_count):
                self.connect(src, dest, bandwidth, latency, bidirectional=True)

        self._finish_build()

    def route(self, src: DeviceId, dest: DeviceId) -> Route:
        self._check_npu(src)
        self._check_npu(dest)

        if src == dest:
            return self._devices_for([src])

        self._route_computed(src, dest, [src, dest])
        return self._devices_for([src, dest])
