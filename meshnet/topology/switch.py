"""
Switch拓扑实现。

所有NPU通过一个中心交换机相连，交换机的设备ID为npus_count。
"""

from typing import Optional

from .base import BaseTopology
from ..utils.types import TopologyBuildingBlock, DeviceId, Route
from ..utils.events import TopologyObserver


class Switch(BaseTopology):
    """Switch拓扑"""

    topology_type = TopologyBuildingBlock.SWITCH

    def __init__(self, npus_count: int, bandwidth: float, latency: float, observer: Optional[TopologyObserver] = None):
        super().__init__(npus_count, npus_count + 1, bandwidth, latency, observer)
        self._switch_id = npus_count

        for i in range(npus_count):
            self.connect(i, self._switch_id, bandwidth, latency, bidirectional=True)

        self._finish_build(switch_id=self._switch_id)

    @property
    def switch_id(self) -> DeviceId:
        return self._switch_id

    def route(self, src: DeviceId, dest: DeviceId) -> Route:
        """src -> switch -> dest"""
        self._check_npu(src)
        self._check_npu(dest)

        if src == dest:
            return self._devices_for([src])

        path = [src, self._switch_id, dest]
        self._route_computed(src, dest, path)
        return self._devices_for(path)
