"""
基础拓扑测试模块。

本模块包含设备链路表、Ring、Switch、FullyConnected拓扑的测试用例。
"""

import unittest

from meshnet.topology.base import Device, Link, DeviceDirectory
from meshnet.topology.ring import Ring
from meshnet.topology.switch import Switch
from meshnet.topology.fully_connected import FullyConnected
from meshnet.topology.graph import to_networkx
from meshnet.utils.types import TopologyBuildingBlock
from meshnet.utils.events import EventRecorder, EventKind
from meshnet.utils.exceptions import TopologyError, InvalidTopologyError, DeviceOutOfRangeError


class TestDeviceDirectory(unittest.TestCase):
    """设备链路表测试类。"""

    def setUp(self):
        """设置测试环境。"""
        self.directory = DeviceDirectory(3, name="test")

    def test_devices(self):
        """测试设备创建与查找。"""
        self.assertEqual(self.directory.devices_count, 3)
        self.assertEqual(self.directory.get_device(2).device_id, 2)
        self.assertEqual(self.directory.get_device(1), Device(1))
        with self.assertRaises(DeviceOutOfRangeError):
            self.directory.get_device(3)

    def test_connect(self):
        """测试双向与单向链路。"""
        self.directory.connect(0, 1, 25.0, 100.0)
        self.directory.connect(1, 2, 25.0, 100.0, bidirectional=False)
        self.assertEqual(self.directory.links_count, 3)

        link = self.directory.get_device(0).get_link(1)
        self.assertIsInstance(link, Link)
        self.assertEqual((link.src, link.dest, link.bandwidth, link.latency), (0, 1, 25.0, 100.0))
        self.assertTrue(self.directory.get_device(1).connected(0))
        self.assertTrue(self.directory.get_device(1).connected(2))
        self.assertFalse(self.directory.get_device(2).connected(1))
        self.assertEqual([(l.src, l.dest) for l in self.directory.links()], [(0, 1), (1, 0), (1, 2)])

    def test_invalid_links(self):
        """测试无效链路。"""
        self.directory.connect(0, 1, 25.0, 100.0)
        with self.assertRaises(TopologyError):
            self.directory.connect(0, 1, 25.0, 100.0)
        with self.assertRaises(TopologyError):
            self.directory.connect(2, 2, 25.0, 100.0)
        with self.assertRaises(TopologyError):
            self.directory.connect(0, 2, 0.0, 100.0)
        with self.assertRaises(TopologyError):
            self.directory.connect(0, 2, 25.0, -1.0)
        with self.assertRaises(DeviceOutOfRangeError):
            self.directory.connect(0, 5, 25.0, 100.0)

    def test_freeze(self):
        """测试冻结后不能添加链路。"""
        self.directory.freeze()
        self.assertTrue(self.directory.frozen)
        with self.assertRaises(TopologyError):
            self.directory.connect(0, 1, 25.0, 100.0)

    def test_invalid_devices_count(self):
        """测试设备数量为0。"""
        with self.assertRaises(InvalidTopologyError):
            DeviceDirectory(0)


class TestRing(unittest.TestCase):
    """Ring拓扑测试类。"""

    def test_bidirectional_ring(self):
        """测试双向环选择较短方向。"""
        ring = Ring(4, bandwidth=50.0, latency=500.0)
        self.assertEqual(ring.basic_topology_type, TopologyBuildingBlock.RING)
        self.assertEqual(ring.links_count, 8)
        self.assertEqual(ring.route_ids(0, 1), [0, 1])
        self.assertEqual(ring.route_ids(0, 3), [0, 3])
        # 距离相同时顺时针
        self.assertEqual(ring.route_ids(0, 2), [0, 1, 2])
        self.assertEqual(ring.route_ids(3, 1), [3, 0, 1])
        self.assertEqual(ring.route_ids(2, 2), [2])

    def test_unidirectional_ring(self):
        """测试单向环总是顺时针。"""
        ring = Ring(4, bandwidth=50.0, latency=500.0, bidirectional=False)
        self.assertFalse(ring.bidirectional)
        self.assertEqual(ring.links_count, 4)
        self.assertEqual(ring.route_ids(0, 3), [0, 1, 2, 3])
        self.assertEqual(ring.route_ids(3, 0), [3, 0])

    def test_two_node_ring(self):
        """测试两节点环只有一对链路。"""
        ring = Ring(2, bandwidth=50.0, latency=500.0)
        self.assertEqual(ring.links_count, 2)
        self.assertEqual(ring.route_ids(1, 0), [1, 0])

    def test_too_small(self):
        """测试节点数不足。"""
        with self.assertRaises(InvalidTopologyError):
            Ring(1, bandwidth=50.0, latency=500.0)


class TestSwitch(unittest.TestCase):
    """Switch拓扑测试类。"""

    def setUp(self):
        """设置测试环境。"""
        self.switch = Switch(4, bandwidth=50.0, latency=500.0)

    def test_structure(self):
        """测试交换机设备与链路。"""
        self.assertEqual(self.switch.npus_count, 4)
        self.assertEqual(self.switch.devices_count, 5)
        self.assertEqual(self.switch.switch_id, 4)
        self.assertEqual(self.switch.links_count, 8)

        graph = to_networkx(self.switch)
        self.assertFalse(graph.nodes[4]["is_npu"])
        self.assertTrue(graph.nodes[0]["is_npu"])

    def test_route(self):
        """测试经过交换机的路由。"""
        self.assertEqual(self.switch.route_ids(0, 3), [0, 4, 3])
        self.assertEqual(self.switch.route_ids(2, 2), [2])
        # 交换机不是NPU
        with self.assertRaises(DeviceOutOfRangeError):
            self.switch.route(0, 4)


class TestFullyConnected(unittest.TestCase):
    """FullyConnected拓扑测试类。"""

    def test_structure_and_route(self):
        """测试全连接链路与一跳路由。"""
        recorder = EventRecorder()
        topology = FullyConnected(4, bandwidth=50.0, latency=500.0, observer=recorder)
        self.assertEqual(topology.links_count, 12)
        self.assertEqual(len(recorder.of_kind(EventKind.LINK_CREATED)), 6)
        self.assertEqual(topology.route_ids(3, 1), [3, 1])
        self.assertEqual(topology.route_ids(1, 1), [1])

        stats = topology.get_topology_statistics()
        self.assertEqual(stats["diameter"], 1)
        self.assertEqual(stats["average_degree"], 3)

    def test_single_npu(self):
        """测试单个NPU。"""
        topology = FullyConnected(1, bandwidth=50.0, latency=500.0)
        self.assertEqual(topology.links_count, 0)
        self.assertEqual(topology.route_ids(0, 0), [0])


if __name__ == "__main__":
    unittest.main(verbosity=2)
