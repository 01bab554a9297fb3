"""
Mesh2D拓扑测试模块。

本模块包含Mesh2D拓扑的测试用例，包括：
- 行优先编号与坐标转换测试
- 链路创建测试
- XY路由测试
- 非完全平方数截断测试
"""

import unittest

import networkx as nx

from meshnet.topology.mesh2d import Mesh2D
from meshnet.utils.types import TopologyBuildingBlock
from meshnet.utils.events import EventRecorder, EventKind
from meshnet.utils.exceptions import TopologyError, InvalidTopologyError, DeviceOutOfRangeError


class TestMesh2DConstruction(unittest.TestCase):
    """Mesh2D构建测试类。"""

    def setUp(self):
        """设置测试环境。"""
        self.mesh = Mesh2D(4, 3, bandwidth=50.0, latency=500.0)

    def test_metadata(self):
        """测试拓扑元数据。"""
        self.assertEqual(self.mesh.width, 4)
        self.assertEqual(self.mesh.height, 3)
        self.assertEqual(self.mesh.npus_count, 12)
        self.assertEqual(self.mesh.devices_count, 12)
        self.assertEqual(self.mesh.dims_count, 2)
        self.assertEqual(self.mesh.npus_count_per_dim, [4, 3])
        self.assertEqual(self.mesh.bandwidth_per_dim, [50.0, 50.0])
        self.assertEqual(self.mesh.basic_topology_type, TopologyBuildingBlock.MESH_2D)
        self.assertEqual(self.mesh.name, "Mesh2D")

    def test_links_count(self):
        """测试有向链路总数为 2 × (W×(H-1) + H×(W-1))。"""
        for width, height in [(1, 1), (1, 5), (4, 3), (5, 5)]:
            mesh = Mesh2D(width, height, bandwidth=10.0, latency=1.0)
            expected = 2 * (width * (height - 1) + height * (width - 1))
            self.assertEqual(mesh.links_count, expected, f"{width}×{height}")

    def test_links_only_between_neighbors(self):
        """测试链路只存在于曼哈顿距离为1的节点之间，且都是双向的。"""
        for link in self.mesh.links():
            self.assertEqual(self.mesh.manhattan_distance(link.src, link.dest), 1)
            self.assertTrue(self.mesh.get_device(link.dest).connected(link.src))
            self.assertEqual(link.bandwidth, 50.0)
            self.assertEqual(link.latency, 500.0)

        # 边缘节点没有环绕链路
        self.assertFalse(self.mesh.get_device(3).connected(4))
        self.assertFalse(self.mesh.get_device(0).connected(3))

    def test_coordinate_conversion(self):
        """测试坐标转换。"""
        self.assertEqual(self.mesh.get_2d_coords(0), (0, 0))
        self.assertEqual(self.mesh.get_2d_coords(5), (1, 1))
        self.assertEqual(self.mesh.get_2d_coords(11), (3, 2))

        for npu_id in range(self.mesh.npus_count):
            x, y = self.mesh.get_2d_coords(npu_id)
            self.assertEqual(self.mesh.coords_to_npu_id(x, y), npu_id)

        with self.assertRaises(InvalidTopologyError):
            self.mesh.coords_to_npu_id(4, 0)

    def test_invalid_parameters(self):
        """测试无效参数。"""
        with self.assertRaises(InvalidTopologyError):
            Mesh2D(0, 3, bandwidth=50.0, latency=500.0)
        with self.assertRaises(InvalidTopologyError):
            Mesh2D(2, 2, bandwidth=0.0, latency=500.0)
        with self.assertRaises(InvalidTopologyError):
            Mesh2D(2, 2, bandwidth=50.0, latency=-1.0)

    def test_connect_after_build(self):
        """测试构建完成后不能再添加链路。"""
        with self.assertRaises(TopologyError):
            self.mesh.connect(0, 5, 50.0, 500.0)

    def test_layout_render(self):
        """测试网格渲染。"""
        lines = Mesh2D(3, 2, bandwidth=50.0, latency=500.0).layout.render().split("\n")
        self.assertEqual(lines[0], "  0 ---   1 ---   2")
        self.assertEqual(lines[1], "  |       |       |")
        self.assertEqual(lines[2], "  3 ---   4 ---   5")


class TestMesh2DRouting(unittest.TestCase):
    """Mesh2D XY路由测试类。"""

    def setUp(self):
        """设置测试环境。"""
        self.mesh = Mesh2D(4, 3, bandwidth=50.0, latency=500.0)

    def test_xy_route(self):
        """测试先X后Y的路由顺序。"""
        self.assertEqual(self.mesh.route_ids(0, 11), [0, 1, 2, 3, 7, 11])
        self.assertEqual(self.mesh.route_ids(11, 0), [11, 10, 9, 8, 4, 0])
        self.assertEqual(self.mesh.route_ids(8, 3), [8, 9, 10, 11, 7, 3])
        self.assertEqual(self.mesh.route_ids(1, 9), [1, 5, 9])

    def test_route_to_self(self):
        """测试到自身的路由只包含源节点。"""
        for npu_id in range(self.mesh.npus_count):
            route = self.mesh.route(npu_id, npu_id)
            self.assertEqual(len(route), 1)
            self.assertEqual(route[0].device_id, npu_id)

    def test_hops_equal_manhattan_distance(self):
        """测试所有NPU对的跳数等于曼哈顿距离。"""
        for width, height in [(4, 3), (5, 5), (1, 6)]:
            mesh = Mesh2D(width, height, bandwidth=50.0, latency=500.0)
            for src in range(mesh.npus_count):
                for dest in range(mesh.npus_count):
                    route = mesh.route_ids(src, dest)
                    self.assertEqual(route[0], src)
                    self.assertEqual(route[-1], dest)
                    self.assertEqual(len(route) - 1, mesh.manhattan_distance(src, dest))

    def test_route_follows_links(self):
        """测试路由中相邻设备之间都存在链路。"""
        for src in range(self.mesh.npus_count):
            for dest in range(self.mesh.npus_count):
                route = self.mesh.route(src, dest)
                for current, following in zip(route, route[1:]):
                    self.assertTrue(current.connected(following.device_id))

    def test_route_is_shortest_path(self):
        """测试路由长度与networkx最短路径一致。"""
        graph = self.mesh.to_graph()
        for src in range(self.mesh.npus_count):
            for dest in range(self.mesh.npus_count):
                self.assertEqual(self.mesh.hop_count(src, dest), nx.shortest_path_length(graph, src, dest))

    def test_route_out_of_range(self):
        """测试越界的NPU ID。"""
        with self.assertRaises(DeviceOutOfRangeError):
            self.mesh.route(0, 12)
        with self.assertRaises(DeviceOutOfRangeError):
            self.mesh.route(-1, 0)
        # 同时也是IndexError
        with self.assertRaises(IndexError):
            self.mesh.get_2d_coords(12)

    def test_neighbors_and_diameter(self):
        """测试相邻判断与直径。"""
        self.assertTrue(self.mesh.are_neighbors(0, 1))
        self.assertTrue(self.mesh.are_neighbors(0, 4))
        self.assertFalse(self.mesh.are_neighbors(0, 5))
        self.assertEqual(self.mesh.get_diameter(), 5)
        self.assertEqual(self.mesh.get_topology_statistics()["diameter"], 5)

    def test_route_events(self):
        """测试路由事件。"""
        recorder = EventRecorder()
        mesh = Mesh2D(2, 2, bandwidth=50.0, latency=500.0, observer=recorder)
        self.assertEqual(len(recorder.of_kind(EventKind.LINK_CREATED)), 4)
        self.assertEqual(len(recorder.of_kind(EventKind.TOPOLOGY_BUILT)), 1)

        recorder.clear()
        mesh.route(0, 3)
        events = recorder.of_kind(EventKind.ROUTE_COMPUTED)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].data["route"], (0, 1, 3))


class TestMesh2DFromNpusCount(unittest.TestCase):
    """根据NPU数量构建正方形Mesh的测试类。"""

    def test_perfect_square(self):
        """测试完全平方数。"""
        recorder = EventRecorder()
        mesh = Mesh2D.from_npus_count(16, bandwidth=50.0, latency=500.0, observer=recorder)
        self.assertEqual((mesh.width, mesh.height), (4, 4))
        self.assertEqual(mesh.npus_count, 16)
        self.assertEqual(recorder.of_kind(EventKind.MESH_TRUNCATED), [])

    def test_truncation(self):
        """测试非完全平方数被截断为最大正方形。"""
        recorder = EventRecorder()
        with self.assertLogs("meshnet.topology.mesh2d", level="WARNING") as logs:
            mesh = Mesh2D.from_npus_count(17, bandwidth=50.0, latency=500.0, observer=recorder)

        self.assertEqual((mesh.width, mesh.height), (4, 4))
        self.assertEqual(mesh.npus_count, 16)
        self.assertIn("16 或 25", logs.output[0])

        events = recorder.of_kind(EventKind.MESH_TRUNCATED)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].data, {"requested": 17, "used": 16, "lost": 1})

    def test_small_counts(self):
        """测试小规模NPU数量。"""
        mesh = Mesh2D.from_npus_count(1, bandwidth=50.0, latency=500.0)
        self.assertEqual(mesh.npus_count, 1)
        self.assertEqual(mesh.links_count, 0)
        self.assertEqual(mesh.route_ids(0, 0), [0])

        mesh = Mesh2D.from_npus_count(3, bandwidth=50.0, latency=500.0)
        self.assertEqual(mesh.npus_count, 1)

    def test_strict_mode(self):
        """测试严格模式下非完全平方数抛出异常。"""
        with self.assertRaises(InvalidTopologyError):
            Mesh2D.from_npus_count(17, bandwidth=50.0, latency=500.0, strict=True)

        mesh = Mesh2D.from_npus_count(9, bandwidth=50.0, latency=500.0, strict=True)
        self.assertEqual(mesh.npus_count, 9)

    def test_invalid_count(self):
        """测试非正数NPU数量。"""
        with self.assertRaises(InvalidTopologyError):
            Mesh2D.from_npus_count(0, bandwidth=50.0, latency=500.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
