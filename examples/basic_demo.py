import os

from meshnet import Mesh2D, SparseMesh2D, EventRecorder, EventKind, NoRouteError, load_network_config, construct_topology

CONFIG_DIR = os.path.join(os.path.dirname(__file__), "configs")


def demo_dense_mesh():
    """演示4×3 Mesh2D的XY路由"""
    print("\n--- 演示 4×3 Mesh2D ---")

    mesh = Mesh2D(4, 3, bandwidth=50.0, latency=500.0)
    print(f"创建的拓扑: {mesh}")
    print(mesh.layout.render())

    # XY路由: 先沿X到第3列，再沿Y到第2行
    route = mesh.route_ids(0, 11)
    print(f"从 NPU 0 到 NPU 11 的路由: {route}")
    print(f"跳数: {len(route) - 1}，曼哈顿距离: {mesh.manhattan_distance(0, 11)}")

    # 非完全平方数会被截断
    truncated = Mesh2D.from_npus_count(17, bandwidth=50.0, latency=500.0)
    print(f"npus_count=17 构建的Mesh: {truncated.width}×{truncated.height}")


def demo_sparse_mesh():
    """演示带L形空洞的SparseMesh2D"""
    print("\n--- 演示 6×4 SparseMesh2D ---")

    topology = construct_topology(load_network_config(os.path.join(CONFIG_DIR, "sparse_mesh_6x4.yml")))
    print(f"创建的拓扑: {topology}")
    print(topology.layout.render())

    # 从左上角到右下角，BFS绕开空洞
    route = topology.route_ids(0, 15)
    print(f"从 NPU 0 到 NPU 15 的路由: {[(i, topology.get_coords(i)) for i in route]}")
    print("拓扑统计信息:", topology.get_topology_statistics())


def demo_custom_placement():
    """演示自定义NPU放置与重复ID的自动修正"""
    print("\n--- 演示自定义NPU放置 ---")

    recorder = EventRecorder()
    placement = {(0, 0): 3, (1, 0): 3, (2, 0): 0}
    mesh = SparseMesh2D(3, 2, excluded=set(), bandwidth=50.0, latency=500.0, placement=placement, observer=recorder)
    print(mesh.layout.render())

    for event in recorder.of_kind(EventKind.PLACEMENT_REJECTED):
        print(f"被忽略的放置: {event.data}")
    for event in recorder.of_kind(EventKind.PLACEMENT_BACKFILLED):
        print(f"自动编号: {event.data}")


def demo_disconnected_mesh():
    """演示不连通的SparseMesh2D"""
    print("\n--- 演示不连通的 SparseMesh2D ---")

    # 中间一列全部排除，左右两部分不连通
    mesh = SparseMesh2D(3, 2, excluded={(1, 0), (1, 1)}, bandwidth=50.0, latency=500.0)
    print(mesh.layout.render())
    print(f"连通分量: {mesh.connected_components()}")

    try:
        mesh.route(0, 1)
    except NoRouteError as e:
        print(f"路由失败: {e}")


if __name__ == "__main__":
    demo_dense_mesh()
    demo_sparse_mesh()
    demo_custom_placement()
    demo_disconnected_mesh()
