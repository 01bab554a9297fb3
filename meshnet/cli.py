#!/usr/bin/env python3
"""
meshnet-route: 从YAML网络文件构建拓扑并查询路由。

示例:
    meshnet-route examples/configs/sparse_mesh_6x4.yml --src 0 --dest 15 --show-grid
    meshnet-route examples/configs/mesh_4x3.yml --all-pairs
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config.loader import load_network_config
from .topology.base import BaseTopology
from .topology.mesh2d import Mesh2D
from .topology.sparse_mesh2d import SparseMesh2D
from .utils.events import EventRecorder
from .utils.exceptions import MeshNetError
from .utils.factory import construct_topology

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """配置控制台日志"""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not root.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root.addHandler(console_handler)


def format_route(topology: BaseTopology, route_ids: List[int]) -> str:
    """格式化路由，Mesh拓扑附带坐标"""
    if isinstance(topology, SparseMesh2D):
        parts = [f"{i}{topology.get_coords(i)}" for i in route_ids]
    elif isinstance(topology, Mesh2D):
        parts = [f"{i}{topology.get_2d_coords(i)}" for i in route_ids]
    else:
        parts = [str(i) for i in route_ids]
    return " -> ".join(parts).replace(", ", ",")


def print_all_pairs(topology: BaseTopology) -> None:
    """打印所有NPU对的跳数统计"""
    hops = [topology.hop_count(src, dest) for src in range(topology.npus_count) for dest in range(topology.npus_count) if src != dest]
    if not hops:
        print("只有一个NPU，没有可路由的NPU对")
        return
    print(f"NPU对数: {len(hops)}")
    print(f"平均跳数: {sum(hops) / len(hops):.3f}")
    print(f"最大跳数: {max(hops)}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="构建拓扑并查询路由")
    parser.add_argument("network", help="YAML网络配置文件")
    parser.add_argument("--src", type=int, help="源NPU ID")
    parser.add_argument("--dest", type=int, help="目标NPU ID")
    parser.add_argument("--all-pairs", action="store_true", help="统计所有NPU对的跳数")
    parser.add_argument("--show-grid", action="store_true", help="打印Mesh网格布局")
    parser.add_argument("--trace", action="store_true", help="打印构建与路由事件")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if (args.src is None) != (args.dest is None):
        parser.error("--src 和 --dest 必须同时指定")

    recorder = EventRecorder() if args.trace else None

    try:
        config = load_network_config(args.network)
        topology = construct_topology(config, observer=recorder)

        print(f"拓扑: {topology!r}")
        for key, value in topology.get_topology_statistics().items():
            print(f"  {key}: {value}")

        if args.show_grid and isinstance(topology, (Mesh2D, SparseMesh2D)):
            print(topology.layout.render())

        if args.src is not None:
            route_ids = topology.route_ids(args.src, args.dest)
            print(f"路由: {format_route(topology, route_ids)}")
            print(f"跳数: {len(route_ids) - 1}")

        if args.all_pairs:
            print_all_pairs(topology)
    except MeshNetError as e:
        print(f"错误: {e}", file=sys.stderr)
        return 1

    if recorder is not None:
        for event in recorder.events:
            print(f"[{event.kind.value}] {event.topology} {event.data}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
