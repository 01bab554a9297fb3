import networkx as nx
from typing import Dict, Any

from .base import BaseTopology


def to_networkx(topology: BaseTopology) -> nx.DiGraph:
    """将拓扑转换为NetworkX有向图，边带有bandwidth与latency属性"""
    graph = nx.DiGraph()
    for device in topology.devices:
        graph.add_node(device.device_id, is_npu=device.device_id < topology.npus_count)
    for link in topology.links():
        graph.add_edge(link.src, link.dest, bandwidth=link.bandwidth, latency=link.latency)
    return graph


def topology_statistics(topology: BaseTopology) -> Dict[str, Any]:
    """获取拓扑统计信息"""
    graph = to_networkx(topology)
    undirected = graph.to_undirected()
    num_nodes = graph.number_of_nodes()
    is_connected = nx.is_connected(undirected) if num_nodes > 0 else False

    return {
        "topology_type": topology.basic_topology_type.value,
        "num_npus": topology.npus_count,
        "num_nodes": num_nodes,
        "num_links": graph.number_of_edges(),
        "num_bidirectional_links": undirected.number_of_edges(),
        "is_connected": is_connected,
        "average_degree": sum(dict(undirected.degree()).values()) / num_nodes if num_nodes > 0 else 0,
        "diameter": nx.diameter(undirected) if is_connected else None,
    }
