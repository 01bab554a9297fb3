"""
邻接矩阵生成和验证工具。

本模块提供用于生成和验证Mesh拓扑邻接矩阵的工具函数。
"""

import numpy as np
from typing import Iterable, List, TYPE_CHECKING
from collections import deque

from .types import AdjacencyMatrix, Coordinate, ValidationResult

if TYPE_CHECKING:
    from ..topology.base import BaseTopology


def create_mesh_adjacency_matrix(width: int, height: int, excluded: Iterable[Coordinate] = ()) -> AdjacencyMatrix:
    """
    创建(稀疏)Mesh拓扑的邻接矩阵。

    有效位置按行优先顺序连续编号，与自动编号的SparseMesh2D以及
    Mesh2D的设备ID一致。

    Args:
        width: 列数
        height: 行数
        excluded: 被排除的(x, y)坐标

    Returns:
        邻接矩阵

    Raises:
        ValueError: 如果拓扑参数无效
    """
    if width < 1 or height < 1:
        raise ValueError(f"拓扑至少需要1×1节点，给定: {width}×{height}")

    excluded = set(excluded)
    ids = {}
    for y in range(height):
        for x in range(width):
            if (x, y) not in excluded:
                ids[(x, y)] = len(ids)

    adj_matrix = np.zeros((len(ids), len(ids)), dtype=int)
    for (x, y), node in ids.items():
        # 只看右侧和下方，对称写入
        for neighbor_coord in ((x + 1, y), (x, y + 1)):
            neighbor = ids.get(neighbor_coord)
            if neighbor is not None:
                adj_matrix[node, neighbor] = 1
                adj_matrix[neighbor, node] = 1

    return adj_matrix.tolist()


def adjacency_from_topology(topology: "BaseTopology") -> AdjacencyMatrix:
    """根据拓扑的链路表生成邻接矩阵（按设备ID排序）"""
    n = topology.devices_count
    adj_matrix = np.zeros((n, n), dtype=int)
    for link in topology.links():
        adj_matrix[link.src, link.dest] = 1
    return adj_matrix.tolist()


def validate_adjacency_matrix(adj_matrix: AdjacencyMatrix) -> ValidationResult:
    """
    验证邻接矩阵的有效性。

    Args:
        adj_matrix: 邻接矩阵

    Returns:
        ValidationResult: (是否有效, 错误消息)
    """
    if not adj_matrix:
        return False, "邻接矩阵不能为空"

    n = len(adj_matrix)

    for i, row in enumerate(adj_matrix):
        if len(row) != n:
            return False, f"邻接矩阵第{i}行长度不匹配，期望{n}，实际{len(row)}"

    matrix = np.array(adj_matrix)

    if not np.isin(matrix, (0, 1)).all():
        i, j = np.argwhere(~np.isin(matrix, (0, 1)))[0]
        return False, f"邻接矩阵元素({i},{j})必须为0或1，实际为{matrix[i, j]}"

    diagonal = np.flatnonzero(np.diag(matrix))
    if diagonal.size:
        i = diagonal[0]
        return False, f"邻接矩阵对角线元素({i},{i})必须为0，不允许自环"

    if not np.array_equal(matrix, matrix.T):
        i, j = np.argwhere(matrix != matrix.T)[0]
        return False, f"邻接矩阵不对称，元素({i},{j})={matrix[i, j]}，但({j},{i})={matrix[j, i]}"

    return True, None


def check_connectivity(adj_matrix: AdjacencyMatrix) -> bool:
    """
    检查图的连通性。

    Args:
        adj_matrix: 邻接矩阵

    Returns:
        是否连通
    """
    if not adj_matrix:
        return False

    n = len(adj_matrix)

    # 使用BFS检查连通性
    visited = [False] * n
    queue = deque([0])
    visited[0] = True
    count = 1

    while queue:
        node = queue.popleft()
        for neighbor, connected in enumerate(adj_matrix[node]):
            if connected and not visited[neighbor]:
                visited[neighbor] = True
                count += 1
                queue.append(neighbor)

    return count == n


def get_node_neighbors(adj_matrix: AdjacencyMatrix, node: int) -> List[int]:
    """
    获取节点的邻居列表。

    Args:
        adj_matrix: 邻接矩阵
        node: 节点索引

    Returns:
        邻居节点索引列表
    """
    if not 0 <= node < len(adj_matrix):
        raise ValueError(f"节点索引{node}超出范围[0, {len(adj_matrix)})")
    return [i for i, connected in enumerate(adj_matrix[node]) if connected]
