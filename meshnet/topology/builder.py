"""
网格布局构建器。

GridLayoutBuilder是构建期的临时上下文：负责统计有效位置、分配NPU编号
（行优先自动编号或自定义放置）、生成待创建的链路；build()产出不可变的
GridLayout，供Mesh拓扑使用。
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..utils.types import Coordinate, DeviceId, Placement, PlacementRejection, NO_DEVICE
from ..utils.exceptions import InvalidTopologyError
from ..utils.events import EventKind, TopologyObserver, emit

logger = logging.getLogger(__name__)


def valid_npu_count(width: int, height: int, excluded: Iterable[Coordinate]) -> int:
    """
    计算有效NPU数量。

    网格范围外的排除坐标不影响计数。

    Args:
        width: 网格列数
        height: 网格行数
        excluded: 排除坐标集合

    Returns:
        width * height - 范围内的排除坐标数
    """
    in_bounds = {(x, y) for x, y in excluded if 0 <= x < width and 0 <= y < height}
    return width * height - len(in_bounds)


@dataclass(frozen=True)
class RejectedPlacement:
    """被跳过的放置条目"""

    coord: Coordinate
    npu_id: DeviceId
    reason: PlacementRejection


@dataclass(frozen=True)
class GridLayout:
    """
    不可变的网格布局。

    grid_to_npu按 y * width + x 索引，无设备的位置为NO_DEVICE；
    npu_to_grid按NPU ID索引。两表在有效位置上构成双射。
    """

    width: int
    height: int
    excluded: FrozenSet[Coordinate]
    grid_to_npu: Tuple[DeviceId, ...]
    npu_to_grid: Tuple[Coordinate, ...]
    rejected: Tuple[RejectedPlacement, ...] = ()
    backfilled: Tuple[Tuple[Coordinate, DeviceId], ...] = ()

    @property
    def valid_count(self) -> int:
        return len(self.npu_to_grid)

    def grid_index(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_valid_position(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and (x, y) not in self.excluded

    def npu_at(self, x: int, y: int) -> Optional[DeviceId]:
        if not self.in_bounds(x, y):
            return None
        npu_id = self.grid_to_npu[self.grid_index(x, y)]
        return None if npu_id == NO_DEVICE else npu_id

    def coords_of(self, npu_id: DeviceId) -> Coordinate:
        return self.npu_to_grid[npu_id]

    def valid_neighbors(self, x: int, y: int) -> List[Coordinate]:
        """
        获取有效邻居坐标。

        候选顺序为 +x, -x, +y, -y，过滤掉越界和被排除的位置。
        链路创建与BFS路由使用同一邻接定义。
        """
        candidates = ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1))
        return [(nx, ny) for nx, ny in candidates if self.is_valid_position(nx, ny)]

    def link_pairs(self) -> List[Tuple[DeviceId, DeviceId]]:
        """
        按行优先扫描生成链路对。

        每个有效位置只与右侧(x+1, y)和下方(x, y+1)的有效邻居配对，
        左/上方向的连接由邻居自身的右/下配对隐含。
        """
        pairs = []
        for y in range(self.height):
            for x in range(self.width):
                current = self.npu_at(x, y)
                if current is None:
                    continue
                for nx, ny in ((x + 1, y), (x, y + 1)):
                    neighbor = self.npu_at(nx, ny)
                    if neighbor is not None:
                        pairs.append((current, neighbor))
        return pairs

    def render(self) -> str:
        """渲染ASCII网格图，'x'表示空洞"""
        lines = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                npu_id = self.npu_at(x, y)
                row.append(f"{npu_id:>3}" if npu_id is not None else "  x")
                if x < self.width - 1:
                    connected = npu_id is not None and self.npu_at(x + 1, y) is not None
                    row.append(" --- " if connected else "     ")
            lines.append("".join(row).rstrip())

            if y < self.height - 1:
                row = []
                for x in range(self.width):
                    connected = self.npu_at(x, y) is not None and self.npu_at(x, y + 1) is not None
                    row.append("  |" if connected else "   ")
                    if x < self.width - 1:
                        row.append("     ")
                lines.append("".join(row).rstrip())
        return "\n".join(lines)


class GridLayoutBuilder:
    """
    网格布局构建器。

    用法:
        builder = GridLayoutBuilder(6, 4, excluded)
        builder.assign_row_major()            # 或 builder.apply_placement(placement)
        layout = builder.build()
    """

    def __init__(
        self,
        width: int,
        height: int,
        excluded: Iterable[Coordinate] = (),
        name: str = "Mesh2D",
        observer: Optional[TopologyObserver] = None,
    ):
        """
        初始化构建器。

        Args:
            width: 网格列数
            height: 网格行数
            excluded: 排除坐标（空洞）
            name: 所属拓扑名称，用于日志与事件
            observer: 可选的事件观察者
        """
        if width < 1 or height < 1:
            raise InvalidTopologyError(f"网格至少需要1×1，给定: {width}×{height}")

        self.width = width
        self.height = height
        self.excluded: Set[Coordinate] = {(int(x), int(y)) for x, y in excluded}
        self.valid_count = valid_npu_count(width, height, self.excluded)
        if self.valid_count < 1:
            raise InvalidTopologyError(f"{width}×{height} 网格中没有有效位置")

        self._name = name
        self._observer = observer
        self._grid_to_npu: List[DeviceId] = [NO_DEVICE] * (width * height)
        self._npu_to_grid: Dict[DeviceId, Coordinate] = {}
        self._rejected: List[RejectedPlacement] = []
        self._backfilled: List[Tuple[Coordinate, DeviceId]] = []

    def _is_valid(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and (x, y) not in self.excluded

    def _assign(self, x: int, y: int, npu_id: DeviceId) -> None:
        self._grid_to_npu[y * self.width + x] = npu_id
        self._npu_to_grid[npu_id] = (x, y)

    def valid_positions(self) -> List[Coordinate]:
        """行优先顺序的有效坐标列表"""
        return [(x, y) for y in range(self.height) for x in range(self.width) if self._is_valid(x, y)]

    def assign_row_major(self) -> "GridLayoutBuilder":
        """按行优先顺序为有效位置连续编号"""
        for npu_id, (x, y) in enumerate(self.valid_positions()):
            self._assign(x, y, npu_id)
        return self

    def apply_placement(self, placement: Placement) -> "GridLayoutBuilder":
        """
        应用自定义NPU放置。

        每个条目依次检查：坐标越界、坐标被排除、ID越界、ID重复；
        任一检查失败则跳过该条目并记录原因。处理完毕后，未分配的
        有效位置按行优先顺序补齐为最小的未使用ID。

        Args:
            placement: (x, y) -> NPU ID 映射

        Returns:
            self
        """
        for (x, y), npu_id in sorted(placement.items()):
            reason = self._check_placement(x, y, npu_id)
            if reason is not None:
                self._reject((x, y), npu_id, reason)
                continue
            self._assign(x, y, npu_id)
            logger.debug(f"{self._name}: 放置 ({x},{y}) -> NPU {npu_id}")

        if len(self._npu_to_grid) < self.valid_count:
            logger.warning(
                f"{self._name}: 期望 {self.valid_count} 个NPU放置，实际 {len(self._npu_to_grid)} 个，" f"其余位置按行优先自动编号"
            )
            self._backfill()
        return self

    def _check_placement(self, x: int, y: int, npu_id: DeviceId) -> Optional[PlacementRejection]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return PlacementRejection.OUT_OF_BOUNDS
        if (x, y) in self.excluded:
            return PlacementRejection.EXCLUDED_POSITION
        if not 0 <= npu_id < self.valid_count:
            return PlacementRejection.ID_OUT_OF_RANGE
        if npu_id in self._npu_to_grid:
            return PlacementRejection.DUPLICATE_ID
        return None

    def _reject(self, coord: Coordinate, npu_id: DeviceId, reason: PlacementRejection) -> None:
        logger.warning(f"{self._name}: 忽略放置条目 {coord} -> {npu_id} ({reason.value})")
        self._rejected.append(RejectedPlacement(coord, npu_id, reason))
        emit(self._observer, EventKind.PLACEMENT_REJECTED, self._name, coord=coord, npu_id=npu_id, reason=reason)

    def _backfill(self) -> None:
        next_id = 0
        for x, y in self.valid_positions():
            if self._grid_to_npu[y * self.width + x] != NO_DEVICE:
                continue
            while next_id in self._npu_to_grid:
                next_id += 1
            self._assign(x, y, next_id)
            self._backfilled.append(((x, y), next_id))
            logger.debug(f"{self._name}: 自动编号 ({x},{y}) -> NPU {next_id}")
            emit(self._observer, EventKind.PLACEMENT_BACKFILLED, self._name, coord=(x, y), npu_id=next_id)
            next_id += 1

    def build(self) -> GridLayout:
        """
        生成不可变布局。

        Raises:
            InvalidTopologyError: 编号未构成有效位置与[0, valid_count)的双射
        """
        if sorted(self._npu_to_grid) != list(range(self.valid_count)):
            raise InvalidTopologyError(f"{self._name}: NPU编号不完整，已分配 {len(self._npu_to_grid)}/{self.valid_count}")

        return GridLayout(
            width=self.width,
            height=self.height,
            excluded=frozenset(self.excluded),
            grid_to_npu=tuple(self._grid_to_npu),
            npu_to_grid=tuple(self._npu_to_grid[i] for i in range(self.valid_count)),
            rejected=tuple(self._rejected),
            backfilled=tuple(self._backfilled),
        )
