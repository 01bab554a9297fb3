"""
meshnet types and enumerations.

This module defines common types, enumerations, and type aliases used across
the topology construction and routing layer.
"""

from enum import Enum
from typing import List, Tuple, Dict, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..topology.base import Device


class TopologyBuildingBlock(Enum):
    """Basic topology building block enumeration."""

    RING = "Ring"
    SWITCH = "Switch"
    FULLY_CONNECTED = "FullyConnected"
    MESH_2D = "Mesh2D"
    SPARSE_MESH_2D = "SparseMesh2D"

    @classmethod
    def from_name(cls, name: str) -> "TopologyBuildingBlock":
        """
        Resolve a building block from its configuration name.

        Matching ignores case and ``_`` / ``-`` separators, so ``Mesh2D``,
        ``mesh2d`` and ``MESH_2D`` all resolve to ``MESH_2D``.

        Raises:
            ValueError: if the name does not match any building block
        """
        if isinstance(name, cls):
            return name

        normalized = str(name).replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == normalized or member.name.replace("_", "").lower() == normalized:
                return member

        raise ValueError(f"Unknown topology building block: {name!r}. " f"Supported: {[m.value for m in cls]}")


class PlacementRejection(Enum):
    """Reason a custom NPU placement entry was skipped."""

    OUT_OF_BOUNDS = "out_of_bounds"
    EXCLUDED_POSITION = "excluded_position"
    ID_OUT_OF_RANGE = "id_out_of_range"
    DUPLICATE_ID = "duplicate_id"


# Type aliases for better code readability
DeviceId = int
Coordinate = Tuple[int, int]  # 2D grid coordinate (x, y)
Route = List["Device"]  # Route represented as a list of devices, src..dest inclusive
RouteIds = List[DeviceId]  # Route represented as a list of device IDs
AdjacencyMatrix = List[List[int]]

# Configuration type aliases
ConfigDict = Dict[str, Any]
Placement = Dict[Coordinate, DeviceId]

# Utility type definitions
ValidationResult = Tuple[bool, Optional[str]]

# Sentinel used in the flat grid table for positions without a device
NO_DEVICE = -1
