"""
Topology instrumentation events.

Topologies accept an optional ``observer`` callable that receives a
:class:`TopologyEvent` for every notable step of construction and routing.
This keeps tracing out of the functional code: nothing is printed unless a
caller asks for it.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


class EventKind(Enum):
    """Instrumentation event kind enumeration."""

    LINK_CREATED = "link_created"
    ROUTE_COMPUTED = "route_computed"
    PLACEMENT_REJECTED = "placement_rejected"
    PLACEMENT_BACKFILLED = "placement_backfilled"
    MESH_TRUNCATED = "mesh_truncated"
    TOPOLOGY_BUILT = "topology_built"


@dataclass(frozen=True)
class TopologyEvent:
    """A single instrumentation event."""

    kind: EventKind
    topology: str
    data: Dict[str, Any] = field(default_factory=dict)


TopologyObserver = Callable[[TopologyEvent], None]


class EventRecorder:
    """Observer that keeps every event it receives, in order."""

    def __init__(self):
        self.events: List[TopologyEvent] = []

    def __call__(self, event: TopologyEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[TopologyEvent]:
        """返回指定类型的事件列表"""
        return [event for event in self.events if event.kind == kind]

    def clear(self) -> None:
        self.events.clear()

    def __len__(self):
        return len(self.events)


def emit(observer: Optional[TopologyObserver], kind: EventKind, topology: str, **data: Any) -> None:
    """Deliver an event to ``observer`` if one is installed."""
    if observer is not None:
        observer(TopologyEvent(kind=kind, topology=topology, data=data))
