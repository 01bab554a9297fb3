class MeshNetError(Exception):
    """Base exception for meshnet errors."""
    pass

class TopologyError(MeshNetError):
    """Exception raised for invalid operations on a topology's device/link table."""
    pass

class InvalidTopologyError(TopologyError):
    """Exception raised for invalid topology construction parameters."""
    pass

class DeviceOutOfRangeError(TopologyError, IndexError):
    """Exception raised when a device ID is outside the topology's NPU range."""
    def __init__(self, device_id: int, npus_count: int, message="Device ID out of range"):
        self.device_id = device_id
        self.npus_count = npus_count
        super().__init__(f"{message}: {device_id} not in [0, {npus_count})")

class NoRouteError(TopologyError):
    """Exception raised when no path exists between two devices."""
    def __init__(self, src: int, dest: int, message="No route found"):
        self.src = src
        self.dest = dest
        super().__init__(f"{message}: {src} -> {dest}")

class ConfigurationError(MeshNetError):
    """Exception raised for fatal network configuration problems."""
    pass
