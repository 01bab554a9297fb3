"""
meshnet 配置模块
"""

from .network_config import NetworkConfig
from .loader import ConfigLoader, load_network_config, to_dict

__all__ = [
    "NetworkConfig",
    "ConfigLoader",
    "load_network_config",
    "to_dict",
]
