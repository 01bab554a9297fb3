# 默认链路参数
DEFAULT_LINK_BANDWIDTH = 50.0  # GB/s
DEFAULT_LINK_LATENCY = 500.0  # ns

# 当前只支持一维拓扑选择
SUPPORTED_DIMS_COUNT = 1
