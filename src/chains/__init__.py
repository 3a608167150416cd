from .chart_chain_manager import ChartChainManager  # noqa: F401
