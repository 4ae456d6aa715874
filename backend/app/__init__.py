"""Popsite Monitor - Prometheus HTTP 探测代理。"""

__version__ = "0.1.0"
