"""
NetBird API Exporter - Prometheus exporter for the NetBird management API

This package polls the NetBird REST API on every scrape and republishes
peers, groups, users, DNS and networks state as Prometheus gauges.
"""

__version__ = "1.0.0"
__author__ = "Amirreza 'Farnam' Taheri"

# Import key components to be available at the package level
from .client import NetBirdClient
from .config import Settings, load_config
from .exporter import NetBirdExporter

# Define the public API of the package
__all__ = [
    "NetBirdClient",
    "NetBirdExporter",
    "Settings",
    "load_config",
    "__version__",
    "__author__",
]
