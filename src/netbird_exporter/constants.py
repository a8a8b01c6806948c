# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Defaults and names shared across the exporter."""

# Upstream API
DEFAULT_API_URL = "https://api.netbird.io"
DEFAULT_API_TIMEOUT = 30  # seconds

PEERS_PATH = "/api/peers"
GROUPS_PATH = "/api/groups"
USERS_PATH = "/api/users"
NAMESERVERS_PATH = "/api/dns/nameservers"
DNS_SETTINGS_PATH = "/api/dns/settings"
NETWORKS_PATH = "/api/networks"

# HTTP surface
DEFAULT_LISTEN_ADDRESS = ":8080"
DEFAULT_METRICS_PATH = "/metrics"
HEALTH_PATH = "/health"
DEFAULT_SHUTDOWN_TIMEOUT = 30  # seconds

# Logging
DEFAULT_LOG_LEVEL = "info"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Metric naming
NAMESPACE = "netbird"
UNKNOWN_LABEL = "unknown"

# The API reports "never" as the zero timestamp 0001-01-01T00:00:00Z
ZERO_TIME_YEAR = 1

# Optional YAML configuration picked up from the working directory
CONFIG_FILE_NAME = "netbird-exporter.yaml"
