# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

"""Custom exception types for the NetBird API exporter."""

from __future__ import annotations


class ExporterError(Exception):
    """Base exception class for all application-specific errors."""

    pass


class ConfigError(ExporterError):
    """Raised for configuration-related errors, such as a missing API token."""

    pass


class NetBirdAPIError(ExporterError):
    """Raised when a request to the NetBird API does not yield usable data."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class TransportError(NetBirdAPIError):
    """Raised for network-related errors, such as connection or timeout issues."""

    pass


class APIStatusError(NetBirdAPIError):
    """Raised when the API answers with a non-200 status code."""

    def __init__(self, path: str, status: int):
        super().__init__(path, f"API returned status {status}")
        self.status = status


class DecodeError(NetBirdAPIError):
    """Raised when a response body is not the JSON shape we expect."""

    pass
