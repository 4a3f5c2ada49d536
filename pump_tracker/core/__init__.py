"""Core configuration for the pump tracker."""

from .config import CONFIG, RemoteConnection, load_remote_connection

__all__ = ["CONFIG", "RemoteConnection", "load_remote_connection"]
