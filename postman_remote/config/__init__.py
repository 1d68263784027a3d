"""Configuration for postman-remote."""

from postman_remote.config.settings import RemoteSettings

__all__ = ["RemoteSettings"]
