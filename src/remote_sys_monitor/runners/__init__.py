"""Command runners used by the checks."""

from remote_sys_monitor.config import ServerConfig
from remote_sys_monitor.runners.base import BaseRunner, CommandError, RemoteConnectionError
from remote_sys_monitor.runners.local import LocalRunner
from remote_sys_monitor.runners.ssh import SSHRunner

__all__ = [
    "BaseRunner",
    "CommandError",
    "LocalRunner",
    "RemoteConnectionError",
    "SSHRunner",
    "create_runner",
]


def create_runner(server: ServerConfig) -> BaseRunner:
    """Get the appropriate runner for a server."""
    if server.local:
        return LocalRunner(server)
    return SSHRunner(server)
