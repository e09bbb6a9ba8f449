"""
Remote System Monitor - run health checks on remote servers over SSH.

Checks directory counts, load average, HTTP endpoints, sensor temperatures,
stale directories and arbitrary commands, then posts one ordered report to
Slack (or another notifier) when something failed.
"""

__version__ = "0.3.0"

from remote_sys_monitor.config import CheckSpec, Config, ConfigError, ServerConfig
from remote_sys_monitor.models import CheckResult, Report
from remote_sys_monitor.monitor import Monitor

__all__ = [
    "CheckResult",
    "CheckSpec",
    "Config",
    "ConfigError",
    "Monitor",
    "Report",
    "ServerConfig",
]
