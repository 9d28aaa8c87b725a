"""Global constants."""

from pathlib import Path

__all__ = [
    "CONFIG_FILE",
    "CONFIG_FILE_ENV_VAR",
    "CREATION_TIME_FORMAT",
    "DASHBOARD_TEMPLATE",
    "DEFAULT_KUBECONFIG_PATH",
    "DEFAULT_PORT",
    "ENV_PREFIX",
    "ROOT_LOGGER",
]

CONFIG_FILE = Path("/etc/pvdashboard/config.yaml")
"""Default path to the dashboard configuration."""

ENV_PREFIX = "PVDASHBOARD_"
"""Prefix for environment variables that override configuration settings."""

CONFIG_FILE_ENV_VAR = f"{ENV_PREFIX}CONFIG_FILE"
"""Environment variable that overrides the configuration file path."""

CREATION_TIME_FORMAT = "%Y-%m-%d/%H:%M:%S"
"""Format of creation timestamps shown on the dashboard."""

DASHBOARD_TEMPLATE = "dashboard.html.jinja"
"""Name of the packaged dashboard template."""

DEFAULT_KUBECONFIG_PATH = Path.home() / ".kube" / "config"
"""Kubeconfig file used if ``KUBECONFIG`` is not set."""

DEFAULT_PORT = 8080
"""Port on which the dashboard listens by default."""

ROOT_LOGGER = "pvdashboard"
"""Name of the root logger for the application."""
