"""Constants used across the tomato-exporter package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "tomato-exporter"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path("/etc") / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_DEVICE_ADDRESS = "192.168.1.1"
DEFAULT_DEVICE_USERNAME = "admin"

DEFAULT_SERVER_HOST = "0.0.0.0"
DEFAULT_SERVER_PORT = 9289
DEFAULT_METRICS_PATH = "/metrics"

SHELL_ENDPOINT = "shell.cgi"
SHELL_WORKING_DIR = "/www"
UPDATE_ENDPOINT = "update.cgi"
AUTH_TOKEN_FIELD = "_http_id"

# Kernel USER_HZ; /proc/stat reports CPU time in these units.
JIFFIES_PER_SECOND = 100
