"""TailFleet constants."""

from __future__ import annotations

# Host defaults (used when no host list and no override are given)
DEFAULT_HOST = "http://localhost:5005"
DEFAULT_HOST_NAME = "default"
DEFAULT_SCHEME = "http://"

# Backend endpoints
ALIVE_PATH = "/alive"
LIST_FILES_PATH = "/list-files"
STREAM_LOGS_PATH = "/stream-logs"
VERSION_PATH = "/version"

# In-band marker the backend uses to report errors on the log stream
ERROR_SENTINEL_PREFIX = "Error:"

# Timing (seconds)
HEALTH_POLL_INTERVAL_S = 10
ALIVE_TIMEOUT_S = 3
PREFLIGHT_TIMEOUT_S = 5
LIST_FILES_TIMEOUT_S = 10
STREAM_CONNECT_TIMEOUT_S = 5
LOOP_TICK_S = 0.1

# Local configuration
CONFIG_DIR_NAME = ".tailfleet"
SERVERS_FILE_NAME = "servers.json"
SERVERS_ENV_VAR = "TAILFLEET_SERVERS"

# User-facing messages
MSG_MISSING_FILE = "Please specify a log file."
MSG_MISSING_HOST = "Please select a host."
MSG_BACKEND_UNREACHABLE = "Backend is unreachable. Please check the connection."
MSG_BACKEND_DOWN = "Failed to connect to backend. Please make sure the server is running."
MSG_LIST_FILES_FAILED = "Failed to load log files from backend."
MSG_LIST_FILES_ERROR = "Error fetching log files."
MSG_STREAM_FAILED = "Event stream failed."
