"""Log file listing for a host."""

from __future__ import annotations

import logging

import requests

from .constants import (
    LIST_FILES_PATH,
    LIST_FILES_TIMEOUT_S,
    MSG_LIST_FILES_ERROR,
    MSG_LIST_FILES_FAILED,
)
from .exceptions import FetchError
from .hosts import Host
from .utils import join_url

logger = logging.getLogger(__name__)


def fetch_file_list(host: Host, timeout: float = LIST_FILES_TIMEOUT_S) -> list[str]:
    """Fetch the names of the log files a host can stream.

    Args:
        host: Host to query
        timeout: Request timeout in seconds

    Returns:
        Filenames in the order the host returned them

    Raises:
        FetchError: On a network failure, a non-2xx status, or a body that
            is not a JSON array of strings
    """
    url = join_url(host.url, LIST_FILES_PATH)
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.debug("File list request to %s failed: %s", url, e)
        raise FetchError(MSG_LIST_FILES_ERROR) from e

    if not response.ok:
        logger.debug("File list request to %s returned %d", url, response.status_code)
        raise FetchError(MSG_LIST_FILES_FAILED)

    try:
        data = response.json()
    except ValueError as e:
        logger.debug("File list from %s is not JSON: %s", url, e)
        raise FetchError(MSG_LIST_FILES_ERROR) from e

    # The backend encodes an empty directory as null
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        logger.debug("File list from %s has unexpected shape: %r", url, data)
        raise FetchError(MSG_LIST_FILES_ERROR)
    return data
