"""
Host information helpers.
"""

import os
import logging
from typing import Optional

from .process import run_command

logger = logging.getLogger(__name__)


def is_running_as_root() -> bool:
    """Check whether the process has superuser identity."""
    return os.geteuid() == 0


def parse_major_version(product_version: str) -> Optional[int]:
    """
    Extract the major component of a macOS product version.

    Args:
        product_version: Version string such as '14.4.1'

    Returns:
        int: The major version, or None if the string is not a version
    """
    head = product_version.strip().split('.', 1)[0]
    try:
        return int(head)
    except ValueError:
        return None


def get_os_major_version() -> Optional[int]:
    """
    Get the running macOS major version via sw_vers.

    Returns:
        int: The major version, or None if it could not be determined
    """
    result = run_command(['sw_vers', '-productVersion'], timeout=10)
    if not result['success']:
        logger.debug(f"sw_vers failed: {result['output'].strip()}")
        return None
    return parse_major_version(result['output'])
