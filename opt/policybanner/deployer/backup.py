"""
Backup of the installed policy banner.

The backup lives inside the run workspace and is discarded with it; it is a
safety net for the duration of one run, not an archive.
"""

import os
import shutil
import logging
from datetime import datetime
from typing import Optional

from ..config import BannerConfig
from .errors import BackupError

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = '%Y%m%d%H%M%S'


def backup_path_for(config: BannerConfig, now: Optional[datetime] = None) -> str:
    """
    Choose the backup location for the installed bundle.

    Names carry a second-resolution timestamp; a numeric suffix is added
    when that name is already taken.

    Args:
        config: Run configuration
        now: Timestamp to use (defaults to the current time)

    Returns:
        str: Unused path inside the workspace
    """
    timestamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    _, ext = os.path.splitext(config.target_name)
    base = os.path.join(config.workspace_dir, f"{config.backup_prefix}{timestamp}")

    candidate = f"{base}{ext}"
    counter = 1
    while os.path.lexists(candidate):
        candidate = f"{base}_{counter}{ext}"
        counter += 1
    return candidate


def create_backup(config: BannerConfig) -> Optional[str]:
    """
    Copy the installed bundle into the workspace.

    Args:
        config: Run configuration

    Returns:
        str: Backup path, or None if there was no installed bundle

    Raises:
        BackupError: If the copy fails
    """
    target = config.target_bundle_path
    if not os.path.isdir(target):
        logger.info("No existing policy banner to backup")
        return None

    backup_dir = backup_path_for(config)
    try:
        shutil.copytree(target, backup_dir, symlinks=True)
    except OSError as e:
        raise BackupError(f"Failed to backup existing policy banner to {backup_dir}: {e}", backup_dir)

    logger.info(f"Existing policy banner backed up to {backup_dir}")
    return backup_dir
