"""
Policy banner deployment steps.

Deployment is a strict sequence: backup -> remove -> install -> secure.
Each step raises a MutationError on failure and the remaining steps are not
attempted. Nothing is rolled back: an install failure after a successful
removal leaves the banner missing, and the backup in the workspace is the
only copy of the previous bundle for the rest of the run.
"""

import os
import shutil
import logging
from pathlib import Path
from typing import Dict

from ..config import BannerConfig
from ..utils.file_operations import resolve_owner, apply_tree_ownership, apply_tree_mode
from .backup import create_backup
from .errors import SetupError, RemovalError, InstallError, PermissionsError

logger = logging.getLogger(__name__)


def prepare_install_dir(config: BannerConfig):
    """
    Create the install directory if it does not exist.

    Raises:
        SetupError: If the directory cannot be created
    """
    install_dir = config.install_dir
    if os.path.isdir(install_dir):
        return
    try:
        Path(install_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SetupError(f"Failed to create {install_dir}: {e}", install_dir)
    logger.info(f"Created {install_dir}")


def remove_existing_bundle(config: BannerConfig) -> bool:
    """
    Delete the installed bundle.

    Returns:
        bool: True if a bundle was removed, False if there was none

    Raises:
        RemovalError: If the bundle cannot be deleted
    """
    target = config.target_bundle_path
    if not os.path.isdir(target):
        logger.info("No existing policy banner to remove")
        return False
    try:
        shutil.rmtree(target)
    except OSError as e:
        raise RemovalError(f"Failed to remove old policy banner at {target}: {e}", target)
    logger.info("Old policy banner removed")
    return True


def install_bundle(config: BannerConfig, source_path: str):
    """
    Copy the incoming bundle to the target path.

    Raises:
        InstallError: If the copy fails
    """
    target = config.target_bundle_path
    try:
        shutil.copytree(source_path, target, symlinks=True)
    except OSError as e:
        raise InstallError(f"Failed to copy new policy banner to {target}: {e}", target)
    logger.info(f"New policy banner copied to {target}")


def secure_bundle(config: BannerConfig):
    """
    Apply mode and ownership to every object under the installed bundle.

    Raises:
        PermissionsError: If either the mode or the ownership cannot be set
    """
    target = config.target_bundle_path
    try:
        apply_tree_mode(target, config.bundle_mode)
    except OSError as e:
        raise PermissionsError(f"Failed to set permissions on {target}: {e}", target)

    try:
        uid, gid = resolve_owner(config.owner, config.group)
        apply_tree_ownership(target, uid, gid)
    except (KeyError, OSError) as e:
        raise PermissionsError(f"Failed to set ownership on {target}: {e}", target)

    logger.info(
        f"Permissions {config.bundle_mode:o} and ownership "
        f"{config.owner}:{config.group} applied to {target}"
    )


def deploy_bundle(config: BannerConfig, source_path: str) -> Dict:
    """
    Replace the installed bundle with the incoming one.

    Args:
        config: Run configuration
        source_path: Validated incoming bundle

    Returns:
        dict: Step results with backup_path and removed

    Raises:
        MutationError: From the first step that fails
    """
    result = {
        'backup_path': None,
        'removed': False,
    }

    logger.debug("Step 1/4: Backing up existing policy banner...")
    result['backup_path'] = create_backup(config)

    logger.debug("Step 2/4: Removing existing policy banner...")
    result['removed'] = remove_existing_bundle(config)

    logger.debug("Step 3/4: Installing new policy banner...")
    install_bundle(config, source_path)

    logger.debug("Step 4/4: Applying ownership and permissions...")
    secure_bundle(config)

    logger.info(f"New policy banner deployed successfully at {config.target_bundle_path}")
    return result
