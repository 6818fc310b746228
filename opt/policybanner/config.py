"""
Configuration module for the PolicyBanner updater.

This module defines the immutable configuration passed to every component.
Values are built once at process start by config_loader.load_config().
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

# --- Staging Area ---
DEFAULT_STAGING_DIR = '/tmp'
WORKSPACE_NAME = 'banner_temp'
ARCHIVE_NAME = 'new_policy_banner.rtfd.zip'
INCOMING_BUNDLE_NAME = 'new_policy_banner.rtfd'

# --- Install Target ---
DEFAULT_INSTALL_DIR = '/Library/Security'
TARGET_BUNDLE_NAME = 'PolicyBanner.rtfd'
BACKUP_PREFIX = 'PolicyBanner_backup_'

# --- Audit Log ---
DEFAULT_LOG_FILE = '/var/log/policy_banner_update.log'

# --- Preboot Sync ---
PREBOOT_COMMAND = ('diskutil', 'apfs', 'updatePreboot', '/')
PREBOOT_MARKER_PATH = '/private/var/db/.PolicyBanner'
PREBOOT_CAPTURE_NAME = 'updatepreboot_output.log'
# The marker file is not maintained reliably from macOS 14 (Sonoma) onwards
MARKER_CHECK_MAX_VERSION = 14


@dataclass(frozen=True)
class BannerConfig:
    """Paths and policy for a single updater run."""

    staging_dir: str = DEFAULT_STAGING_DIR
    workspace_name: str = WORKSPACE_NAME
    archive_name: str = ARCHIVE_NAME
    incoming_name: str = INCOMING_BUNDLE_NAME
    target_name: str = TARGET_BUNDLE_NAME
    install_dir: str = DEFAULT_INSTALL_DIR
    log_file: str = DEFAULT_LOG_FILE
    log_file_mode: int = 0o644
    verbose: bool = False
    owner: str = 'root'
    group: str = 'wheel'
    bundle_mode: int = 0o755
    backup_prefix: str = BACKUP_PREFIX
    preboot_command: Tuple[str, ...] = PREBOOT_COMMAND
    preboot_marker: str = PREBOOT_MARKER_PATH
    marker_check_max_version: int = MARKER_CHECK_MAX_VERSION
    preboot_timeout: Optional[float] = None

    @property
    def workspace_dir(self) -> str:
        """Ephemeral scratch directory inside the staging area."""
        return os.path.join(self.staging_dir, self.workspace_name)

    @property
    def archive_path(self) -> str:
        """Compressed form of the incoming bundle, if one was staged."""
        return os.path.join(self.staging_dir, self.archive_name)

    @property
    def staged_bundle_path(self) -> str:
        """Incoming bundle staged as a plain directory."""
        return os.path.join(self.staging_dir, self.incoming_name)

    @property
    def extracted_bundle_path(self) -> str:
        """Incoming bundle as extracted from the archive."""
        return os.path.join(self.workspace_dir, self.incoming_name)

    @property
    def target_bundle_path(self) -> str:
        """Live bundle read by the login window."""
        return os.path.join(self.install_dir, self.target_name)

    @property
    def preboot_capture_path(self) -> str:
        """Scratch file receiving the preboot sync command output."""
        return os.path.join(self.workspace_dir, PREBOOT_CAPTURE_NAME)
