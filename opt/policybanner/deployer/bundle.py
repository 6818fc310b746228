"""
Incoming bundle validation.

This module locates the staged replacement bundle, checks that it is
structurally present, and decides whether the installed bundle needs
replacing at all.
"""

import os
import logging
import zipfile

from ..config import BannerConfig
from ..utils.file_operations import extract_zip_archive, compare_trees
from .errors import PreconditionError, MissingSourceError, InvalidBundleError

logger = logging.getLogger(__name__)


def extract_incoming_bundle(config: BannerConfig) -> str:
    """
    Resolve the incoming bundle, extracting the staged archive if present.

    The bundle extracted from the archive is preferred; without an archive
    the bundle pre-staged as a plain directory is used.

    Args:
        config: Run configuration

    Returns:
        str: Path of the incoming bundle directory (may not exist yet; see
            validate_incoming_bundle)

    Raises:
        InvalidBundleError: If the archive exists but cannot be extracted
    """
    if not os.path.isfile(config.archive_path):
        logger.debug(f"No archive at {config.archive_path}; using staged bundle")
        return config.staged_bundle_path

    try:
        extract_zip_archive(config.archive_path, config.workspace_dir)
    except (zipfile.BadZipFile, ValueError, OSError, RuntimeError, NotImplementedError) as e:
        # RuntimeError: encrypted member; NotImplementedError: unsupported compression
        raise InvalidBundleError(f"Failed to extract {config.archive_path}: {e}", config.archive_path)

    if os.path.isdir(config.extracted_bundle_path):
        logger.debug(f"Extracted policy banner from {config.archive_path}")
        return config.extracted_bundle_path

    logger.debug(f"{config.archive_path} did not contain {config.incoming_name}; using staged bundle")
    return config.staged_bundle_path


def validate_incoming_bundle(bundle_path: str) -> str:
    """
    Confirm the incoming bundle is a directory holding at least one file.

    Args:
        bundle_path: Path of the incoming bundle

    Returns:
        str: The validated path

    Raises:
        MissingSourceError: If the bundle directory does not exist
        InvalidBundleError: If the bundle contains no files
    """
    if not os.path.isdir(bundle_path):
        raise MissingSourceError(f"New policy banner directory not found at {bundle_path}", bundle_path)

    for _, _, filenames in os.walk(bundle_path):
        if filenames:
            break
    else:
        raise InvalidBundleError(f"New policy banner at {bundle_path} contains no files", bundle_path)

    logger.debug(f"New policy banner found at {bundle_path}")
    return bundle_path


def compare_bundles(incoming_path: str, installed_path: str) -> bool:
    """
    Decide whether the installed bundle must be replaced.

    Only names and byte content are compared; ownership and permissions are
    reapplied on every deployment anyway.

    Args:
        incoming_path: Path of the validated incoming bundle
        installed_path: Path of the live bundle

    Returns:
        bool: True if an update is needed

    Raises:
        MissingSourceError: If the incoming bundle has disappeared
        PreconditionError: If either tree cannot be read
    """
    if not os.path.isdir(incoming_path):
        raise MissingSourceError(f"New policy banner not found at {incoming_path}", incoming_path)

    if not os.path.isdir(installed_path):
        logger.info("No existing PolicyBanner found. Will install new one.")
        return True

    try:
        result = compare_trees(incoming_path, installed_path)
    except OSError as e:
        raise PreconditionError(f"Failed to compare {incoming_path} with {installed_path}: {e}", installed_path)

    if result['identical']:
        logger.info("PolicyBanner content is the same. No update needed.")
        return False

    for path in result['only_left']:
        logger.debug(f"Only in new banner: {path}")
    for path in result['only_right']:
        logger.debug(f"Only in installed banner: {path}")
    for path in result['differing']:
        logger.debug(f"Content differs: {path}")
    logger.info("PolicyBanner content differs. Update required.")
    return True
