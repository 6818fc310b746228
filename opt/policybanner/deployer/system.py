"""
Policy banner update orchestration.

This module sequences the run: privilege check, audit log, workspace,
bundle validation, deployment and preboot verification. The first fatal
error aborts the run; the workspace is removed on every exit path.
"""

import logging
from typing import Dict

from ..config import BannerConfig
from ..utils.audit_log import attach_audit_log
from ..utils.system_info import is_running_as_root
from .bundle import extract_incoming_bundle, validate_incoming_bundle, compare_bundles
from .errors import DeploymentError, PrivilegeError
from .installer import prepare_install_dir, deploy_bundle
from .preboot import verify_preboot
from .workspace import Workspace

logger = logging.getLogger(__name__)


def check_privileges():
    """
    Refuse to run without superuser identity.

    Raises:
        PrivilegeError: If the process is not running as root
    """
    if not is_running_as_root():
        raise PrivilegeError("This script must be run as root")


def perform_update(config: BannerConfig) -> Dict:
    """
    Performs a complete policy banner update.

    This includes:
    1. Checking for root privileges
    2. Opening the audit log
    3. Creating the workspace and extracting/validating the incoming bundle
    4. Preparing the install directory
    5. Comparing incoming and installed bundles
    6. Backup, remove, install, secure (only if the bundles differ)
    7. Preboot volume sync and verification (always)

    Args:
        config: Run configuration

    Returns:
        dict: Result including:
            - success: Overall success status
            - exit_code: Process exit status for this result
            - message: Human-readable status message
            - update_needed: Whether the bundles differed (None if not reached)
            - backup_path: Backup location inside the (now removed) workspace
            - verification: Preboot verification result (None if not reached)
    """
    result = {
        'success': False,
        'exit_code': 1,
        'message': '',
        'update_needed': None,
        'backup_path': None,
        'verification': None,
    }

    try:
        check_privileges()
    except PrivilegeError as e:
        logger.error(str(e))
        result['message'] = str(e)
        return result

    attach_audit_log(config.log_file, config.log_file_mode)
    logger.info("Starting policy banner update process")

    try:
        with Workspace(config.workspace_dir):
            incoming = validate_incoming_bundle(extract_incoming_bundle(config))
            prepare_install_dir(config)

            result['update_needed'] = compare_bundles(incoming, config.target_bundle_path)
            if result['update_needed']:
                deployment = deploy_bundle(config, incoming)
                result['backup_path'] = deployment['backup_path']

            result['verification'] = verify_preboot(config)

    except DeploymentError as e:
        logger.error(str(e))
        result['message'] = str(e)
        result['exit_code'] = e.exit_code
        return result

    result['success'] = True
    result['exit_code'] = 0
    result['message'] = 'Policy banner update completed'
    logger.info("Policy banner update completed")
    return result
