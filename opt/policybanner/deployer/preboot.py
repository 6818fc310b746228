"""
FileVault preboot synchronization and verification.

After the banner is installed, the APFS preboot volume must be updated so
the FileVault unlock screen shows the new banner. The sync command's output
has no timestamps and no stable status format, so:
- the run is bracketed with our own start/end timestamps
- the full output is appended to the audit log
- a coarse outcome is derived from an ordered table of marker phrases

Nothing here is fatal. The banner is already installed; every problem is
reported as a warning.
"""

import os
import logging
from datetime import datetime
from typing import Dict, Optional

from ..config import BannerConfig
from ..utils.audit_log import append_raw_output
from ..utils.process import run_command
from ..utils.system_info import get_os_major_version

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

OUTCOME_SUCCESS = 'success'
OUTCOME_UNVERIFIABLE = 'unverifiable'
OUTCOME_DEGRADED = 'degraded'

# Worst outcome wins when combining the sync result and the marker check
_OUTCOME_SEVERITY = {
    OUTCOME_SUCCESS: 0,
    OUTCOME_UNVERIFIABLE: 1,
    OUTCOME_DEGRADED: 2,
}

# Checked in order; the first phrase found in the output decides.
PREBOOT_OUTPUT_RULES = (
    ('Successfully wrote Encrypted Root PList File', OUTCOME_SUCCESS,
     logging.INFO, "Preboot update completed successfully."),
    ('Error', OUTCOME_DEGRADED,
     logging.WARNING, "Potential issues detected during Preboot update. Check detailed logs."),
)
PREBOOT_OUTPUT_DEFAULT = (OUTCOME_UNVERIFIABLE,
                          logging.INFO, "Preboot update completed with standard output.")


def _timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def worst_outcome(*outcomes: str) -> str:
    return max(outcomes, key=_OUTCOME_SEVERITY.__getitem__)


def classify_preboot_output(output: str) -> Dict:
    """
    Classify captured sync output using PREBOOT_OUTPUT_RULES.

    Args:
        output: Combined stdout/stderr of the sync command

    Returns:
        dict: outcome, level and message of the matching rule
    """
    for phrase, outcome, level, message in PREBOOT_OUTPUT_RULES:
        if phrase in output:
            return {'outcome': outcome, 'level': level, 'message': message, 'phrase': phrase}

    outcome, level, message = PREBOOT_OUTPUT_DEFAULT
    return {'outcome': outcome, 'level': level, 'message': message, 'phrase': None}


def check_preboot_marker(config: BannerConfig, os_major_version: Optional[int]) -> str:
    """
    Check the on-disk preboot banner marker where it is meaningful.

    Args:
        config: Run configuration
        os_major_version: Running macOS major version, or None if unknown

    Returns:
        str: Outcome of the check
    """
    marker = config.preboot_marker

    if os_major_version is None:
        logger.warning(f"Unable to determine macOS version; skipping {marker} check.")
        return OUTCOME_UNVERIFIABLE

    if os_major_version >= config.marker_check_max_version:
        logger.info(
            f"Running macOS {os_major_version} detected; skipping {marker} check "
            f"(not reliable on macOS {config.marker_check_max_version}+)."
        )
        return OUTCOME_SUCCESS

    if os.path.exists(marker):
        logger.info("Policy banner is configured for FileVault preboot screen.")
        return OUTCOME_SUCCESS

    logger.warning("Policy banner not configured for FileVault preboot screen after update.")
    return OUTCOME_DEGRADED


def verify_preboot(config: BannerConfig, os_major_version: Optional[int] = None) -> Dict:
    """
    Resynchronize the preboot volume and verify the result.

    Args:
        config: Run configuration
        os_major_version: Override for the detected macOS major version

    Returns:
        dict: Verification result with outcome, command_success, start_time,
            end_time, classification and marker_outcome
    """
    result = {
        'outcome': OUTCOME_DEGRADED,
        'command_success': False,
        'returncode': None,
        'start_time': None,
        'end_time': None,
        'classification': None,
        'marker_outcome': None,
    }

    logger.info("Starting Preboot volume update to sync PolicyBanner...")
    result['start_time'] = _timestamp()

    run = run_command(
        list(config.preboot_command),
        timeout=config.preboot_timeout,
        capture_path=config.preboot_capture_path
    )
    result['returncode'] = run['returncode']
    result['command_success'] = run['success']

    if not run['success']:
        result['end_time'] = _timestamp()
        logger.warning("Failed to update preboot volume. Preboot banner status might not be accurate.")
        logger.info(f"Preboot update started at {result['start_time']} and failed at {result['end_time']}.")
        append_raw_output(config.log_file, run['output'])
        return result

    result['end_time'] = _timestamp()
    logger.info(f"Preboot volume update completed. Start: {result['start_time']} | End: {result['end_time']}")
    append_raw_output(config.log_file, run['output'])

    classification = classify_preboot_output(run['output'])
    result['classification'] = classification['outcome']
    logger.log(classification['level'], classification['message'])

    if os_major_version is None:
        os_major_version = get_os_major_version()
    result['marker_outcome'] = check_preboot_marker(config, os_major_version)

    result['outcome'] = worst_outcome(result['classification'], result['marker_outcome'])
    return result
