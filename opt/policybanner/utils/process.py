"""
External command execution.

This module provides a single runner for the external commands the updater
depends on (sw_vers, diskutil).
"""

import subprocess
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def run_command(
    cmd: List[str],
    timeout: Optional[float] = None,
    capture_path: Optional[str] = None
) -> Dict:
    """
    Run a command once and capture its output.

    Args:
        cmd: Command and arguments as list
        timeout: Seconds to wait before giving up, or None to wait forever
        capture_path: If given, stdout and stderr are both written to this
            file and read back into the result

    Returns:
        dict: Command result with success, returncode, output, command
    """
    result = {
        'success': False,
        'returncode': -1,
        'output': '',
        'command': ' '.join(cmd)
    }

    try:
        if capture_path:
            with open(capture_path, 'wb') as capture:
                proc = subprocess.run(
                    cmd,
                    stdout=capture,
                    stderr=subprocess.STDOUT,
                    timeout=timeout
                )
            with open(capture_path, 'r', encoding='utf-8', errors='replace') as capture:
                result['output'] = capture.read()
        else:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors='replace',
                timeout=timeout
            )
            result['output'] = proc.stdout or ''

        result['returncode'] = proc.returncode
        result['success'] = proc.returncode == 0

    except subprocess.TimeoutExpired:
        result['output'] = f"Command timed out after {timeout} seconds\n"
        logger.debug(f"Command timed out: {result['command']}")
    except OSError as e:
        result['output'] = f"{e}\n"
        logger.debug(f"Error running command {result['command']}: {e}")

    return result
