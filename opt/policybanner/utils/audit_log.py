"""
Audit logging for the PolicyBanner updater.

All modules log through the standard logging package. This module wires the
package logger to:
- stdout for INFO/DEBUG records
- stderr for WARN/ERROR records, so the fleet console captures them
- an append-only audit log file, once the run is known to be privileged
"""

import os
import sys
import logging
from pathlib import Path

PACKAGE_LOGGER = 'policybanner'

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class AuditFormatter(logging.Formatter):
    """Formats records as `[timestamp] [LEVEL] message`."""

    LEVEL_NAMES = {
        logging.WARNING: 'WARN',
        logging.CRITICAL: 'ERROR',
    }

    def __init__(self):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record):
        name = self.LEVEL_NAMES.get(record.levelno)
        if name is None:
            return super().format(record)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = name
        return super().format(record)


class _BelowWarning(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


class AuditFileHandler(logging.FileHandler):
    """Append-only file handler; every record is flushed as it is written."""

    def __init__(self, path):
        super().__init__(path, mode='a', encoding='utf-8')


def _get_logger():
    return logging.getLogger(PACKAGE_LOGGER)


def reset_logging():
    """Detach and close every handler on the package logger."""
    root = _get_logger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def configure_logging(verbose: bool = False):
    """
    Set up console logging for the package.

    Args:
        verbose: If True, DEBUG records are emitted as well
    """
    reset_logging()
    root = _get_logger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False

    formatter = AuditFormatter()

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.addFilter(_BelowWarning())
    out_handler.setFormatter(formatter)
    root.addHandler(out_handler)

    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setLevel(logging.WARNING)
    err_handler.setFormatter(formatter)
    root.addHandler(err_handler)


def prepare_log_file(path: str, mode: int = 0o644):
    """
    Create the audit log file if it does not exist yet.

    Args:
        path: Audit log path
        mode: Permission bits applied to a newly created file
    """
    if os.path.isfile(path):
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    Path(path).touch()
    os.chmod(path, mode)


def attach_audit_log(path: str, mode: int = 0o644):
    """
    Start appending package log records to the audit log file.

    Replaces any audit handler attached earlier in the process.

    Args:
        path: Audit log path
        mode: Permission bits for a newly created log file
    """
    root = _get_logger()
    for handler in list(root.handlers):
        if isinstance(handler, AuditFileHandler):
            root.removeHandler(handler)
            handler.close()

    prepare_log_file(path, mode)
    handler = AuditFileHandler(path)
    handler.setFormatter(AuditFormatter())
    root.addHandler(handler)


def append_raw_output(path: str, text: str):
    """
    Append captured command output to the audit log verbatim.

    The output is not echoed to the console; the fleet console only sees the
    one-line summaries logged around it.

    Args:
        path: Audit log path
        text: Captured output
    """
    if not text:
        return
    if not text.endswith('\n'):
        text += '\n'
    with open(path, 'a', encoding='utf-8') as f:
        f.write(text)
