"""
Ephemeral workspace management.

The workspace holds the extracted archive, the backup snapshot and the
captured preboot sync output. It is removed on every exit path: normal
return, a DeploymentError, or a termination signal (converted into
TerminationRequested by install_signal_handlers).
"""

import os
import shutil
import signal
import logging
from pathlib import Path
from typing import Dict

from .errors import SetupError, TerminationRequested

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = tuple(
    getattr(signal, name) for name in ('SIGHUP', 'SIGINT', 'SIGQUIT', 'SIGTERM')
    if hasattr(signal, name)
)


class Workspace:
    """Scratch directory owned by a single run.

    Use as a context manager; the directory is destroyed exactly once when
    the block is left, however it is left.
    """

    def __init__(self, path: str):
        self.path = path
        self._created = False
        self._destroyed = False

    def create(self) -> str:
        """
        Create the scratch directory.

        A directory left behind by an earlier, interrupted run is discarded.

        Returns:
            str: The workspace path

        Raises:
            SetupError: If the directory cannot be created
        """
        try:
            if os.path.isdir(self.path):
                logger.debug(f"Removing stale temporary directory {self.path}")
                shutil.rmtree(self.path)
            Path(self.path).mkdir(parents=True, mode=0o700)
        except OSError as e:
            raise SetupError(f"Could not create temporary directory {self.path}: {e}", self.path)

        self._created = True
        logger.debug(f"Temporary directory {self.path} created")
        return self.path

    def destroy(self):
        """Remove the scratch directory. Idempotent; removal errors are only logged.

        Termination signals are held back until removal has finished, so a
        second signal cannot interrupt the teardown.
        """
        if self._destroyed:
            return

        previous_mask = signal.pthread_sigmask(signal.SIG_BLOCK, TERMINATION_SIGNALS)
        try:
            self._remove()
            self._destroyed = True
        finally:
            signal.pthread_sigmask(signal.SIG_SETMASK, previous_mask)

    def _remove(self):
        if not os.path.isdir(self.path):
            return
        try:
            shutil.rmtree(self.path)
            logger.debug(f"Temporary directory {self.path} cleaned up")
        except OSError as e:
            logger.debug(f"Failed to clean up temporary directory {self.path}: {e}")

    @property
    def exists(self) -> bool:
        return os.path.isdir(self.path)

    def __enter__(self):
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.destroy()
        return False


def _raise_termination(signum, frame):
    raise TerminationRequested(signum)


def install_signal_handlers() -> Dict:
    """
    Turn termination signals into TerminationRequested exceptions.

    Returns:
        dict: Previous handlers by signal number, for restore_signal_handlers
    """
    previous = {}
    for signum in TERMINATION_SIGNALS:
        previous[signum] = signal.signal(signum, _raise_termination)
    return previous


def restore_signal_handlers(previous: Dict):
    """Reinstall handlers returned by install_signal_handlers."""
    for signum, handler in previous.items():
        signal.signal(signum, handler)
