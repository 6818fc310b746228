"""
Errors raised by the deployment pipeline.

Every fatal condition is a DeploymentError. Preboot verification problems
are never raised; they are reported as warnings.
"""

from typing import Optional


class DeploymentError(Exception):
    """A fatal condition that aborts the run with a non-zero exit status."""

    exit_code = 1

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


# --- Precondition errors ---

class PreconditionError(DeploymentError):
    """The run cannot start safely."""


class PrivilegeError(PreconditionError):
    pass


class MissingSourceError(PreconditionError):
    pass


class InvalidBundleError(PreconditionError):
    pass


class SetupError(PreconditionError):
    """Workspace or install directory could not be created."""


# --- Mutation errors ---

class MutationError(DeploymentError):
    """A step that changes the installed bundle failed."""


class BackupError(MutationError):
    pass


class RemovalError(MutationError):
    pass


class InstallError(MutationError):
    pass


class PermissionsError(MutationError):
    pass


class TerminationRequested(SystemExit):
    """Raised from a signal handler so that cleanup runs on the way out."""

    def __init__(self, signum: int):
        super().__init__(128 + signum)
        self.signum = signum
