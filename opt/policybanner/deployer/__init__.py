"""
Deployer package for the PolicyBanner updater.

This package contains the policy banner replacement pipeline:
- Workspace creation and guaranteed cleanup
- Incoming bundle extraction, validation and comparison
- Backup, removal, installation and securing of the bundle
- FileVault preboot volume sync and verification
- Orchestration of the whole run
"""

from .errors import (
    DeploymentError,
    PreconditionError,
    PrivilegeError,
    MissingSourceError,
    InvalidBundleError,
    SetupError,
    MutationError,
    BackupError,
    RemovalError,
    InstallError,
    PermissionsError,
    TerminationRequested,
)

from .workspace import (
    Workspace,
    install_signal_handlers,
    restore_signal_handlers,
)

from .bundle import (
    extract_incoming_bundle,
    validate_incoming_bundle,
    compare_bundles,
)

from .backup import create_backup

from .installer import (
    prepare_install_dir,
    remove_existing_bundle,
    install_bundle,
    secure_bundle,
    deploy_bundle,
)

from .preboot import (
    classify_preboot_output,
    check_preboot_marker,
    verify_preboot,
)

from .system import perform_update

__all__ = [
    # Errors
    'DeploymentError',
    'PreconditionError',
    'PrivilegeError',
    'MissingSourceError',
    'InvalidBundleError',
    'SetupError',
    'MutationError',
    'BackupError',
    'RemovalError',
    'InstallError',
    'PermissionsError',
    'TerminationRequested',
    # Workspace
    'Workspace',
    'install_signal_handlers',
    'restore_signal_handlers',
    # Bundle validation
    'extract_incoming_bundle',
    'validate_incoming_bundle',
    'compare_bundles',
    # Deployment
    'create_backup',
    'prepare_install_dir',
    'remove_existing_bundle',
    'install_bundle',
    'secure_bundle',
    'deploy_bundle',
    # Preboot verification
    'classify_preboot_output',
    'check_preboot_marker',
    'verify_preboot',
    # Orchestration
    'perform_update',
]
