"""
PolicyBanner updater.

Replaces the macOS login-window policy banner bundle in /Library/Security,
keeps a run-scoped backup of the previous bundle, enforces root:wheel 755
ownership and permissions, and resynchronizes the FileVault preboot volume.
"""

__version__ = '1.3.0'
