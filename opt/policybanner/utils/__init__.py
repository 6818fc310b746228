"""
Utils package for the PolicyBanner updater.

This package contains utility functions for:
- Audit logging (console and append-only log file)
- External command execution
- Host information (privilege, macOS version)
- File operations (extraction, tree comparison, ownership and permissions)
"""
