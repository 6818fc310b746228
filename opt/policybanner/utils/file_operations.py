"""
File operations utilities.

This module provides functions for archive extraction, tree hashing and
comparison, and recursive ownership/permission changes.
"""

import os
import grp
import pwd
import hashlib
import logging
import zipfile
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


def extract_zip_archive(source_path, dest_dir):
    """Extracts a .zip archive into a directory, overwriting existing files.

    Args:
        source_path: path to .zip archive
        dest_dir: destination directory for extraction

    Returns:
        number of archive members extracted

    Raises:
        ValueError: if a member would be written outside dest_dir
        zipfile.BadZipFile: if the archive is corrupt
        RuntimeError: if a member is encrypted
        NotImplementedError: if a member uses an unsupported compression method
    """
    os.makedirs(dest_dir, exist_ok=True)
    dest_root = os.path.realpath(dest_dir)

    with zipfile.ZipFile(source_path) as archive:
        members = archive.infolist()
        for member in members:
            target = os.path.realpath(os.path.join(dest_root, member.filename))
            if target != dest_root and not target.startswith(dest_root + os.sep):
                raise ValueError(f"Archive member escapes destination: {member.filename}")
        archive.extractall(dest_root)

    logger.debug(f"Extracted {len(members)} entries from {source_path} to {dest_dir}")
    return len(members)


def calculate_file_hash(filepath: str) -> str:
    """
    Calculate SHA256 hash of a file.

    Args:
        filepath: Path to the file

    Returns:
        str: Hex digest of the file hash
    """
    sha256 = hashlib.sha256()
    with open(filepath, 'rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            sha256.update(chunk)
    return sha256.hexdigest()


def snapshot_tree(root: str) -> Dict[str, str]:
    """
    Describe a directory tree by relative path.

    Directories map to 'dir', symlinks to 'link:<target>', and regular files
    to their SHA256 digest.

    Args:
        root: Directory to walk

    Returns:
        dict: Relative path -> entry description
    """
    entries = {}
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        for name in dirnames:
            path = os.path.join(dirpath, name)
            rel_path = os.path.normpath(os.path.join(rel_dir, name))
            if os.path.islink(path):
                entries[rel_path] = f"link:{os.readlink(path)}"
            else:
                entries[rel_path] = 'dir'
        for name in filenames:
            path = os.path.join(dirpath, name)
            rel_path = os.path.normpath(os.path.join(rel_dir, name))
            if os.path.islink(path):
                entries[rel_path] = f"link:{os.readlink(path)}"
            else:
                entries[rel_path] = calculate_file_hash(path)
    return entries


def compare_trees(left: str, right: str) -> Dict:
    """
    Compare two directory trees by names and byte content.

    Ownership and permission bits are not inspected.

    Args:
        left: First directory
        right: Second directory

    Returns:
        dict: Comparison result with identical, only_left, only_right, differing
    """
    left_entries = snapshot_tree(left)
    right_entries = snapshot_tree(right)

    only_left = sorted(set(left_entries) - set(right_entries))
    only_right = sorted(set(right_entries) - set(left_entries))
    differing = sorted(
        path for path in set(left_entries) & set(right_entries)
        if left_entries[path] != right_entries[path]
    )

    return {
        'identical': not (only_left or only_right or differing),
        'only_left': only_left,
        'only_right': only_right,
        'differing': differing,
    }


def resolve_owner(owner: str, group: str) -> Tuple[int, int]:
    """
    Look up uid and gid for a user and group name.

    Raises:
        KeyError: if the user or group does not exist
    """
    return pwd.getpwnam(owner).pw_uid, grp.getgrnam(group).gr_gid


def apply_tree_ownership(root: str, uid: int, gid: int):
    """Recursively chown a tree (like chown -R). Symlinks themselves are changed, not followed."""
    os.lchown(root, uid, gid)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            os.lchown(os.path.join(dirpath, name), uid, gid)


def apply_tree_mode(root: str, mode: int):
    """Recursively chmod a tree (like chmod -R). Symlinks are skipped."""
    os.chmod(root, mode)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                os.chmod(path, mode)
