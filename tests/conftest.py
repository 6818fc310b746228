import grp
import os
import pwd
from pathlib import Path

import pytest

from policybanner.config import BannerConfig
from policybanner.config_loader import DEBUG_ENV_VAR
from policybanner.utils.audit_log import attach_audit_log, configure_logging, reset_logging

BANNER_FILES = {
    "TXT.rtf": b"{\\rtf1\\ansi Authorized use only. Activity is monitored.}",
    "logo.png": b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR",
    "Resources/notice.txt": b"Contact IT security before use.\n",
}


@pytest.fixture(autouse=True)
def _package_logging(monkeypatch):
    monkeypatch.delenv(DEBUG_ENV_VAR, raising=False)
    configure_logging(verbose=True)
    yield
    reset_logging()


@pytest.fixture
def banner_config(tmp_path: Path) -> BannerConfig:
    staging = tmp_path / "staging"
    staging.mkdir()
    return BannerConfig(
        staging_dir=str(staging),
        install_dir=str(tmp_path / "Library" / "Security"),
        log_file=str(tmp_path / "log" / "policy_banner_update.log"),
        verbose=True,
        owner=pwd.getpwuid(os.getuid()).pw_name,
        group=grp.getgrgid(os.getgid()).gr_name,
        preboot_command=("sh", "-c", "echo 'Successfully wrote Encrypted Root PList File'"),
        preboot_marker=str(tmp_path / "db" / ".PolicyBanner"),
    )


@pytest.fixture
def make_bundle():
    def _make(path, files=None) -> Path:
        root = Path(path)
        root.mkdir(parents=True, exist_ok=True)
        for rel_path, content in (files if files is not None else BANNER_FILES).items():
            file_path = root / rel_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        return root

    return _make


@pytest.fixture
def audit_log(banner_config):
    """Attach the audit log and return a reader for its contents."""
    attach_audit_log(banner_config.log_file)

    def _read() -> str:
        return Path(banner_config.log_file).read_text()

    return _read


@pytest.fixture
def workspace_dir(banner_config) -> Path:
    path = Path(banner_config.workspace_dir)
    path.mkdir(parents=True)
    return path
