import os
import shutil
import signal
import time

import pytest

from policybanner.deployer.errors import InstallError, SetupError, TerminationRequested
from policybanner.deployer.workspace import (
    Workspace,
    install_signal_handlers,
    restore_signal_handlers,
)


def test_context_manager_creates_and_removes(tmp_path):
    path = tmp_path / "banner_temp"

    with Workspace(str(path)) as workspace:
        assert path.is_dir()
        (path / "scratch.log").write_text("output")
        assert workspace.exists

    assert not path.exists()


def test_removed_when_a_step_fails(tmp_path):
    path = tmp_path / "banner_temp"

    with pytest.raises(InstallError):
        with Workspace(str(path)):
            raise InstallError("Failed to copy new policy banner")

    assert not path.exists()


def test_destroy_is_idempotent(tmp_path):
    workspace = Workspace(str(tmp_path / "banner_temp"))
    workspace.create()

    workspace.destroy()
    workspace.destroy()

    assert not workspace.exists


def test_destroy_without_directory_is_harmless(tmp_path):
    Workspace(str(tmp_path / "never_created")).destroy()


def test_stale_workspace_is_replaced(tmp_path):
    path = tmp_path / "banner_temp"
    path.mkdir()
    (path / "leftover").write_text("from an interrupted run")

    Workspace(str(path)).create()

    assert path.is_dir()
    assert os.listdir(path) == []


def test_create_failure_is_setup_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")

    with pytest.raises(SetupError):
        Workspace(str(blocker / "banner_temp")).create()


def test_termination_signal_removes_workspace(tmp_path):
    path = tmp_path / "banner_temp"
    previous = install_signal_handlers()
    try:
        with pytest.raises(TerminationRequested) as excinfo:
            with Workspace(str(path)):
                os.kill(os.getpid(), signal.SIGTERM)
                time.sleep(5)
    finally:
        restore_signal_handlers(previous)

    assert excinfo.value.signum == signal.SIGTERM
    assert excinfo.value.code == 128 + signal.SIGTERM
    assert not path.exists()
    assert signal.getsignal(signal.SIGTERM) == previous[signal.SIGTERM]


def test_second_signal_does_not_interrupt_teardown(tmp_path, monkeypatch):
    path = tmp_path / "banner_temp"
    workspace = Workspace(str(path))
    workspace.create()
    (path / "Resources").mkdir()
    (path / "Resources" / "notice.txt").write_text("scratch")
    real_rmtree = shutil.rmtree

    def signalled_rmtree(target, *args, **kwargs):
        os.kill(os.getpid(), signal.SIGTERM)
        real_rmtree(target, *args, **kwargs)

    previous = install_signal_handlers()
    try:
        monkeypatch.setattr("policybanner.deployer.workspace.shutil.rmtree", signalled_rmtree)
        with pytest.raises(TerminationRequested):
            workspace.destroy()
    finally:
        restore_signal_handlers(previous)

    assert not path.exists()
    assert not signal.pthread_sigmask(signal.SIG_BLOCK, []) & {signal.SIGTERM}
