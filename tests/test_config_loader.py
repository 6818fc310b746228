import json

import pytest

from policybanner.config import BannerConfig
from policybanner.config_loader import DEBUG_ENV_VAR, load_config


def test_defaults_when_config_file_missing(tmp_path):
    config = load_config(str(tmp_path / "missing.json"))

    assert config == BannerConfig()
    assert config.target_bundle_path == "/Library/Security/PolicyBanner.rtfd"
    assert config.staged_bundle_path == "/tmp/new_policy_banner.rtfd"
    assert config.archive_path == "/tmp/new_policy_banner.rtfd.zip"
    assert config.workspace_dir == "/tmp/banner_temp"
    assert config.preboot_capture_path == "/tmp/banner_temp/updatepreboot_output.log"
    assert config.log_file == "/var/log/policy_banner_update.log"
    assert config.bundle_mode == 0o755
    assert (config.owner, config.group) == ("root", "wheel")
    assert config.preboot_command == ("diskutil", "apfs", "updatePreboot", "/")
    assert config.preboot_timeout is None
    assert config.verbose is False


def test_config_file_values_are_merged(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "staging_dir": "/private/tmp/stage",
        "bundle_mode": "750",
        "preboot_command": ["diskutil", "apfs", "updatePreboot", "/Volumes/Data"],
        "preboot_timeout": 30,
        "favourite_colour": "blue",
    }))

    config = load_config(str(path))

    assert config.staging_dir == "/private/tmp/stage"
    assert config.workspace_dir == "/private/tmp/stage/banner_temp"
    assert config.bundle_mode == 0o750
    assert config.preboot_command == ("diskutil", "apfs", "updatePreboot", "/Volumes/Data")
    assert config.preboot_timeout == 30.0
    assert config.install_dir == "/Library/Security"


def test_invalid_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert load_config(str(path)) == BannerConfig()


def test_debug_environment_variable_enables_verbose(tmp_path, monkeypatch):
    monkeypatch.setenv(DEBUG_ENV_VAR, "1")

    assert load_config(str(tmp_path / "missing.json")).verbose is True


def test_overrides_take_precedence(tmp_path, monkeypatch):
    monkeypatch.setenv(DEBUG_ENV_VAR, "1")
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"install_dir": "/from/file"}))

    config = load_config(str(path), verbose=False, install_dir="/from/cli", log_file=None)

    assert config.verbose is False
    assert config.install_dir == "/from/cli"
    assert config.log_file == "/var/log/policy_banner_update.log"


def test_command_string_is_split(tmp_path):
    config = load_config(str(tmp_path / "missing.json"), preboot_command="diskutil apfs updatePreboot /")

    assert config.preboot_command == ("diskutil", "apfs", "updatePreboot", "/")


@pytest.mark.parametrize("overrides", [
    {"bundle_mode": "rwxr-xr-x"},
    {"preboot_timeout": 0},
    {"preboot_command": []},
    {"no_such_option": 1},
])
def test_invalid_values_raise(tmp_path, overrides):
    with pytest.raises(ValueError):
        load_config(str(tmp_path / "missing.json"), **overrides)


@pytest.mark.parametrize("values", [
    {"marker_check_max_version": [14]},
    {"preboot_timeout": {}},
    {"preboot_timeout": [30]},
])
def test_wrongly_typed_file_values_raise_value_error(tmp_path, values):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(values))

    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize("raw, expected", [
    ("false", False),
    ("no", False),
    ("0", False),
    ("true", True),
    ("Yes", True),
    (True, True),
    (0, False),
])
def test_verbose_flag_from_file(tmp_path, raw, expected):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"verbose": raw}))

    assert load_config(str(path)).verbose is expected


def test_debug_environment_variable_false_keeps_quiet(tmp_path, monkeypatch):
    monkeypatch.setenv(DEBUG_ENV_VAR, "false")

    assert load_config(str(tmp_path / "missing.json")).verbose is False
