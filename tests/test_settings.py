# tests/test_settings.py
import pytest

from errors import SettingsError
from settings import SETTINGS_ENV, InstallerSettings, load_settings


def test_missing_file_gives_defaults(tmp_path):
    s = load_settings(str(tmp_path / "absent.yaml"))
    assert s == InstallerSettings()
    assert s.target_root == "/mnt"
    assert s.mirror_url == "http://deb.debian.org/debian"


def test_yaml_overrides_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "mirror_url: http://mirror.local/debian\n"
        "boot_size: 1G\n"
        "kernel_packages: [linux-image-amd64]\n"
    )
    s = load_settings(str(path))
    assert s.mirror_url == "http://mirror.local/debian"
    assert s.boot_size == "1G"
    assert s.kernel_packages == ["linux-image-amd64"]
    assert s.zfs_pool == "hackeros"


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("colour: green\nzfs_pool: tank\n")
    s = load_settings(str(path))
    assert s.zfs_pool == "tank"
    assert not hasattr(s, "colour")


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("")
    assert load_settings(str(path)) == InstallerSettings()


def test_environment_variable_points_at_file(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("default_hostname: lab\n")
    monkeypatch.setenv(SETTINGS_ENV, str(path))
    assert load_settings().default_hostname == "lab"


@pytest.mark.parametrize("content", [
    "mirror_url: [unclosed\n",
    "- just\n- a list\n",
])
def test_malformed_file_raises(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content)
    with pytest.raises(SettingsError):
        load_settings(str(path))


def test_derived_asset_paths():
    s = InstallerSettings(asset_dir="/opt/assets")
    assert str(s.overlay_dir) == "/opt/assets/official"
    assert str(s.images_dir) == "/opt/assets/images"
