# tests/test_main.py
import pytest

import main
from conftest import make_config
from errors import CommandError, PreflightError


def test_non_root_is_refused(monkeypatch, capsys):
    monkeypatch.setattr(main.os, "geteuid", lambda: 1000)
    with pytest.raises(SystemExit) as exc:
        main.main()
    assert exc.value.code == 1
    assert "root" in capsys.readouterr().err


def test_quit_in_wizard_exits_cleanly(monkeypatch, tmp_path):
    import app
    monkeypatch.setattr(main.os, "geteuid", lambda: 0)
    monkeypatch.setenv("HACKEROS_INSTALLER_SETTINGS", str(tmp_path / "none.yaml"))
    monkeypatch.setattr(app.HackerOSInstaller, "run", lambda self: None)
    called = []
    monkeypatch.setattr(main, "install", lambda c, s: called.append(c) or 0)
    with pytest.raises(SystemExit) as exc:
        main.main()
    assert exc.value.code == 0
    assert called == []


def test_preflight_failure_reports_and_returns_one(monkeypatch, settings, capsys):
    import provision.preflight as preflight
    import provision.pipeline as pipeline

    def fail(config, settings):
        raise PreflightError("Preflight failed:\n  debootstrap missing")

    ran = []
    monkeypatch.setattr(preflight, "run_preflight", fail)
    monkeypatch.setattr(pipeline.InstallationPipeline, "run", lambda self: ran.append(self))
    assert main.install(make_config(), settings) == 1
    assert "ERROR: Preflight failed" in capsys.readouterr().err
    assert ran == []


def test_pipeline_failure_returns_one(monkeypatch, settings):
    import provision.preflight as preflight
    import provision.pipeline as pipeline

    def boom(self):
        raise CommandError(["sfdisk", "/dev/sda"], 1, "no such device")

    monkeypatch.setattr(preflight, "run_preflight", lambda c, s: [])
    monkeypatch.setattr(pipeline.InstallationPipeline, "run", boom)
    assert main.install(make_config(), settings) == 1
