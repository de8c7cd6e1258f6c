import subprocess

import pytest

from vc4bootstrap.errors import CommandFailure, DependencyInstallFailure
from vc4bootstrap.services.filesystem import FileSystemService
from vc4bootstrap.services.provisioner import DependencyProvisioner


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class FakeRunCmd:
    def __init__(self, installed=(), fail_when=None):
        self.installed = set(installed)
        self.fail_when = fail_when
        self.calls = []

    def __call__(self, cmd, check=True, capture_output=False, cwd=None):
        self.calls.append(list(cmd))
        if cmd[:2] == ["rpm", "-q"]:
            returncode = 0 if cmd[2] in self.installed else 1
            return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr="")
        if self.fail_when and self.fail_when(cmd):
            if check:
                raise CommandFailure(f"Command failed (1): {' '.join(cmd)}")
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


def _provisioner(tmp_path, run_cmd, runtime_present=True):
    return DependencyProvisioner(
        logger=DummyLogger(),
        console=DummyConsole(),
        filesystem_service=FileSystemService(logger=DummyLogger(), console=DummyConsole()),
        run_cmd=run_cmd,
        log_file=str(tmp_path / "install.log"),
        venv_dir=str(tmp_path / "venv"),
        which=lambda _name: "/usr/bin/python3.9" if runtime_present else None,
    )


def test_provisioner_installs_packages_and_pinned_libraries(tmp_path):
    run_cmd = FakeRunCmd()
    provisioner = _provisioner(tmp_path, run_cmd)

    provisioner.run()

    assert run_cmd.calls[0][:3] == ["yum", "install", "-y"]
    assert "net-snmp" in run_cmd.calls[0]
    venv_pip = str(tmp_path / "venv" / "bin" / "pip")
    assert ["python3.9", "-m", "venv", str(tmp_path / "venv")] in run_cmd.calls
    assert [venv_pip, "install", "--upgrade", "pip", "setuptools", "wheel"] in run_cmd.calls
    library_call = run_cmd.calls[-1]
    assert library_call[:2] == [venv_pip, "install"]
    assert "Flask==2.3.3" in library_call
    assert not any(call[:2] == ["yum", "remove"] for call in run_cmd.calls)


def test_provisioner_removes_conflicting_package_when_present(tmp_path):
    run_cmd = FakeRunCmd(installed={"perl-libs.i686"})

    _provisioner(tmp_path, run_cmd).run()

    assert ["yum", "remove", "-y", "perl-libs.i686"] in run_cmd.calls


def test_provisioner_installs_runtime_when_missing(tmp_path):
    run_cmd = FakeRunCmd(fail_when=lambda cmd: cmd[:3] == ["dnf", "module", "reset"])

    _provisioner(tmp_path, run_cmd, runtime_present=False).run()

    assert ["dnf", "module", "enable", "-y", "python39"] in run_cmd.calls
    assert ["yum", "install", "-y", "python39", "python39-pip", "python39-devel"] in run_cmd.calls


def test_provisioner_recreates_existing_environment(tmp_path):
    venv_dir = tmp_path / "venv"
    (venv_dir / "lib").mkdir(parents=True)
    (venv_dir / "lib" / "stale.py").write_text("drift", encoding="utf-8")

    first = FakeRunCmd()
    _provisioner(tmp_path, first).run()

    assert venv_dir.is_dir()
    assert list(venv_dir.iterdir()) == []

    second = FakeRunCmd()
    _provisioner(tmp_path, second).run()

    assert first.calls == second.calls


def test_provisioner_failure_is_fatal(tmp_path):
    run_cmd = FakeRunCmd(fail_when=lambda cmd: cmd[:2] == ["yum", "install"])

    with pytest.raises(DependencyInstallFailure, match="Dependency provisioning failed"):
        _provisioner(tmp_path, run_cmd).run()

    assert len(run_cmd.calls) == 1
