import pytest

from vc4bootstrap.errors import InsufficientPrivilege, UnsupportedOperatingSystem
from vc4bootstrap.services.preflight import PreflightService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


def _service(tmp_path, release: str, euid: int = 0) -> PreflightService:
    release_file = tmp_path / "redhat-release"
    release_file.write_text(release + "\n", encoding="utf-8")
    return PreflightService(
        logger=DummyLogger(),
        console=DummyConsole(),
        release_file=str(release_file),
        geteuid=lambda: euid,
    )


@pytest.mark.parametrize(
    "release",
    [
        "Red Hat Enterprise Linux release 8.2 (Ootpa)",
        "Red Hat Enterprise Linux release 8.10 (Ootpa)",
        "Red Hat Enterprise Linux release 9.0 (Plow)",
        "AlmaLinux release 8.3 (Purple Manul)",
        "AlmaLinux release 9.4 (Seafoam Ocelot)",
        "Rocky Linux release 8.4 (Green Obsidian)",
        "Rocky Linux release 9.3 (Blue Onyx)",
    ],
)
def test_supported_releases_are_accepted(tmp_path, release):
    profile = _service(tmp_path, release).run()

    assert profile.release == release
    assert profile.major in (8, 9)


@pytest.mark.parametrize(
    "release",
    [
        "Red Hat Enterprise Linux release 8.1 (Ootpa)",
        "AlmaLinux release 8.2 (Purple Manul)",
        "Rocky Linux release 8.3 (Green Obsidian)",
        "Red Hat Enterprise Linux Server release 7.9 (Maipo)",
        "Rocky Linux release 10.0 (Red Quartz)",
        "CentOS Linux release 8.5.2111",
        "Fedora release 39 (Thirty Nine)",
        "",
    ],
)
def test_unsupported_releases_are_rejected(tmp_path, release):
    with pytest.raises(UnsupportedOperatingSystem, match="Unsupported OS"):
        _service(tmp_path, release).run()


def test_missing_release_file_is_rejected(tmp_path):
    service = PreflightService(
        logger=DummyLogger(),
        console=DummyConsole(),
        release_file=str(tmp_path / "absent"),
        geteuid=lambda: 0,
    )

    with pytest.raises(UnsupportedOperatingSystem):
        service.check_operating_system()


def test_non_root_user_is_rejected(tmp_path):
    service = _service(tmp_path, "Rocky Linux release 9.3 (Blue Onyx)", euid=1000)

    with pytest.raises(InsufficientPrivilege, match="must run as root"):
        service.run()
