"""Host identity and privilege checks run before any mutation."""

import os
import re
from typing import Callable, Optional

from packaging.version import InvalidVersion, Version

from vc4bootstrap.constants import RELEASE_FILE, SUPPORTED_MAJOR_VERSIONS, SUPPORTED_OS_FAMILIES
from vc4bootstrap.errors import InsufficientPrivilege, UnsupportedOperatingSystem
from vc4bootstrap.errors_catalog import actionable_error
from vc4bootstrap.models import HostProfile


class PreflightService:
    """Validates the OS release and effective user without touching the host."""

    VERSION_PATTERN = re.compile(r"release\s+(\d+(?:\.\d+)*)")

    def __init__(
        self,
        logger,
        console,
        release_file: str = RELEASE_FILE,
        geteuid: Optional[Callable[[], int]] = None,
    ):
        self.logger = logger
        self.console = console
        self.release_file = release_file
        self.geteuid = geteuid or os.geteuid

    def read_release(self) -> str:
        try:
            with open(self.release_file, "r", encoding="utf-8") as file_obj:
                return file_obj.read().strip()
        except OSError as exc:
            raise UnsupportedOperatingSystem(
                actionable_error("unsupported_os", release=f"cannot read {self.release_file} ({exc})")
            ) from exc

    def parse_release(self, release: str) -> Optional[HostProfile]:
        family = next((name for name in SUPPORTED_OS_FAMILIES if release.startswith(name)), None)
        if family is None:
            return None

        match = self.VERSION_PATTERN.search(release)
        if not match:
            return None

        try:
            parsed = Version(match.group(1))
        except InvalidVersion:
            return None
        return HostProfile(family=family, version=parsed, release=release)

    def is_supported(self, profile: HostProfile) -> bool:
        if profile.major not in SUPPORTED_MAJOR_VERSIONS:
            return False
        if profile.major == 8:
            return profile.version >= Version(SUPPORTED_OS_FAMILIES[profile.family])
        return True

    def check_operating_system(self) -> HostProfile:
        release = self.read_release()
        profile = self.parse_release(release)
        if profile is None or not self.is_supported(profile):
            raise UnsupportedOperatingSystem(actionable_error("unsupported_os", release=release or "<empty>"))

        self.console.print(f"[green]Detected compatible OS:[/green] {release}")
        self.logger.info("Detected compatible OS: %s", release)
        return profile

    def check_privilege(self):
        if self.geteuid() != 0:
            raise InsufficientPrivilege(actionable_error("insufficient_privilege"))

    def run(self) -> HostProfile:
        self.check_privilege()
        return self.check_operating_system()
