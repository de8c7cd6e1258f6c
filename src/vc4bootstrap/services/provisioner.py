"""OS package and Python runtime provisioning for the VC-4 host."""

import os
import shutil
from typing import Callable, Iterable, Optional

from vc4bootstrap.constants import (
    CONFLICTING_PACKAGES,
    OS_PACKAGES,
    PINNED_LIBRARIES,
    RUNTIME_EXECUTABLE,
    RUNTIME_MODULE_ENABLE,
    RUNTIME_MODULE_RESET,
    RUNTIME_PACKAGES,
    VENV_BOOTSTRAP_PACKAGES,
    VENV_DIR,
)
from vc4bootstrap.errors import DependencyInstallFailure, InstallerError
from vc4bootstrap.errors_catalog import actionable_error


class DependencyProvisioner:
    """Installs OS packages, the pinned runtime and the isolated library environment."""

    def __init__(
        self,
        logger,
        console,
        filesystem_service,
        run_cmd: Callable,
        log_file: str,
        venv_dir: str = VENV_DIR,
        os_packages: Iterable[str] = OS_PACKAGES,
        conflicting_packages: Iterable[str] = CONFLICTING_PACKAGES,
        libraries: Iterable[str] = PINNED_LIBRARIES,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service
        self.run_cmd = run_cmd
        self.log_file = log_file
        self.venv_dir = venv_dir
        self.os_packages = list(os_packages)
        self.conflicting_packages = list(conflicting_packages)
        self.libraries = list(libraries)
        self.which = which

    @property
    def venv_pip(self) -> str:
        return os.path.join(self.venv_dir, "bin", "pip")

    def install_os_packages(self):
        self.console.print("[blue]Installing system prerequisites...[/blue]")
        self.run_cmd(["yum", "install", "-y", *self.os_packages])

    def remove_conflicts(self):
        for package in self.conflicting_packages:
            result = self.run_cmd(["rpm", "-q", package], check=False, capture_output=True)
            if result.returncode != 0:
                self.logger.debug("Conflicting package %s is not installed.", package)
                continue
            self.logger.info("Removing conflicting package %s...", package)
            self.run_cmd(["yum", "remove", "-y", package])

    def ensure_runtime(self):
        if self.which(RUNTIME_EXECUTABLE):
            self.logger.info("%s is already installed.", RUNTIME_EXECUTABLE)
            return

        self.console.print(f"[blue]Installing {RUNTIME_EXECUTABLE}...[/blue]")
        # a missing python36 stream is fine, reset only clears a stale enablement
        self.run_cmd(["dnf", "module", "reset", "-y", RUNTIME_MODULE_RESET], check=False)
        self.run_cmd(["dnf", "module", "enable", "-y", RUNTIME_MODULE_ENABLE])
        self.run_cmd(["yum", "install", "-y", *RUNTIME_PACKAGES])

    def recreate_environment(self):
        self.logger.info("Creating venv with %s at %s", RUNTIME_EXECUTABLE, self.venv_dir)
        if os.path.exists(self.venv_dir):
            self.logger.info("Removing old venv")
        self.filesystem_service.recreate_dir(self.venv_dir)
        self.run_cmd([RUNTIME_EXECUTABLE, "-m", "venv", self.venv_dir])
        self.run_cmd([self.venv_pip, "install", "--upgrade", *VENV_BOOTSTRAP_PACKAGES])

    def install_libraries(self):
        self.console.print("[blue]Installing Python dependencies...[/blue]")
        self.run_cmd([self.venv_pip, "install", *self.libraries])

    def run(self):
        try:
            self.install_os_packages()
            self.remove_conflicts()
            self.ensure_runtime()
            self.recreate_environment()
            self.install_libraries()
        except InstallerError as exc:
            raise DependencyInstallFailure(
                actionable_error("dependency_install_failed", detail=str(exc), log_file=self.log_file)
            ) from exc
        self.console.print("[green]Dependencies installed.[/green]")
