"""Extracts the VC-4 package and runs the vendor installer from a clean directory."""

import os
from typing import Callable

from vc4bootstrap.constants import SCRIPT_MODE
from vc4bootstrap.errors import CommandFailure, VendorInstallerFailure
from vc4bootstrap.errors_catalog import actionable_error
from vc4bootstrap.models import InstallationContext


class VendorInstallerService:
    """Stages the vendor installer and trusts its exit status."""

    def __init__(self, logger, console, archive_service, filesystem_service, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.archive_service = archive_service
        self.filesystem_service = filesystem_service
        self.run_cmd = run_cmd

    def locate_archive(self, context: InstallationContext) -> str:
        archive = self.archive_service.locate_archive(context.work_dir)
        context.archive_path = archive
        self.console.print(f"[green]Found Crestron archive:[/green] {archive}")
        self.logger.info("Found Crestron archive: %s", archive)
        return archive

    def extract_package(self, context: InstallationContext) -> str:
        self.logger.info("Extracting package into %s...", context.extract_dir)
        self.filesystem_service.recreate_dir(context.extract_dir)
        self.archive_service.extract(context.archive_path, context.extract_dir)

        installer = self.archive_service.find_installer(context.extract_dir)
        context.installer_path = installer
        self.logger.info("Found installer: %s", installer)
        return installer

    def stage_installer(self, context: InstallationContext) -> str:
        source_dir = os.path.dirname(context.installer_path)
        self.filesystem_service.recreate_dir(context.safe_dir)

        self.logger.info("Copying extracted Crestron package to %s", context.safe_dir)
        self.filesystem_service.copy_tree_contents(source_dir, context.safe_dir)

        staged = os.path.join(context.safe_dir, os.path.basename(context.installer_path))
        self.filesystem_service.set_permissions(staged, SCRIPT_MODE)
        return staged

    def run_installer(self, context: InstallationContext):
        staged = self.stage_installer(context)
        self.console.print(f"[blue]Running Crestron installer from {context.safe_dir}[/blue]")
        try:
            self.run_cmd([f"./{os.path.basename(staged)}"], cwd=context.safe_dir)
        except CommandFailure as exc:
            raise VendorInstallerFailure(
                actionable_error("vendor_installer_failed", detail=str(exc), log_file=context.log_file)
            ) from exc

        self.console.print("[green]>>> Crestron VC-4 installation completed successfully.[/green]")
        self.logger.info("Crestron VC-4 installation completed successfully.")
