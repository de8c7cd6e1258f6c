import logging
import os
import subprocess
import time
import uuid
from typing import Callable, List, Optional, Sequence, Tuple

import requests
from rich.console import Console

from .constants import (
    CONSOLE_PATH,
    EXCLUDED_NETWORKS,
    EXTRACT_DIR_NAME,
    LICENSE_ATTEMPTS,
    LICENSE_INTERVAL_SECONDS,
    LICENSE_STATUS_URL,
    LOG_FILE,
    READINESS_ATTEMPTS,
    READINESS_INTERVAL_SECONDS,
    REPORT_FILE,
    SAFE_DIR,
    SERVICE_PROCESS_PATTERNS,
)
from .errors import InstallerError
from .models import InstallationContext, RetryBudget
from .services.archive import ArchiveService
from .services.command_runner import CommandRunner
from .services.filesystem import FileSystemService
from .services.license import LicenseResolver
from .services.license_input import ConsoleLicensePrompt, FileLicenseSource
from .services.log_sink import LogSink
from .services.preflight import PreflightService
from .services.provisioner import DependencyProvisioner
from .services.readiness import ReadinessPoller, ServiceAddressPolicy
from .services.report import ReportService
from .services.snmp import MonitoringConfigurator
from .services.tuning import SystemTuner
from .services.vendor_installer import VendorInstallerService

console = Console()
logger = logging.getLogger("vc4bootstrap")


class VC4Installer:
    """Runs the VC-4 installation stages in order, aborting on the first failure."""

    def __init__(
        self,
        work_dir: Optional[str] = None,
        log_file: str = LOG_FILE,
        report_file: str = REPORT_FILE,
        verbose: bool = False,
        license_file: Optional[str] = None,
        server_address: Optional[str] = None,
        excluded_networks: Sequence[str] = EXCLUDED_NETWORKS,
        skip_dependencies: bool = False,
        license_attempts: int = LICENSE_ATTEMPTS,
        license_interval_seconds: float = LICENSE_INTERVAL_SECONDS,
        license_status_url: str = LICENSE_STATUS_URL,
        readiness_attempts: int = READINESS_ATTEMPTS,
        readiness_interval_seconds: float = READINESS_INTERVAL_SECONDS,
        console_path: str = CONSOLE_PATH,
        service_process_patterns: Sequence[str] = SERVICE_PROCESS_PATTERNS,
        license_input=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.work_dir = os.path.abspath(work_dir or os.getcwd())
        self.log_file = log_file
        self.verbose = verbose
        self.skip_dependencies = skip_dependencies
        self.current_stage_name: Optional[str] = None
        self.host_profile = None

        if license_attempts < 1 or readiness_attempts < 1:
            raise InstallerError("Retry attempts must be at least 1.")
        if license_interval_seconds < 0 or readiness_interval_seconds < 0:
            raise InstallerError("Retry intervals cannot be negative.")

        self.context = InstallationContext(
            run_id=uuid.uuid4().hex[:10],
            work_dir=self.work_dir,
            extract_dir=os.path.join(self.work_dir, EXTRACT_DIR_NAME),
            safe_dir=SAFE_DIR,
            log_file=log_file,
        )

        self.report_service = ReportService(report_file=report_file, logger=logger)
        self.filesystem_service = FileSystemService(logger=logger, console=console)
        self.archive_service = ArchiveService(logger=logger)
        self.command_runner = CommandRunner(logger=logger, subprocess_module=subprocess)

        self.preflight_service = PreflightService(logger=logger, console=console)
        self.provisioner = DependencyProvisioner(
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
            run_cmd=self._run_cmd,
            log_file=log_file,
        )
        self.vendor_installer = VendorInstallerService(
            logger=logger,
            console=console,
            archive_service=self.archive_service,
            filesystem_service=self.filesystem_service,
            run_cmd=self._run_cmd,
        )
        self.system_tuner = SystemTuner(
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
            run_cmd=self._run_cmd,
        )
        self.monitoring_configurator = MonitoringConfigurator(
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
            run_cmd=self._run_cmd,
        )

        if license_input is None:
            license_input = FileLicenseSource(license_file) if license_file else ConsoleLicensePrompt(console)
        self.license_resolver = LicenseResolver(
            logger=logger,
            console=console,
            filesystem_service=self.filesystem_service,
            run_cmd=self._run_cmd,
            input_provider=license_input,
            requests_module=requests,
            status_url=license_status_url,
            budget=RetryBudget(license_attempts, license_interval_seconds),
            sleep=sleep,
        )
        self.readiness_poller = ReadinessPoller(
            logger=logger,
            console=console,
            run_cmd=self._run_cmd,
            address_policy=ServiceAddressPolicy(
                excluded_networks=excluded_networks,
                explicit_address=server_address,
            ),
            requests_module=requests,
            budget=RetryBudget(readiness_attempts, readiness_interval_seconds),
            process_patterns=service_process_patterns,
            console_path=console_path,
            sleep=sleep,
        )

    def _run_cmd(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        return self.command_runner.run(cmd, check=check, capture_output=capture_output, cwd=cwd)

    def _run_stage(self, name: str, callback, *args, **kwargs):
        self.current_stage_name = name
        self.report_service.stage_started(name)
        logger.info("--- %s ---", name)

        try:
            result = callback(*args, **kwargs)
        except KeyboardInterrupt:
            self.report_service.stage_finished(name, "aborted", error="Operation cancelled by user.")
            raise
        except Exception as exc:
            self.report_service.stage_finished(name, "failed", error=str(exc))
            raise

        self.report_service.stage_finished(name, "success")
        self.current_stage_name = None
        return result

    def run_preflight(self):
        self.host_profile = self.preflight_service.run()

    def locate_archive(self):
        self.vendor_installer.locate_archive(self.context)

    def provision_dependencies(self):
        self.provisioner.run()

    def extract_package(self):
        self.vendor_installer.extract_package(self.context)

    def run_vendor_installer(self):
        self.vendor_installer.run_installer(self.context)

    def apply_system_tuning(self):
        self.system_tuner.run()

    def configure_monitoring(self):
        self.monitoring_configurator.run()

    def resolve_license(self):
        state = self.license_resolver.run(self.context)
        self.report_service.set_result("license_state", state.value)

    def wait_for_readiness(self):
        endpoint = self.readiness_poller.run(self.context)
        self.report_service.set_result("endpoint", {"host": endpoint.host, "port": endpoint.port})

    def stages(self) -> List[Tuple[str, Callable]]:
        stages = [
            ("preflight", self.run_preflight),
            ("locate archive", self.locate_archive),
        ]
        if self.skip_dependencies:
            logger.info("Skipping dependency provisioning as requested.")
        else:
            stages.append(("provision dependencies", self.provision_dependencies))
        stages.extend(
            [
                ("extract package", self.extract_package),
                ("vendor installer", self.run_vendor_installer),
                ("system tuning", self.apply_system_tuning),
                ("monitoring configuration", self.configure_monitoring),
                ("license", self.resolve_license),
                ("readiness", self.wait_for_readiness),
            ]
        )
        return stages

    def print_summary(self):
        endpoint = self.context.endpoint
        url = f"http://{endpoint.url_host}{self.readiness_poller.console_path}"
        logger.info("=================================================")
        logger.info("VC-4 Installation Completed Successfully")
        logger.info("Logs saved to %s", self.log_file)
        logger.info("Access VC-4 via:")
        logger.info("  → %s", url)
        logger.info(
            "  (Backend confirmed on port %s with HTTP %s)",
            endpoint.port,
            self.context.readiness_status,
        )
        for warning in self.context.warnings:
            logger.warning(warning)
        logger.info("=================================================")

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None
        level = logging.DEBUG if self.verbose else logging.INFO
        logger.setLevel(level)

        with LogSink(logger, self.log_file, level=level) as log_sink:
            try:
                logger.info("=== Crestron VC-4 Installation Wrapper ===")
                if log_sink.active:
                    logger.info("Logging to %s", self.log_file)
                self.report_service.start_run(
                    run_id=self.context.run_id,
                    metadata={"work_dir": self.work_dir, "log_file": self.log_file},
                )

                for name, callback in self.stages():
                    self._run_stage(name, callback)

                self.print_summary()
                report_status = "success"
                exit_code = 0
                return exit_code

            except KeyboardInterrupt:
                console.print("[bold red]Operation cancelled by user.[/bold red]")
                logger.info("Operation cancelled by user")
                report_status = "aborted"
                report_error = "Operation cancelled by user."
                return exit_code
            except InstallerError as exc:
                stage = self.current_stage_name or exc.stage
                console.print(f"[bold red]Error ({stage}):[/bold red] {exc}")
                logger.error("Stage '%s' failed: %s", stage, exc)
                logger.error("Full log: %s", self.log_file)
                report_error = str(exc)
                return exit_code
            except Exception as exc:
                console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
                logger.exception("Unexpected error")
                logger.error("Full log: %s", self.log_file)
                report_error = str(exc)
                return exit_code
            finally:
                self.report_service.set_result("warnings", list(self.context.warnings))
                self.report_service.finalize(report_status, error=report_error)
