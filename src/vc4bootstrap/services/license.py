"""License state detection and the license re-check loop."""

import os
import shutil
import time
from typing import Callable, Optional

import requests

from vc4bootstrap.constants import (
    CERTIFICATE_MARKER,
    HTTP_TIMEOUT_SECONDS,
    LICENSE_ATTEMPTS,
    LICENSE_FILE,
    LICENSE_INTERVAL_SECONDS,
    LICENSE_STATUS_URL,
    VC4_SERVICE,
)
from vc4bootstrap.models import (
    InstallationContext,
    LicenseContent,
    LicensePath,
    LicenseSource,
    LicenseState,
    RetryBudget,
)
from vc4bootstrap.services.retry import retry_until

_STATUS_KEYWORDS = (
    ("valid", LicenseState.VALID),
    ("trial", LicenseState.TRIAL),
    ("expired", LicenseState.EXPIRED),
)


def classify_status_response(body: Optional[str]) -> LicenseState:
    """Maps a license-status response body to a state; ``None`` means unreachable."""
    if not body:
        return LicenseState.UNKNOWN
    # "invalid" contains "valid"; drop it before the substring tests.
    lowered = body.lower().replace("invalid", "")
    for keyword, state in _STATUS_KEYWORDS:
        if keyword in lowered:
            return state
    return LicenseState.UNKNOWN


def derive_license_state(certificate: str, status_body: Optional[str]) -> LicenseState:
    if not certificate.strip():
        return LicenseState.MISSING
    if CERTIFICATE_MARKER not in certificate:
        return LicenseState.INVALID
    return classify_status_response(status_body)


class LicenseResolver:
    """Checks the installed certificate and collects a new one when needed."""

    def __init__(
        self,
        logger,
        console,
        filesystem_service,
        run_cmd: Callable,
        input_provider,
        requests_module=requests,
        license_file: str = LICENSE_FILE,
        status_url: str = LICENSE_STATUS_URL,
        service: str = VC4_SERVICE,
        budget: RetryBudget = RetryBudget(LICENSE_ATTEMPTS, LICENSE_INTERVAL_SECONDS),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service
        self.run_cmd = run_cmd
        self.input_provider = input_provider
        self.requests = requests_module
        self.license_file = license_file
        self.status_url = status_url
        self.service = service
        self.budget = budget
        self.sleep = sleep

    def query_status(self) -> Optional[str]:
        try:
            response = self.requests.get(self.status_url, timeout=HTTP_TIMEOUT_SECONDS)
        except self.requests.RequestException as exc:
            self.logger.debug("License status endpoint unreachable: %s", exc)
            return None
        return response.text

    def derive_state(self) -> LicenseState:
        certificate = self.filesystem_service.read_text(self.license_file)
        status_body = None
        if certificate.strip() and CERTIFICATE_MARKER in certificate:
            status_body = self.query_status()
        return derive_license_state(certificate, status_body)

    def install_license(self, source: LicenseSource) -> bool:
        if isinstance(source, LicensePath) and source.path.strip() and os.path.isfile(source.path):
            os.makedirs(os.path.dirname(self.license_file) or ".", exist_ok=True)
            shutil.copyfile(source.path, self.license_file)
            self.logger.info("Copied license from %s to %s", source.path, self.license_file)
            return True

        if isinstance(source, LicenseContent) and source.content.strip():
            self.filesystem_service.write_text(self.license_file, source.content)
            self.logger.info("Wrote pasted license to %s", self.license_file)
            return True

        if isinstance(source, LicensePath) and source.path.strip():
            self.logger.warning("License file not found: %s", source.path)
        self.logger.warning("No license provided. VC-4 may run in limited or trial mode.")
        return False

    def restart_service(self):
        self.logger.info("Restarting VC-4 service...")
        result = self.run_cmd(["systemctl", "restart", self.service], check=False)
        if result.returncode != 0:
            self.logger.warning("Could not restart %s (exit %s).", self.service, result.returncode)

    def _report_miss(self, attempt: int, state: LicenseState):
        self.logger.info(
            "[%s/%s] License not valid yet (%s), retrying...",
            attempt,
            self.budget.max_attempts,
            state.value,
        )

    def wait_for_valid_license(self) -> LicenseState:
        self.logger.info(
            "Re-checking license status (up to %d seconds)...",
            int(self.budget.total_seconds),
        )
        outcome = retry_until(
            probe=lambda _attempt: self.derive_state(),
            predicate=lambda state: state is LicenseState.VALID,
            budget=self.budget,
            sleep=self.sleep,
            wait_first=True,
            on_miss=self._report_miss,
        )
        if outcome.succeeded:
            self.logger.info("License Status: VALID")
        return outcome.last_value

    def run(self, context: InstallationContext) -> LicenseState:
        self.logger.info("Checking VC-4 license status...")
        state = self.derive_state()
        context.license_state = state
        self.console.print(f"License Status: [bold]{state.value}[/bold]")
        self.logger.info("License Status: %s", state.value)

        if not state.needs_license:
            return state

        source = self.input_provider.request_license_source()
        self.install_license(source)
        self.restart_service()

        state = self.wait_for_valid_license()
        context.license_state = state
        if state is not LicenseState.VALID:
            message = "License still not valid after retries. Please check manually."
            self.console.print(f"[yellow]Warning:[/yellow] {message}")
            self.logger.warning(message)
            context.warnings.append(message)
        return state
