"""Discovery of the VC-4 WebApp endpoint and HTTP readiness polling."""

import ipaddress
import re
import time
from typing import Callable, Iterable, List, Optional, Tuple

import requests

from vc4bootstrap.constants import (
    CONSOLE_PATH,
    EXCLUDED_NETWORKS,
    FALLBACK_HOST,
    HTTP_TIMEOUT_SECONDS,
    READINESS_ATTEMPTS,
    READINESS_INTERVAL_SECONDS,
    SERVICE_PROCESS_PATTERNS,
)
from vc4bootstrap.errors import InstallerError, ReadinessTimeout
from vc4bootstrap.errors_catalog import actionable_error
from vc4bootstrap.models import InstallationContext, RetryBudget, ServiceEndpoint
from vc4bootstrap.services.retry import retry_until


class ServiceAddressPolicy:
    """Chooses the address operators should use to reach the WebApp."""

    def __init__(
        self,
        excluded_networks: Iterable[str] = EXCLUDED_NETWORKS,
        explicit_address: Optional[str] = None,
        fallback: str = FALLBACK_HOST,
    ):
        try:
            self.excluded_networks = [
                ipaddress.ip_network(network, strict=False) for network in excluded_networks
            ]
        except ValueError as exc:
            raise InstallerError(f"Invalid excluded network: {exc}") from exc
        self.explicit_address = explicit_address
        self.fallback = fallback

    def is_excluded(self, address: str) -> bool:
        try:
            parsed = ipaddress.ip_address(address.split("%", 1)[0])
        except ValueError:
            return True
        return any(
            parsed.version == network.version and parsed in network
            for network in self.excluded_networks
        )

    def select(self, addresses: Iterable[str]) -> str:
        if self.explicit_address:
            return self.explicit_address
        for address in addresses:
            if not self.is_excluded(address):
                return address
        return self.fallback


def parse_listening_port(socket_table: str, patterns: Iterable[str]) -> Optional[int]:
    """Returns the local port of the first ``ss -tulpn`` row owned by a matching process."""
    patterns = [pattern for pattern in patterns if pattern]
    if not patterns:
        return None
    matcher = re.compile("|".join(re.escape(pattern) for pattern in patterns))
    for line in socket_table.splitlines():
        columns = line.split()
        if len(columns) < 5 or columns[0] == "Netid":
            continue

        process = " ".join(columns[6:]) if len(columns) > 6 else line
        if not matcher.search(process):
            continue

        port = re.search(r"(\d+)$", columns[4])
        if port:
            return int(port.group(1))
    return None


class ReadinessPoller:
    """Blocks until the WebApp answers HTTP 200 on its discovered port."""

    def __init__(
        self,
        logger,
        console,
        run_cmd: Callable,
        address_policy: Optional[ServiceAddressPolicy] = None,
        requests_module=requests,
        budget: RetryBudget = RetryBudget(READINESS_ATTEMPTS, READINESS_INTERVAL_SECONDS),
        process_patterns: Iterable[str] = SERVICE_PROCESS_PATTERNS,
        console_path: str = CONSOLE_PATH,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd
        self.address_policy = address_policy or ServiceAddressPolicy()
        self.requests = requests_module
        self.budget = budget
        self.process_patterns = list(process_patterns)
        self.console_path = console_path
        self.sleep = sleep

    def discover_port(self) -> Optional[int]:
        result = self.run_cmd(["ss", "-tulpn"], check=False, capture_output=True)
        return parse_listening_port(result.stdout or "", self.process_patterns)

    def host_addresses(self) -> List[str]:
        result = self.run_cmd(["hostname", "-I"], check=False, capture_output=True)
        return (result.stdout or "").split()

    def discover_host(self) -> str:
        if self.address_policy.explicit_address:
            return self.address_policy.explicit_address
        return self.address_policy.select(self.host_addresses())

    def check_http(self, endpoint: ServiceEndpoint) -> Optional[int]:
        try:
            response = self.requests.get(
                endpoint.url(self.console_path),
                timeout=HTTP_TIMEOUT_SECONDS,
                allow_redirects=False,
            )
        except self.requests.RequestException as exc:
            self.logger.debug("Readiness probe failed: %s", exc)
            return None
        return response.status_code

    def probe(self, _attempt: int) -> Tuple[Optional[ServiceEndpoint], Optional[int]]:
        port = self.discover_port()
        if port is None:
            return None, None
        endpoint = ServiceEndpoint(host=self.discover_host(), port=port)
        return endpoint, self.check_http(endpoint)

    def _report_miss(self, attempt: int, observation):
        endpoint, status = observation
        port = endpoint.port if endpoint else ""
        self.logger.info(
            "[%s/%s] WebApp not ready yet (port=%s, status=%s), retrying in %ss...",
            attempt,
            self.budget.max_attempts,
            port,
            status or "N/A",
            int(self.budget.interval_seconds),
        )

    def run(self, context: InstallationContext) -> ServiceEndpoint:
        self.console.print("[yellow]Waiting for VC-4 WebApp to start...[/yellow]")
        outcome = retry_until(
            probe=self.probe,
            predicate=lambda observation: observation[0] is not None and observation[1] == 200,
            budget=self.budget,
            sleep=self.sleep,
            on_miss=self._report_miss,
        )

        if not outcome.succeeded:
            raise ReadinessTimeout(
                actionable_error(
                    "readiness_timeout",
                    seconds=str(int(self.budget.total_seconds)),
                    log_file=context.log_file,
                )
            )

        endpoint, status = outcome.last_value
        context.endpoint = endpoint
        context.readiness_status = status
        self.console.print(f"[green]VC-4 WebApp is up and responding on port {endpoint.port}[/green]")
        self.logger.info("VC-4 WebApp is up and responding on %s", endpoint.url(self.console_path))
        return endpoint
