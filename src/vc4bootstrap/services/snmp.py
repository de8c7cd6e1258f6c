"""SNMP agentx configuration for VC-4 monitoring."""

import os
from typing import Callable

from vc4bootstrap.constants import SNMP_CONF, SNMP_MASTER_DIRECTIVE, SNMP_SERVICE, SNMP_SOCKET_DIRECTIVE
from vc4bootstrap.errors import CommandFailure, MonitoringConfigFailure


class MonitoringConfigurator:
    """Enables the agentx socket in snmpd.conf and restarts snmpd."""

    def __init__(
        self,
        logger,
        console,
        filesystem_service,
        run_cmd: Callable,
        snmp_conf: str = SNMP_CONF,
        service: str = SNMP_SERVICE,
    ):
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service
        self.run_cmd = run_cmd
        self.snmp_conf = snmp_conf
        self.service = service

    def configure(self) -> str:
        """Returns ``unchanged``, ``appended`` or ``created``."""
        lines = [SNMP_MASTER_DIRECTIVE, SNMP_SOCKET_DIRECTIVE]
        try:
            if os.path.exists(self.snmp_conf):
                content = self.filesystem_service.read_text(self.snmp_conf)
                if SNMP_SOCKET_DIRECTIVE in content:
                    self.logger.info("SNMP already configured for VC-4.")
                    return "unchanged"

                self.logger.info("Configuring SNMP for VC-4...")
                self.filesystem_service.append_lines(self.snmp_conf, [""] + lines)
                return "appended"

            self.logger.info("SNMP config file not found, creating new one...")
            self.filesystem_service.write_text(self.snmp_conf, "\n".join(lines) + "\n")
            return "created"
        except OSError as exc:
            raise MonitoringConfigFailure(f"Could not update {self.snmp_conf}: {exc}") from exc

    def run(self) -> str:
        outcome = self.configure()
        try:
            self.run_cmd(["systemctl", "enable", self.service])
            self.run_cmd(["systemctl", "restart", self.service])
        except CommandFailure as exc:
            raise MonitoringConfigFailure(f"Could not restart {self.service}: {exc}") from exc
        self.console.print(f"[green]SNMP monitoring configured ({outcome}).[/green]")
        return outcome
