import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    CONSOLE_PATH,
    DEFAULT_CONFIG_FILE,
    EXCLUDED_NETWORKS,
    LICENSE_ATTEMPTS,
    LICENSE_INTERVAL_SECONDS,
    LICENSE_STATUS_URL,
    LOG_FILE,
    READINESS_ATTEMPTS,
    READINESS_INTERVAL_SECONDS,
    REPORT_FILE,
    SERVICE_PROCESS_PATTERNS,
)
from .core import VC4Installer
from .errors import InstallerError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--work-dir",
    required=False,
    type=click.Path(file_okay=False),
    help="Directory holding the Crestron package archive (default: current directory).",
)
@click.option("--log-file", type=click.Path(), help=f"Path to log file (default: {LOG_FILE}).")
@click.option("--report-file", type=click.Path(), help=f"Path to the JSON run report (default: {REPORT_FILE}).")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option(
    "--license-file",
    required=False,
    type=click.Path(),
    help="License certificate to install when the current license is not valid (skips the prompt).",
)
@click.option(
    "--server-address",
    required=False,
    help="Address used for the readiness check and access URL instead of auto-detection.",
)
@click.option(
    "--exclude-network",
    "exclude_networks",
    multiple=True,
    help="CIDR ignored when auto-detecting the server address. Repeatable.",
)
@click.option(
    "--skip-dependencies",
    is_flag=True,
    default=None,
    help="Skip OS package and Python runtime provisioning.",
)
def main(
    config,
    work_dir,
    log_file,
    report_file,
    verbose,
    license_file,
    server_address,
    exclude_networks,
    skip_dependencies,
):
    """Install Crestron VC-4 on a supported RHEL-family host."""
    logger = logging.getLogger("vc4bootstrap")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except InstallerError as exc:
        raise click.ClickException(str(exc)) from exc

    work_dir = _resolve_option(work_dir, config_values, "work_dir")
    log_file = _resolve_option(log_file, config_values, "log_file", default=LOG_FILE)
    report_file = _resolve_option(report_file, config_values, "report_file", default=REPORT_FILE)
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    license_file = _resolve_option(license_file, config_values, "license_file")
    server_address = _resolve_option(server_address, config_values, "server_address")
    excluded_networks = list(
        _resolve_option(exclude_networks or None, config_values, "excluded_networks", default=EXCLUDED_NETWORKS)
    )
    skip_dependencies = bool(
        _resolve_option(skip_dependencies, config_values, "skip_dependencies", default=False)
    )

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    try:
        installer = VC4Installer(
            work_dir=work_dir,
            log_file=log_file,
            report_file=report_file,
            verbose=verbose,
            license_file=license_file,
            server_address=server_address,
            excluded_networks=excluded_networks,
            skip_dependencies=skip_dependencies,
            license_attempts=int(config_values.get("license_attempts", LICENSE_ATTEMPTS)),
            license_interval_seconds=float(
                config_values.get("license_interval_seconds", LICENSE_INTERVAL_SECONDS)
            ),
            license_status_url=config_values.get("license_status_url", LICENSE_STATUS_URL),
            readiness_attempts=int(config_values.get("readiness_attempts", READINESS_ATTEMPTS)),
            readiness_interval_seconds=float(
                config_values.get("readiness_interval_seconds", READINESS_INTERVAL_SECONDS)
            ),
            console_path=config_values.get("console_path", CONSOLE_PATH),
            service_process_patterns=config_values.get("service_process_patterns", SERVICE_PROCESS_PATTERNS),
        )
    except (InstallerError, TypeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(installer.run())


if __name__ == "__main__":
    main()
