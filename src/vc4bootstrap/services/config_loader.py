"""Configuration loader for VC4Bootstrap."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from vc4bootstrap.errors import InstallerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "work_dir",
        "log_file",
        "report_file",
        "verbose",
        "license_file",
        "server_address",
        "excluded_networks",
        "skip_dependencies",
        "license_attempts",
        "license_interval_seconds",
        "license_status_url",
        "readiness_attempts",
        "readiness_interval_seconds",
        "console_path",
        "service_process_patterns",
    }
    LIST_KEYS = {"excluded_networks", "service_process_patterns"}

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InstallerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InstallerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InstallerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InstallerError(f"Unknown configuration keys: {unknown_list}")

        for key in self.LIST_KEYS & set(parsed):
            value = parsed[key]
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise InstallerError(f"Configuration key '{key}' must be a list of strings.")

        if parsed.get("service_process_patterns") == []:
            raise InstallerError("Configuration key 'service_process_patterns' cannot be empty.")

        return parsed
