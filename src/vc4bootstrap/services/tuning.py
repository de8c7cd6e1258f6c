"""Kernel network parameter tuning required by VC-4."""

from typing import Callable, Dict, Iterable, List, Tuple

from vc4bootstrap.constants import SYSCTL_FILE, SYSCTL_SETTINGS
from vc4bootstrap.errors import CommandFailure, TuningApplyFailure


class SystemTuner:
    """Appends missing sysctl overrides and loads them into the kernel."""

    def __init__(
        self,
        logger,
        console,
        filesystem_service,
        run_cmd: Callable,
        sysctl_file: str = SYSCTL_FILE,
        settings: Iterable[Tuple[str, str]] = SYSCTL_SETTINGS,
    ):
        self.logger = logger
        self.console = console
        self.filesystem_service = filesystem_service
        self.run_cmd = run_cmd
        self.sysctl_file = sysctl_file
        self.settings = list(settings)

    @staticmethod
    def configured_keys(content: str) -> List[str]:
        keys = []
        for line in content.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith(("#", ";")) or "=" not in stripped:
                continue
            keys.append(stripped.split("=", 1)[0].strip())
        return keys

    def missing_lines(self, content: str) -> List[str]:
        present = set(self.configured_keys(content))
        return [f"{key}={value}" for key, value in self.settings if key not in present]

    def write_settings(self) -> List[str]:
        content = self.filesystem_service.read_text(self.sysctl_file)
        lines = self.missing_lines(content)
        if not lines:
            self.logger.info("Sysctl tuning already present in %s.", self.sysctl_file)
            return []

        if content and not content.endswith("\n"):
            lines = [""] + lines
        try:
            self.filesystem_service.append_lines(self.sysctl_file, lines)
        except OSError as exc:
            raise TuningApplyFailure(f"Could not update {self.sysctl_file}: {exc}") from exc
        return [line for line in lines if line]

    def read_back(self) -> Dict[str, str]:
        values = {}
        for key, _ in self.settings:
            result = self.run_cmd(["sysctl", "-n", key], capture_output=True)
            values[key] = (result.stdout or "").strip()
        return values

    def run(self) -> Dict[str, str]:
        self.console.print("[blue]Applying Crestron sysctl tuning...[/blue]")
        added = self.write_settings()
        for line in added:
            self.logger.info("Added %s to %s", line, self.sysctl_file)

        try:
            self.run_cmd(["sysctl", "-p", self.sysctl_file])
            values = self.read_back()
        except CommandFailure as exc:
            raise TuningApplyFailure(f"Failed to load {self.sysctl_file}: {exc}") from exc

        self.logger.info(">>> Sysctl tuning applied. Current values:")
        for key, value in values.items():
            self.logger.info("%s = %s", key, value)
        return values
