"""Subprocess execution service for VC4Bootstrap."""

import subprocess
from typing import List, Optional

from vc4bootstrap.errors import CommandFailure


class CommandRunner:
    """Runs external commands with consistent error handling.

    Output of streamed commands is forwarded to the logger line by line while the
    process runs, so package manager and installer output lands in the run log in
    real time. Captured commands return their output for parsing instead.
    """

    def __init__(self, logger, default_timeout: Optional[float] = None, subprocess_module=subprocess):
        self.logger = logger
        self.default_timeout = default_timeout
        self.subprocess = subprocess_module

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        if capture_output:
            result = self._run_captured(cmd, cmd_str, cwd, timeout)
        else:
            result = self._run_streamed(cmd, cmd_str, cwd)

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise CommandFailure(message)

        self.logger.debug(message)
        return result

    def _run_captured(self, cmd, cmd_str, cwd, timeout) -> subprocess.CompletedProcess:
        effective_timeout = timeout if timeout is not None else self.default_timeout
        try:
            result = self.subprocess.run(
                cmd,
                text=True,
                capture_output=True,
                cwd=cwd,
                timeout=effective_timeout,
            )
        except FileNotFoundError as exc:
            raise CommandFailure(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandFailure(f"Command timed out after {effective_timeout}s: {cmd_str}") from exc
        except OSError as exc:
            raise CommandFailure(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())
        return result

    def _run_streamed(self, cmd, cmd_str, cwd) -> subprocess.CompletedProcess:
        try:
            process = self.subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
                cwd=cwd,
            )
        except FileNotFoundError as exc:
            raise CommandFailure(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except OSError as exc:
            raise CommandFailure(f"Failed to execute command: {cmd_str}. {exc}") from exc

        lines = []
        if process.stdout:
            for line in process.stdout:
                cleaned = line.rstrip()
                if not cleaned:
                    continue
                lines.append(cleaned)
                self.logger.info(cleaned)

        returncode = process.wait()
        return subprocess.CompletedProcess(cmd, returncode, stdout="\n".join(lines), stderr="")
