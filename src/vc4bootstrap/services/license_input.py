"""Sources of a replacement VC-4 license certificate."""

import os
import sys

import click

from vc4bootstrap.constants import PASTE_KEYWORD
from vc4bootstrap.models import LicenseContent, LicensePath, LicenseSource


class ConsoleLicensePrompt:
    """Asks the operator for a certificate path or pasted certificate text."""

    def __init__(self, console, prompt=click.prompt, stdin=None):
        self.console = console
        self.prompt = prompt
        self.stdin = stdin

    def request_license_source(self) -> LicenseSource:
        self.console.print("-------------------------------------------------")
        self.console.print("Your VC-4 installation needs a valid license.")
        self.console.print("Options:")
        self.console.print("  1) Enter full path to license file")
        self.console.print("  2) Paste license text directly (multi-line, finish with Ctrl+D)")

        try:
            answer = self.prompt(
                f"Enter license file path or type '{PASTE_KEYWORD}'",
                default="",
                show_default=False,
            )
        except (click.Abort, EOFError):
            return None

        answer = (answer or "").strip()
        if answer.lower() == PASTE_KEYWORD:
            self.console.print("Paste your license certificate below. When finished, press Ctrl+D:")
            stream = self.stdin or sys.stdin
            return LicenseContent(stream.read())
        if answer:
            return LicensePath(os.path.expanduser(answer))
        return None


class FileLicenseSource:
    """Non-interactive source used when a certificate path is given up front."""

    def __init__(self, path: str):
        self.path = path

    def request_license_source(self) -> LicenseSource:
        return LicensePath(self.path)
