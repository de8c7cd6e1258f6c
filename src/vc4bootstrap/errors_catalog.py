"""Actionable error catalog for VC4Bootstrap."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "unsupported_os": {
        "what": "Unsupported OS: {release}.",
        "next": "Use RHEL 8.2+/9, AlmaLinux 8.3+/9 or Rocky Linux 8.4+/9.",
    },
    "insufficient_privilege": {
        "what": "This installer must run as root.",
        "next": "Re-run it with `sudo vc4bootstrap`.",
    },
    "archive_not_found": {
        "what": "No VC-4 package archive found in {path}.",
        "next": "Place the Crestron .zip/.tar.gz/.tgz/.tar next to the installer and retry.",
    },
    "installer_not_found": {
        "what": "Could not find '{name}' inside the extracted package.",
        "next": "Check that the archive is an official VC-4 release package.",
    },
    "dependency_install_failed": {
        "what": "Dependency provisioning failed: {detail}",
        "next": "Check repository access and the package manager output in {log_file}.",
    },
    "vendor_installer_failed": {
        "what": "The VC-4 installer exited with an error: {detail}",
        "next": "Review the installer output in {log_file} and retry.",
    },
    "readiness_timeout": {
        "what": "VC-4 WebApp did not become ready after {seconds} seconds.",
        "next": "Check `systemctl status virtualcontrol.service` and {log_file}.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
