"""Shared domain models for VC4Bootstrap."""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from packaging.version import Version


@dataclass
class InstallationContext:
    """Run-scoped state threaded through every stage.

    Each optional field has exactly one writer: the archive locator sets
    ``archive_path``, the vendor installer sets ``installer_path``, the license
    resolver sets ``license_state`` and the readiness poller sets ``endpoint``.
    """

    run_id: str
    work_dir: str
    extract_dir: str
    safe_dir: str
    log_file: str
    archive_path: Optional[str] = None
    installer_path: Optional[str] = None
    license_state: Optional["LicenseState"] = None
    endpoint: Optional["ServiceEndpoint"] = None
    readiness_status: Optional[int] = None
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class HostProfile:
    family: str
    version: Version
    release: str

    @property
    def major(self) -> int:
        return self.version.major


class LicenseState(str, Enum):
    MISSING = "MISSING"
    INVALID = "INVALID"
    TRIAL = "TRIAL"
    EXPIRED = "EXPIRED"
    VALID = "VALID"
    UNKNOWN = "UNKNOWN"

    @property
    def needs_license(self) -> bool:
        return self not in (LicenseState.VALID, LicenseState.TRIAL)


@dataclass(frozen=True)
class ServiceEndpoint:
    host: str
    port: int

    @property
    def url_host(self) -> str:
        try:
            version = ipaddress.ip_address(self.host.split("%", 1)[0]).version
        except ValueError:
            return self.host
        return f"[{self.host}]" if version == 6 else self.host

    def url(self, path: str = "/") -> str:
        return f"http://{self.url_host}:{self.port}{path}"


@dataclass(frozen=True)
class RetryBudget:
    max_attempts: int
    interval_seconds: float

    @property
    def total_seconds(self) -> float:
        return self.max_attempts * self.interval_seconds


@dataclass(frozen=True)
class LicensePath:
    path: str


@dataclass(frozen=True)
class LicenseContent:
    content: str


LicenseSource = Union[LicensePath, LicenseContent, None]
