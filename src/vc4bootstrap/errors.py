"""Domain errors for VC4Bootstrap."""


class InstallerError(RuntimeError):
    """Raised when the installation cannot continue safely."""

    stage = "run"


class CommandFailure(InstallerError):
    """An external command could not be started or exited non-zero."""

    stage = "command"


class UnsupportedOperatingSystem(InstallerError):
    stage = "preflight"


class InsufficientPrivilege(InstallerError):
    stage = "preflight"


class DependencyInstallFailure(InstallerError):
    stage = "provision dependencies"


class ArchiveNotFound(InstallerError):
    stage = "locate archive"


class InstallerNotFound(InstallerError):
    stage = "locate installer"


class VendorInstallerFailure(InstallerError):
    stage = "vendor installer"


class TuningApplyFailure(InstallerError):
    stage = "system tuning"


class MonitoringConfigFailure(InstallerError):
    stage = "monitoring configuration"


class ReadinessTimeout(InstallerError):
    stage = "readiness"
