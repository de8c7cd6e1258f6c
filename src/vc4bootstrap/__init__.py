"""
VC4Bootstrap - Crestron VC-4 installation wrapper for RHEL-family hosts
"""

__version__ = "1.0.0"

from .core import VC4Installer
from .errors import InstallerError

__all__ = ["VC4Installer", "InstallerError"]
