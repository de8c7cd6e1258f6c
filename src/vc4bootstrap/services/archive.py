"""Vendor package discovery and safe archive extraction."""

import os
import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import List, Optional

from vc4bootstrap.constants import ARCHIVE_EXTENSIONS, INSTALLER_NAME
from vc4bootstrap.errors import ArchiveNotFound, InstallerError, InstallerNotFound
from vc4bootstrap.errors_catalog import actionable_error


class ArchiveService:
    """Encapsulates archive lookup and safe extraction logic."""

    def __init__(self, logger=None, extensions=ARCHIVE_EXTENSIONS):
        self.logger = logger
        self.extensions = tuple(extensions)

    def archive_kind(self, path: str) -> Optional[str]:
        name = os.path.basename(path).lower()
        if name.endswith(".zip"):
            return "zip"
        if name.endswith((".tar.gz", ".tgz")):
            return "tar.gz"
        if name.endswith(".tar"):
            return "tar"
        return None

    def find_archives(self, directory: str) -> List[str]:
        try:
            entries = sorted(os.listdir(directory))
        except OSError as exc:
            raise ArchiveNotFound(f"Cannot list working directory {directory}: {exc}") from exc

        return [
            os.path.join(directory, entry)
            for entry in entries
            if os.path.isfile(os.path.join(directory, entry)) and entry.lower().endswith(self.extensions)
        ]

    def locate_archive(self, directory: str) -> str:
        candidates = self.find_archives(directory)
        if not candidates:
            raise ArchiveNotFound(actionable_error("archive_not_found", path=directory))

        if len(candidates) > 1 and self.logger:
            ignored = ", ".join(os.path.basename(path) for path in candidates[1:])
            self.logger.warning(
                "Multiple package archives found; using %s and ignoring %s.",
                os.path.basename(candidates[0]),
                ignored,
            )
        return candidates[0]

    def is_within_dir(self, base_dir: Path, candidate: Path) -> bool:
        try:
            return os.path.commonpath([str(base_dir), str(candidate)]) == str(base_dir)
        except ValueError:
            return False

    def extract(self, archive_path: str, destination_dir: str):
        kind = self.archive_kind(archive_path)
        if kind == "zip":
            self.safe_extract_zip(archive_path, destination_dir)
        elif kind in ("tar", "tar.gz"):
            self.safe_extract_tar(archive_path, destination_dir)
        else:
            raise InstallerError(f"Unsupported archive format: {archive_path}")

    def safe_extract_zip(self, zip_path: str, destination_dir: str):
        base = Path(destination_dir).resolve()

        try:
            with zipfile.ZipFile(zip_path, "r") as zip_ref:
                for member in zip_ref.infolist():
                    normalized_name = member.filename.replace("\\", "/")
                    target_path = (base / normalized_name).resolve()

                    if not self.is_within_dir(base, target_path):
                        raise InstallerError(
                            f"Unsafe ZIP entry detected: `{member.filename}`. "
                            "Archive extraction aborted to prevent path traversal."
                        )

                    file_type = (member.external_attr >> 16) & 0o170000
                    if file_type == 0o120000:
                        raise InstallerError(
                            f"Unsafe ZIP entry detected: `{member.filename}` is a symbolic link."
                        )

                for member in zip_ref.infolist():
                    normalized_name = member.filename.replace("\\", "/")
                    target_path = (base / normalized_name).resolve()

                    if member.is_dir() or normalized_name.endswith("/"):
                        target_path.mkdir(parents=True, exist_ok=True)
                        continue

                    target_path.parent.mkdir(parents=True, exist_ok=True)
                    with zip_ref.open(member, "r") as src, open(target_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)

                    mode = (member.external_attr >> 16) & 0o777
                    if mode:
                        os.chmod(target_path, mode)
        except zipfile.BadZipFile as exc:
            raise InstallerError(f"Invalid ZIP archive: {zip_path}") from exc

    def safe_extract_tar(self, tar_path: str, destination_dir: str):
        base = Path(destination_dir).resolve()

        try:
            with tarfile.open(tar_path, "r:*") as tar_ref:
                members = tar_ref.getmembers()
                for member in members:
                    target_path = (base / member.name).resolve()
                    if not self.is_within_dir(base, target_path):
                        raise InstallerError(
                            f"Unsafe TAR entry detected: `{member.name}`. "
                            "Archive extraction aborted to prevent path traversal."
                        )
                    if member.issym() or member.islnk():
                        raise InstallerError(
                            f"Unsafe TAR entry detected: `{member.name}` is a link."
                        )
                    if not (member.isfile() or member.isdir()):
                        raise InstallerError(
                            f"Unsafe TAR entry detected: `{member.name}` is not a regular file."
                        )

                extract_kwargs = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}
                tar_ref.extractall(str(base), members=members, **extract_kwargs)
        except tarfile.TarError as exc:
            raise InstallerError(f"Invalid TAR archive: {tar_path}") from exc

    def find_installer(self, root: str, name: str = INSTALLER_NAME) -> str:
        matches = sorted(path for path in Path(root).rglob(name) if path.is_file())
        if not matches:
            raise InstallerNotFound(actionable_error("installer_not_found", name=name))
        return str(matches[0])
