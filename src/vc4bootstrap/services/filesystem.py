"""Filesystem helpers for VC4Bootstrap."""

import logging
import os
import shutil

from rich.console import Console

from vc4bootstrap.errors import InstallerError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def set_permissions(self, path: str, mode: int):
        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def recreate_dir(self, path: str):
        """Destroys ``path`` if present and creates it empty."""
        if os.path.lexists(path):
            self.logger.debug("Removing directory: %s", path)
            try:
                if os.path.isdir(path) and not os.path.islink(path):
                    shutil.rmtree(path)
                else:
                    os.remove(path)
            except OSError as exc:
                raise InstallerError(f"Could not remove {path}: {exc}") from exc
        os.makedirs(path, exist_ok=True)

    def copy_tree_contents(self, source_dir: str, destination_dir: str):
        try:
            shutil.copytree(source_dir, destination_dir, symlinks=True, dirs_exist_ok=True)
        except (OSError, shutil.Error) as exc:
            raise InstallerError(f"Failed to copy {source_dir} to {destination_dir}: {exc}") from exc

    def read_text(self, path: str) -> str:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as file_obj:
                return file_obj.read()
        except FileNotFoundError:
            return ""

    def append_lines(self, path: str, lines):
        with open(path, "a", encoding="utf-8") as file_obj:
            for line in lines:
                file_obj.write(f"{line}\n")

    def write_text(self, path: str, content: str):
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as file_obj:
            file_obj.write(content)
