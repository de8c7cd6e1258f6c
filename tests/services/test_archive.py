import io
import tarfile
import zipfile

import pytest

from vc4bootstrap.errors import ArchiveNotFound, InstallerError, InstallerNotFound
from vc4bootstrap.services.archive import ArchiveService


class DummyLogger:
    def __init__(self):
        self.warnings = []

    def warning(self, message, *args, **_kwargs):
        self.warnings.append(message % args)


def test_archive_service_blocks_path_traversal(tmp_path):
    service = ArchiveService()

    zip_path = tmp_path / "malicious.zip"
    with zipfile.ZipFile(zip_path, "w") as zip_file:
        zip_file.writestr("../escape.txt", "malicious")

    destination = tmp_path / "extract"
    destination.mkdir()

    with pytest.raises(InstallerError):
        service.safe_extract_zip(str(zip_path), str(destination))

    assert not (tmp_path / "escape.txt").exists()


def test_archive_service_extracts_valid_zip(tmp_path):
    service = ArchiveService()

    zip_path = tmp_path / "vc4.zip"
    with zipfile.ZipFile(zip_path, "w") as zip_file:
        zip_file.writestr("vc4/installVC4.sh", "#!/bin/sh\nexit 0\n")

    destination = tmp_path / "extract"
    destination.mkdir()

    service.extract(str(zip_path), str(destination))

    assert (destination / "vc4" / "installVC4.sh").read_text(encoding="utf-8").startswith("#!/bin/sh")


def test_archive_service_extracts_tar_gz(tmp_path):
    service = ArchiveService()

    payload = b"#!/bin/sh\nexit 0\n"
    tar_path = tmp_path / "vc4.tar.gz"
    with tarfile.open(tar_path, "w:gz") as tar_file:
        info = tarfile.TarInfo("package/installVC4.sh")
        info.size = len(payload)
        info.mode = 0o755
        tar_file.addfile(info, io.BytesIO(payload))

    destination = tmp_path / "extract"
    destination.mkdir()

    service.extract(str(tar_path), str(destination))

    assert (destination / "package" / "installVC4.sh").read_bytes() == payload


def test_archive_service_blocks_tar_symlinks(tmp_path):
    service = ArchiveService()

    tar_path = tmp_path / "vc4.tar"
    with tarfile.open(tar_path, "w") as tar_file:
        info = tarfile.TarInfo("package/link")
        info.type = tarfile.SYMTYPE
        info.linkname = "/etc/passwd"
        tar_file.addfile(info)

    destination = tmp_path / "extract"
    destination.mkdir()

    with pytest.raises(InstallerError, match="is a link"):
        service.extract(str(tar_path), str(destination))


def test_locate_archive_fails_on_empty_directory(tmp_path):
    service = ArchiveService()

    with pytest.raises(ArchiveNotFound, match="No VC-4 package archive found"):
        service.locate_archive(str(tmp_path))


def test_locate_archive_ignores_nested_and_unrelated_files(tmp_path):
    service = ArchiveService()
    (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "vc4.zip").write_bytes(b"")

    with pytest.raises(ArchiveNotFound):
        service.locate_archive(str(tmp_path))


def test_locate_archive_picks_first_in_lexicographic_order(tmp_path):
    logger = DummyLogger()
    service = ArchiveService(logger=logger)
    for name in ("vc4_b.tgz", "vc4_a.tar.gz", "vc4_c.zip"):
        (tmp_path / name).write_bytes(b"")

    archive = service.locate_archive(str(tmp_path))

    assert archive == str(tmp_path / "vc4_a.tar.gz")
    assert "vc4_b.tgz" in logger.warnings[0]
    assert "vc4_c.zip" in logger.warnings[0]


def test_find_installer_searches_recursively(tmp_path):
    service = ArchiveService()
    deep = tmp_path / "a" / "b"
    deep.mkdir(parents=True)
    (deep / "installVC4.sh").write_text("#!/bin/sh\n", encoding="utf-8")

    assert service.find_installer(str(tmp_path)) == str(deep / "installVC4.sh")


def test_find_installer_raises_when_missing(tmp_path):
    service = ArchiveService()

    with pytest.raises(InstallerNotFound, match="installVC4.sh"):
        service.find_installer(str(tmp_path))
