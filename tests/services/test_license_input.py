import io

import click

from vc4bootstrap.models import LicenseContent, LicensePath
from vc4bootstrap.services.license_input import ConsoleLicensePrompt, FileLicenseSource


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


def test_prompt_returns_path():
    prompt = ConsoleLicensePrompt(DummyConsole(), prompt=lambda *_args, **_kwargs: " /root/cert.pem ")

    assert prompt.request_license_source() == LicensePath("/root/cert.pem")


def test_prompt_reads_pasted_content_until_end_of_input():
    pasted = "-----BEGIN CERTIFICATE-----\n\nMIIB\n-----END CERTIFICATE-----\n"
    prompt = ConsoleLicensePrompt(
        DummyConsole(),
        prompt=lambda *_args, **_kwargs: "PASTE",
        stdin=io.StringIO(pasted),
    )

    assert prompt.request_license_source() == LicenseContent(pasted)


def test_prompt_returns_none_for_blank_or_aborted_input():
    def aborted(*_args, **_kwargs):
        raise click.Abort()

    assert ConsoleLicensePrompt(DummyConsole(), prompt=lambda *_a, **_k: "").request_license_source() is None
    assert ConsoleLicensePrompt(DummyConsole(), prompt=aborted).request_license_source() is None


def test_file_source_is_non_interactive():
    assert FileLicenseSource("/tmp/cert.pem").request_license_source() == LicensePath("/tmp/cert.pem")
