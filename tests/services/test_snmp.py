import subprocess

from vc4bootstrap.services.filesystem import FileSystemService
from vc4bootstrap.services.snmp import MonitoringConfigurator


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


def _configurator(snmp_conf, calls):
    def run_cmd(cmd, check=True, capture_output=False, cwd=None):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    return MonitoringConfigurator(
        logger=DummyLogger(),
        console=DummyConsole(),
        filesystem_service=FileSystemService(logger=DummyLogger(), console=DummyConsole()),
        run_cmd=run_cmd,
        snmp_conf=str(snmp_conf),
    )


def test_creates_config_when_missing(tmp_path):
    snmp_conf = tmp_path / "snmp" / "snmpd.conf"
    calls = []

    assert _configurator(snmp_conf, calls).run() == "created"

    assert snmp_conf.read_text(encoding="utf-8") == "master agentx\nagentXSocket tcp:localhost:705\n"
    assert calls == [
        ["systemctl", "enable", "snmpd.service"],
        ["systemctl", "restart", "snmpd.service"],
    ]


def test_appends_directive_to_existing_config(tmp_path):
    snmp_conf = tmp_path / "snmpd.conf"
    snmp_conf.write_text("rocommunity public\n", encoding="utf-8")

    assert _configurator(snmp_conf, []).run() == "appended"

    assert snmp_conf.read_text(encoding="utf-8") == (
        "rocommunity public\n\nmaster agentx\nagentXSocket tcp:localhost:705\n"
    )


def test_existing_directive_is_left_alone_but_daemon_restarts(tmp_path):
    snmp_conf = tmp_path / "snmpd.conf"
    original = "master agentx\nagentXSocket tcp:localhost:705\n"
    snmp_conf.write_text(original, encoding="utf-8")
    calls = []

    assert _configurator(snmp_conf, calls).run() == "unchanged"

    assert snmp_conf.read_text(encoding="utf-8") == original
    assert ["systemctl", "restart", "snmpd.service"] in calls
