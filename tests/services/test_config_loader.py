import pytest

from vc4bootstrap.errors import InstallerError
from vc4bootstrap.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".vc4bootstrap.yml"
    config_file.write_text(
        "log_file: /tmp/vc4.log\nreadiness_attempts: 5\nexcluded_networks:\n  - 172.17.0.0/16\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded["log_file"] == "/tmp/vc4.log"
    assert loaded["readiness_attempts"] == 5
    assert loaded["excluded_networks"] == ["172.17.0.0/16"]


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".vc4bootstrap.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(InstallerError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_scalar_list_values(tmp_path):
    config_file = tmp_path / ".vc4bootstrap.yml"
    config_file.write_text("service_process_patterns: node\n", encoding="utf-8")

    with pytest.raises(InstallerError, match="must be a list of strings"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_empty_process_patterns(tmp_path):
    config_file = tmp_path / ".vc4bootstrap.yml"
    config_file.write_text("service_process_patterns: []\n", encoding="utf-8")

    with pytest.raises(InstallerError, match="cannot be empty"):
        ConfigLoader().load(str(config_file))


def test_config_loader_handles_missing_and_empty_files(tmp_path):
    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")

    assert ConfigLoader().load(None) == {}
    assert ConfigLoader().load(str(empty)) == {}
    with pytest.raises(InstallerError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "absent.yml"))
