import os
from pathlib import Path

import pytest
import yaml

from dynamodb_local.config import (
    DEFAULT_DOWNLOAD_URL,
    DEFAULT_INSTALL_PATH,
    ENV_DOWNLOAD_URL,
    ENV_INSTALL_PATH,
    ENV_JAVA,
    InstanceSettings,
    Settings,
)


def write_config(tmp_path, data):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.safe_dump(data))
    return str(config_file)


@pytest.mark.unit
def test_defaults():
    settings = Settings()
    assert settings.installer.install_path == DEFAULT_INSTALL_PATH
    assert settings.installer.download_url == DEFAULT_DOWNLOAD_URL
    assert settings.installer.install_path.endswith("dynamodb-local")
    assert settings.java_path == "java"
    assert settings.instances == []
    settings.validate()


@pytest.mark.unit
def test_load_config(tmp_path):
    config_file = write_config(tmp_path, {
        "installer": {
            "install_path": "/opt/dynamodb-local",
            "download_url": "https://example.com/ddb.tar.gz",
        },
        "java_path": "/usr/bin/java",
        "stop_timeout": 2,
        "log_level": "debug",
        "auto_restart": True,
        "instances": [
            {"port": 8000},
            {"port": 8001, "db_path": "/var/ddb", "additional_args": "-sharedDb"},
        ],
    })

    settings = Settings()
    settings.load(config_file)

    assert settings.installer.install_path == "/opt/dynamodb-local"
    assert settings.installer.download_url == "https://example.com/ddb.tar.gz"
    assert settings.java_path == "/usr/bin/java"
    assert settings.stop_timeout == 2
    assert settings.log_level == "debug"
    assert settings.auto_restart
    assert [instance.port for instance in settings.instances] == [8000, 8001]
    assert settings.instances[0].db_path is None
    assert settings.instances[1].additional_args == ["-sharedDb"]


@pytest.mark.unit
def test_example_config_is_valid(monkeypatch):
    for name in (ENV_INSTALL_PATH, ENV_DOWNLOAD_URL, ENV_JAVA):
        monkeypatch.delenv(name, raising=False)
    config_file = Path(__file__).parent.parent / "config.example.yaml"

    settings = Settings()
    settings.load(str(config_file))

    assert [instance.port for instance in settings.instances] == [8000, 8001]
    assert settings.instances[1].java_opts == "-Xmx512m"


@pytest.mark.unit
def test_load_empty_config(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")

    settings = Settings()
    settings.load(str(config_file))

    assert settings.installer.install_path == DEFAULT_INSTALL_PATH


@pytest.mark.unit
def test_unsupported_option(tmp_path):
    config_file = write_config(tmp_path, {"clickhouse": {"host": "localhost"}})
    with pytest.raises(Exception, match="Unsupported config options"):
        Settings().load(config_file)


@pytest.mark.unit
def test_env_vars_override_config(tmp_path, monkeypatch):
    config_file = write_config(tmp_path, {
        "installer": {"install_path": "/from/file"},
    })
    monkeypatch.setenv(ENV_INSTALL_PATH, "/from/env")
    monkeypatch.setenv(ENV_DOWNLOAD_URL, "/tmp/archive.tar.gz")
    monkeypatch.setenv(ENV_JAVA, "/jdk/bin/java")

    settings = Settings()
    settings.load(config_file)

    assert settings.installer.install_path == "/from/env"
    assert settings.installer.download_url == "/tmp/archive.tar.gz"
    assert settings.java_path == "/jdk/bin/java"


@pytest.mark.unit
def test_config_without_env_vars(tmp_path, monkeypatch):
    for name in (ENV_INSTALL_PATH, ENV_DOWNLOAD_URL, ENV_JAVA):
        monkeypatch.delenv(name, raising=False)
    config_file = write_config(tmp_path, {"installer": {"install_path": "/from/file"}})

    settings = Settings()
    settings.load(config_file)

    assert settings.installer.install_path == "/from/file"
    assert settings.installer.download_url == DEFAULT_DOWNLOAD_URL


@pytest.mark.unit
@pytest.mark.parametrize("data, message", [
    ({"log_level": "verbose"}, "wrong log level"),
    ({"stop_timeout": -1}, "stop_timeout"),
    ({"installer": {"install_path": 5}}, "install_path should be string"),
    ({"instances": [{"port": 8000}, {"port": 8000}]}, "duplicate instance port"),
    ({"instances": [{"port": 70000}]}, "out of range"),
    ({"instances": [{"port": "8000"}]}, "port should be int"),
])
def test_invalid_config(tmp_path, data, message):
    config_file = write_config(tmp_path, data)
    with pytest.raises(ValueError, match=message):
        Settings().load(config_file)


@pytest.mark.unit
def test_instance_settings_normalizes_single_arg():
    instance = InstanceSettings(port=8000, additional_args="-sharedDb")
    instance.validate()
    assert instance.additional_args == ["-sharedDb"]


@pytest.mark.unit
def test_apply_env_overrides_ignores_empty_values():
    settings = Settings()
    settings.apply_env_overrides({ENV_INSTALL_PATH: ""})
    assert settings.installer.install_path == DEFAULT_INSTALL_PATH
    assert os.path.isabs(settings.installer.install_path)
