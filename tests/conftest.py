"""Shared test fixtures for dynamodb-local tests"""

import pytest

from dynamodb_local import manager as manager_module
from dynamodb_local.config import Settings
from dynamodb_local.installer import JAR_NAME
from dynamodb_local.manager import DynamoDbLocal
from tests.utils.fakes import FakePopen, build_archive


@pytest.fixture
def archive(tmp_path):
    return build_archive(tmp_path / "dynamodb_local_latest.tar.gz")


@pytest.fixture
def spawned(monkeypatch):
    """Record every process started by the manager instead of running java."""
    processes = []

    def fake_popen(*args, **kwargs):
        process = FakePopen(*args, **kwargs)
        processes.append(process)
        return process

    monkeypatch.setattr(manager_module.subprocess, "Popen", fake_popen)
    return processes


@pytest.fixture
def no_network(monkeypatch):
    calls = []

    def fail_get(url, **kwargs):
        calls.append(url)
        raise AssertionError(f"unexpected download of {url}")

    monkeypatch.setattr("dynamodb_local.installer.requests.get", fail_get)
    return calls


@pytest.fixture
def install_dir(tmp_path):
    path = tmp_path / "install"
    path.mkdir()
    (path / JAR_NAME).write_bytes(b"jar")
    return path


@pytest.fixture
def ddb(install_dir, spawned, no_network):
    settings = Settings()
    settings.installer.install_path = str(install_dir)
    settings.stop_timeout = 1.0
    manager = DynamoDbLocal(settings)
    yield manager
    manager.shutdown()
