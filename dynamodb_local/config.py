"""
DynamoDB Local Launcher Configuration Management

This module provides configuration classes for the emulator installer, the
launched instances and the supervisor that keeps them running.

Classes:
    InstallerSettings: Where the emulator is installed and where it is downloaded from
    InstanceSettings: A single emulator instance to launch (port, persistence, extra args)
    Settings: Main configuration class that orchestrates all settings

Key Features:
    - YAML-based configuration loading
    - Environment variable overrides for installer and runtime paths
    - Type validation and error handling
"""

import os
import tempfile
from dataclasses import dataclass, field

import yaml


DEFAULT_INSTALL_PATH = os.path.join(tempfile.gettempdir(), "dynamodb-local")
DEFAULT_DOWNLOAD_URL = (
    "https://s3-us-west-2.amazonaws.com/dynamodb-local/dynamodb_local_latest.tar.gz"
)

ENV_INSTALL_PATH = "DYNAMODB_LOCAL_INSTALL_PATH"
ENV_DOWNLOAD_URL = "DYNAMODB_LOCAL_DOWNLOAD_URL"
ENV_JAVA = "DYNAMODB_LOCAL_JAVA"

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def stype(obj):
    """Get the simple type name of an object.

    Example:
        >>> stype([1, 2, 3])
        'list'
    """
    return type(obj).__name__


@dataclass
class InstallerSettings:
    """Emulator installation configuration.

    Attributes:
        install_path: Directory holding the extracted emulator (DynamoDBLocal.jar
            and the DynamoDBLocal_lib native library directory)
        download_url: HTTP(S) URL of the distribution tar.gz, or the path of a
            local tar.gz file

    Paths and URLs are not checked for existence here, a wrong value fails
    later when the installer runs.
    """
    install_path: str = DEFAULT_INSTALL_PATH
    download_url: str = DEFAULT_DOWNLOAD_URL

    def validate(self):
        if not isinstance(self.install_path, str):
            raise ValueError(
                f"installer install_path should be string and not {stype(self.install_path)}"
            )

        if not isinstance(self.download_url, str):
            raise ValueError(
                f"installer download_url should be string and not {stype(self.download_url)}"
            )


@dataclass
class InstanceSettings:
    port: int = 8000
    db_path: str = None
    additional_args: list = field(default_factory=list)
    java_opts: str = ""
    detached: bool = False
    verbose: bool = False

    def validate(self):
        if not isinstance(self.port, int) or isinstance(self.port, bool):
            raise ValueError(f"instance port should be int and not {stype(self.port)}")

        if not 0 < self.port < 65536:
            raise ValueError(f"instance port {self.port} is out of range")

        if self.db_path is not None and not isinstance(self.db_path, str):
            raise ValueError(
                f"instance db_path should be string or None and not {stype(self.db_path)}"
            )

        if isinstance(self.additional_args, str):
            self.additional_args = [self.additional_args]
        if not isinstance(self.additional_args, list):
            raise ValueError(
                f"instance additional_args should be list and not {stype(self.additional_args)}"
            )

        if not isinstance(self.java_opts, str):
            raise ValueError(
                f"instance java_opts should be string and not {stype(self.java_opts)}"
            )


class Settings:
    DEFAULT_LOG_LEVEL = "info"
    DEFAULT_JAVA_PATH = "java"
    DEFAULT_STOP_TIMEOUT = 5.0
    DEFAULT_CHECK_INTERVAL = 5

    def __init__(self):
        self.installer = InstallerSettings()
        self.java_path = Settings.DEFAULT_JAVA_PATH
        self.stop_timeout = Settings.DEFAULT_STOP_TIMEOUT
        self.log_level = Settings.DEFAULT_LOG_LEVEL
        self.instances: list[InstanceSettings] = []
        self.check_interval = Settings.DEFAULT_CHECK_INTERVAL
        self.auto_restart = False

    def load(self, settings_file):
        with open(settings_file, "r") as f:
            data = yaml.safe_load(f.read()) or {}

        self.installer = InstallerSettings(**data.pop("installer", {}))
        self.java_path = data.pop("java_path", Settings.DEFAULT_JAVA_PATH)
        self.stop_timeout = data.pop("stop_timeout", Settings.DEFAULT_STOP_TIMEOUT)
        self.log_level = data.pop("log_level", Settings.DEFAULT_LOG_LEVEL)
        self.check_interval = data.pop("check_interval", Settings.DEFAULT_CHECK_INTERVAL)
        self.auto_restart = data.pop("auto_restart", False)

        self.instances = []
        for instance in data.pop("instances", []):
            self.instances.append(InstanceSettings(**instance))

        if data:
            raise Exception(f"Unsupported config options: {list(data.keys())}")

        self.apply_env_overrides()
        self.validate()

    def apply_env_overrides(self, environ=None):
        environ = os.environ if environ is None else environ
        if environ.get(ENV_INSTALL_PATH):
            self.installer.install_path = environ[ENV_INSTALL_PATH]
        if environ.get(ENV_DOWNLOAD_URL):
            self.installer.download_url = environ[ENV_DOWNLOAD_URL]
        if environ.get(ENV_JAVA):
            self.java_path = environ[ENV_JAVA]

    def validate_log_level(self):
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"wrong log level {self.log_level}")

    def validate(self):
        self.installer.validate()
        self.validate_log_level()

        if not isinstance(self.java_path, str) or not self.java_path:
            raise ValueError(f"java_path should be non-empty string and not {stype(self.java_path)}")

        if not isinstance(self.stop_timeout, (int, float)) or self.stop_timeout < 0:
            raise ValueError("stop_timeout should be a non-negative number")

        if not isinstance(self.check_interval, (int, float)) or self.check_interval <= 0:
            raise ValueError("check_interval should be positive")

        if not isinstance(self.auto_restart, bool):
            raise ValueError(f"auto_restart should be bool and not {stype(self.auto_restart)}")

        ports = set()
        for instance in self.instances:
            instance.validate()
            if instance.port in ports:
                raise ValueError(f"duplicate instance port {instance.port}")
            ports.add(instance.port)
