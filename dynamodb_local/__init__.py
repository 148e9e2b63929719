import importlib.metadata

from .config import InstallerSettings, InstanceSettings, Settings
from .errors import DownloadError, DynamoDbLocalError, InstallError, LaunchError
from .installer import Installer
from .manager import DynamoDbLocal
from .process import DynamoDbProcess
from .registry import ProcessRegistry

try:
    __version__ = importlib.metadata.version("dynamodb-local")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"  # fallback version


_default_manager = None


def get_default_manager() -> DynamoDbLocal:
    global _default_manager
    if _default_manager is None:
        _default_manager = DynamoDbLocal()
    return _default_manager


def launch(port, db_path=None, additional_args=None, verbose=False, detached=False, java_opts=""):
    return get_default_manager().launch(
        port,
        db_path=db_path,
        additional_args=additional_args,
        verbose=verbose,
        detached=detached,
        java_opts=java_opts,
    )


def stop(port, timeout=None):
    get_default_manager().stop(port, timeout=timeout)


def stop_child(child):
    get_default_manager().stop_child(child)


def relaunch(port, *args, **kwargs):
    return get_default_manager().relaunch(port, *args, **kwargs)


def configure_installer(install_path=None, download_url=None):
    get_default_manager().configure_installer(
        install_path=install_path,
        download_url=download_url,
    )


__all__ = [
    "DownloadError",
    "DynamoDbLocal",
    "DynamoDbLocalError",
    "DynamoDbProcess",
    "InstallError",
    "Installer",
    "InstallerSettings",
    "InstanceSettings",
    "LaunchError",
    "ProcessRegistry",
    "Settings",
    "configure_installer",
    "get_default_manager",
    "launch",
    "relaunch",
    "stop",
    "stop_child",
]
