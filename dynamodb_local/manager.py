import atexit
import os
import shlex
import subprocess
import threading
from logging import getLogger

from .config import Settings
from .errors import LaunchError
from .installer import JAR_NAME, LIB_DIR_NAME, Installer
from .process import DynamoDbProcess
from .registry import ProcessRegistry


logger = getLogger(__name__)

IN_MEMORY_FLAG = "-inMemory"
DB_PATH_FLAG = "-dbPath"


def normalize_additional_args(additional_args, db_path=None):
    """Return a fresh argument list ending with the persistence flags."""
    if not additional_args:
        args = []
    elif isinstance(additional_args, str):
        args = [additional_args]
    else:
        args = list(additional_args)

    if db_path:
        args.extend([DB_PATH_FLAG, str(db_path)])
    else:
        args.append(IN_MEMORY_FLAG)
    return args


def build_launch_args(port, additional_args, java_path="java", java_opts=""):
    args = [
        java_path,
        "-Xrs",
        f"-Djava.library.path=./{LIB_DIR_NAME}",
        *shlex.split(java_opts or ""),
        "-jar",
        JAR_NAME,
        "-port",
        str(port),
    ]
    args.extend(str(arg) for arg in additional_args)
    return [arg for arg in args if arg]


class DynamoDbLocal:
    """Launches DynamoDB Local instances and keeps track of them by port.

    Each manager owns its settings and registry, so several managers can
    live side by side. Non-detached processes are killed when the host
    interpreter exits, or earlier through ``shutdown`` / the context manager.
    """

    def __init__(self, settings: Settings = None):
        self.settings = settings or Settings()
        self.registry = ProcessRegistry()
        self._shutdown_lock = threading.Lock()
        self._atexit_registered = False
        self._shut_down = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    @property
    def installer(self):
        return Installer(self.settings.installer)

    def configure_installer(self, install_path=None, download_url=None):
        if install_path:
            self.settings.installer.install_path = str(install_path)
        if download_url:
            self.settings.installer.download_url = str(download_url)

    def get(self, port):
        return self.registry.get(port)

    def running_ports(self):
        return self.registry.ports()

    def launch(
        self,
        port,
        db_path=None,
        additional_args=None,
        verbose=False,
        detached=False,
        java_opts="",
    ) -> DynamoDbProcess:
        existing = self.registry.get(port)
        if existing is not None:
            return existing

        additional_args = normalize_additional_args(additional_args, db_path)

        self.installer.ensure_installed()

        install_path = self.settings.installer.install_path
        args = build_launch_args(
            port,
            additional_args,
            java_path=self.settings.java_path,
            java_opts=java_opts,
        )

        try:
            popen = subprocess.Popen(
                args,
                cwd=install_path,
                env=os.environ.copy(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=None,
            )
        except (OSError, ValueError) as e:
            if verbose:
                logger.error(f"DynamoDB Local start error: {e}")
            raise LaunchError(f"Unable to launch DynamoDB Local process: {e}") from e

        if not popen.pid:
            raise LaunchError("Unable to launch DynamoDB Local process")

        process = DynamoDbProcess(popen, port, args, detached=detached, verbose=verbose)
        process.start_watcher()

        if not detached:
            self._register_atexit()

        self.registry.register(port, process)

        log = logger.info if verbose else logger.debug
        log(
            f"DynamoDB Local ({process.pid}) started on port {port} "
            f"via {' '.join(args)} from CWD {install_path}"
        )
        return process

    def stop(self, port, timeout=None):
        process = self.registry.remove(port)
        if process is None:
            return

        process.kill()
        if timeout is None:
            timeout = self.settings.stop_timeout
        if not timeout:
            return

        if process.wait(timeout=timeout) is None:
            logger.warning(
                f"DynamoDB Local ({process.pid}) on port {port} "
                f"did not exit within {timeout} seconds"
            )
        else:
            logger.debug(f"DynamoDB Local ({process.pid}) on port {port} stopped")

    def stop_child(self, child):
        pid = getattr(child, "pid", None)
        if not pid:
            return
        logger.debug(f"stopping child process {pid}")
        child.terminate()

    def relaunch(self, port, *args, **kwargs) -> DynamoDbProcess:
        self.stop(port)
        return self.launch(port, *args, **kwargs)

    def stop_all(self):
        for port in self.registry.ports():
            process = self.registry.get(port)
            if process is None or process.detached:
                continue
            self.stop(port)

    def shutdown(self):
        with self._shutdown_lock:
            if self._shut_down:
                return
            self._shut_down = True
            registered, self._atexit_registered = self._atexit_registered, False
        self.stop_all()
        if registered:
            atexit.unregister(self.shutdown)

    def _register_atexit(self):
        with self._shutdown_lock:
            self._shut_down = False
            if self._atexit_registered:
                return
            atexit.register(self.shutdown)
            self._atexit_registered = True
