import signal
import subprocess
import threading
import time
from logging import getLogger

logger = getLogger(__name__)


class GracefulKiller:
    kill_now = False

    def __init__(self):
        signal.signal(signal.SIGINT, self.exit_gracefully)
        signal.signal(signal.SIGTERM, self.exit_gracefully)

    def exit_gracefully(self, signum, frame):
        self.kill_now = True


class DynamoDbProcess:
    """Handle of a running DynamoDB Local java process.

    Wraps the ``subprocess.Popen`` object and watches it from a daemon thread
    so that the exit code is recorded as soon as the process dies. The
    registry entry that created the handle owns it until ``stop``.
    """

    def __init__(self, popen: subprocess.Popen, port: int, args, detached=False, verbose=False):
        self.popen = popen
        self.port = port
        self.args = list(args)
        self.detached = detached
        self.verbose = verbose
        self.start_time = time.time()
        self.end_time = None
        self.error = None
        self._exited = threading.Event()
        self._watcher = None

    def __repr__(self):
        return f"DynamoDbProcess(pid={self.pid}, port={self.port}, returncode={self.returncode})"

    @property
    def pid(self):
        return self.popen.pid

    @property
    def returncode(self):
        return self.popen.returncode

    @property
    def is_running(self):
        return self.poll() is None

    def poll(self):
        return self.popen.poll()

    def start_watcher(self):
        self._watcher = threading.Thread(
            target=self._watch_exit,
            daemon=True,
            name=f"DynamoDbLocalWatcher-{self.port}",
        )
        self._watcher.start()

    def _watch_exit(self):
        code = None
        try:
            code = self.popen.wait()
        except Exception as e:
            self.error = e
            logger.error(f"Error waiting for DynamoDB Local on port {self.port}: {e}")

        if code is not None and code != 0 and self.verbose:
            logger.warning(
                f"DynamoDB Local ({self.pid}) on port {self.port} exited with code {code}"
            )
        self.end_time = time.time()
        self._exited.set()

    def wait_watched(self, timeout=None) -> bool:
        """Block until the watcher thread has recorded the exit."""
        return self._exited.wait(timeout)

    def wait(self, timeout=None):
        """Wait for the process to exit, return its exit code or None on timeout."""
        try:
            return self.popen.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None

    def terminate(self):
        if self.poll() is None:
            self.popen.terminate()

    def kill(self):
        if self.poll() is None:
            self.popen.kill()
