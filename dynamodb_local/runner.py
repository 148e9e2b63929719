import time
from logging import getLogger

from .config import InstanceSettings, Settings
from .manager import DynamoDbLocal
from .process import GracefulKiller


logger = getLogger(__name__)


class Runner:

    SLEEP_STEP = 0.3

    def __init__(self, config: Settings, manager: DynamoDbLocal = None):
        self.config = config
        self.manager = manager or DynamoDbLocal(config)
        self.instances: dict[int, InstanceSettings] = {
            instance.port: instance for instance in config.instances
        }

    def launch_instance(self, instance: InstanceSettings):
        return self.manager.launch(
            instance.port,
            db_path=instance.db_path,
            additional_args=instance.additional_args,
            verbose=instance.verbose,
            detached=instance.detached,
            java_opts=instance.java_opts,
        )

    def restart_dead_processes(self):
        for port, instance in self.instances.items():
            process = self.manager.get(port)
            if process is not None and process.is_running:
                continue
            if process is None:
                logger.warning(f"Launching missing instance on port {port}")
                self.launch_instance(instance)
                continue
            logger.warning(
                f"Process dead (exit code: {process.returncode}), relaunching port {port}"
            )
            self.manager.relaunch(
                port,
                db_path=instance.db_path,
                additional_args=instance.additional_args,
                verbose=instance.verbose,
                detached=instance.detached,
                java_opts=instance.java_opts,
            )

    def wait(self, killer, seconds):
        t1 = time.time()
        while time.time() - t1 < seconds and not killer.kill_now:
            time.sleep(self.SLEEP_STEP)

    def run(self):
        if not self.instances:
            logger.warning("no instances configured")
            return

        killer = GracefulKiller()

        self.manager.installer.ensure_installed()
        try:
            for port, instance in self.instances.items():
                if killer.kill_now:
                    break
                process = self.launch_instance(instance)
                logger.info(f"DynamoDB Local ({process.pid}) running on port {port}")

            logger.info("all instances launched")

            while not killer.kill_now:
                self.wait(killer, self.config.check_interval)
                if killer.kill_now:
                    break
                if self.config.auto_restart:
                    self.restart_dead_processes()
        finally:
            logger.info("stopping all instances")
            self.manager.shutdown()
            logger.info("stopped")
