#!/usr/bin/env python3

import argparse
import logging
import os
import sys

from .config import InstanceSettings, Settings
from .errors import DynamoDbLocalError
from .manager import DynamoDbLocal
from .runner import Runner


def set_logging_config(tags, log_level_str=None):
    """Configure logging to output only to stderr."""
    handlers = [logging.StreamHandler(sys.stderr)]

    log_levels = {
        'critical': logging.CRITICAL,
        'error': logging.ERROR,
        'warning': logging.WARNING,
        'info': logging.INFO,
        'debug': logging.DEBUG,
    }

    log_level = log_levels.get(log_level_str)
    if log_level is None:
        logging.warning(f'Unknown log level {log_level_str}, setting info')
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=f'[{tags} %(asctime)s %(levelname)8s] %(message)s',
        handlers=handlers,
    )


def run_install(args, config: Settings):
    set_logging_config('install', log_level_str=config.log_level)
    manager = DynamoDbLocal(config)
    if manager.installer.ensure_installed():
        logging.info(f'installed into {config.installer.install_path}')
    else:
        logging.info(f'already installed in {config.installer.install_path}')


def run_launch(args, config: Settings):
    if not args.port:
        raise Exception("need to pass --port argument")

    set_logging_config(f'ddblocal {args.port}', log_level_str=config.log_level)
    instance = InstanceSettings(
        port=args.port,
        db_path=None if args.in_memory else args.db_path,
        additional_args=args.additional_args,
        java_opts=args.java_opts,
        verbose=True,
    )
    instance.validate()

    with DynamoDbLocal(config) as manager:
        process = manager.launch(
            instance.port,
            db_path=instance.db_path,
            additional_args=instance.additional_args,
            verbose=instance.verbose,
            java_opts=instance.java_opts,
        )
        try:
            code = process.wait()
        except KeyboardInterrupt:
            logging.info('interrupted, stopping')
            return
        logging.info(f'DynamoDB Local exited with code {code}')


def run_all(args, config: Settings):
    set_logging_config('runner', log_level_str=config.log_level)
    runner = Runner(config)
    runner.run()


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "mode", help="run mode",
        type=str,
        choices=["install", "launch", "run"])
    parser.add_argument("--config", help="config file path", default='config.yaml', type=str)
    parser.add_argument("--install-path", help="directory to install DynamoDB Local into", type=str)
    parser.add_argument("--download-url", help="archive URL or local tar.gz path", type=str)
    parser.add_argument("--log-level", help="log level", type=str)
    parser.add_argument("--port", help="port for launch mode", type=int)
    parser.add_argument("--db-path", help="persistence directory, in memory if not set", type=str)
    parser.add_argument("--in-memory", action="store_true", help="force in memory mode")
    parser.add_argument("--java-opts", help="extra JVM options", default='', type=str)
    # everything after -- goes to DynamoDB Local untouched
    argv = sys.argv[1:]
    additional_args = []
    if "--" in argv:
        separator = argv.index("--")
        argv, additional_args = argv[:separator], argv[separator + 1:]
    args = parser.parse_args(argv)
    args.additional_args = additional_args

    config = Settings()
    if os.path.exists(args.config):
        config.load(args.config)
    else:
        config.apply_env_overrides()

    if args.install_path or args.download_url:
        DynamoDbLocal(config).configure_installer(
            install_path=args.install_path,
            download_url=args.download_url,
        )
    if args.log_level:
        config.log_level = args.log_level
    config.validate()

    try:
        if args.mode == 'install':
            run_install(args, config)
        if args.mode == 'launch':
            run_launch(args, config)
        if args.mode == 'run':
            run_all(args, config)
    except DynamoDbLocalError as e:
        logging.critical(str(e))
        sys.exit(1)


if __name__ == '__main__':
    main()
