#!/usr/bin/env python3
"""
Cpu usage monitor for a single process.

Samples the cpu usage of a process every few seconds, appends each sample
to pscpu_<pid>.csv and prints it to stdout until interrupted.
"""
import logging
import sys
from pathlib import Path

from pscpu.cli.pscpu_cli import build_config, parse_args
from pscpu.config.monitor_config import MonitorConfig
from pscpu.errors import ConfigError, PscpuError
from pscpu.monitor.process_monitor import (
    ProcessMonitor,
    install_signal_handlers,
    restore_signal_handlers,
)
from pscpu.monitor.sampler import build_sampler
from pscpu.recorder.csv_recorder import CsvRecorder
from pscpu.util.log_config import configure_logging, setup_logger

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

logger = setup_logger(__name__)


def build_monitor(config: MonitorConfig) -> ProcessMonitor:
    sampler = build_sampler(config.backend, ps_command=config.ps_command)
    recorder = CsvRecorder(config.folder, config.pid, sync=config.sync)
    return ProcessMonitor(
        pid=config.pid,
        sampler=sampler,
        recorder=recorder,
        interval=config.seconds,
        max_samples=config.max_samples,
    )


def main(argv=None) -> int:
    """
    Main entry point.

    1. Parse arguments and the optional config file
    2. Open the csv file
    3. Sample until interrupted, a --count is reached or an error occurs

    Returns:
        Process exit status: 0 on interrupt / completed count,
        1 on query, parse or I/O errors, 2 on configuration errors
    """
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    level = logging.DEBUG if args.verbose else logging.INFO
    try:
        configure_logging(level, Path(config.log_file) if config.log_file else None)
    except OSError as e:
        logger.error(f"Cannot open log file {config.log_file}: {e}")
        return EXIT_CONFIG_ERROR
    logger.debug(f"Configuration: {config}")

    monitor = build_monitor(config)
    previous_handlers = install_signal_handlers(monitor)
    try:
        monitor.run()
    except PscpuError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    finally:
        restore_signal_handlers(previous_handlers)

    logger.info(f"Stopped after {monitor.samples_taken} sample(s), data in {monitor.recorder.path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
