# pscpu/cli/pscpu_cli.py
import argparse
from pathlib import Path

from pscpu import __version__
from pscpu.config.config_loader import ConfigLoader
from pscpu.config.monitor_config import DEFAULT_SECONDS, MonitorConfig
from pscpu.consts.SamplerBackend import SamplerBackend

USAGE_DESCRIPTION = f"""\
pscpu - v{__version__}

Monitor cpu usage in % of a process to a csv file.
Each line of the csv file will be in the format:

    RFC3339_TIMESTAMP,CPU_USAGE

For example: 2015-01-05T14:44:05+01:00,66.6
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pscpu",
        description=USAGE_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("-p", "--pid", type=int, default=None,
                    help="REQUIRED, the pid of the process to monitor")
    ap.add_argument("-f", "--folder", type=str, default=None,
                    help="output folder of the csv file, defaults to current working directory")
    ap.add_argument("-s", "--seconds", type=int, default=None,
                    help=f"collect stats of cpu usage every s seconds (default: {DEFAULT_SECONDS})")
    ap.add_argument("-n", "--count", type=int, default=None,
                    help="stop after n samples (default: 0, run until interrupted)")
    ap.add_argument("--backend", choices=[b.value for b in SamplerBackend], default=None,
                    help="how to query the cpu usage: ps | psutil (default: ps)")
    ap.add_argument("--ps-command", type=str, default=None,
                    help="ps executable name or path (default: ps)")
    ap.add_argument("--sync", action="store_const", const=True, default=None,
                    help="fsync the csv file every time it is flushed")
    ap.add_argument("--config", type=Path, default=None,
                    help="YAML file with default values for the options above")
    ap.add_argument("--env", type=str, default=None,
                    help=(
                        "Environment name for configuration override (e.g., 'dev', 'prod'). "
                        "Loads <config>_<env>.yaml in addition to --config."
                    ))
    ap.add_argument("--log-file", type=str, default=None,
                    help="also write debug logs to this file")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="show debug messages on stderr")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def build_config(args: argparse.Namespace) -> MonitorConfig:
    """
    Merge the parsed arguments over the optional config file.

    Raises:
        ConfigError: if a value is missing or invalid
    """
    loader = ConfigLoader(args.config, env=args.env)
    return loader.load({
        "pid": args.pid,
        "folder": args.folder,
        "seconds": args.seconds,
        "count": args.count,
        "backend": args.backend,
        "ps_command": args.ps_command,
        "sync": args.sync,
        "log_file": args.log_file,
    })


def parse_args(argv=None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
