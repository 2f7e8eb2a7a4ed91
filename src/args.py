"""Argument parsing functionality for PeerFix."""

import argparse

from constants import Constants, VERSION


def positive_int(value):
    """argparse type for integers >= 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser():
    """Builds the argument parser."""
    parser = argparse.ArgumentParser(
        prog="peerfix",
        description=(
            "PeerFix - analyze and fix peer dependency issues"
        ),
        add_help=True,
    )

    parser.add_argument("-v", "--version",
                        action="version",
                        version=f"peerfix v{VERSION}")
    parser.add_argument("--fix",
                        dest="FIX",
                        help="Install missing or conflicting peer dependencies",
                        action="store_true")
    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Project directory containing package.json (default: current directory)",
                        action="store",
                        type=str,
                        default=".")
    parser.add_argument("-m", "--manager",
                        dest="MANAGER",
                        help="Package manager used for suggested and executed installs",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_MANAGERS)
    parser.add_argument("-s", "--source",
                        dest="SOURCE",
                        help="Where peer metadata is read from (default: installed)",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_SOURCES)
    parser.add_argument("--registry-url",
                        dest="REGISTRY_URL",
                        help="npm registry base URL for --source registry",
                        action="store",
                        type=str)
    parser.add_argument("--batch-size",
                        dest="BATCH_SIZE",
                        help=f"Packages per install command (default: {Constants.BATCH_SIZE})",
                        action="store",
                        type=positive_int)
    parser.add_argument("--workers",
                        dest="WORKERS",
                        help=f"Concurrent metadata fetches (default: {Constants.MAX_WORKERS})",
                        action="store",
                        type=positive_int)
    parser.add_argument("--ignore",
                        dest="IGNORE",
                        help="Regex of peer names to ignore (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--optional",
                        dest="OPTIONAL",
                        help="Peer name to report as optional (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to JSON report file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if warnings are present.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output the report to the console.",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
