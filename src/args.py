"""Argument parsing functionality for dephub."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="dephub",
        description=(
            "dephub - Composer and PIP version constraint checker"
        ),
        add_help=True,
    )

    parser.add_argument("-t", "--type",
                        dest="package_type",
                        help="Package Manager Type, i.e: composer, pip",
                        action="store", type=str.lower,
                        choices=Constants.SUPPORTED_PACKAGES,
                        required=True)

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-m", "--match",
                        dest="MATCH",
                        help="Check whether VERSION satisfies CONSTRAINT",
                        nargs=2,
                        metavar=("VERSION", "CONSTRAINT"),
                        type=str)
    input_group.add_argument("-d", "--directory",
                    dest="FROM_SRC",
                    help="Extract dependencies from local source repository",
                    action="store",
                    type=str)
    input_group.add_argument("-g", "--git",
                            dest="FROM_GIT",
                            help="Extract dependencies from a git repository (github.com only)",
                            action="store", type=str)

    parser.add_argument("--ref",
                        dest="REF",
                        help="Commit hash, branch or tag used with --git (default branch if omitted)",
                        action="store",
                        type=str,
                        default="")
    parser.add_argument("--requirements-file",
                        dest="REQUIREMENTS_FILE",
                        help="Requirements file name for pip projects (default: requirements.txt)",
                        action="store",
                        type=str)
    parser.add_argument("--dev",
                        dest="INCLUDE_DEV",
                        help="Include Composer dev dependencies",
                        action="store_true")

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("-u", "--updates",
                        dest="UPDATES",
                        help="Report the latest release of every dependency",
                        action="store_true")
    mode_group.add_argument("--compatible",
                        dest="COMPATIBLE",
                        help="Report the newest locked-version upgrade allowed by each constraint",
                        action="store_true")
    parser.add_argument("--incompatible-only",
                        dest="INCOMPATIBLE_ONLY",
                        help="With --updates, only report releases outside the declared constraint",
                        action="store_true")

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=['json', 'csv'])

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML config file",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: DEPHUB_LOG_LEVEL or INFO)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    return parser.parse_args(argv)
