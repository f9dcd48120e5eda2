"""dephub: Composer and PIP version constraint checker.

Matches single versions against constraints, lists the constraints declared
by a project (local directory or GitHub repository) and reports available
updates from Packagist or PyPI.
"""

import csv
import json
import logging
import sys

from args import parse_args
from checkers import ComposerUpdatesChecker, PipUpdatesChecker
from cli_config import apply_cli_overrides, load_config
from common.errors import (
    FileNotFoundInSource,
    ManifestError,
    RegistryError,
    UnsupportedSourceError,
)
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, PackageManagers
from sources import git_source, local_source
from versioning import VersioningError, satisfies

logger = logging.getLogger(__name__)

CONSTRAINT_FIELDS = ["name", "version"]
UPDATE_FIELDS = ["name", "version", "author", "url", "current_version", "current_constraint"]


def export_csv(rows, fields, path):
    """Exports result rows to a CSV file.

    Args:
        rows (list): List of result dicts.
        fields (list): Column names, in order.
        path (str): File path to export the CSV.
    """
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.DictWriter(file, fieldnames=fields, extrasaction="ignore")
            export.writeheader()
            export.writerows(rows)
        logging.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_json(rows, path):
    """Exports result rows to a JSON file.

    Args:
        rows (list): List of result dicts.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(rows, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _output_format(args):
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT
    if getattr(args, "OUTPUT", None) and args.OUTPUT.lower().endswith(".csv"):
        return "csv"
    return "json"


def write_results(args, rows, fields):
    """Write results to the output file, or print JSON to stdout."""
    if getattr(args, "OUTPUT", None):
        if _output_format(args) == "csv":
            export_csv(rows, fields, args.OUTPUT)
        else:
            export_json(rows, args.OUTPUT)
        return
    if args.QUIET:
        return
    if _output_format(args) == "csv":
        export = csv.DictWriter(sys.stdout, fieldnames=fields, extrasaction="ignore")
        export.writeheader()
        export.writerows(rows)
    else:
        print(json.dumps(rows, ensure_ascii=False, indent=4))


def setup_logging(args):
    """Configure root logging from --loglevel and --logfile."""
    configure_logging(args.LOG_LEVEL)
    if getattr(args, "LOG_FILE", None):
        handler = logging.FileHandler(args.LOG_FILE, encoding="utf-8")
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def build_source(args):
    """Create the dependency source selected on the command line."""
    kwargs = {
        "requirements_file": Constants.REQUIREMENTS_FILE,
        "include_dev": args.INCLUDE_DEV,
    }
    if args.FROM_GIT:
        return git_source(args.FROM_GIT, ref=args.REF, **kwargs)
    return local_source(args.FROM_SRC, **kwargs)


def build_checker(package_type):
    if package_type == PackageManagers.COMPOSER.value:
        return ComposerUpdatesChecker()
    return PipUpdatesChecker()


def run_match(args):
    """Handle -m/--match; exit code tells whether the version matched."""
    version, constraint = args.MATCH
    matched = satisfies(version, constraint, args.package_type)
    logging.info("%s %s %s", version, "satisfies" if matched else "does not satisfy", constraint)
    if not args.QUIET:
        print("true" if matched else "false")
    return ExitCodes.SUCCESS if matched else ExitCodes.NO_MATCH


def run_source(args):
    """Handle -d/--directory and -g/--git."""
    source = build_source(args)
    constraints = source.constraints(args.package_type)
    if is_debug_enabled(logger):
        logger.debug(
            "Loaded constraints",
            extra=extra_context(
                event="decision",
                component="cli",
                action="constraints",
                count=len(constraints)
            )
        )
    if not (args.UPDATES or args.COMPATIBLE):
        write_results(args, [c.to_dict() for c in constraints], CONSTRAINT_FIELDS)
        return ExitCodes.SUCCESS
    if not constraints:
        logging.warning("No packages found in the project manifest.")
        write_results(args, [], UPDATE_FIELDS)
        return ExitCodes.SUCCESS

    checker = build_checker(args.package_type)
    if args.COMPATIBLE:
        requirements = source.requirements(args.package_type)
        if not requirements:
            logging.warning("No locked requirements found; compatible updates need a lock file.")
            write_results(args, [], UPDATE_FIELDS)
            return ExitCodes.SUCCESS
        updates = checker.compatible_updates(constraints, requirements)
    else:
        updates = checker.last_updates(constraints, incompatible_only=args.INCOMPATIBLE_ONLY)
    logging.info("%d update(s) found.", len(updates))
    write_results(args, [u.to_dict() for u in updates], UPDATE_FIELDS)
    return ExitCodes.SUCCESS


def run(args):
    """Dispatch parsed arguments; returns an ExitCodes member."""
    try:
        if args.MATCH:
            return run_match(args)
        return run_source(args)
    except VersioningError as e:
        logging.error("%s", e)
        return ExitCodes.PARSE_ERROR
    except FileNotFoundInSource as e:
        logging.error("File not found: %s, aborting", e)
        return ExitCodes.FILE_ERROR
    except (ManifestError, UnsupportedSourceError) as e:
        logging.error("%s, aborting", e)
        return ExitCodes.FILE_ERROR
    except RegistryError as e:
        logging.error("%s, aborting", e)
        return ExitCodes.CONNECTION_ERROR


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    setup_logging(args)
    load_config(args.CONFIG)
    apply_cli_overrides(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )
    if args.INCOMPATIBLE_ONLY and not args.UPDATES:
        logging.warning("--incompatible-only is only applicable with --updates.")

    code = run(args)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome=code.name.lower())
        )
    sys.exit(code.value)


if __name__ == "__main__":
    main()
