"""Argument parsing functionality for vbump."""

import argparse

from vbump.constants import Constants


def comma_split(values):
    """Flatten repeated, comma separated option values into one list."""
    out = []
    for value in values or []:
        out.extend(v.strip() for v in value.split(",") if v.strip())
    return out


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="vbump",
        description=(
            "Bump/update/output version variables that represent artifacts by "
            "looking at their source repositories and filtering smartly."
        ),
        add_help=True,
    )

    parser.add_argument("SPEC_FILES",
                        help="Comma separated version spec files and/or directories "
                             "(directories are searched for version-spec.yaml/yml)",
                        nargs="+",
                        type=str)
    parser.add_argument("--defaults-files",
                        dest="DEFAULTS_FILES",
                        help="Comma separated files with default spec data. "
                             "Not used for selecting which variables to query.",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--enumerate",
                        dest="ENUMERATE",
                        help="List all available versions that match each variable version spec",
                        action="store_true")
    parser.add_argument("--print-full-spec",
                        dest="PRINT_FULL_SPEC",
                        help="Output the full, merged version spec",
                        action="store_true")
    parser.add_argument("-f", "--output-format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (default: dotenv)",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS,
                        default="dotenv")
    parser.add_argument("--local-only",
                        dest="LOCAL_ONLY",
                        help="Do not query remote registries (use version-default values)",
                        action="store_true")
    parser.add_argument("--all-local",
                        dest="ALL_LOCAL",
                        help="Include every historical git (voom) version, not just the latest",
                        action="store_true")
    parser.add_argument("--root-dir",
                        dest="ROOT_DIR",
                        help="Base directory for git paths starting with '.' or '/' (default: .)",
                        action="store",
                        type=str,
                        default=".")
    parser.add_argument("--dirty-suffix",
                        dest="DIRTY_SUFFIX",
                        help="Suffix for git versions with uncommitted changes",
                        action="store",
                        type=str,
                        default=Constants.DIRTY_SUFFIX)
    parser.add_argument("--allow-unresolved",
                        dest="ALLOW_UNRESOLVED",
                        help="Do not fail when a variable resolves to no version",
                        action="store_true")

    parser.add_argument("--profile",
                        dest="PROFILE",
                        help="AWS profile for ECR access [env: PROFILE]",
                        action="store",
                        type=str)
    parser.add_argument("--no-profile",
                        dest="NO_PROFILE",
                        help="Ignore any AWS profile for ECR access",
                        action="store_true")
    parser.add_argument("--artifactory-base-url",
                        dest="ARTIFACTORY_BASE_URL",
                        help="Artifactory base URL [env: ARTIFACTORY_BASE_URL]",
                        action="store",
                        type=str)
    parser.add_argument("--artifactory-username",
                        dest="ARTIFACTORY_USERNAME",
                        help="Artifactory username [env: ARTIFACTORY_USERNAME]",
                        action="store",
                        type=str)
    parser.add_argument("--artifactory-identity-token",
                        dest="ARTIFACTORY_IDENTITY_TOKEN",
                        help="Artifactory identity token [env: ARTIFACTORY_IDENTITY_TOKEN]",
                        action="store",
                        type=str)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--debug",
                        dest="DEBUG",
                        help="Show debug/trace output (stderr), same as --loglevel DEBUG",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.OUTPUT_FORMAT == "dotenv" and (args.ENUMERATE or args.PRINT_FULL_SPEC):
        parser.error("Cannot use default 'dotenv' format with --enumerate or --print-full-spec")
    return args
