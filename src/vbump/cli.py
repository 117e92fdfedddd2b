"""vbump - resolve artifact versions from layered version spec files."""
import logging
import sys

import yaml

from vbump.args import comma_split, parse_args
from vbump.cli_config import apply_env_overrides, config_from_args
from vbump.common.logging_utils import configure_logging, extra_context, is_debug_enabled
from vbump.constants import ExitCodes
from vbump.output import format_output
from vbump.versioning.defaults import (
    find_spec_files,
    load_default_file,
    load_version_spec,
    merge_spec_files,
)
from vbump.versioning.errors import (
    ConfigurationError,
    SpecValidationError,
    UnresolvedVersionsError,
    UpstreamQueryError,
)
from vbump.versioning.service import build_output, resolve_spec_sync
from vbump.versioning.validate import normalize_spec

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging("DEBUG" if args.DEBUG else args.LOG_LEVEL)
    if args.LOG_FILE:
        file_handler = logging.FileHandler(args.LOG_FILE)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", args.LOG_FILE)


def load_inputs(args):
    """Load defaults documents and the merged version spec named on the command line."""
    defaults = [load_default_file(path) for path in comma_split(args.DEFAULTS_FILES)]
    spec_files = find_spec_files(comma_split(args.SPEC_FILES))
    if not spec_files:
        raise FileNotFoundError(f"No version spec files found in: {', '.join(args.SPEC_FILES)}")
    logger.info("Loading version specs: %s", " ".join(spec_files))
    version_spec = merge_spec_files(load_version_spec(path) for path in spec_files)
    return defaults, version_spec


def run(args) -> int:
    """Resolve and print versions; return the process exit code."""
    try:
        defaults, version_spec = load_inputs(args)
    except (OSError, yaml.YAMLError, SpecValidationError) as e:
        logger.error("Could not load spec files: %s", e)
        return ExitCodes.FILE_ERROR.value

    try:
        full_spec = normalize_spec(defaults, version_spec, checked=True)
        if args.PRINT_FULL_SPEC:
            sys.stdout.write(format_output(args.OUTPUT_FORMAT, full_spec))
            return ExitCodes.SUCCESS.value

        config = config_from_args(args)
        results = resolve_spec_sync(config, full_spec)
    except (SpecValidationError, UnresolvedVersionsError) as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value
    except ConfigurationError as e:
        logger.error("%s", e)
        return ExitCodes.CONFIG_ERROR.value
    except UpstreamQueryError as e:
        logger.error("%s", e)
        return ExitCodes.CONNECTION_ERROR.value

    sys.stdout.write(format_output(args.OUTPUT_FORMAT, build_output(results, args.ENUMERATE)))
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    apply_env_overrides(args)
    _setup_logging(args)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main"),
        )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
