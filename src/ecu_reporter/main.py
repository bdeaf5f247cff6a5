import sys
import time
import logging

from .cli import parse_cmdline_args
from .utilities.output_utils import format_duration
from .exceptions import (
    ReporterError,
    ApiError,
    NetworkError,
    ConfigurationError,
    DataError,
    FileSystemError,
    ValidationError,
    ScanNotFoundError,
    CVENotFoundError,
    UpstreamUnavailableError,
)
from .handlers import (
    handle_generate_report,
    handle_export_sbom,
    handle_fetch_cve,
    handle_serve,
)

LOG_FILE = "ecu-reporter-log.txt"
SECRET_PARAMS = {'store_key', 'nvd_api_key'}


def setup_logging(level_name: str) -> logging.Logger:
    """Full records go to the log file, short ones to stdout."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.FileHandler(LOG_FILE, mode='w')],
        force=True,
    )
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    console.setLevel(level)
    logging.getLogger().addHandler(console)
    return logging.getLogger("ecu-reporter")


def print_configuration(params) -> None:
    reveal_secrets = params.log.upper() == 'DEBUG'
    print("--- ECU Reporter Configuration ---")
    print(f"Command: {params.command}")
    for key, value in sorted(vars(params).items()):
        if key in ('command', 'settings'):
            continue
        if key in SECRET_PARAMS and not reveal_secrets:
            value = "****" if value else "Not Set"
        print(f"  {key:<30} = {value}")
    print("-" * 34)


def main() -> int:
    """
    Entry point of the ``ecu-reporter`` command.

    Parses arguments, configures logging, builds the scan store client and
    runs the selected command. Returns 0 on success and 1 on any failure.
    """
    start_time = time.monotonic()
    logger = None

    try:
        params = parse_cmdline_args()
        logger = setup_logging(params.log)
        print_configuration(params)

        command_handlers = {
            "generate-report": handle_generate_report,
            "export-sbom": handle_export_sbom,
            "fetch-cve": handle_fetch_cve,
            "serve": handle_serve,
        }
        handler = command_handlers.get(params.command)
        if handler is None:
            print(f"Error: Unknown command '{params.command}'.")
            logger.error(f"No handler registered for command '{params.command}'")
            return 1

        store = params.settings.build_store()
        logger.info("Scan store client initialized.")

        handler(store, params)
        print("\nECU Reporter finished successfully.")
        return 0

    except (ConfigurationError, ValidationError, ScanNotFoundError, CVENotFoundError) as e:
        # Usage problems: no traceback in the log
        print(f"\nRuntime Error: {e.message}")
        if logger: logger.error("%s: %s", type(e).__name__, e.message)
        return 1
    except (ApiError, NetworkError, UpstreamUnavailableError, DataError, FileSystemError) as e:
        print(f"\nRuntime Error: {e.message}")
        if logger: logger.error("%s: %s", type(e).__name__, e.message, exc_info=True)
        return 1
    except ReporterError as e:
        print(f"\nECU Reporter Error: {e.message}")
        if logger: logger.error("Unhandled ReporterError: %s", e.message, exc_info=True)
        return 1
    except Exception as e:
        print(f"\nUnexpected Error: {e}")
        if logger: logger.critical("Unexpected error occurred", exc_info=True)
        return 1
    finally:
        duration = format_duration(time.monotonic() - start_time)
        print(f"\nTotal Execution Time: {duration}")
        if logger: logger.info("Total execution time: %s", duration)


if __name__ == "__main__":
    sys.exit(main())
