"""
CLI-facing error reporting for the ECU reporter handlers.

Every handler is wrapped by ``handler_error_wrapper``: reporter errors are
explained to the user with a headline and a few hints, then re-raised so
``main()`` can turn them into an exit code.
"""

import logging
import argparse
import functools
from typing import Callable, List

from ..exceptions import (
    ReporterError,
    ApiError,
    NetworkError,
    ConfigurationError,
    FileSystemError,
    ValidationError,
    DataError,
    ScanNotFoundError,
    CVENotFoundError,
    UpstreamUnavailableError,
)

logger = logging.getLogger("ecu-reporter")

EXPECTED_ERRORS = (
    ScanNotFoundError,
    CVENotFoundError,
    UpstreamUnavailableError,
    FileSystemError,
    ApiError,
    NetworkError,
    ValidationError,
    ConfigurationError,
    DataError,
)


def _scan_not_found(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return [
        "❌ Cannot continue: The requested scan does not exist",
        f"   Scan '{getattr(params, 'scan_id', 'unknown')}' was not found in the scan store.",
        "",
        "💡 Check that:",
        "   • the scan id was copied correctly",
        "   • --store-url or --data-file points at the right store",
    ]


def _cve_not_found(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return [
        f"❌ The NVD has no record for '{getattr(params, 'cve_id', 'unknown')}'",
        f"   {error.message}",
    ]


def _upstream_unavailable(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return [
        "❌ NVD unavailable",
        f"   {error.message}",
        "",
        "💡 Nothing is cached for this CVE yet; retry once the NVD is reachable",
    ]


def _network(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return [
        "❌ Could not reach the scan store",
        f"   {error.message}",
        "",
        "💡 Check that:",
        f"   • the store URL is right: {getattr(params, 'store_url', None) or '<not specified>'}",
        "   • this machine can reach it",
    ]


def _api(error: ReporterError, params: argparse.Namespace) -> List[str]:
    lines = ["❌ The scan store rejected the request", f"   {error.message}"]
    if error.code:
        lines.append(f"   Error code: {error.code}")
    return lines


def _file_system(error: ReporterError, params: argparse.Namespace) -> List[str]:
    lines = [
        "❌ Could not write the output",
        f"   {error.message}",
        "",
        "💡 Check that the target directory is writable",
    ]
    if getattr(params, 'output', None):
        lines.append(f"   • --output was: {params.output}")
    return lines


def _validation(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return ["❌ Invalid input", f"   {error.message}", "", "💡 Review the command-line arguments"]


def _configuration(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return [
        "❌ Configuration problem",
        f"   {error.message}",
        "",
        "💡 Review the command-line arguments and ECU_* / NVD_* environment variables",
    ]


def _data(error: ReporterError, params: argparse.Namespace) -> List[str]:
    return ["❌ The scan store returned data that could not be read", f"   {error.message}"]


ERROR_EXPLAINERS = [
    (ScanNotFoundError, _scan_not_found),
    (CVENotFoundError, _cve_not_found),
    (UpstreamUnavailableError, _upstream_unavailable),
    (NetworkError, _network),
    (ApiError, _api),
    (FileSystemError, _file_system),
    (ValidationError, _validation),
    (ConfigurationError, _configuration),
    (DataError, _data),
]


def format_and_print_error(error: Exception, handler_name: str, params: argparse.Namespace):
    """
    Print a user-facing explanation of a handler failure.

    Args:
        error: The exception raised by the handler
        handler_name: Name of the failing handler
        params: Command line parameters
    """
    if not isinstance(error, ReporterError):
        error = ReporterError(str(error))

    explain = next((fn for cls, fn in ERROR_EXPLAINERS if isinstance(error, cls)), None)
    if explain is not None:
        lines = explain(error, params)
    else:
        lines = [f"❌ Error executing '{getattr(params, 'command', 'unknown')}' command: {error.message}"]

    print()
    for line in lines:
        print(line)

    if error.code and not isinstance(error, ApiError):
        print(f"\nError code: {error.code}")

    if getattr(params, 'log', 'INFO') == 'DEBUG' and error.details:
        print(f"\nDetails ({handler_name}):")
        for key, value in error.details.items():
            print(f"  • {key}: {value}")
    else:
        print("\nRun with --log DEBUG to see error details")


def handler_error_wrapper(handler_func: Callable) -> Callable:
    """
    Decorate a command handler with the CLI's error reporting.

    Reporter errors are printed and re-raised as they are. Anything else is
    logged with its traceback and re-raised as a ``ReporterError`` chained to
    the original.
    """
    @functools.wraps(handler_func)
    def wrapper(store, params):
        name = handler_func.__name__
        try:
            logger.debug(f"{name} starting for '{getattr(params, 'command', 'unknown')}'")
            return handler_func(store, params)
        except EXPECTED_ERRORS as e:
            logger.debug(f"{name} failed: {type(e).__name__}: {e.message}")
            format_and_print_error(e, name, params)
            raise
        except Exception as e:
            logger.error(f"{name} crashed: {e}", exc_info=True)
            wrapped = ReporterError(
                f"Failed to execute {getattr(params, 'command', 'command')}: {e}",
                details={"error": str(e), "handler": name},
            )
            format_and_print_error(wrapped, name, params)
            raise wrapped from e

    return wrapper
