# ecu_reporter/cli.py

import argparse
import os
import logging
from argparse import RawTextHelpFormatter

from .config import Settings
from .exceptions import ValidationError
from .utilities.reporting.report_generator import REPORT_FORMATS
from .utilities.reporting.sbom_exporter import SBOM_FORMATS

logger = logging.getLogger(__name__)


# --- Helper functions for common arguments ---
def add_scan_options(subparser):
    scan_args = subparser.add_argument_group("Scan Selection")
    scan_args.add_argument("--scan-id", help="Identifier of the scan to read.", required=True, metavar="ID")


def add_output_options(subparser, what: str):
    output_args = subparser.add_argument_group("Output Options")
    output_args.add_argument(
        "--output",
        help=f"Write the {what} to this file or directory (Default: the suggested filename in the current directory).",
        metavar="PATH",
    )


# --- Main Parsing Function ---
def parse_cmdline_args():
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments, with the effective
        ``settings`` (environment overlaid by command-line values) attached

    Raises:
        ValidationError: If required arguments are missing or invalid
        ConfigurationError: If an environment variable cannot be parsed
    """
    parser = argparse.ArgumentParser(
        description="ECU Reporter - reports, SBOMs and CVE data for ECU firmware scans.",
        formatter_class=RawTextHelpFormatter,
        epilog="""
Environment Variables:
  ECU_STORE_URL        : Scan store URL (e.g., https://<project>.supabase.co)
  ECU_STORE_KEY        : Scan store service key
  ECU_DATA_FILE        : JSON dump of the store tables, used when no store URL is set
  NVD_API_URL          : NVD CVE API endpoint
  NVD_API_KEY          : NVD API key (sent as the apiKey header)
  NVD_TIMEOUT          : NVD request timeout in seconds (Default: 30)
  CVE_CACHE_TTL_HOURS  : CVE cache freshness window in hours (Default: 24)
  CVE_SINGLE_FLIGHT    : Serialize concurrent lookups of the same CVE (Default: true)

Example Usage:
  # Markdown report for a scan
  ecu-reporter --store-url <URL> --store-key <KEY> \\
    generate-report --scan-id 3f6c... --format markdown

  # CycloneDX SBOM, validated against the 1.5 schema
  ecu-reporter --store-url <URL> --store-key <KEY> \\
    export-sbom --scan-id 3f6c... --format cyclonedx --validate --output sboms/

  # SWID tag from a local data dump
  ecu-reporter --data-file ./scans.json export-sbom --scan-id 3f6c... --format swid

  # Resolve a CVE through the cache
  ecu-reporter --store-url <URL> --store-key <KEY> fetch-cve --cve-id CVE-2021-44228

  # Serve the HTTP endpoints
  ecu-reporter --store-url <URL> --store-key <KEY> serve --port 8000
"""
    )

    # --- Global Arguments (apply to all subcommands) ---
    global_args = parser.add_argument_group("Global Arguments")
    global_args.add_argument(
        "--store-url",
        help="Scan store URL. Overrides ECU_STORE_URL env var.",
        default=os.getenv("ECU_STORE_URL"),
        metavar="URL"
    )
    global_args.add_argument(
        "--store-key",
        help="Scan store service key. Overrides ECU_STORE_KEY env var.",
        default=os.getenv("ECU_STORE_KEY"),
        metavar="KEY"
    )
    global_args.add_argument(
        "--data-file",
        help="Read scans from a JSON dump instead of a remote store. Overrides ECU_DATA_FILE env var.",
        default=os.getenv("ECU_DATA_FILE"),
        metavar="PATH"
    )
    global_args.add_argument(
        "--log",
        help="Logging level (Default: INFO)",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )

    # --- Subparsers ---
    subparsers = parser.add_subparsers(dest='command', help='Available commands', required=True, metavar='COMMAND')

    # --- 'generate-report' Subcommand ---
    report_parser = subparsers.add_parser(
        'generate-report',
        help='Generate the vulnerability report of a scan.',
        formatter_class=RawTextHelpFormatter,
    )
    add_scan_options(report_parser)
    report_parser.add_argument(
        "--format",
        help="Report format (Default: json). 'pdf' is deprecated and produces JSON.",
        choices=list(REPORT_FORMATS),
        default="json",
    )
    add_output_options(report_parser, "report")

    # --- 'export-sbom' Subcommand ---
    sbom_parser = subparsers.add_parser(
        'export-sbom',
        help='Export the SBOM of a scan as CycloneDX, SPDX or SWID.',
        formatter_class=RawTextHelpFormatter,
    )
    add_scan_options(sbom_parser)
    sbom_parser.add_argument(
        "--format",
        help="SBOM format.",
        choices=list(SBOM_FORMATS),
        required=True,
    )
    sbom_parser.add_argument(
        "--validate",
        help="Check the generated document with the format's validator before writing it.",
        action="store_true",
        default=False,
    )
    add_output_options(sbom_parser, "SBOM")

    # --- 'fetch-cve' Subcommand ---
    cve_parser = subparsers.add_parser(
        'fetch-cve',
        help='Resolve a CVE through the cache, fetching it from the NVD when stale.',
        formatter_class=RawTextHelpFormatter,
    )
    cve_parser.add_argument("--cve-id", help="CVE identifier (e.g., CVE-2021-44228).", required=True, metavar="ID")
    nvd_args = cve_parser.add_argument_group("NVD Options")
    nvd_args.add_argument("--nvd-api-key", help="NVD API key. Overrides NVD_API_KEY env var.", metavar="KEY")
    nvd_args.add_argument("--nvd-timeout", help="NVD request timeout in seconds. Overrides NVD_TIMEOUT env var.", type=float, metavar="SECONDS")
    add_output_options(cve_parser, "CVE data")

    # --- 'serve' Subcommand ---
    serve_parser = subparsers.add_parser(
        'serve',
        help='Serve the generate-report, export-sbom and fetch-cve HTTP endpoints.',
        formatter_class=RawTextHelpFormatter,
    )
    serve_parser.add_argument("--host", help="Interface to bind (Default: 127.0.0.1)", default="127.0.0.1")
    serve_parser.add_argument("--port", help="Port to listen on (Default: 8000)", type=int, default=8000)

    args = parser.parse_args()

    # Validate store parameters
    if args.store_url and not args.store_key:
        raise ValidationError("A store key must be provided with --store-url (or ECU_STORE_KEY)")
    if not args.store_url and not args.data_file:
        raise ValidationError("Either --store-url/--store-key or --data-file must be provided")
    if args.data_file and not args.store_url and not os.path.exists(args.data_file):
        raise ValidationError(f"Data file does not exist: {args.data_file}")

    # Validate command-specific parameters
    if args.command == 'fetch-cve':
        if not args.cve_id.strip():
            raise ValidationError("CVE ID required")
        if args.nvd_timeout is not None and args.nvd_timeout <= 0:
            raise ValidationError("--nvd-timeout must be greater than zero")
    elif args.command == 'serve':
        if not 0 < args.port < 65536:
            raise ValidationError(f"Port must be between 1 and 65535: {args.port}")

    # Effective settings: environment first, command line on top
    settings = Settings.from_env()
    settings.store_url = args.store_url
    settings.store_key = args.store_key
    settings.data_file = args.data_file
    if getattr(args, 'nvd_api_key', None):
        settings.nvd_api_key = args.nvd_api_key
    if getattr(args, 'nvd_timeout', None):
        settings.nvd_timeout = args.nvd_timeout
    args.settings = settings

    return args
