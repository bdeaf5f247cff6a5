# ecu_reporter/handlers/generate_report.py

import logging
import argparse
from typing import TYPE_CHECKING

from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output_utils import save_document
from ..utilities.reporting.report_generator import generate_report

if TYPE_CHECKING:
    from ..api import StoreAPI

logger = logging.getLogger("ecu-reporter")


@handler_error_wrapper
def handle_generate_report(store: "StoreAPI", params: argparse.Namespace) -> bool:
    """
    Handler for the 'generate-report' command. Renders the vulnerability report
    of one scan and writes it to disk.

    Args:
        store: The scan store client
        params: Command line parameters

    Returns:
        bool: True if the report was written
    """
    print(f"\n--- Running {params.command.upper()} Command ---")

    print(f"\nBuilding {params.format} report for scan '{params.scan_id}'...")
    document = generate_report(store, params.scan_id, params.format)

    filepath = save_document(document, params.output)
    print(f"Saved report to: {filepath}")
    logger.info(f"Report for scan '{params.scan_id}' written to {filepath} ({document.content_type})")
    return True
