# ecu_reporter/handlers/export_sbom.py

import logging
import argparse
from typing import TYPE_CHECKING

from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output_utils import save_document
from ..utilities.reporting.sbom_exporter import export_sbom
from ..utilities.sbom_validator import SBOMValidator

if TYPE_CHECKING:
    from ..api import StoreAPI

logger = logging.getLogger("ecu-reporter")


@handler_error_wrapper
def handle_export_sbom(store: "StoreAPI", params: argparse.Namespace) -> bool:
    """
    Handler for the 'export-sbom' command. Exports the component inventory of
    one scan as CycloneDX, SPDX or SWID and writes it to disk.

    With --validate, the generated document is checked by the format's own
    tooling first; issues are reported as warnings and the document is still
    written.

    Args:
        store: The scan store client
        params: Command line parameters

    Returns:
        bool: True if the SBOM was written
    """
    print(f"\n--- Running {params.command.upper()} Command ---")

    print(f"\nExporting {params.format} SBOM for scan '{params.scan_id}'...")
    document = export_sbom(store, params.scan_id, params.format)

    if getattr(params, 'validate', False):
        print("\nValidating generated SBOM...")
        issues = SBOMValidator.validate(params.format.lower(), document.body)
        if issues:
            print(f"⚠️  {len(issues)} validation issue(s) reported:")
            for issue in issues:
                print(f"   • {issue}")
                logger.warning(f"SBOM validation issue: {issue}")
        else:
            print("✅ SBOM passed validation")

    filepath = save_document(document, params.output)
    print(f"Saved SBOM to: {filepath}")
    logger.info(f"SBOM for scan '{params.scan_id}' written to {filepath}")
    return True
