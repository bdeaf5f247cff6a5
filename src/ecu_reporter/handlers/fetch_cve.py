# ecu_reporter/handlers/fetch_cve.py

import json
import logging
import argparse
from typing import TYPE_CHECKING

from ..models import RenderedDocument
from ..utilities.error_handling import handler_error_wrapper
from ..utilities.output_utils import save_document
from ..utilities.reporting.cve_resolver import CVEResolver

if TYPE_CHECKING:
    from ..api import StoreAPI

logger = logging.getLogger("ecu-reporter")


@handler_error_wrapper
def handle_fetch_cve(store: "StoreAPI", params: argparse.Namespace) -> bool:
    """
    Handler for the 'fetch-cve' command. Resolves one CVE through the cache
    and prints it, or writes it to --output.

    Args:
        store: The scan store client (holds the CVE cache)
        params: Command line parameters

    Returns:
        bool: True if the CVE was resolved
    """
    print(f"\n--- Running {params.command.upper()} Command ---")

    settings = params.settings
    resolver = CVEResolver(
        store,
        settings.build_nvd_client(),
        ttl=settings.cve_cache_ttl,
        single_flight=settings.cve_single_flight,
    )

    print(f"\nResolving {params.cve_id}...")
    entry = resolver.resolve(params.cve_id)
    body = json.dumps(entry.to_row(), indent=2, ensure_ascii=False)

    if params.output:
        document = RenderedDocument(body=body, filename=f"{entry.cve_id}.json", content_type="application/json")
        filepath = save_document(document, params.output)
        print(f"Saved CVE data to: {filepath}")
    else:
        print(body)

    cvss = entry.cvss_score if entry.cvss_score is not None else "N/A"
    severity = (entry.severity or "unknown").upper()
    print(f"\n{entry.cve_id}: CVSS {cvss} ({severity}), fetched at {entry.fetched_at.isoformat()}")
    return True
