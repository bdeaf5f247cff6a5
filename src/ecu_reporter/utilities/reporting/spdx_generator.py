"""
SPDX 2.3 SBOM generation.

This module renders a scan's component inventory as an SPDX 2.3 JSON document:
a root package describing the firmware (``SPDXRef-RootPackage``), one package
per component (``SPDXRef-Package-<index>``) carrying its CVE ids as security
external references, and a ``CONTAINS`` relationship from the root to every
component package.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...models import SBOMComponent, Scan
from .sbom_utils import SCANNER_NAME, SCANNER_VERSION, UNKNOWN, format_sbom_timestamp

logger = logging.getLogger(__name__)

SPDX_VERSION = "SPDX-2.3"
SPDX_LICENSE_LIST_VERSION = "3.19"
SPDX_NAMESPACE_BASE = "https://spdx.org/spdxdocs/"
ROOT_PACKAGE_ID = "SPDXRef-RootPackage"
NOASSERTION = "NOASSERTION"


def package_ref(index: int) -> str:
    """SPDX id of the package for the component at ``index``."""
    return f"SPDXRef-Package-{index}"


def _root_package(scan: Scan) -> Dict[str, Any]:
    return {
        "SPDXID": ROOT_PACKAGE_ID,
        "name": scan.ecu_name,
        "versionInfo": scan.version or UNKNOWN,
        "packageFileName": scan.file_name,
        "downloadLocation": NOASSERTION,
        "filesAnalyzed": False,
        "supplier": f"Organization: {scan.manufacturer}" if scan.manufacturer else NOASSERTION,
        "primaryPackagePurpose": "FIRMWARE",
    }


def _component_package(index: int, component: SBOMComponent) -> Dict[str, Any]:
    return {
        "SPDXID": package_ref(index),
        "name": component.component_name,
        "versionInfo": component.version or NOASSERTION,
        "downloadLocation": NOASSERTION,
        "filesAnalyzed": False,
        "licenseConcluded": component.license or NOASSERTION,
        "licenseDeclared": component.license or NOASSERTION,
        "copyrightText": NOASSERTION,
        "externalRefs": [
            {
                "referenceCategory": "SECURITY",
                "referenceType": "cpe23Type",
                "referenceLocator": cve,
            }
            for cve in component.vulnerabilities
        ],
    }


def build_spdx_document(
    scan: Scan,
    components: List[SBOMComponent],
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the SPDX document as a dictionary.

    Args:
        scan: The scanned firmware, described by the root package
        components: Component inventory, in the order the ids are assigned
        timestamp: Creation timestamp (defaults to now, UTC)

    Returns:
        Dict with the SPDX 2.3 fields in canonical order
    """
    return {
        "spdxVersion": SPDX_VERSION,
        "dataLicense": "CC0-1.0",
        "SPDXID": "SPDXRef-DOCUMENT",
        "name": f"SBOM for {scan.ecu_name}",
        "documentNamespace": f"{SPDX_NAMESPACE_BASE}{scan.id}",
        "creationInfo": {
            "created": format_sbom_timestamp(timestamp),
            "creators": [f"Tool: {SCANNER_NAME}-{SCANNER_VERSION}"],
            "licenseListVersion": SPDX_LICENSE_LIST_VERSION,
        },
        "packages": [_root_package(scan)] + [
            _component_package(i, comp) for i, comp in enumerate(components)
        ],
        "relationships": [
            {
                "spdxElementId": ROOT_PACKAGE_ID,
                "relationshipType": "CONTAINS",
                "relatedSpdxElement": package_ref(i),
            }
            for i in range(len(components))
        ],
    }


def generate_spdx(
    scan: Scan,
    components: List[SBOMComponent],
    timestamp: Optional[datetime] = None,
) -> str:
    """Render the SPDX document as pretty-printed JSON."""
    document = build_spdx_document(scan, components, timestamp)
    logger.debug(f"SPDX document for scan '{scan.id}': {len(document['packages'])} packages")
    return json.dumps(document, indent=2, ensure_ascii=False)
