"""
CycloneDX SBOM generation.

This module renders a scan's component inventory as a CycloneDX 1.5 JSON
document. The firmware image is the metadata component; every SBOM component
becomes a ``library`` referenced by ``component-<index>``, and the CVE ids
attached to components are flattened into the top-level ``vulnerabilities``
array, each pointing back at its owning component.

The encoder is a pure function of its inputs.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...models import SBOMComponent, Scan
from .sbom_utils import (
    ANALYZER_NAME,
    SCANNER_NAME,
    SCANNER_VERSION,
    UNKNOWN,
    build_generic_purl,
    format_sbom_timestamp,
)

logger = logging.getLogger(__name__)

CYCLONEDX_SPEC_VERSION = "1.5"
NVD_DETAIL_URL = "https://nvd.nist.gov/vuln/detail/"


def component_ref(index: int) -> str:
    """Stable synthetic bom-ref for the component at ``index``."""
    return f"component-{index}"


def _build_metadata(scan: Scan, timestamp: Optional[datetime]) -> Dict[str, Any]:
    return {
        "timestamp": format_sbom_timestamp(timestamp),
        "tools": [{
            "vendor": SCANNER_NAME,
            "name": ANALYZER_NAME,
            "version": SCANNER_VERSION,
        }],
        "component": {
            "type": "firmware",
            "name": scan.ecu_name,
            "version": scan.version or UNKNOWN,
            "description": f"{scan.ecu_type} ECU from {scan.manufacturer or 'Unknown'}",
            "properties": [
                {"name": "architecture", "value": scan.architecture},
                {"name": "manufacturer", "value": scan.manufacturer or "Unknown"},
            ],
        },
    }


def _build_component(index: int, component: SBOMComponent) -> Dict[str, Any]:
    return {
        "type": "library",
        "bom-ref": component_ref(index),
        "name": component.component_name,
        "version": component.version or UNKNOWN,
        "licenses": [{"license": {"id": component.license}}] if component.license else [],
        "purl": build_generic_purl(component.component_name, component.version),
        "properties": [
            {"name": "source_file", "value": component.source_file or UNKNOWN},
        ],
    }


def _build_vulnerabilities(components: List[SBOMComponent]) -> List[Dict[str, Any]]:
    vulnerabilities = []
    for index, component in enumerate(components):
        for cve in component.vulnerabilities:
            vulnerabilities.append({
                "id": cve,
                "source": {"name": "NVD", "url": f"{NVD_DETAIL_URL}{cve}"},
                "affects": [{"ref": component_ref(index)}],
            })
    return vulnerabilities


def build_cyclonedx_bom(
    scan: Scan,
    components: List[SBOMComponent],
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the CycloneDX document as a dictionary.

    Args:
        scan: The scanned firmware, described as the metadata component
        components: Component inventory, in the order the ids are assigned
        timestamp: Document timestamp (defaults to now, UTC)

    Returns:
        Dict with the CycloneDX 1.5 fields in canonical order
    """
    return {
        "bomFormat": "CycloneDX",
        "specVersion": CYCLONEDX_SPEC_VERSION,
        "serialNumber": f"urn:uuid:{scan.id}",
        "version": 1,
        "metadata": _build_metadata(scan, timestamp),
        "components": [_build_component(i, comp) for i, comp in enumerate(components)],
        "vulnerabilities": _build_vulnerabilities(components),
    }


def generate_cyclonedx(
    scan: Scan,
    components: List[SBOMComponent],
    timestamp: Optional[datetime] = None,
) -> str:
    """Render the CycloneDX document as pretty-printed JSON."""
    bom = build_cyclonedx_bom(scan, components, timestamp)
    logger.debug(
        f"CycloneDX BOM for scan '{scan.id}': {len(bom['components'])} components, "
        f"{len(bom['vulnerabilities'])} vulnerabilities"
    )
    return json.dumps(bom, indent=2, ensure_ascii=False)
