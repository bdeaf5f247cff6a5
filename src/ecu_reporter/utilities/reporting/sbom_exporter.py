"""
SBOM export: fetches a scan's component inventory and dispatches it to one of
the format encoders.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional, TYPE_CHECKING

from ...exceptions import ValidationError
from ...models import RenderedDocument, SBOMComponent, Scan
from .cyclonedx_generator import generate_cyclonedx
from .spdx_generator import generate_spdx
from .swid_generator import generate_swid

if TYPE_CHECKING:
    from ...api.scans_api import ScansAPI

logger = logging.getLogger(__name__)


class SBOMFormat(NamedTuple):
    encoder: Callable[[Scan, List[SBOMComponent], Optional[datetime]], str]
    content_type: str
    extension: str


SBOM_FORMATS: Dict[str, SBOMFormat] = {
    "cyclonedx": SBOMFormat(generate_cyclonedx, "application/json", "json"),
    "spdx": SBOMFormat(generate_spdx, "application/json", "json"),
    "swid": SBOMFormat(lambda scan, components, _timestamp: generate_swid(scan, components), "application/xml", "xml"),
}


def resolve_sbom_format(sbom_format: Optional[str]) -> str:
    fmt = (sbom_format or "").strip().lower()
    if fmt not in SBOM_FORMATS:
        raise ValidationError(
            "Invalid format. Use: cyclonedx, spdx, or swid",
            code="invalid_format",
            details={"format": sbom_format},
        )
    return fmt


def render_sbom(
    scan: Scan,
    components: List[SBOMComponent],
    sbom_format: str,
    timestamp: Optional[datetime] = None,
) -> RenderedDocument:
    """Encode already-fetched scan data without touching the store."""
    fmt = resolve_sbom_format(sbom_format)
    entry = SBOM_FORMATS[fmt]
    return RenderedDocument(
        body=entry.encoder(scan, components, timestamp),
        filename=f"{scan.ecu_name}-sbom-{fmt}.{entry.extension}",
        content_type=entry.content_type,
    )


def export_sbom(
    store: "ScansAPI",
    scan_id: str,
    sbom_format: Optional[str],
    timestamp: Optional[datetime] = None,
) -> RenderedDocument:
    """
    Export the SBOM of one scan.

    The format is checked before the store is read, so an invalid request has
    no side effects.

    Args:
        store: Store exposing the typed scan reads
        scan_id: Identifier of the scan to export
        sbom_format: ``cyclonedx``, ``spdx`` or ``swid``
        timestamp: Document timestamp for the JSON formats (defaults to now, UTC)

    Returns:
        RenderedDocument with the encoded document, a
        ``<ecu_name>-sbom-<format>.<ext>`` filename and a content type

    Raises:
        ValidationError: If scan_id is missing or the format is unsupported
        ScanNotFoundError: If the scan doesn't exist
    """
    fmt = resolve_sbom_format(sbom_format)
    if not scan_id:
        raise ValidationError("Scan ID required", code="missing_scan_id")

    scan = store.get_scan(scan_id)
    components = store.list_sbom_components(scan_id)
    logger.info(f"Exporting {len(components)} components of scan '{scan_id}' as {fmt}")

    return render_sbom(scan, components, fmt, timestamp)
