"""
SWID tag generation (ISO/IEC 19770-2:2015).

Every free-text value is escaped before it is placed in element content or an
attribute. Substitutions are applied in list order with the ampersand first,
so entities introduced by later substitutions are never escaped twice.
"""

import logging
from typing import List, Optional

from ...models import SBOMComponent, Scan
from .sbom_utils import SCANNER_NAME, UNKNOWN

logger = logging.getLogger(__name__)

SWID_NAMESPACE = "http://standards.iso.org/iso/19770/-2/2015/schema.xsd"
DEFAULT_TAG_VERSION = "1.0.0"

XML_ESCAPES = [
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
]


def escape_xml(value: Optional[str]) -> str:
    """Escape a value for XML content or a double- or single-quoted attribute."""
    if not value:
        return ""
    text = str(value)
    for char, entity in XML_ESCAPES:
        text = text.replace(char, entity)
    return text


def _payload_files(components: List[SBOMComponent]) -> str:
    return "\n".join(
        f'      <File name="{escape_xml(comp.component_name)}" version="{escape_xml(comp.version or UNKNOWN)}" />'
        for comp in components
    )


def generate_swid(scan: Scan, components: List[SBOMComponent]) -> str:
    """
    Render the SWID tag for a scan.

    Args:
        scan: The scanned firmware; its id becomes the tagId
        components: Component inventory, listed as files of the payload directory

    Returns:
        A well-formed XML document
    """
    files = _payload_files(components)
    logger.debug(f"SWID tag for scan '{scan.id}': {len(components)} payload files")

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<SoftwareIdentity",
        f'    xmlns="{SWID_NAMESPACE}"',
        f'    name="{escape_xml(scan.ecu_name)}"',
        f'    tagId="{escape_xml(scan.id)}"',
        f'    version="{escape_xml(scan.version or DEFAULT_TAG_VERSION)}"',
        '    versionScheme="semver">',
        "",
        f'  <Entity name="{escape_xml(scan.manufacturer or "Unknown")}" role="tagCreator" />',
        f'  <Entity name="{escape_xml(SCANNER_NAME)}" role="tagCreator" />',
        "",
        "  <Meta",
        f'    product="{escape_xml(scan.ecu_name)}"',
        f'    colloquialVersion="{escape_xml(scan.version or UNKNOWN)}"',
        f'    revision="{escape_xml(scan.architecture or UNKNOWN)}"',
        f'    edition="{escape_xml(scan.ecu_type)}" />',
        "",
        "  <Payload>",
        '    <Directory name="components">',
    ]
    if files:
        lines.append(files)
    lines += [
        "    </Directory>",
        "  </Payload>",
        "",
        "</SoftwareIdentity>",
    ]
    return "\n".join(lines)
