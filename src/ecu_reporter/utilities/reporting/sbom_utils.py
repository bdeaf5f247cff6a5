"""
Shared helpers for the SBOM encoders.
"""

from datetime import datetime, timezone
from typing import Optional

from packageurl import PackageURL

SCANNER_NAME = "ECU Security Scanner"
ANALYZER_NAME = "Automotive Firmware Analyzer"
SCANNER_VERSION = "1.0.0"

UNKNOWN = "unknown"


def format_sbom_timestamp(timestamp: Optional[datetime] = None) -> str:
    """UTC timestamp at second precision with a Z suffix, as SPDX requires."""
    timestamp = timestamp or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_generic_purl(name: str, version: Optional[str]) -> str:
    """Package URL of the form pkg:generic/<name>@<version-or-unknown>."""
    # packageurl strips slashes and blanks from the name and fails if nothing is left
    if not (name or "").replace("/", "").strip():
        name = UNKNOWN
    if not (version or "").strip():
        version = UNKNOWN
    return PackageURL(type="generic", name=name, version=version).to_string()
