"""
Scan reporting utilities.

This package contains the three read paths over the scan store:
- Scan reports (JSON and Markdown)
- SBOM export (CycloneDX 1.5, SPDX 2.3 and SWID tags)
- CVE resolution against the NVD with a time-bounded cache

Encoders are pure functions of already-fetched scan data; only the entry
points (generate_report, export_sbom, CVEResolver) talk to the store.
"""

from .report_generator import generate_report
from .sbom_exporter import export_sbom, SBOM_FORMATS
from .cve_resolver import CVEResolver, CVE_CACHE_TTL

__all__ = [
    "generate_report",
    "export_sbom",
    "SBOM_FORMATS",
    "CVEResolver",
    "CVE_CACHE_TTL",
]
