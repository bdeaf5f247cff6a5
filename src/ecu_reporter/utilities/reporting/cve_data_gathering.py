"""
NVD record parsing.

This module turns the raw ``cve`` object returned by the NVD CVE API 2.0 into
the cache entry shape stored in ``cve_cache``.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ...models import CVECacheEntry

logger = logging.getLogger(__name__)

# Checked in order; the first metric family present wins
CVSS_METRIC_PREFERENCE = ["cvssMetricV31", "cvssMetricV30", "cvssMetricV2"]


def _extract_description(cve: Dict[str, Any]) -> str:
    for desc in cve.get("descriptions") or []:
        if desc.get("lang") == "en":
            return desc.get("value") or ""
    return ""


def _extract_cvss(cve: Dict[str, Any]) -> Tuple[Optional[float], Optional[str]]:
    """Base score and lowercase severity of the preferred CVSS metric."""
    metrics = cve.get("metrics") or {}
    for metric_type in CVSS_METRIC_PREFERENCE:
        entries = metrics.get(metric_type)
        if not entries:
            continue
        metric_entry = entries[0]
        cvss_data = metric_entry.get("cvssData") or {}
        # CVSS v2 keeps its severity on the metric entry, v3 inside cvssData
        if metric_type == "cvssMetricV2":
            severity = metric_entry.get("baseSeverity")
        else:
            severity = cvss_data.get("baseSeverity")
        return cvss_data.get("baseScore"), severity.lower() if severity else None
    return None, None


def _extract_cwe_ids(cve: Dict[str, Any]) -> List[str]:
    cwe_ids: List[str] = []
    for weakness in cve.get("weaknesses") or []:
        for desc in weakness.get("description") or []:
            value = desc.get("value")
            if value and value not in cwe_ids:
                cwe_ids.append(value)
    return cwe_ids


def _extract_references(cve: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "url": ref.get("url"),
            "source": ref.get("source"),
            "tags": ref.get("tags") or [],
        }
        for ref in cve.get("references") or []
    ]


def parse_nvd_cve(cve_id: str, cve: Dict[str, Any], fetched_at: datetime) -> CVECacheEntry:
    """
    Parse an NVD ``cve`` object into a cache entry.

    Args:
        cve_id: The identifier that was requested; used as the cache key
        cve: The ``vulnerabilities[0].cve`` object from the NVD response
        fetched_at: When the record was fetched

    Returns:
        CVECacheEntry ready to be upserted
    """
    cvss_score, severity = _extract_cvss(cve)
    entry = CVECacheEntry(
        cve_id=cve_id,
        fetched_at=fetched_at,
        description=_extract_description(cve),
        cvss_score=cvss_score,
        severity=severity,
        published_date=cve.get("published"),
        modified_date=cve.get("lastModified"),
        reference_links=_extract_references(cve),
        cwe_ids=_extract_cwe_ids(cve),
        affected_products=cve.get("configurations") or [],
    )
    logger.debug(f"Parsed {cve_id}: cvss={cvss_score}, severity={severity}, {len(entry.cwe_ids)} CWEs")
    return entry
