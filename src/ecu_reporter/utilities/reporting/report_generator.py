"""
Vulnerability report generation.

This module aggregates a scan and its findings (vulnerabilities, compliance
results, SBOM components and the analysis timeline) into a structured report,
and serializes it either as pretty-printed JSON or as a Markdown narrative.

The report is read-only with respect to the store.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ...exceptions import ValidationError
from ...models import (
    AnalysisLog,
    ComplianceResult,
    ComplianceStatus,
    RenderedDocument,
    SBOMComponent,
    Scan,
    Severity,
    Vulnerability,
)
from .markdown_report import render_markdown_report

if TYPE_CHECKING:
    from ...api.scans_api import ScansAPI

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("json", "markdown", "pdf")


def normalize_report_format(report_format: Optional[str]) -> str:
    """
    Resolve the requested report format to the one that will be rendered.

    ``pdf`` has never produced a PDF: it is served as JSON. The pass-through is
    kept for existing callers and flagged as deprecated.
    """
    fmt = (report_format or "json").strip().lower()
    if fmt not in REPORT_FORMATS:
        raise ValidationError(
            f"Invalid report format '{report_format}'. Use: {', '.join(REPORT_FORMATS)}",
            code="invalid_format",
        )
    if fmt == "pdf":
        logger.warning("Report format 'pdf' is deprecated and is rendered as JSON")
        return "json"
    return fmt


def count_by_severity(vulnerabilities: List[Vulnerability]) -> Dict[str, int]:
    """Count vulnerabilities per severity bucket; every bucket is present."""
    counts = {severity.value: 0 for severity in Severity}
    for vuln in vulnerabilities:
        counts[vuln.severity.value] += 1
    return counts


def count_by_compliance_status(results: List[ComplianceResult]) -> Dict[str, int]:
    counts = {status.value: 0 for status in ComplianceStatus}
    for result in results:
        counts[result.status.value] += 1
    return counts


def compute_compliance_score(compliance_counts: Dict[str, int]) -> int:
    """
    Percentage of passing rules, rounded half up to an integer in [0, 100].
    Zero when there are no pass, fail or warning results.
    """
    passed = compliance_counts.get("pass", 0)
    total = passed + compliance_counts.get("fail", 0) + compliance_counts.get("warning", 0)
    if total == 0:
        return 0
    # int(x + 0.5) rounds half up like Math.round; round() would round half to even
    return int(passed * 100 / total + 0.5)


def _scan_metadata(scan: Scan) -> Dict[str, Any]:
    return {
        "id": scan.id,
        "ecu_name": scan.ecu_name,
        "ecu_type": scan.ecu_type,
        "version": scan.version,
        "manufacturer": scan.manufacturer,
        "architecture": scan.architecture,
        "file_name": scan.file_name,
        "file_hash": scan.file_hash,
        "file_size": scan.file_size,
        "status": scan.status,
        "created_at": scan.created_at,
        "completed_at": scan.completed_at,
        "risk_score": scan.risk_score,
        "executive_summary": scan.executive_summary,
    }


def _vulnerability_entry(vuln: Vulnerability) -> Dict[str, Any]:
    return {
        "id": vuln.id,
        "cve_id": vuln.cve_id,
        "cwe_id": vuln.cwe_id,
        "severity": vuln.severity.value,
        "cvss_score": vuln.cvss_score,
        "title": vuln.title,
        "description": vuln.description,
        "affected_component": vuln.affected_component,
        "affected_function": vuln.affected_function,
        "code_snippet": vuln.code_snippet,
        "line_number": vuln.line_number,
        "detection_method": vuln.detection_method,
        "status": vuln.status.value,
        "remediation": vuln.remediation,
        "attack_vector": vuln.attack_vector,
        "impact": vuln.impact,
    }


def _compliance_entry(result: ComplianceResult) -> Dict[str, Any]:
    return {
        "framework": result.framework,
        "rule_id": result.rule_id,
        "rule_description": result.rule_description,
        "status": result.status.value,
        "details": result.details,
    }


def _sbom_entry(component: SBOMComponent) -> Dict[str, Any]:
    return {
        "component_name": component.component_name,
        "version": component.version,
        "license": component.license,
        "source_file": component.source_file,
        "vulnerabilities": list(component.vulnerabilities),
    }


def _timeline_entry(log: AnalysisLog) -> Dict[str, Any]:
    return {
        "stage": log.stage,
        "level": log.log_level,
        "message": log.message,
        "timestamp": log.created_at,
    }


def build_report(
    scan: Scan,
    vulnerabilities: List[Vulnerability],
    compliance_results: List[ComplianceResult],
    sbom_components: List[SBOMComponent],
    analysis_logs: List[AnalysisLog],
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Assemble the structured report from already-fetched scan data.

    Args:
        scan: The scan being reported on
        vulnerabilities: Findings, already ordered by severity
        compliance_results: Compliance rule outcomes
        sbom_components: Component inventory
        analysis_logs: Analysis log entries, already in chronological order
        generated_at: Report timestamp (defaults to now, UTC)

    Returns:
        Dict holding scan metadata, summary statistics and the detailed lists
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    severity_counts = count_by_severity(vulnerabilities)
    compliance_counts = count_by_compliance_status(compliance_results)

    return {
        "generated_at": generated_at.isoformat(),
        "scan": _scan_metadata(scan),
        "summary": {
            "total_vulnerabilities": len(vulnerabilities),
            "vulnerability_breakdown": severity_counts,
            "compliance_breakdown": compliance_counts,
            "compliance_score": compute_compliance_score(compliance_counts),
            "sbom_components_count": len(sbom_components),
        },
        "vulnerabilities": [_vulnerability_entry(v) for v in vulnerabilities],
        "compliance_results": [_compliance_entry(c) for c in compliance_results],
        "sbom": [_sbom_entry(s) for s in sbom_components],
        "analysis_timeline": [_timeline_entry(log) for log in analysis_logs],
    }


def generate_report(
    store: "ScansAPI",
    scan_id: str,
    report_format: Optional[str] = "json",
    generated_at: Optional[datetime] = None,
) -> RenderedDocument:
    """
    Generate the vulnerability report for one scan.

    Args:
        store: Store exposing the typed scan reads
        scan_id: Identifier of the scan to report on
        report_format: ``json``, ``markdown`` or the deprecated ``pdf`` (served as JSON)
        generated_at: Report timestamp (defaults to now, UTC)

    Returns:
        RenderedDocument with the body, a ``scan-report-<scanId>.<ext>`` filename hint and content type

    Raises:
        ValidationError: If scan_id is missing or the format is unsupported
        ScanNotFoundError: If the scan doesn't exist
        ApiError, NetworkError, DataError: If reading the store fails
    """
    if not scan_id:
        raise ValidationError("Scan ID required", code="missing_scan_id")
    fmt = normalize_report_format(report_format)

    scan = store.get_scan(scan_id)
    vulnerabilities = store.list_vulnerabilities(scan_id)
    compliance_results = store.list_compliance_results(scan_id)
    sbom_components = store.list_sbom_components(scan_id)
    analysis_logs = store.list_analysis_logs(scan_id)

    report = build_report(
        scan,
        vulnerabilities,
        compliance_results,
        sbom_components,
        analysis_logs,
        generated_at=generated_at,
    )
    logger.info(
        f"Built report for scan '{scan_id}': {report['summary']['total_vulnerabilities']} vulnerabilities, "
        f"compliance score {report['summary']['compliance_score']}%"
    )

    if fmt == "json":
        return RenderedDocument(
            body=json.dumps(report, indent=2, ensure_ascii=False),
            filename=f"scan-report-{scan_id}.json",
            content_type="application/json",
        )

    return RenderedDocument(
        body=render_markdown_report(scan, vulnerabilities, sbom_components, report),
        filename=f"scan-report-{scan_id}.md",
        content_type="text/markdown",
    )
