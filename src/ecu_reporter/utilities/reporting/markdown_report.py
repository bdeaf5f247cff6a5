"""
Markdown rendering of the vulnerability report.
"""

from typing import Any, Dict, List, Optional

from ...models import SBOMComponent, Scan, Vulnerability

NOT_AVAILABLE = "N/A"
REPORT_FOOTER = "*Report generated by ECU Vulnerability Scanner*"


def _text(value: Optional[Any]) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)


def _number(value: Optional[float]) -> str:
    """Render 7.0 as "7" and 7.5 as "7.5"; absent values as N/A."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:g}"


def _cell(value: Optional[Any]) -> str:
    return _text(value).replace("|", "\\|")


def _scan_information(scan: Scan) -> List[str]:
    return [
        "## Scan Information",
        "",
        f"- **ECU Name:** {_text(scan.ecu_name)}",
        f"- **ECU Type:** {_text(scan.ecu_type)}",
        f"- **Version:** {_text(scan.version)}",
        f"- **Manufacturer:** {_text(scan.manufacturer)}",
        f"- **Architecture:** {_text(scan.architecture)}",
        f"- **File:** {_text(scan.file_name)}",
        f"- **Risk Score:** {_number(scan.risk_score)}/100",
    ]


def _vulnerability_section(index: int, vuln: Vulnerability) -> List[str]:
    lines = [
        f"### {index}. {vuln.title}",
        "",
        f"- **Severity:** {vuln.severity.value.upper()}",
        f"- **CVE:** {_text(vuln.cve_id)}",
        f"- **CWE:** {_text(vuln.cwe_id)}",
        f"- **CVSS Score:** {_number(vuln.cvss_score)}",
        f"- **Component:** {_text(vuln.affected_component)}",
        f"- **Function:** {_text(vuln.affected_function)}",
        f"- **Detection Method:** {_text(vuln.detection_method)}",
        "",
        "**Description:**",
        vuln.description or "No description available.",
        "",
        "**Remediation:**",
        vuln.remediation or "No remediation guidance available.",
    ]
    if vuln.code_snippet:
        lines += ["", "**Code Snippet:**", "```c", vuln.code_snippet, "```"]
    lines.append("")
    return lines


def render_markdown_report(
    scan: Scan,
    vulnerabilities: List[Vulnerability],
    sbom_components: List[SBOMComponent],
    report: Dict[str, Any],
) -> str:
    """
    Render the narrative Markdown report.

    Args:
        scan: The scan being reported on
        vulnerabilities: Findings in report order
        sbom_components: Component inventory
        report: The structured report, used for its timestamp and summary block

    Returns:
        The Markdown document
    """
    summary = report["summary"]
    severity_counts = summary["vulnerability_breakdown"]
    compliance_counts = summary["compliance_breakdown"]

    lines = [
        "# ECU Vulnerability Scan Report",
        "",
        f"Generated: {report['generated_at']}",
        "",
    ]
    lines += _scan_information(scan)
    lines += [
        "",
        "## Executive Summary",
        "",
        scan.executive_summary or "No executive summary available.",
        "",
        "## Vulnerability Summary",
        "",
        "| Severity | Count |",
        "|----------|-------|",
        f"| Critical | {severity_counts['critical']} |",
        f"| High | {severity_counts['high']} |",
        f"| Medium | {severity_counts['medium']} |",
        f"| Low | {severity_counts['low']} |",
        f"| Info | {severity_counts['info']} |",
        f"| **Total** | **{summary['total_vulnerabilities']}** |",
        "",
        "## Compliance Summary",
        "",
        "| Status | Count |",
        "|--------|-------|",
        f"| Pass | {compliance_counts['pass']} |",
        f"| Fail | {compliance_counts['fail']} |",
        f"| Warning | {compliance_counts['warning']} |",
        f"| **Score** | **{summary['compliance_score']}%** |",
        "",
        "## Detailed Vulnerabilities",
        "",
    ]

    if vulnerabilities:
        for index, vuln in enumerate(vulnerabilities, start=1):
            lines += _vulnerability_section(index, vuln)
    else:
        lines += ["No vulnerabilities found.", ""]

    lines += [
        "## SBOM (Software Bill of Materials)",
        "",
        "| Component | Version | License |",
        "|-----------|---------|---------|",
    ]
    if sbom_components:
        for component in sbom_components:
            lines.append(f"| {_cell(component.component_name)} | {_cell(component.version)} | {_cell(component.license)} |")
    else:
        lines.append("| No components detected | | |")

    lines += ["", "---", REPORT_FOOTER, ""]
    return "\n".join(lines)
